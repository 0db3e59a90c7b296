"""Public client for the document registry.

CrptApi is the boundary between callers and the dispatch machinery: it
serializes documents, hands them to the dispatcher, and collapses every
outcome into an integer status. Apart from invalid construction arguments,
nothing raised beneath it escapes.
"""

from __future__ import annotations

import asyncio
import logging

from crpt_api.adapters.rate_limit.base import RateWindow, TimeUnit
from crpt_api.adapters.transport.base import AbstractTransport
from crpt_api.adapters.transport.factory import create_transport
from crpt_api.core.config import ClientSettings, settings
from crpt_api.core.errors import SerializationAppError
from crpt_api.schemas.document import Document, serialize_document
from crpt_api.schemas.submission import Submission
from crpt_api.services.dispatcher import Dispatcher

logger = logging.getLogger(__name__)


class CrptApi:
    """Thread-safe, rate-limited client posting documents to the registry.

    At most ``request_limit`` requests are started per ``time_unit``; callers
    beyond that are delayed, not refused.

    Example:
        >>> api = CrptApi(TimeUnit.SECONDS, 5)
        >>> api.post_document(Document(doc_id="42"), signature="...")
        200
    """

    def __init__(
        self,
        time_unit: TimeUnit,
        request_limit: int,
        *,
        client_settings: ClientSettings | None = None,
        transport: AbstractTransport | None = None,
        dispatcher: Dispatcher | None = None,
    ) -> None:
        """Validate the rate window and build the dispatcher.

        Args:
            time_unit: Window length. NANOSECONDS is rejected.
            request_limit: Maximum requests per window, at least 1.
            client_settings: Optional settings; defaults to the global settings.
            transport: Optional transport; built from settings when omitted.
            dispatcher: Optional prebuilt dispatcher (tests inject one).

        Raises:
            ValidationAppError: If the window is invalid. No pool or HTTP
                client is created in that case.
        """
        self._settings = client_settings or settings.client
        window = RateWindow(time_unit=time_unit, request_limit=request_limit)

        if dispatcher is None:
            dispatcher = Dispatcher(
                window,
                transport or create_transport(self._settings),
                max_pending=self._settings.max_pending,
                result_timeout=self._settings.result_timeout_seconds,
            )
        self._dispatcher = dispatcher
        self.window = window

        logger.debug(
            "client.created",
            extra={
                "time_unit": time_unit.name,
                "request_limit": request_limit,
                "min_interval_ns": window.min_interval_ns,
            },
        )

    def __enter__(self) -> CrptApi:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        """Wait for scheduled sends, then release the pool and HTTP client."""
        self._dispatcher.close()
        self._dispatcher.transport.close()

    def post_document(self, document: Document, signature: str) -> int:
        """Create a document in the registry.

        Blocks until the request, delayed as needed to respect the rate
        window, has completed.

        Args:
            document: Document to send.
            signature: Signature authorizing the sender, sent as a header.

        Returns:
            The registry's HTTP status code, or the configured failure status
            (400 by default) if anything went wrong before a status was
            received.
        """
        failure_status = self._settings.failure_status

        try:
            payload = serialize_document(document)
        except SerializationAppError as exc:
            logger.warning(
                "client.serialization_failed",
                extra={"error_code": exc.code, "error_message": exc.message},
            )
            return failure_status

        try:
            result = self._dispatcher.submit(Submission(payload=payload, signature=signature))
        except Exception as exc:
            # Safety net: the dispatcher recovers its own failures
            logger.exception(
                "client.unexpected_error",
                extra={"error_type": type(exc).__name__},
            )
            return failure_status

        return result.to_status(failure_status)

    async def apost_document(self, document: Document, signature: str) -> int:
        """Awaitable variant of post_document for asyncio callers.

        The blocking call runs in the event loop's default executor, so the
        loop keeps serving other tasks while this one waits its turn.
        """
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.post_document, document, signature)
