"""httpx transport adapter."""

import logging

import httpx

from crpt_api.adapters.transport.base import AbstractTransport
from crpt_api.core.errors import TransportAppError

logger = logging.getLogger(__name__)


class HttpxTransport(AbstractTransport):
    """Transport posting documents with a shared synchronous httpx client.

    ``httpx.Client`` is safe to share between worker threads, so one
    instance serves the whole dispatcher pool.
    """

    def __init__(
        self,
        url: str,
        *,
        signature_header: str = "X-signature",
        timeout_seconds: float = 30.0,
        client: httpx.Client | None = None,
    ) -> None:
        """Initialize the transport.

        Args:
            url: Document creation endpoint.
            signature_header: Header name carrying the caller signature.
            timeout_seconds: Timeout for each request in seconds.
            client: Optional preconfigured client (tests pass one backed by
                ``httpx.MockTransport``).
        """
        self.url = url
        self.signature_header = signature_header
        self.timeout_seconds = timeout_seconds
        self.client = client or httpx.Client(timeout=timeout_seconds)

    def post(self, payload: str, signature: str) -> int:
        """POST the payload and return the response status code.

        Raises:
            TransportAppError: On timeouts, connection failures or any other
                httpx-level error. Non-2xx responses are not errors.
        """
        headers = {
            self.signature_header: signature,
            "Content-Type": "application/json",
        }

        body = payload.encode("utf-8")
        # The signature header is masked by SensitiveDataFilter
        logger.debug(
            "transport.request",
            extra={"url": self.url, "headers": headers, "body_bytes": len(body)},
        )

        try:
            response = self.client.post(self.url, content=body, headers=headers)
        except httpx.TimeoutException as exc:
            logger.warning(
                "transport.timeout",
                extra={"url": self.url, "timeout_seconds": self.timeout_seconds},
            )
            raise TransportAppError(
                code="transport_timeout",
                message=f"Registry request timed out: {exc}",
                details={"url": self.url, "timeout_seconds": self.timeout_seconds},
                timed_out=True,
            ) from exc
        except httpx.HTTPError as exc:
            logger.warning(
                "transport.error",
                extra={"url": self.url, "error_type": type(exc).__name__},
            )
            raise TransportAppError(
                code="transport_error",
                message=f"Registry request failed: {exc}",
                details={"url": self.url, "error_type": type(exc).__name__},
            ) from exc

        logger.debug(
            "transport.response",
            extra={"url": self.url, "status_code": response.status_code},
        )
        return response.status_code

    def close(self) -> None:
        self.client.close()
