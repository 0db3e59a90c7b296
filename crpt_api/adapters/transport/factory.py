"""Factory for creating the registry transport from settings."""

from crpt_api.adapters.transport.base import AbstractTransport
from crpt_api.adapters.transport.httpx_transport import HttpxTransport
from crpt_api.core.config import ClientSettings, settings
from crpt_api.core.errors import ValidationAppError


def create_transport(client_settings: ClientSettings | None = None) -> AbstractTransport:
    """Instantiate the HTTP transport described by the client settings.

    Args:
        client_settings: Optional settings; defaults to the global settings.

    Returns:
        AbstractTransport: Configured transport instance.

    Raises:
        ValidationAppError: If the configured endpoint is not an http(s) URL.
    """
    cfg = client_settings or settings.client

    if not cfg.base_url.lower().startswith(("https://", "http://")):
        raise ValidationAppError(
            code="transport_invalid_url",
            message=f"Registry URL must use http or https: '{cfg.base_url}'",
            details={"url": cfg.base_url},
        )

    return HttpxTransport(
        cfg.base_url,
        signature_header=cfg.signature_header,
        timeout_seconds=cfg.http_timeout_seconds,
    )
