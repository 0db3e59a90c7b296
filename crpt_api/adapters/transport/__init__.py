"""Transport adapter layer - abstracts over the HTTP client used to reach the registry."""

from crpt_api.adapters.transport.base import AbstractTransport
from crpt_api.adapters.transport.factory import create_transport
from crpt_api.adapters.transport.httpx_transport import HttpxTransport

__all__ = [
    "AbstractTransport",
    "HttpxTransport",
    "create_transport",
]
