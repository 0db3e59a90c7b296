"""Rate-limited client for the document registry."""

from crpt_api.adapters.rate_limit.base import RateWindow, TimeUnit
from crpt_api.schemas.document import Description, Document, Product, serialize_document
from crpt_api.services.crpt_api import CrptApi

__all__ = [
    "CrptApi",
    "Description",
    "Document",
    "Product",
    "RateWindow",
    "TimeUnit",
    "serialize_document",
]
