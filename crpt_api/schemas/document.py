"""Pydantic schemas for registry documents.

Field aliases are the registry's external names and must not change. Python
attribute names are accepted too (``populate_by_name``), so both
``Document(doc_id="1")`` and ``Document.model_validate({"doc_id": "1"})`` work.
"""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, ConfigDict, Field
from pydantic_core import PydanticSerializationError

from crpt_api.core.errors import SerializationAppError


class Description(BaseModel):
    """Free-form description block attached to a document."""

    model_config = ConfigDict(populate_by_name=True)

    participant_inn: str | None = Field(None, alias="participantInn")


class Product(BaseModel):
    """A single product line inside a document."""

    model_config = ConfigDict(populate_by_name=True)

    certificate_document: str | None = Field(None, alias="certificate_document")
    certificate_document_date: date | None = Field(None, alias="certificate_document_date")
    certificate_document_number: str | None = Field(None, alias="certificate_document_number")
    owner_inn: str | None = Field(None, alias="owner_inn")
    producer_inn: str | None = Field(None, alias="producer_inn")
    production_date: date | None = Field(None, alias="production_date")
    tnved_code: str | None = Field(None, alias="tnved_code")
    uit_code: str | None = Field(None, alias="uit_code")
    uitu_code: str | None = Field(None, alias="uitu_code")


class Document(BaseModel):
    """Document creation request body."""

    model_config = ConfigDict(populate_by_name=True)

    description: Description | None = None
    doc_id: str | None = Field(None, alias="doc_id")
    doc_status: str | None = Field(None, alias="doc_status")
    doc_type: str | None = Field(None, alias="doc_type")
    import_request: bool = Field(False, alias="importRequest")
    owner_inn: str | None = Field(None, alias="owner_inn")
    participant_inn: str | None = Field(None, alias="participant_inn")
    producer_inn: str | None = Field(None, alias="producer_inn")
    production_date: date | None = Field(None, alias="production_date")
    production_type: date | str | None = Field(
        None,
        alias="production_type",
        description="Historically sent as a date; plain type codes are accepted too.",
    )
    products: list[Product] | None = None
    reg_date: date | None = Field(None, alias="reg_date")
    reg_number: str | None = Field(None, alias="reg_number")


def serialize_document(document: Document) -> str:
    """Render a document as the registry's JSON body.

    Dates become ``yyyy-MM-dd`` strings and unset fields are emitted as
    explicit ``null``.

    Args:
        document: Document to serialize.

    Returns:
        JSON text using the external field names.

    Raises:
        SerializationAppError: If the document cannot be rendered.
    """
    if not isinstance(document, Document):
        raise SerializationAppError(
            code="document_invalid_type",
            message=f"Expected Document, got {type(document).__name__}",
        )

    try:
        return document.model_dump_json(by_alias=True)
    except (PydanticSerializationError, ValueError, TypeError) as exc:
        raise SerializationAppError(
            code="document_serialization_failed",
            message=f"Document could not be serialized: {exc}",
            details={"error_type": type(exc).__name__},
        ) from exc
