"""
Pydantic schemas for Latvian business document analysis.

Each document category has its own record schema. The schemas are passed to
the LLM for structured output, so field descriptions double as extraction
instructions. Python attributes are snake_case; the JSON form (LLM output,
UI display, exports) uses the camelCase aliases.
"""

import json
import re
import time
from datetime import date
from enum import Enum
from typing import Annotated, ClassVar, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator
from pydantic.alias_generators import to_camel

from .errors import UnsupportedCategoryError


class DocumentCategory(str, Enum):
    """The three document types we classify."""
    INVOICE = "invoice"
    DELIVERY_NOTE = "deliveryNote"
    RECEIPT = "receipt"

    @property
    def label(self) -> str:
        return CATEGORY_LABELS[self]

    @property
    def latvian_term(self) -> str:
        return CATEGORY_LATVIAN_TERMS[self]


CATEGORY_LABELS = {
    DocumentCategory.INVOICE: "Invoice",
    DocumentCategory.DELIVERY_NOTE: "Delivery Note",
    DocumentCategory.RECEIPT: "Receipt",
}

CATEGORY_LATVIAN_TERMS = {
    DocumentCategory.INVOICE: "rēķins",
    DocumentCategory.DELIVERY_NOTE: "pavadzīme",
    DocumentCategory.RECEIPT: "čeks",
}


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys, populated by either name."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============================================================================
# Shared Models
# ============================================================================

class Party(CamelModel):
    """A seller or buyer named on the document."""
    name: str = Field(..., description="Name of the company or person")
    registration_number: Optional[str] = Field(None, description="Company registration number")
    vat_number: Optional[str] = Field(None, description="VAT (PVN) registration number")
    address: Optional[str] = Field(None, description="Postal address")


class LineItem(CamelModel):
    """A line item on an invoice, delivery note or receipt."""
    description: str = Field(..., description="Description of the item or service")
    quantity: Optional[float] = Field(None, description="Quantity of items")
    unit_price: Optional[float] = Field(None, description="Price per unit")
    total_price: float = Field(..., description="Total price for this line item")
    vat_rate: Optional[float] = Field(None, description="VAT rate applied to this item (in %)")
    vat_amount: Optional[float] = Field(None, description="VAT amount for this line item")


class PaymentDetails(CamelModel):
    """Bank transfer details printed on an invoice."""
    bank_account: Optional[str] = Field(None, description="Bank account number (IBAN)")
    bank_name: Optional[str] = Field(None, description="Name of the bank")
    reference: Optional[str] = Field(None, description="Payment reference")


# ============================================================================
# Document Schemas
# ============================================================================

def _drop_default(schema: dict) -> None:
    # Structured outputs reject non-null defaults in the JSON schema
    schema.pop("default", None)


class BaseDocument(CamelModel):
    """Fields shared by every document record."""
    document_number: str = Field(..., description="Document identifier/number")
    date: str = Field(..., description="Document date in YYYY-MM-DD format")
    seller: Party = Field(..., description="Seller (Pārdevējs) details")
    buyer: Party = Field(..., description="Buyer (Pircējs) details")
    total_amount: float = Field(..., description="Total amount including VAT")
    currency: str = Field(..., description="Currency used in the document (e.g., EUR)")
    line_items: list[LineItem] = Field(..., description="Items or services listed on the document")


class Invoice(BaseDocument):
    """Schema for invoices (rēķins)."""
    document_type: Literal["invoice"] = Field("invoice", json_schema_extra=_drop_default)
    subtotal: float = Field(..., description="Total amount before VAT")
    vat_amount: float = Field(..., description="Total VAT (PVN) amount")
    due_date: Optional[str] = Field(None, description="Payment due date in YYYY-MM-DD format")
    payment_details: Optional[PaymentDetails] = Field(None, description="Bank payment details")


class DeliveryNote(BaseDocument):
    """Schema for delivery notes (pavadzīme)."""
    document_type: Literal["deliveryNote"] = Field("deliveryNote", json_schema_extra=_drop_default)
    delivery_date: Optional[str] = Field(None, description="Date of delivery in YYYY-MM-DD format")
    related_invoice: Optional[str] = Field(None, description="Reference to related invoice number")


class Receipt(BaseDocument):
    """Schema for receipts (čeks)."""
    document_type: Literal["receipt"] = Field("receipt", json_schema_extra=_drop_default)
    payment_method: Optional[str] = Field(None, description="Method of payment (cash, card, etc.)")
    cashier_name: Optional[str] = Field(None, description="Name of the cashier")


DocumentRecord = Annotated[
    Union[Invoice, DeliveryNote, Receipt],
    Field(discriminator="document_type"),
]

_RECORD_ADAPTER: TypeAdapter = TypeAdapter(DocumentRecord)


# ============================================================================
# Classification Result
# ============================================================================

class ClassificationResult(CamelModel):
    """Result from the document type detector."""
    model_config = ConfigDict(frozen=True)

    category: DocumentCategory = Field(
        ..., alias="documentType", description="The detected document type"
    )
    confidence: float = Field(..., description="Confidence level in the detection (0-1)")
    rationale: str = Field(
        ..., alias="reasoning", description="Reasoning behind the document type detection"
    )

    @field_validator("confidence")
    @classmethod
    def clamp_confidence(cls, value: float) -> float:
        return min(max(value, 0.0), 1.0)


class ValidationResult(BaseModel):
    """Result from the advisory consistency checks."""
    is_valid: bool
    errors: list[str] = Field(default_factory=list)


class HistoryEntry(CamelModel):
    """A recently analyzed input, truncated for display."""
    text: str
    timestamp: int = Field(..., description="Submission time in epoch milliseconds")

    PREVIEW_LENGTH: ClassVar[int] = 100

    @classmethod
    def from_input(cls, text: str, now: Optional[float] = None) -> "HistoryEntry":
        preview = text[:cls.PREVIEW_LENGTH]
        if len(text) > cls.PREVIEW_LENGTH:
            preview += "..."
        seconds = time.time() if now is None else now
        return cls(text=preview, timestamp=int(seconds * 1000))


# ============================================================================
# Schema Mapping
# ============================================================================

DOCUMENT_SCHEMAS = {
    DocumentCategory.INVOICE: Invoice,
    DocumentCategory.DELIVERY_NOTE: DeliveryNote,
    DocumentCategory.RECEIPT: Receipt,
}


def coerce_category(value: object) -> DocumentCategory:
    """Convert a category or its string value, rejecting unknown values."""
    try:
        return DocumentCategory(value)
    except (TypeError, ValueError):
        raise UnsupportedCategoryError(value) from None


def get_schema_for_category(category: object) -> type[BaseDocument]:
    """Get the Pydantic schema class for a document category (or its string value)."""
    schema_class = DOCUMENT_SCHEMAS.get(coerce_category(category))
    if schema_class is None:
        raise UnsupportedCategoryError(category)
    return schema_class


def record_to_display(record: BaseDocument) -> str:
    """Render a record as the pretty camelCase JSON shown to users."""
    data = record.model_dump(mode="json", by_alias=True, exclude_none=True)
    return json.dumps(data, indent=2, ensure_ascii=False)


def record_from_display(text: str) -> BaseDocument:
    """Parse the display JSON back into the matching record variant."""
    return _RECORD_ADAPTER.validate_json(text)


# ============================================================================
# Advisory Validation
# ============================================================================

AMOUNT_TOLERANCE = 0.01
_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def _is_iso_date(value: str) -> bool:
    if not _ISO_DATE.match(value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


def validate_record(record: BaseDocument) -> ValidationResult:
    """
    Check an extracted record for internal consistency.

    These checks mirror the hints given to the LLM; failures are reported,
    never used to reject the record.
    """
    errors = []

    for field_name in ("date", "due_date", "delivery_date"):
        value = getattr(record, field_name, None)
        if value and not _is_iso_date(value):
            errors.append(f"{field_name}: expected YYYY-MM-DD, got {value!r}")

    for index, item in enumerate(record.line_items, start=1):
        if item.quantity is None or item.unit_price is None:
            continue
        expected = item.quantity * item.unit_price
        # Rounded unit prices drift by up to half a cent per unit
        tolerance = AMOUNT_TOLERANCE * max(1.0, abs(item.quantity))
        candidates = [expected]
        if item.vat_amount is not None:
            candidates.append(expected + item.vat_amount)
        if all(abs(c - item.total_price) > tolerance for c in candidates):
            errors.append(
                f"line {index} ({item.description}): "
                f"{item.quantity:g} × {item.unit_price:.2f} != {item.total_price:.2f}"
            )

    if isinstance(record, Invoice):
        expected_total = record.subtotal + record.vat_amount
        if abs(expected_total - record.total_amount) > AMOUNT_TOLERANCE:
            errors.append(
                f"subtotal {record.subtotal:.2f} + VAT {record.vat_amount:.2f} "
                f"!= total {record.total_amount:.2f}"
            )

    return ValidationResult(is_valid=not errors, errors=errors)
