"""
Unit tests for the document schemas.

Covers the camelCase display form, the tagged union of record variants and
the advisory consistency checks.
"""

import json

import pytest
from pydantic import ValidationError

from ocr_analyzer.errors import UnsupportedCategoryError
from ocr_analyzer.schemas import (
    DOCUMENT_SCHEMAS,
    ClassificationResult,
    DeliveryNote,
    DocumentCategory,
    HistoryEntry,
    Invoice,
    LineItem,
    Receipt,
    coerce_category,
    get_schema_for_category,
    record_from_display,
    record_to_display,
    validate_record,
)


class TestDocumentCategory:
    """Tests for the category enum."""

    def test_values_match_wire_names(self):
        assert [c.value for c in DocumentCategory] == ["invoice", "deliveryNote", "receipt"]

    def test_labels_and_latvian_terms(self):
        assert DocumentCategory.DELIVERY_NOTE.label == "Delivery Note"
        assert DocumentCategory.RECEIPT.latvian_term == "čeks"

    def test_coerce_accepts_string_value(self):
        assert coerce_category("receipt") is DocumentCategory.RECEIPT
        assert coerce_category(DocumentCategory.INVOICE) is DocumentCategory.INVOICE

    def test_coerce_rejects_unknown(self):
        with pytest.raises(UnsupportedCategoryError, match="purchaseOrder"):
            coerce_category("purchaseOrder")

    @pytest.mark.parametrize("value", [None, ["invoice"], {"type": "invoice"}])
    def test_coerce_rejects_non_string_values(self, value):
        with pytest.raises(UnsupportedCategoryError):
            coerce_category(value)

    def test_every_category_has_its_own_schema(self):
        assert get_schema_for_category(DocumentCategory.INVOICE) is Invoice
        assert get_schema_for_category(DocumentCategory.DELIVERY_NOTE) is DeliveryNote
        assert get_schema_for_category(DocumentCategory.RECEIPT) is Receipt
        assert len(set(DOCUMENT_SCHEMAS.values())) == 3

    def test_schema_lookup_accepts_string_value(self):
        assert get_schema_for_category("deliveryNote") is DeliveryNote

    def test_schema_lookup_rejects_unknown(self):
        with pytest.raises(UnsupportedCategoryError):
            get_schema_for_category("purchaseOrder")


class TestClassificationResult:
    """Tests for the detector's result model."""

    def test_parses_wire_names(self):
        result = ClassificationResult.model_validate(
            {"documentType": "deliveryNote", "confidence": 0.8, "reasoning": "Pavadzīme in title"}
        )

        assert result.category is DocumentCategory.DELIVERY_NOTE
        assert result.rationale == "Pavadzīme in title"

    def test_confidence_is_clamped(self):
        high = ClassificationResult(category="invoice", confidence=1.7, rationale="")
        low = ClassificationResult(category="invoice", confidence=-0.2, rationale="")

        assert high.confidence == 1.0
        assert low.confidence == 0.0

    def test_is_frozen(self):
        result = ClassificationResult(category="receipt", confidence=0.9, rationale="Čeks")

        with pytest.raises(ValidationError):
            result.confidence = 0.1

    def test_unknown_category_rejected(self):
        with pytest.raises(ValidationError):
            ClassificationResult.model_validate(
                {"documentType": "contract", "confidence": 0.5, "reasoning": ""}
            )


class TestDisplayForm:
    """Round trips between records and their display JSON."""

    @pytest.mark.parametrize("fixture_name", ["full_invoice", "full_delivery_note", "full_receipt"])
    def test_round_trip_keeps_every_field(self, request, fixture_name):
        record = request.getfixturevalue(fixture_name)

        display = record_to_display(record)
        restored = record_from_display(display)

        assert type(restored) is type(record)
        assert restored == record
        # Every field of the variant appears in the display form
        keys = set(json.loads(display))
        expected = {field.alias or name for name, field in type(record).model_fields.items()}
        assert keys == expected

    def test_display_uses_camel_case(self, full_invoice):
        data = json.loads(record_to_display(full_invoice))

        assert data["documentType"] == "invoice"
        assert data["paymentDetails"]["bankName"] == "Swedbank"
        assert data["lineItems"][0]["unitPrice"] == 50.0

    def test_display_keeps_latvian_characters(self, full_invoice):
        assert "Piegādātājs" in record_to_display(full_invoice)

    def test_absent_optional_fields_are_omitted(self, seller, buyer):
        receipt = Receipt(
            document_number="1",
            date="2024-01-01",
            seller=seller,
            buyer=buyer,
            total_amount=1.0,
            currency="EUR",
            line_items=[],
        )

        data = json.loads(record_to_display(receipt))

        assert "paymentMethod" not in data
        assert record_from_display(record_to_display(receipt)) == receipt

    def test_discriminator_selects_variant(self, full_delivery_note):
        data = full_delivery_note.model_dump(by_alias=True)

        assert isinstance(record_from_display(json.dumps(data)), DeliveryNote)

    def test_wrong_tag_rejected(self, full_receipt):
        data = full_receipt.model_dump(by_alias=True)
        data["documentType"] = "purchaseOrder"

        with pytest.raises(ValidationError):
            record_from_display(json.dumps(data))


class TestJsonSchema:
    """The schemas handed to the LLM."""

    @pytest.mark.parametrize("schema", [Invoice, DeliveryNote, Receipt])
    def test_document_type_has_no_default(self, schema):
        prop = schema.model_json_schema()["properties"]["documentType"]

        assert "default" not in prop

    def test_invoice_schema_uses_aliases(self):
        props = Invoice.model_json_schema()["properties"]

        assert {"documentNumber", "totalAmount", "lineItems", "vatAmount"} <= set(props)


class TestHistoryEntry:
    """Tests for history entry truncation."""

    def test_long_text_is_truncated(self):
        entry = HistoryEntry.from_input("x" * 150, now=1.5)

        assert entry.text == "x" * 100 + "..."
        assert entry.timestamp == 1500

    def test_short_text_kept(self):
        entry = HistoryEntry.from_input("y" * 100)

        assert entry.text == "y" * 100


class TestValidateRecord:
    """Tests for the advisory consistency checks."""

    def test_consistent_invoice_is_valid(self, full_invoice):
        result = validate_record(full_invoice)

        assert result.is_valid
        assert result.errors == []

    def test_line_total_mismatch_reported(self, full_receipt):
        full_receipt.line_items.append(
            LineItem(description="Piens", quantity=3, unit_price=1.0, total_price=5.0)
        )

        result = validate_record(full_receipt)

        assert not result.is_valid
        assert "line 2 (Piens)" in result.errors[0]

    def test_line_total_including_vat_accepted(self):
        item = LineItem(description="Kafija", quantity=1, unit_price=10.0, total_price=12.1, vat_amount=2.1)

        assert validate_record(_receipt_with([item])).is_valid

    def test_missing_quantity_skips_check(self):
        item = LineItem(description="Piegāde", total_price=7.5)

        assert validate_record(_receipt_with([item])).is_valid

    def test_bad_date_reported(self, full_delivery_note):
        full_delivery_note.delivery_date = "16.03.2024"

        result = validate_record(full_delivery_note)

        assert not result.is_valid
        assert "delivery_date" in result.errors[0]

    def test_invoice_totals_mismatch_reported(self, full_invoice):
        full_invoice.vat_amount = 20.0

        result = validate_record(full_invoice)

        assert not result.is_valid
        assert "subtotal" in result.errors[0]


def _receipt_with(items):
    return Receipt(
        document_number="1",
        date="2024-01-01",
        seller={"name": "Veikals"},
        buyer={"name": "Pircējs"},
        total_amount=sum(item.total_price for item in items),
        currency="EUR",
        line_items=items,
    )
