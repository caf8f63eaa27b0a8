"""Shared fixtures: offline LLM clients and fully populated records."""

import asyncio

import pytest

from ocr_analyzer.errors import ExternalServiceError
from ocr_analyzer.llm import LLMClient, MockLLMClient
from ocr_analyzer.schemas import (
    DeliveryNote,
    Invoice,
    LineItem,
    Party,
    PaymentDetails,
    Receipt,
)

INVOICE_TEXT = "Rēķins Nr. 123, PVN 21%, Kopā 121.00 EUR"


class FailingLLMClient(LLMClient):
    """Fails every call, optionally only from the n-th call on."""

    def __init__(self, fail_from: int = 0):
        self.fail_from = fail_from
        self.mock = MockLLMClient()

    @property
    def calls(self):
        return self.mock.calls

    def _maybe_fail(self):
        if len(self.mock.calls) >= self.fail_from:
            raise ExternalServiceError("service unavailable")

    async def parse(self, prompt, schema):
        self._maybe_fail()
        return await self.mock.parse(prompt, schema)

    async def complete(self, prompt):
        self._maybe_fail()
        return await self.mock.complete(prompt)


class BlockingLLMClient(MockLLMClient):
    """Mock client whose calls wait until `release` is set."""

    def __init__(self):
        super().__init__()
        self.release = asyncio.Event()

    async def parse(self, prompt, schema):
        await self.release.wait()
        return await super().parse(prompt, schema)

    async def complete(self, prompt):
        await self.release.wait()
        return await super().complete(prompt)


@pytest.fixture
def mock_llm():
    return MockLLMClient()


@pytest.fixture
def seller():
    return Party(
        name="SIA Piegādātājs",
        registration_number="40003000001",
        vat_number="LV40003000001",
        address="Brīvības iela 1, Rīga",
    )


@pytest.fixture
def buyer():
    return Party(
        name="SIA Pircējs",
        registration_number="40003000002",
        vat_number="LV40003000002",
        address="Elizabetes iela 2, Rīga",
    )


@pytest.fixture
def line_item():
    return LineItem(
        description="Konsultācijas",
        quantity=2,
        unit_price=50.0,
        total_price=100.0,
        vat_rate=21,
        vat_amount=21.0,
    )


@pytest.fixture
def full_invoice(seller, buyer, line_item):
    return Invoice(
        document_number="123",
        date="2024-03-15",
        seller=seller,
        buyer=buyer,
        total_amount=121.0,
        currency="EUR",
        line_items=[line_item],
        subtotal=100.0,
        vat_amount=21.0,
        due_date="2024-03-29",
        payment_details=PaymentDetails(
            bank_account="LV00HABA0000000000000",
            bank_name="Swedbank",
            reference="Rēķins 123",
        ),
    )


@pytest.fixture
def full_delivery_note(seller, buyer, line_item):
    return DeliveryNote(
        document_number="PZ-1",
        date="2024-03-15",
        seller=seller,
        buyer=buyer,
        total_amount=121.0,
        currency="EUR",
        line_items=[line_item],
        delivery_date="2024-03-16",
        related_invoice="123",
    )


@pytest.fixture
def full_receipt(seller, buyer, line_item):
    return Receipt(
        document_number="0001",
        date="2024-03-15",
        seller=seller,
        buyer=buyer,
        total_amount=121.0,
        currency="EUR",
        line_items=[line_item],
        payment_method="card",
        cashier_name="Anna",
    )
