"""
Remote text generation via OpenAI chat completions.

The stages talk to an LLMClient, which offers two calls:
- parse(): structured output conforming to a Pydantic schema
- complete(): free-form text

Every failure mode of the remote call (transport errors, timeouts, refusals,
truncated or non-conformant output) is raised as ExternalServiceError.
"""

import os
from abc import ABC, abstractmethod
from typing import Optional, TypeVar

import openai
from openai import AsyncOpenAI
from pydantic import BaseModel, ValidationError

from .config import DEFAULT_MODEL, Settings
from .errors import ExternalServiceError
from .logging import get_logger
from .prompts import DETECTION_PROMPT
from .schemas import (
    ClassificationResult,
    DeliveryNote,
    DocumentCategory,
    Invoice,
    Receipt,
)

logger = get_logger(__name__)

SchemaT = TypeVar("SchemaT", bound=BaseModel)

INCOMPLETE_FINISH_REASONS = {"length", "content_filter"}


class LLMClient(ABC):
    """Interface for the remote text-generation capability."""

    @abstractmethod
    async def parse(self, prompt: str, schema: type[SchemaT]) -> SchemaT:
        """Return output conforming to `schema`."""

    @abstractmethod
    async def complete(self, prompt: str) -> str:
        """Return free-form text."""


class OpenAILLMClient(LLMClient):
    """
    LLMClient backed by OpenAI's structured outputs.

    Usage:
        llm = OpenAILLMClient()
        result = await llm.parse(prompt, ClassificationResult)
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = DEFAULT_MODEL,
        temperature: float = 0.0,
        timeout: Optional[float] = None,
    ):
        """
        Initialize the client.

        Args:
            api_key: OpenAI API key. If not provided, reads from OPENAI_API_KEY env var.
            model: OpenAI model to use (default: gpt-4o-mini)
            temperature: Sampling temperature (0 for repeatable extraction)
            timeout: Request timeout in seconds (default: the SDK's own)
        """
        self.api_key = api_key or os.getenv("OPENAI_API_KEY")
        if not self.api_key:
            raise ValueError(
                "OpenAI API key required. Set OPENAI_API_KEY environment variable "
                "or pass api_key parameter."
            )

        self.model = model
        self.temperature = temperature
        self.timeout = timeout

    def _client(self) -> AsyncOpenAI:
        # A fresh client per call: the UI drives each call from its own event loop
        if self.timeout is None:
            return AsyncOpenAI(api_key=self.api_key)
        return AsyncOpenAI(api_key=self.api_key, timeout=self.timeout)

    def _messages(self, prompt: str) -> list[dict]:
        return [{"role": "user", "content": prompt}]

    async def parse(self, prompt: str, schema: type[SchemaT]) -> SchemaT:
        try:
            async with self._client() as client:
                response = await client.chat.completions.parse(
                    model=self.model,
                    messages=self._messages(prompt),
                    response_format=schema,
                    temperature=self.temperature,
                )
        except openai.OpenAIError as e:
            raise ExternalServiceError(f"{schema.__name__} request failed: {e}") from e
        except ValidationError as e:
            raise ExternalServiceError(
                f"Response does not conform to {schema.__name__}: {e.error_count()} error(s)"
            ) from e

        message = response.choices[0].message
        if message.parsed is None:
            reason = message.refusal or "empty response"
            raise ExternalServiceError(f"No {schema.__name__} returned: {reason}")

        return message.parsed

    async def complete(self, prompt: str) -> str:
        try:
            async with self._client() as client:
                response = await client.chat.completions.create(
                    model=self.model,
                    messages=self._messages(prompt),
                    temperature=self.temperature,
                )
        except openai.OpenAIError as e:
            raise ExternalServiceError(f"Completion request failed: {e}") from e

        choice = response.choices[0]
        if choice.finish_reason in INCOMPLETE_FINISH_REASONS:
            raise ExternalServiceError(f"Completion stopped early: {choice.finish_reason}")

        content = choice.message.content
        if not content or not content.strip():
            raise ExternalServiceError("Completion returned no text")

        return content


class MockLLMClient(LLMClient):
    """
    Mock client for running without API calls.

    Guesses the category from Latvian/English keywords in the OCR text and
    returns predefined, schema-conformant responses. Every call is recorded
    in `calls` as (method, prompt, schema).
    """

    KEYWORDS = {
        DocumentCategory.INVOICE: ("rēķins", "invoice"),
        DocumentCategory.DELIVERY_NOTE: ("pavadzīme", "delivery note"),
        DocumentCategory.RECEIPT: ("čeks", "receipt", "kases"),
    }

    MOCK_RECORDS = {
        Invoice: {
            "documentType": "invoice",
            "documentNumber": "123",
            "date": "2024-03-15",
            "seller": {
                "name": "SIA Mock Piegādātājs",
                "registrationNumber": "40003000001",
                "vatNumber": "LV40003000001",
                "address": "Brīvības iela 1, Rīga",
            },
            "buyer": {"name": "SIA Mock Pircējs", "vatNumber": "LV40003000002"},
            "totalAmount": 121.00,
            "currency": "EUR",
            "lineItems": [
                {
                    "description": "Konsultāciju pakalpojumi",
                    "quantity": 1,
                    "unitPrice": 100.00,
                    "totalPrice": 100.00,
                    "vatRate": 21,
                    "vatAmount": 21.00,
                },
            ],
            "subtotal": 100.00,
            "vatAmount": 21.00,
            "dueDate": "2024-03-29",
            "paymentDetails": {
                "bankAccount": "LV00HABA0000000000000",
                "bankName": "Swedbank",
                "reference": "Rēķins Nr. 123",
            },
        },
        DeliveryNote: {
            "documentType": "deliveryNote",
            "documentNumber": "PZ-0042",
            "date": "2024-03-15",
            "seller": {"name": "SIA Mock Noliktava"},
            "buyer": {"name": "SIA Mock Veikals"},
            "totalAmount": 60.50,
            "currency": "EUR",
            "lineItems": [
                {"description": "Kartona kastes", "quantity": 10, "unitPrice": 5.00, "totalPrice": 50.00},
            ],
            "deliveryDate": "2024-03-16",
            "relatedInvoice": "123",
        },
        Receipt: {
            "documentType": "receipt",
            "documentNumber": "0001-2345",
            "date": "2024-03-15",
            "seller": {"name": "SIA Mock Veikals"},
            "buyer": {"name": "Privātpersona"},
            "totalAmount": 3.63,
            "currency": "EUR",
            "lineItems": [
                {"description": "Maize", "quantity": 1, "unitPrice": 1.50, "totalPrice": 1.50},
                {"description": "Piens", "quantity": 2, "unitPrice": 1.065, "totalPrice": 2.13},
            ],
            "paymentMethod": "card",
            "cashierName": "Anna",
        },
    }

    MOCK_SUMMARIES = {
        DocumentCategory.INVOICE: (
            "Invoice Nr. 123 issued by SIA Mock Piegādātājs to SIA Mock Pircējs. "
            "The total is 121.00 EUR including 21.00 EUR VAT. Payment is due by 2024-03-29."
        ),
        DocumentCategory.DELIVERY_NOTE: (
            "Delivery note PZ-0042 from SIA Mock Noliktava to SIA Mock Veikals. "
            "Ten cardboard boxes were delivered on 2024-03-16 against invoice 123."
        ),
        DocumentCategory.RECEIPT: (
            "Receipt from SIA Mock Veikals dated 2024-03-15. "
            "Bread and milk were bought for 3.63 EUR, paid by card."
        ),
    }

    def __init__(self):
        self.calls: list[tuple[str, str, Optional[type[BaseModel]]]] = []

    def guess_category(self, prompt: str) -> tuple[DocumentCategory, int]:
        """Return the best keyword match and its hit count in the OCR text."""
        lowered = prompt.lower()
        template = DETECTION_PROMPT.lower()
        hits = {
            category: sum(
                max(lowered.count(keyword) - template.count(keyword), 0)
                for keyword in keywords
            )
            for category, keywords in self.KEYWORDS.items()
        }
        category = max(hits, key=hits.get)
        return category, hits[category]

    async def parse(self, prompt: str, schema: type[SchemaT]) -> SchemaT:
        self.calls.append(("parse", prompt, schema))

        if schema is ClassificationResult:
            category, hits = self.guess_category(prompt)
            confidence = 0.9 if hits else 0.4
            return ClassificationResult(
                category=category,
                confidence=confidence,
                rationale=f"Mock detection: {hits} keyword match(es) for {category.label}.",
            )

        if schema in self.MOCK_RECORDS:
            return schema.model_validate(self.MOCK_RECORDS[schema])

        raise ExternalServiceError(f"Mock has no response for {schema.__name__}")

    async def complete(self, prompt: str) -> str:
        self.calls.append(("complete", prompt, None))

        for category, summary in self.MOCK_SUMMARIES.items():
            if f"following {category.label.lower()} document" in prompt:
                return summary
        return "Mock summary of the document."


def create_llm_client(settings: Settings) -> LLMClient:
    """Build the configured LLM client."""
    if settings.use_mock:
        logger.info("Using mock LLM client")
        return MockLLMClient()

    return OpenAILLMClient(
        api_key=settings.openai_api_key,
        model=settings.model,
        temperature=settings.temperature,
        timeout=settings.timeout,
    )
