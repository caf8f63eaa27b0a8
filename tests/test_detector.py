"""Unit tests for the document type detector."""

import pytest

from conftest import INVOICE_TEXT, FailingLLMClient
from ocr_analyzer.detector import DocumentTypeDetector
from ocr_analyzer.errors import EmptyInputError, ExternalServiceError
from ocr_analyzer.schemas import ClassificationResult, DocumentCategory


class TestDocumentTypeDetector:
    """Tests for DocumentTypeDetector."""

    @pytest.fixture
    def detector(self, mock_llm):
        return DocumentTypeDetector(mock_llm)

    @pytest.mark.asyncio
    async def test_detects_invoice(self, detector):
        result = await detector.detect(INVOICE_TEXT)

        assert isinstance(result, ClassificationResult)
        assert result.category is DocumentCategory.INVOICE
        assert result.confidence > 0.5
        assert result.rationale

    @pytest.mark.asyncio
    async def test_prompt_embeds_text_and_guidance(self, detector, mock_llm):
        await detector.detect(INVOICE_TEXT)

        method, prompt, schema = mock_llm.calls[0]
        assert method == "parse"
        assert schema is ClassificationResult
        assert INVOICE_TEXT in prompt
        for hint in ("Rēķins", "Pavadzīme", "Čeks"):
            assert hint in prompt

    @pytest.mark.asyncio
    async def test_text_with_braces_is_embedded_verbatim(self, detector, mock_llm):
        text = "Rēķins {Nr. 5} total {amount}"

        await detector.detect(text)

        assert text in mock_llm.calls[0][1]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("text", ["", "   ", "\n\t"])
    async def test_empty_text_rejected_without_remote_call(self, detector, mock_llm, text):
        with pytest.raises(EmptyInputError, match="Please enter some text"):
            await detector.detect(text)

        assert mock_llm.calls == []

    @pytest.mark.asyncio
    async def test_service_error_propagates(self):
        detector = DocumentTypeDetector(FailingLLMClient())

        with pytest.raises(ExternalServiceError):
            await detector.detect(INVOICE_TEXT)
