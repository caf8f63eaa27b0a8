"""
Document type detection with an LLM.

The full OCR text goes into a single prompt with keyword guidance for each
category; the reply must conform to ClassificationResult.
"""

from .errors import EmptyInputError, ExternalServiceError
from .llm import LLMClient
from .logging import get_logger
from .prompts import render_detection_prompt
from .schemas import ClassificationResult

logger = get_logger(__name__)


class DocumentTypeDetector:
    """
    Classifies OCR text as an invoice, delivery note or receipt.

    Usage:
        detector = DocumentTypeDetector(llm)
        result = await detector.detect("Rēķins Nr. 123 ...")
    """

    def __init__(self, llm: LLMClient):
        self.llm = llm

    async def detect(self, text: str) -> ClassificationResult:
        """
        Detect the document type of OCR text.

        Args:
            text: The OCR text to classify

        Returns:
            ClassificationResult with category, confidence and rationale

        Raises:
            EmptyInputError: If the text is empty or whitespace only
            ExternalServiceError: If the LLM call fails
        """
        if not text or not text.strip():
            raise EmptyInputError()

        try:
            result = await self.llm.parse(render_detection_prompt(text), ClassificationResult)
        except ExternalServiceError:
            logger.exception("Error detecting document type")
            raise

        logger.info(
            "Detected document type: %s (confidence: %.2f)",
            result.category.value,
            result.confidence,
        )
        return result
