"""
Structured data extraction with OpenAI structured outputs.

The detected category picks one of three record schemas. The schema is handed
to the LLM as the response format, so the reply is parsed and validated by
Pydantic rather than by a local parser.
"""

from .errors import EmptyInputError, ExternalServiceError, UnsupportedCategoryError
from .llm import LLMClient
from .logging import get_logger
from .prompts import render_extraction_prompt
from .schemas import (
    DocumentCategory,
    DocumentRecord,
    coerce_category,
    get_schema_for_category,
    record_to_display,
)

logger = get_logger(__name__)


class DocumentExtractor:
    """
    Extracts a DocumentRecord from OCR text.

    Usage:
        extractor = DocumentExtractor(llm)
        invoice = await extractor.extract(text, DocumentCategory.INVOICE)
        print(invoice.total_amount)
    """

    def __init__(self, llm: LLMClient):
        self.llm = llm

    async def extract(self, text: str, category: DocumentCategory | str) -> DocumentRecord:
        """
        Extract structured data from a document.

        Args:
            text: The OCR text to extract from
            category: The document category (determines which schema to use)

        Returns:
            Invoice, DeliveryNote or Receipt matching the category

        Raises:
            EmptyInputError: If the text is empty or whitespace only
            UnsupportedCategoryError: If the category is not a known value
            ExternalServiceError: If the LLM call fails or returns another shape
        """
        try:
            category = coerce_category(category)
        except UnsupportedCategoryError:
            logger.error("Unsupported document type: %r", category)
            raise
        schema_class = get_schema_for_category(category)

        if not text or not text.strip():
            raise EmptyInputError()

        try:
            record = await self.llm.parse(render_extraction_prompt(text, category), schema_class)
        except ExternalServiceError:
            logger.exception("Error extracting %s data", category.value)
            raise

        if not isinstance(record, schema_class):
            raise ExternalServiceError(
                f"Expected {schema_class.__name__}, got {type(record).__name__}"
            )

        logger.info(
            "Extracted %s %s with %d line item(s)",
            category.value,
            record.document_number,
            len(record.line_items),
        )
        logger.debug("%s extraction result:\n%s", category.value, record_to_display(record))
        return record
