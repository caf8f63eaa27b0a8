"""Category-aware document summaries."""

from .errors import EmptyInputError, ExternalServiceError
from .llm import LLMClient
from .logging import get_logger
from .prompts import render_summary_prompt
from .schemas import DocumentCategory, coerce_category

logger = get_logger(__name__)


class DocumentSummarizer:
    """Writes a 3-5 sentence synopsis focused on what matters for the category."""

    def __init__(self, llm: LLMClient):
        self.llm = llm

    async def summarize(self, text: str, category: DocumentCategory | str) -> str:
        """
        Summarize OCR text of a document whose category is already known.

        Raises:
            EmptyInputError: If the text is empty or whitespace only
            UnsupportedCategoryError: If the category is not a known value
            ExternalServiceError: If the LLM call fails
        """
        category = coerce_category(category)
        if not text or not text.strip():
            raise EmptyInputError()

        try:
            summary = await self.llm.complete(render_summary_prompt(text, category))
        except ExternalServiceError:
            logger.exception("Error summarizing %s", category.value)
            raise

        logger.info("Summarized %s (%d chars)", category.value, len(summary))
        return summary.strip()
