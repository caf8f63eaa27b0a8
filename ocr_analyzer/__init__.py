# OCR Analyzer
# LLM pipeline for classifying, summarizing and extracting Latvian business documents

from .schemas import (
    DocumentCategory,
    ClassificationResult,
    Invoice,
    DeliveryNote,
    Receipt,
    DocumentRecord,
)
from .errors import (
    ExternalServiceError,
    UnsupportedCategoryError,
    PreconditionError,
    EmptyInputError,
)
from .detector import DocumentTypeDetector
from .summarizer import DocumentSummarizer
from .extractor import DocumentExtractor
from .coordinator import AnalysisCoordinator, AnalysisSession, AnalysisState

__all__ = [
    "DocumentCategory",
    "ClassificationResult",
    "Invoice",
    "DeliveryNote",
    "Receipt",
    "DocumentRecord",
    "ExternalServiceError",
    "UnsupportedCategoryError",
    "PreconditionError",
    "EmptyInputError",
    "DocumentTypeDetector",
    "DocumentSummarizer",
    "DocumentExtractor",
    "AnalysisCoordinator",
    "AnalysisSession",
    "AnalysisState",
]
