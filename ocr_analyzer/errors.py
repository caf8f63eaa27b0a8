"""
Exceptions raised by the analysis pipeline.

Stage functions raise these and let them propagate; the coordinator catches
them at the boundary of each user action.
"""


class AnalyzerError(Exception):
    """Base class for all pipeline errors."""


class ExternalServiceError(AnalyzerError):
    """The LLM call failed, timed out, or returned non-conformant output."""


class UnsupportedCategoryError(AnalyzerError, ValueError):
    """A stage was asked to handle a category outside the known set."""

    def __init__(self, category: object):
        self.category = category
        super().__init__(f"Unsupported document type: {category}")


class PreconditionError(AnalyzerError):
    """A stage was requested before its required predecessor completed."""


class EmptyInputError(PreconditionError, ValueError):
    """The submitted OCR text is empty or whitespace only."""

    def __init__(self, message: str = "Please enter some text to analyze"):
        super().__init__(message)
