"""
Coordinator for the detect → summarize → extract workflow.

Holds the single active AnalysisSession and walks it through the stages,
either one user action at a time or chained with process_all(). Stage
results are merged into the session as immutable copies, and only the
coordinator writes to it.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict

from .config import Settings, load_settings
from .detector import DocumentTypeDetector
from .errors import (
    EmptyInputError,
    ExternalServiceError,
    PreconditionError,
    UnsupportedCategoryError,
)
from .extractor import DocumentExtractor
from .history import HistoryStore, InMemoryStore, JsonFileStore
from .llm import LLMClient, create_llm_client
from .logging import get_logger
from .schemas import (
    ClassificationResult,
    DocumentRecord,
    HistoryEntry,
    ValidationResult,
    validate_record,
)
from .summarizer import DocumentSummarizer

logger = get_logger(__name__)

STAGE_FAILURES = (ExternalServiceError, UnsupportedCategoryError)


class AnalysisState(str, Enum):
    """Where the coordinator is in the detect, summarize, extract workflow."""
    IDLE = "idle"
    DETECTING = "detecting"
    SUMMARIZING = "summarizing"
    EXTRACTING = "extracting"
    COMPLETE = "complete"
    FAILED = "failed"


BUSY_STATES = {AnalysisState.DETECTING, AnalysisState.SUMMARIZING, AnalysisState.EXTRACTING}


class Action(str, Enum):
    """User-triggered actions, each with its own failure message."""
    DETECT = "detect"
    SUMMARIZE = "summarize"
    EXTRACT = "extract"
    PROCESS_ALL = "process_all"


ERROR_MESSAGES = {
    Action.DETECT: "An error occurred during document type detection. Please try again.",
    Action.SUMMARIZE: "An error occurred during document summarization. Please try again.",
    Action.EXTRACT: "An error occurred during data extraction. Please try again.",
    Action.PROCESS_ALL: "An error occurred during document processing. Please try again.",
}

DETECT_FIRST_MESSAGE = "Please detect document type first"
BUSY_MESSAGE = "Please wait for the current step to finish"


class AnalysisSession(BaseModel):
    """Working state for one input text."""
    model_config = ConfigDict(frozen=True)

    input_text: str
    classification: Optional[ClassificationResult] = None
    summary: Optional[str] = None
    record: Optional[DocumentRecord] = None
    validation: Optional[ValidationResult] = None

    def merge(self, **delta) -> "AnalysisSession":
        """Return a copy with the stage's delta applied."""
        return self.model_copy(update=delta)


class AnalysisCoordinator:
    """
    State machine sequencing the three stages for one session.

    States: IDLE → DETECTING → (SUMMARIZING → EXTRACTING →) COMPLETE, with
    FAILED reachable from any running stage and IDLE from anywhere via clear().

    Usage:
        coordinator = AnalysisCoordinator.from_settings(load_settings())
        session = await coordinator.process_all(text)
        if coordinator.state is AnalysisState.FAILED:
            print(coordinator.error)
    """

    def __init__(
        self,
        detector: DocumentTypeDetector,
        summarizer: DocumentSummarizer,
        extractor: DocumentExtractor,
        history: Optional[HistoryStore] = None,
    ):
        self.detector = detector
        self.summarizer = summarizer
        self.extractor = extractor
        self.history = history if history is not None else HistoryStore(InMemoryStore())
        self.history.load()

        self._state = AnalysisState.IDLE
        self._session: Optional[AnalysisSession] = None
        self._error: Optional[str] = None

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        llm: Optional[LLMClient] = None,
    ) -> "AnalysisCoordinator":
        """Wire the default stages and file-backed history from settings."""
        settings = settings or load_settings()
        llm = llm or create_llm_client(settings)
        return cls(
            detector=DocumentTypeDetector(llm),
            summarizer=DocumentSummarizer(llm),
            extractor=DocumentExtractor(llm),
            history=HistoryStore(JsonFileStore(settings.history_path)),
        )

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def state(self) -> AnalysisState:
        return self._state

    @property
    def session(self) -> Optional[AnalysisSession]:
        return self._session

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def is_busy(self) -> bool:
        return self._state in BUSY_STATES

    @property
    def history_entries(self) -> list[HistoryEntry]:
        return self.history.entries

    # -------------------------------------------------------------------------
    # Actions
    # -------------------------------------------------------------------------

    async def detect(self, text: str) -> Optional[AnalysisSession]:
        """Start a new session for `text` and detect its document type."""
        session = self._start_session(text)

        self._state = AnalysisState.DETECTING
        try:
            classification = await self.detector.detect(text)
        except STAGE_FAILURES:
            return self._fail(session, Action.DETECT)

        if self._merge(session, classification=classification):
            self._remember(text)
            self._state = AnalysisState.COMPLETE
        return self._session

    async def summarize(self) -> Optional[AnalysisSession]:
        """Summarize the current session's text using its detected category."""
        session = self._require_classification()

        self._state = AnalysisState.SUMMARIZING
        try:
            summary = await self.summarizer.summarize(
                session.input_text, session.classification.category
            )
        except STAGE_FAILURES:
            return self._fail(session, Action.SUMMARIZE)

        if self._merge(session, summary=summary):
            self._state = AnalysisState.COMPLETE
        return self._session

    async def extract(self) -> Optional[AnalysisSession]:
        """Extract a structured record using the detected category's schema."""
        session = self._require_classification()

        self._state = AnalysisState.EXTRACTING
        try:
            record = await self.extractor.extract(
                session.input_text, session.classification.category
            )
        except STAGE_FAILURES:
            return self._fail(session, Action.EXTRACT)

        if self._merge(session, record=record, validation=self._validate(record)):
            self._state = AnalysisState.COMPLETE
        return self._session

    async def process_all(self, text: str) -> Optional[AnalysisSession]:
        """Run detect, summarize and extract in order on a new session."""
        session = self._start_session(text)

        try:
            self._state = AnalysisState.DETECTING
            classification = await self.detector.detect(text)
            if not self._merge(session, classification=classification):
                return self._session
            session = self._session
            self._remember(text)

            self._state = AnalysisState.SUMMARIZING
            summary = await self.summarizer.summarize(text, classification.category)
            if not self._merge(session, summary=summary):
                return self._session
            session = self._session

            self._state = AnalysisState.EXTRACTING
            record = await self.extractor.extract(text, classification.category)
            if not self._merge(session, record=record, validation=self._validate(record)):
                return self._session
        except STAGE_FAILURES:
            return self._fail(session, Action.PROCESS_ALL)

        self._state = AnalysisState.COMPLETE
        return self._session

    def clear(self) -> None:
        """Discard the session and return to IDLE, whatever the current state."""
        self._session = None
        self._error = None
        self._state = AnalysisState.IDLE

    def load_from_history(self, index: int) -> str:
        """Reset the session and return the stored text of a history entry."""
        entry = self.history[index]
        self.clear()
        return entry.text

    def clear_history(self) -> None:
        """Forget all saved inputs. The current session is left alone."""
        try:
            self.history.clear()
        except (OSError, ValueError):
            logger.exception("Failed to clear history")

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _reject(self, error: PreconditionError) -> None:
        self._error = str(error)
        raise error

    def _ensure_not_busy(self) -> None:
        if self.is_busy:
            self._reject(PreconditionError(BUSY_MESSAGE))

    def _start_session(self, text: str) -> AnalysisSession:
        self._ensure_not_busy()
        if not text or not text.strip():
            self._reject(EmptyInputError())

        self._error = None
        self._session = AnalysisSession(input_text=text)
        return self._session

    def _require_classification(self) -> AnalysisSession:
        self._ensure_not_busy()
        session = self._session
        if session is None or session.classification is None:
            self._reject(PreconditionError(DETECT_FIRST_MESSAGE))

        self._error = None
        return session

    def _merge(self, session: AnalysisSession, **delta) -> bool:
        # A clear() while the stage was awaiting makes its result stale
        if self._session is not session:
            logger.info("Session was reset during a stage; discarding its result")
            return False
        self._session = session.merge(**delta)
        return True

    def _fail(self, session: AnalysisSession, action: Action) -> Optional[AnalysisSession]:
        logger.error("%s failed; session marked as failed", action.value)
        if self._session is session:
            self._state = AnalysisState.FAILED
            self._error = ERROR_MESSAGES[action]
        return self._session

    def _remember(self, text: str) -> None:
        try:
            self.history.add(text)
        except (OSError, ValueError):
            logger.exception("Failed to save history")

    def _validate(self, record: DocumentRecord) -> ValidationResult:
        validation = validate_record(record)
        for problem in validation.errors:
            logger.warning("Extracted %s looks inconsistent: %s", record.document_type, problem)
        return validation
