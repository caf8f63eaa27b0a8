"""
OCR Analyzer - Latvian business document analysis
Paste OCR text, detect its type, summarize it and extract structured data.
"""

import asyncio

import pandas as pd
import streamlit as st

from ocr_analyzer.config import load_settings
from ocr_analyzer.coordinator import AnalysisCoordinator, AnalysisState
from ocr_analyzer.errors import PreconditionError
from ocr_analyzer.logging import configure_logging
from ocr_analyzer.samples import SAMPLES
from ocr_analyzer.schemas import DocumentCategory, record_to_display

# Page config
st.set_page_config(
    page_title="OCR Analyzer",
    page_icon="📄",
    layout="wide",
    initial_sidebar_state="collapsed",
)

st.markdown("""
<style>
    @import url('https://fonts.googleapis.com/css2?family=Inter:wght@400;500;600;700&family=JetBrains+Mono:wght@400;500&display=swap');

    .stApp {
        background: #0f1117;
        font-family: 'Inter', sans-serif;
    }

    .main .block-container {
        max-width: 1400px;
        padding: 1rem 2rem;
    }

    h1, h2, h3 { color: #fafafa !important; font-family: 'Inter', sans-serif !important; }
    p, span, label { color: #a1a1aa !important; }

    /* Header */
    .app-header {
        padding: 0.5rem 0 1rem 0;
        border-bottom: 1px solid #27272a;
        margin-bottom: 1.5rem;
    }
    .app-title { font-size: 1.5rem; font-weight: 700; color: #fafafa; }
    .app-subtitle { font-size: 0.85rem; color: #71717a; }

    /* Type badges */
    .type-badge {
        display: inline-flex;
        align-items: center;
        gap: 0.35rem;
        padding: 0.25rem 0.6rem;
        border-radius: 4px;
        font-size: 0.75rem;
        font-weight: 500;
    }
    .type-invoice { background: #1e3a5f; color: #60a5fa; }
    .type-delivery { background: #14532d; color: #4ade80; }
    .type-receipt { background: #3b0764; color: #c084fc; }

    /* Buttons */
    .stButton > button {
        background: #3b82f6;
        color: white !important;
        border: none;
        border-radius: 6px;
        font-weight: 500;
    }
    .stButton > button:hover { background: #2563eb; }

    /* Text area */
    .stTextArea textarea {
        background: #18181b !important;
        border: 1px solid #27272a !important;
        color: #e4e4e7 !important;
        font-family: 'JetBrains Mono', monospace !important;
        font-size: 0.8rem !important;
    }

    /* History list */
    .history-meta { font-size: 0.7rem; color: #52525b; }

    #MainMenu, footer, header { visibility: hidden; }

    /* Confidence bar */
    .confidence-bar {
        height: 4px;
        background: #27272a;
        border-radius: 2px;
        overflow: hidden;
        margin-top: 0.25rem;
    }
    .confidence-fill {
        height: 100%;
        background: linear-gradient(90deg, #3b82f6, #8b5cf6);
        border-radius: 2px;
    }
</style>
""", unsafe_allow_html=True)


TYPE_CONFIG = {
    DocumentCategory.INVOICE: {"icon": "📊", "class": "type-invoice"},
    DocumentCategory.DELIVERY_NOTE: {"icon": "📦", "class": "type-delivery"},
    DocumentCategory.RECEIPT: {"icon": "🧾", "class": "type-receipt"},
}

STATUS_LABELS = {
    AnalysisState.DETECTING: "Detecting document type...",
    AnalysisState.SUMMARIZING: "Summarizing document...",
    AnalysisState.EXTRACTING: "Extracting data...",
}


def get_coordinator() -> AnalysisCoordinator:
    """One coordinator per browser session."""
    if "coordinator" not in st.session_state:
        settings = load_settings()
        configure_logging(settings.log_level)
        if not settings.use_mock and not settings.openai_api_key:
            st.error("⚠️ Set OPENAI_API_KEY in .env file (or OCR_ANALYZER_MOCK=1)")
            st.stop()
        st.session_state.coordinator = AnalysisCoordinator.from_settings(settings)
    return st.session_state.coordinator


def run_action(coordinator: AnalysisCoordinator, label: str, coro) -> None:
    """Run a coordinator coroutine, surfacing rejections as warnings."""
    try:
        with st.spinner(label):
            asyncio.run(coro)
    except PreconditionError as e:
        st.warning(str(e))


def render_classification(classification) -> None:
    config = TYPE_CONFIG[classification.category]
    st.markdown(f"""
    <div style="display: flex; align-items: center; gap: 1rem; margin-bottom: 0.5rem;">
        <span class="type-badge {config['class']}">{config['icon']} {classification.category.label} ({classification.category.latvian_term})</span>
        <span style="color: #71717a; font-size: 0.85rem;">
            Confidence: <strong style="color: #fafafa;">{classification.confidence:.1%}</strong>
        </span>
    </div>
    <div class="confidence-bar">
        <div class="confidence-fill" style="width: {classification.confidence * 100}%;"></div>
    </div>
    """, unsafe_allow_html=True)
    st.caption(classification.rationale)


def render_record(session) -> None:
    record = session.record
    display = record_to_display(record)

    if session.validation and not session.validation.is_valid:
        st.warning("⚠️ Extracted values look inconsistent:\n\n" + "\n".join(
            f"- {problem}" for problem in session.validation.errors
        ))
    else:
        st.success("✅ Extraction successful")

    if record.line_items:
        items_df = pd.DataFrame(
            [item.model_dump(by_alias=True) for item in record.line_items]
        )
        st.dataframe(items_df, use_container_width=True, hide_index=True)

    with st.expander("🧾 Extracted JSON", expanded=False):
        st.code(display, language="json")

    exp_col1, exp_col2 = st.columns(2)
    with exp_col1:
        st.download_button(
            "📥 JSON",
            display,
            f"{record.document_type}_{record.document_number}.json",
            "application/json",
            use_container_width=True,
        )
    with exp_col2:
        st.download_button(
            "📊 Line items CSV",
            pd.DataFrame(
                [item.model_dump(by_alias=True) for item in record.line_items]
            ).to_csv(index=False),
            f"{record.document_type}_{record.document_number}_items.csv",
            "text/csv",
            use_container_width=True,
            disabled=not record.line_items,
        )


def main():
    coordinator = get_coordinator()

    # =========================================================================
    # Header
    # =========================================================================
    st.markdown("""
    <div class="app-header">
        <div class="app-title">📄 OCR Analyzer</div>
        <div class="app-subtitle">Invoices, delivery notes and receipts: detect, summarize, extract</div>
    </div>
    """, unsafe_allow_html=True)

    left_col, right_col = st.columns([1, 1.2])

    # -------------------------------------------------------------------------
    # Left: Input + History
    # -------------------------------------------------------------------------
    with left_col:
        st.markdown("#### 📝 OCR Text")

        sample_col, load_col = st.columns([2, 1])
        with sample_col:
            sample = st.selectbox(
                "Sample",
                options=list(SAMPLES),
                format_func=lambda c: c.label,
                label_visibility="collapsed",
            )
        with load_col:
            if st.button("Load sample", use_container_width=True):
                st.session_state.pending_input = SAMPLES[sample]
                coordinator.clear()

        # Widget state can only be replaced before the widget is created
        if "pending_input" in st.session_state:
            st.session_state.input_text = st.session_state.pop("pending_input")

        text = st.text_area(
            "Paste OCR text",
            key="input_text",
            height=320,
            label_visibility="collapsed",
            placeholder="Paste OCR text from an invoice, delivery note or receipt...",
        )

        has_classification = bool(coordinator.session and coordinator.session.classification)
        b1, b2, b3, b4, b5 = st.columns(5)
        with b1:
            if st.button("🔍 Detect", use_container_width=True):
                run_action(coordinator, STATUS_LABELS[AnalysisState.DETECTING], coordinator.detect(text))
        with b2:
            if st.button("📝 Summarize", use_container_width=True, disabled=not has_classification):
                run_action(coordinator, STATUS_LABELS[AnalysisState.SUMMARIZING], coordinator.summarize())
        with b3:
            if st.button("🧠 Extract", use_container_width=True, disabled=not has_classification):
                run_action(coordinator, STATUS_LABELS[AnalysisState.EXTRACTING], coordinator.extract())
        with b4:
            if st.button("🚀 All", use_container_width=True):
                run_action(coordinator, "Processing document...", coordinator.process_all(text))
        with b5:
            if st.button("🗑️ Clear", use_container_width=True):
                coordinator.clear()
                st.session_state.pending_input = ""
                st.rerun()

        entries = coordinator.history_entries
        if entries:
            recent_col, clear_col = st.columns([3, 1])
            with recent_col:
                st.markdown("##### 🕘 Recent")
            with clear_col:
                if st.button("Clear History", use_container_width=True):
                    coordinator.clear_history()
                    st.rerun()
            for index, entry in enumerate(entries):
                h_text, h_load = st.columns([5, 1])
                with h_text:
                    st.text(entry.text.replace("\n", " "))
                    when = pd.to_datetime(entry.timestamp, unit="ms")
                    st.markdown(
                        f'<div class="history-meta">{when:%Y-%m-%d %H:%M}</div>',
                        unsafe_allow_html=True,
                    )
                with h_load:
                    if st.button("Load", key=f"history_{index}"):
                        st.session_state.pending_input = coordinator.load_from_history(index)
                        st.rerun()

    # -------------------------------------------------------------------------
    # Right: Results
    # -------------------------------------------------------------------------
    with right_col:
        st.markdown("#### 🔎 Results")

        if coordinator.error:
            st.error(coordinator.error)

        session = coordinator.session
        if session is None or session.classification is None:
            st.markdown("""
            <div style="text-align: center; padding: 4rem 2rem; color: #71717a;">
                <div style="font-size: 3rem; margin-bottom: 1rem;">📁</div>
                <div style="font-size: 1.1rem; margin-bottom: 0.5rem;">No results yet</div>
                <div style="font-size: 0.85rem;">Paste OCR text and click <strong>Detect</strong> or <strong>All</strong></div>
            </div>
            """, unsafe_allow_html=True)
            return

        st.markdown("##### Document Type")
        render_classification(session.classification)

        if session.summary:
            st.markdown("##### Summary")
            st.code(session.summary, language=None, wrap_lines=True)

        if session.record is not None:
            st.markdown("##### Extracted Data")
            render_record(session)


if __name__ == "__main__":
    main()
