"""
Shop Well - wellness verdicts for product pages.

Streamlit panel acting as the display collaborator for the pipeline.
"""
import sys
from pathlib import Path

# Add project root to path for imports when running via streamlit
project_root = Path(__file__).parent.parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

import asyncio
import logging

import streamlit as st

from shopwell.config import get_config
from shopwell.ai import CapabilityProbe, build_default_capabilities
from shopwell.ai.prompts import resolve_language
from shopwell.models.verdict import AnalysisPayload
from shopwell.pipeline import DisplaySink, PipelineOrchestrator
from shopwell.store import PreferenceStore

from shopwell.ui.styles import inject_custom_css
from shopwell.ui.components import (
    render_analysis,
    render_debug_panel,
    render_preference_sidebar,
    render_product_input,
    render_status,
    should_analyze,
)


logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


class StreamlitDisplay(DisplaySink):
    """Draws pipeline output into one placeholder."""

    def __init__(self, placeholder):
        self.placeholder = placeholder

    def show_loading(self) -> None:
        self.placeholder.info("Analyzing product...")

    def show_analysis(self, payload: AnalysisPayload) -> None:
        st.session_state.payload = payload
        with self.placeholder.container():
            render_analysis(payload)

    def show_error(self, message: str) -> None:
        st.session_state.payload = None
        self.placeholder.error(message)


def init_session_state():
    """Initialize session state variables."""
    defaults = {
        "orchestrator": None,
        "payload": None,
        "last_record": None,
        "show_debug": False,
    }
    for key, value in defaults.items():
        if key not in st.session_state:
            st.session_state[key] = value


def get_orchestrator() -> PipelineOrchestrator:
    if st.session_state.orchestrator is None:
        summarizer, prompt = build_default_capabilities()
        st.session_state.orchestrator = PipelineOrchestrator(
            probe=CapabilityProbe(summarizer=summarizer, prompt=prompt),
        )
    return st.session_state.orchestrator


def main():
    """Main application entry point."""
    config = get_config()

    st.set_page_config(
        page_title=config.ui.page_title,
        page_icon=config.ui.page_icon,
        layout="centered",
    )

    inject_custom_css()
    init_session_state()

    store = PreferenceStore()
    settings = render_preference_sidebar(store)

    render_header()

    record = render_product_input()
    result_area = st.empty()

    orchestrator = get_orchestrator()
    orchestrator.display = StreamlitDisplay(result_area)

    analyze = st.button("🔍 Analyze", type="primary", use_container_width=True, disabled=record is None)
    if should_analyze(record, st.session_state.last_record, analyze, settings["autoshow"]):
        st.session_state.last_record = record
        profile = store.load_profile()
        language = resolve_language(settings["languagePreference"])
        asyncio.run(orchestrator.run(record, profile, language=language))
    elif st.session_state.payload is not None:
        with result_area.container():
            render_analysis(st.session_state.payload)

    report = orchestrator.last_report
    if report is not None and report.capabilities is not None:
        render_status(report.capabilities)

    if config.enable_debug_panel and st.session_state.show_debug:
        render_debug_panel(report)


def render_header():
    """Render the app header."""
    col1, col2 = st.columns([4, 1])

    with col1:
        st.markdown("""
        <div class="app-header">
            <h1>🛍️ Shop Well</h1>
            <p class="subtitle">Wellness-aware product checks for your condition and allergies</p>
        </div>
        """, unsafe_allow_html=True)

    with col2:
        if get_config().enable_debug_panel:
            st.session_state.show_debug = st.checkbox(
                "🔧 Debug",
                value=st.session_state.show_debug,
                key="debug_toggle",
            )


if __name__ == "__main__":
    main()
