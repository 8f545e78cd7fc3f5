"""
Debug panel component - transparency view for developers.
"""
import json
import streamlit as st
from typing import Optional

from ...pipeline.orchestrator import RunReport


def render_debug_panel(report: Optional[RunReport] = None):
    """
    Render the debug/transparency panel.
    Shows what the last run probed, extracted and clamped.
    """
    st.markdown("---")
    st.markdown("### 🔧 Debug Panel")

    if report is None:
        st.info("No analysis run yet")
        return

    tabs = st.tabs(["Run", "Facts", "Validation", "Raw Report"])

    with tabs[0]:
        render_run_debug(report)

    with tabs[1]:
        render_facts_debug(report)

    with tabs[2]:
        render_validation_debug(report)

    with tabs[3]:
        render_raw_report(report)


def render_run_debug(report: RunReport):
    col1, col2 = st.columns(2)

    with col1:
        st.markdown(f"**Run ID:** `{report.run_id}`")
        st.markdown(f"**Started:** {report.started_at}")
        st.markdown(f"**Completed:** {report.completed_at}")

    with col2:
        st.markdown(f"**Facts via:** {report.fact_strategy or '-'}")
        st.markdown(f"**Verdict via:** {report.verdict_strategy or '-'}")

    if report.capabilities is not None:
        st.markdown("**Capabilities:**")
        for key, value in report.capabilities.diagnostics.items():
            st.markdown(f"- `{key}`: {value}")

    if report.error:
        st.error(f"Error: {report.error}")


def render_facts_debug(report: RunReport):
    facts = report.facts
    if facts is None:
        st.info("No facts extracted")
        return

    st.markdown(f"**Source:** {facts.source} ({facts.confidence} confidence)")
    st.markdown(f"**Flags:** {', '.join(facts.active_flags) or 'none'}")
    st.markdown(f"**Claims:** {', '.join(facts.dietary_claims) or 'none'}")
    st.markdown(f"**Allergens:** {', '.join(facts.allergen_warnings) or 'none'}")
    st.text_area("Parsed text", value=facts.source_text, height=150, disabled=True)


def render_validation_debug(report: RunReport):
    if not report.clamps:
        st.info("Draft passed validation unchanged")
        return

    for clamp in report.clamps:
        st.markdown(f"- `{clamp.field}`: {clamp.reason}")


def render_raw_report(report: RunReport):
    json_str = json.dumps(report.model_dump(mode="json"), indent=2, ensure_ascii=False)
    st.code(json_str, language="json")

    st.download_button(
        "📥 Download Report JSON",
        data=json_str,
        file_name=f"run_{report.run_id}.json",
        mime="application/json",
    )
