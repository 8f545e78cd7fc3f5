"""
Result card component - renders an analysis payload.
"""
import html

import streamlit as st

from ...ai.probe import status_message
from ...models.capability import CapabilitySet
from ...models.verdict import AnalysisPayload


VERDICT_LABELS = {
    "helpful": "✅ Helpful",
    "mixed": "⚖️ Mixed",
    "not_ideal": "⛔ Not ideal",
}


def render_analysis(payload: AnalysisPayload):
    """Render the verdict card for one payload."""
    label = VERDICT_LABELS.get(payload.verdict, payload.verdict)
    bullets_html = "".join(f"<li>{html.escape(b)}</li>" for b in payload.bullets)

    alert_html = ""
    if payload.allergen_alert:
        alert_html = '<div class="allergen-alert">⚠️ Contains allergens you listed</div>'

    card_html = f"""
    <div class="verdict-card">
        <span class="verdict-badge verdict-{payload.verdict}">{label}</span>
        <span style="margin-left: 0.5rem;">for {html.escape(payload.condition)}</span>
        {alert_html}
        <ul>{bullets_html}</ul>
        <div class="caveat">{html.escape(payload.caveat)}</div>
    </div>
    """
    st.markdown(card_html, unsafe_allow_html=True)

    with st.expander("📊 Details", expanded=False):
        st.markdown(
            f'**Confidence:** <span class="confidence-{payload.confidence}">'
            f"{payload.confidence}</span>",
            unsafe_allow_html=True,
        )
        if payload.allergen_warnings:
            st.markdown(f"**Allergens detected:** {', '.join(payload.allergen_warnings)}")
        else:
            st.markdown("**Allergens detected:** none")


def render_status(capabilities: CapabilitySet):
    """One-line note on which on-device capabilities were used."""
    message = status_message(capabilities)
    if capabilities.any_ready:
        st.caption(f"🤖 {message}")
    else:
        st.caption(f"🧩 {message}")
