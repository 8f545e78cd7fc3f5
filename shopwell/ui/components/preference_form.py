"""
Preference form component - condition and allergy settings in the sidebar.
"""
import streamlit as st
from typing import Any

from ...ai.prompts import SUPPORTED_LANGUAGES
from ...models.profile import CUSTOM_CONDITION
from ...store import COMMON_ALLERGENS, CONDITIONS, PreferenceStore


LANGUAGE_OPTIONS = ["auto", *SUPPORTED_LANGUAGES]


def render_preference_sidebar(store: PreferenceStore) -> dict[str, Any]:
    """
    Render the settings form and save it on submit.

    Returns:
        The settings currently stored, after any save
    """
    settings = store.load()

    with st.sidebar:
        st.markdown("### ⚙️ Settings")

        with st.form("preferences"):
            condition = st.selectbox(
                "Condition",
                options=CONDITIONS,
                index=CONDITIONS.index(settings["condition"]) if settings["condition"] in CONDITIONS else 0,
                format_func=lambda c: "Custom..." if c == CUSTOM_CONDITION else c,
            )
            custom_condition = st.text_input(
                "Custom condition",
                value=settings["customCondition"],
                help="Used when the condition is set to Custom",
            )

            allergies = st.multiselect(
                "Allergies",
                options=COMMON_ALLERGENS,
                default=[a for a in settings["allergies"] if a in COMMON_ALLERGENS],
                format_func=lambda a: a.replace("-", " ").title(),
            )
            custom_allergies = st.text_input(
                "Other allergies (comma separated)",
                value=", ".join(settings["customAllergies"]),
            )

            language = st.selectbox(
                "Response language",
                options=LANGUAGE_OPTIONS,
                index=LANGUAGE_OPTIONS.index(settings["languagePreference"])
                if settings["languagePreference"] in LANGUAGE_OPTIONS else 0,
                format_func=lambda code: "Auto-detect" if code == "auto" else SUPPORTED_LANGUAGES[code],
            )
            autoshow = st.checkbox("Analyze automatically", value=settings["autoshow"])

            submitted = st.form_submit_button("Save", use_container_width=True)

        if submitted:
            try:
                settings = store.save(
                    condition=condition,
                    customCondition=custom_condition,
                    allergies=allergies,
                    customAllergies=[a for a in custom_allergies.split(",") if a.strip()],
                    languagePreference=language,
                    autoshow=autoshow,
                )
                st.success("Settings saved")
            except ValueError as e:
                st.error(str(e))

    return settings
