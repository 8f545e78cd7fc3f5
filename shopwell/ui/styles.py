"""
Custom CSS styles for the Shop Well panel.
"""
import streamlit as st


COLORS = {
    "primary": "#2E7D5B",
    "accent": "#F2C14E",
    "background": "#0F1513",
    "surface": "#17201C",
    "text": "#E8EFEB",
    "text_muted": "#8FA39A",
    "helpful": "#2EA043",
    "mixed": "#D29922",
    "not_ideal": "#F85149",
    "border": "#2C3A34",
}


def inject_custom_css():
    """Inject custom CSS into the Streamlit app."""
    st.markdown(f"""
    <style>
    :root {{
        --primary: {COLORS['primary']};
        --accent: {COLORS['accent']};
        --surface: {COLORS['surface']};
        --text: {COLORS['text']};
        --text-muted: {COLORS['text_muted']};
        --border: {COLORS['border']};
    }}

    .app-header {{
        text-align: center;
        padding: 1.5rem 0 1rem;
    }}

    .app-header h1 {{
        font-size: 2.2rem;
        font-weight: 700;
        color: var(--primary);
        margin-bottom: 0.25rem;
    }}

    .app-header .subtitle {{
        color: var(--text-muted);
        font-size: 1rem;
    }}

    .verdict-card {{
        background: var(--surface);
        border: 1px solid var(--border);
        border-radius: 12px;
        padding: 1.25rem;
        margin-bottom: 1rem;
    }}

    .verdict-badge {{
        display: inline-block;
        padding: 0.35rem 0.9rem;
        border-radius: 20px;
        font-weight: 600;
        color: white;
    }}

    .verdict-helpful {{ background: {COLORS['helpful']}; }}
    .verdict-mixed {{ background: {COLORS['mixed']}; color: #1a1a1a; }}
    .verdict-not_ideal {{ background: {COLORS['not_ideal']}; }}

    .allergen-alert {{
        background: rgba(248, 81, 73, 0.15);
        border: 1px solid {COLORS['not_ideal']};
        color: {COLORS['not_ideal']};
        border-radius: 8px;
        padding: 0.6rem 0.9rem;
        margin: 0.75rem 0;
        font-weight: 600;
    }}

    .caveat {{
        color: var(--text-muted);
        font-size: 0.9rem;
        font-style: italic;
    }}

    .confidence-high {{ color: {COLORS['helpful']}; }}
    .confidence-medium {{ color: {COLORS['mixed']}; }}
    .confidence-low {{ color: {COLORS['not_ideal']}; }}
    </style>
    """, unsafe_allow_html=True)
