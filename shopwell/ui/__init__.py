"""Streamlit UI for Shop Well."""
