#!/usr/bin/env python
"""
Run script for Shop Well.
Use: python run_shopwell.py
Or: streamlit run shopwell/ui/app.py
"""
import sys
import subprocess


def main():
    """Run the Streamlit app."""
    subprocess.run([
        sys.executable, "-m", "streamlit", "run",
        "shopwell/ui/app.py",
        "--server.port=8502",
        "--browser.gatherUsageStats=false",
    ])


if __name__ == "__main__":
    main()
