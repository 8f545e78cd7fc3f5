"""
Shop Well - wellness verdicts for retail product pages.
"""

__version__ = "0.3.0"
