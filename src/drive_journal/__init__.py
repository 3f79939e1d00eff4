"""
Drive journal.

Review automatically recorded car trips per month, tag them as business or
private, merge adjacent trips into grouped drives and keep running totals.
"""

__version__ = "0.1.0"
