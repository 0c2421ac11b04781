"""
Speechcast

Live presentation broadcasting: a presenter advances through prepared
sections and every connected viewer receives them as they happen.
"""

__version__ = "0.1.0"
