"""
textgrab: durable element locators and AI-ready text extraction for HTML documents.
"""

__version__ = "0.1.0"
