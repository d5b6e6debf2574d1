"""
HTML to PDF Service - converts user-supplied HTML into a downloadable PDF.

Pasted or uploaded HTML is sanitized, rendered in an isolated headless
Chromium process via Playwright, and returned as a single-page PDF sized
to the rendered content.
"""

__version__ = "0.1.0"
