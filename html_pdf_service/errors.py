"""Exceptions raised while converting HTML to PDF."""


class ConversionError(Exception):
    """Base class for HTML to PDF conversion failures."""


class BrowserUnavailableError(ConversionError):
    """Raised when no Chromium executable can be located."""
