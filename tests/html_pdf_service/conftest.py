"""
Pytest fixtures for HTML to PDF service tests.
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from html_pdf_service.app import create_app
from html_pdf_service.config import ServiceSettings

FAKE_PDF = b"%PDF-1.4 fake pdf content"


@pytest.fixture
def settings():
    """Development settings; explicit values take precedence over the environment."""
    return ServiceSettings(environment="development", max_concurrent_renders=None)


@pytest.fixture
def production_settings():
    return ServiceSettings(environment="production")


@pytest.fixture
def mock_render():
    """
    Replace the render pipeline so endpoint tests never launch Chromium.

    Must patch where it's USED (html_pdf_service.app), not where it's defined.
    """
    with patch("html_pdf_service.app.render_html_to_pdf", new=AsyncMock(return_value=FAKE_PDF)) as mock:
        yield mock


@pytest.fixture
def client(settings, mock_render):
    """FastAPI test client with rendering mocked out."""
    return TestClient(create_app(settings))


@pytest.fixture
def production_client(production_settings, mock_render):
    """Production-mode client that does not follow redirects."""
    return TestClient(create_app(production_settings), follow_redirects=False)


@pytest.fixture
def playwright_mocks(tmp_path):
    """
    Mock the Playwright driver, browser and page used by RenderSession.

    The page reports a content height of 1234px and prints FAKE_PDF.
    """
    executable = tmp_path / "chromium"
    executable.write_text("")

    page = MagicMock()
    page.set_content = AsyncMock()
    page.evaluate = AsyncMock(side_effect=[None, 1234])
    page.pdf = AsyncMock(return_value=FAKE_PDF)

    browser = MagicMock()
    browser.new_page = AsyncMock(return_value=page)
    browser.close = AsyncMock()

    playwright = MagicMock()
    playwright.chromium.executable_path = str(executable)
    playwright.chromium.launch = AsyncMock(return_value=browser)
    playwright.stop = AsyncMock()

    with patch("html_pdf_service.renderer.async_playwright") as mock_async_playwright:
        mock_async_playwright.return_value.start = AsyncMock(return_value=playwright)
        yield SimpleNamespace(
            async_playwright=mock_async_playwright,
            playwright=playwright,
            browser=browser,
            page=page,
            executable=str(executable),
        )
