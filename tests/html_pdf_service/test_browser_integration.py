"""
Integration tests against a real Chromium.

Requires `playwright install chromium`. Skipped unless RUN_BROWSER_TESTS=1.
"""

import os

import pytest
from fastapi.testclient import TestClient

from html_pdf_service.app import create_app
from html_pdf_service.config import ServiceSettings
from html_pdf_service.renderer import RenderSession
from html_pdf_service.sanitizer import sanitize_html

pytestmark = pytest.mark.skipif(
    os.getenv("RUN_BROWSER_TESTS") != "1",
    reason="Set RUN_BROWSER_TESTS=1 to run tests that launch Chromium",
)


@pytest.fixture
def settings():
    return ServiceSettings(environment="development")


@pytest.mark.asyncio
async def test_wrapper_removed_from_rendered_page(settings):
    html = '<div id="awesomewrap">HIDDEN WRAPPER</div><h1>Visible</h1>'

    async with RenderSession(settings) as session:
        await session.load(html)
        await session.remove_wrapper()
        content = await session.page.content()
        height = await session.measure_content_height()
        pdf_bytes = await session.pdf(height)

    assert "HIDDEN WRAPPER" not in content
    assert "Visible" in content
    assert height > 0
    assert pdf_bytes.startswith(b"%PDF")


@pytest.mark.asyncio
async def test_sanitized_script_never_runs(settings):
    html = sanitize_html('<h1 id="t">before</h1><script>document.getElementById("t").textContent = "after"</script>')

    async with RenderSession(settings) as session:
        await session.load(html)
        text = await session.page.evaluate('() => document.getElementById("t").textContent')

    assert text == "before"


def test_upload_returns_real_pdf(settings):
    client = TestClient(create_app(settings))

    response = client.post("/upload", data={"htmlInput": "<h1>Hello</h1>"})

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert response.content.startswith(b"%PDF")
