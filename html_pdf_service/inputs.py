"""
Input acceptor for the upload endpoint.

Pulls raw HTML out of a request carrying either a multipart file upload
(``htmlFile``) or a text field (``htmlInput``) in a multipart, URL-encoded
or JSON body. The body is read into memory with a hard bound before any
parsing, so oversize payloads are rejected whether or not the client sent
a Content-Length.
"""

import json
import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import HTTPException, Request
from starlette.datastructures import UploadFile

logger = logging.getLogger(__name__)

FILE_FIELD = "htmlFile"
TEXT_FIELD = "htmlInput"

# Headroom for multipart boundaries, part headers and JSON framing on top of the payload
BODY_OVERHEAD_BYTES = 64 * 1024

NO_INPUT_MESSAGE = "No HTML content provided."


@dataclass
class RawInput:
    """HTML taken from a single request, before sanitizing."""

    html: str
    source: str  # "file" or "text"
    size: int


def format_size_limit(max_bytes: int) -> str:
    """Human-readable size limit: MB from 1 MiB up, KB from 1 KiB, else bytes."""
    if max_bytes >= 1024 * 1024:
        return f"{max_bytes / (1024 * 1024):.2f}MB"
    if max_bytes >= 1024:
        return f"{max_bytes / 1024:.2f}KB"
    return f"{max_bytes} bytes"


def _too_large(max_bytes: int) -> HTTPException:
    return HTTPException(
        status_code=413,
        detail=f"HTML content exceeds the {format_size_limit(max_bytes)} limit."
    )


def check_content_length(request: Request, max_bytes: int) -> None:
    """Reject bodies that are already too large according to Content-Length."""
    content_length = request.headers.get("content-length")
    if not content_length:
        return
    try:
        declared = int(content_length)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid Content-Length header.")
    if declared > max_bytes + BODY_OVERHEAD_BYTES:
        logger.warning(f"Rejecting upload: Content-Length {declared} exceeds limit")
        raise _too_large(max_bytes)


async def read_bounded_body(request: Request, max_bytes: int) -> bytes:
    """
    Read the request body, stopping as soon as it outgrows the ceiling.

    Chunked bodies without a Content-Length are bounded the same way.

    Raises:
        HTTPException: 413 once more than max_bytes plus framing overhead arrived
    """
    limit = max_bytes + BODY_OVERHEAD_BYTES
    body = bytearray()
    async for chunk in request.stream():
        body.extend(chunk)
        if len(body) > limit:
            logger.warning(f"Rejecting upload: body exceeds {limit} bytes")
            raise _too_large(max_bytes)
    return bytes(body)


def _replay_request(request: Request, body: bytes) -> Request:
    """Build a Request over the same scope whose body is the buffered bytes."""
    sent = False

    async def receive():
        nonlocal sent
        if sent:
            return {"type": "http.disconnect"}
        sent = True
        return {"type": "http.request", "body": body, "more_body": False}

    return Request(request.scope, receive)


async def _read_upload(upload: UploadFile, max_bytes: int) -> Optional[RawInput]:
    # Read one byte past the limit so oversize files are detected without
    # copying the whole thing.
    contents = await upload.read(max_bytes + 1)
    if len(contents) > max_bytes:
        logger.warning(f"Rejecting upload {upload.filename!r}: exceeds {max_bytes} bytes")
        raise _too_large(max_bytes)
    if not contents:
        return None
    return RawInput(
        html=contents.decode("utf-8", errors="replace"),
        source="file",
        size=len(contents),
    )


def _text_input(value, max_bytes: int) -> Optional[RawInput]:
    if not isinstance(value, str) or not value:
        return None
    size = len(value.encode("utf-8"))
    if size > max_bytes:
        logger.warning(f"Rejecting text input: {size} bytes exceeds {max_bytes}")
        raise _too_large(max_bytes)
    return RawInput(html=value, source="text", size=size)


async def read_html_input(request: Request, max_bytes: int) -> RawInput:
    """
    Extract the HTML to convert from an upload request.

    An uploaded file takes precedence over the text field when both are
    present. Empty values count as missing.

    Args:
        request: Incoming POST /upload request
        max_bytes: Maximum accepted payload size in bytes

    Returns:
        RawInput with the decoded HTML

    Raises:
        HTTPException: 400 when no HTML was provided or the body is
            malformed, 413 when the payload exceeds max_bytes
    """
    check_content_length(request, max_bytes)

    content_type = request.headers.get("content-type", "").split(";")[0].strip().lower()

    if content_type == "application/json":
        body = await read_bounded_body(request, max_bytes)
        try:
            payload = json.loads(body)
        except ValueError:
            raise HTTPException(status_code=400, detail="Invalid JSON body.")
        text = payload.get(TEXT_FIELD) if isinstance(payload, dict) else None
        raw = _text_input(text, max_bytes)

    elif content_type in ("multipart/form-data", "application/x-www-form-urlencoded"):
        body = await read_bounded_body(request, max_bytes)
        # The whole body is already bounded, so no single part can exceed this;
        # oversize text is left to _text_input and reported as 413.
        part_limit = max_bytes + BODY_OVERHEAD_BYTES
        buffered = _replay_request(request, body)
        async with buffered.form(max_files=1, max_part_size=part_limit) as form:
            raw = None
            upload = form.get(FILE_FIELD)
            if isinstance(upload, UploadFile):
                raw = await _read_upload(upload, max_bytes)
            if raw is None:
                raw = _text_input(form.get(TEXT_FIELD), max_bytes)

    else:
        raw = None

    if raw is None:
        raise HTTPException(status_code=400, detail=NO_INPUT_MESSAGE)
    return raw
