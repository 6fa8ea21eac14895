"""Content sniffing: media type detection from magic bytes.

Determines a payload's media type from its leading bytes, never from a file
name or caller-supplied metadata. Follows the WHATWG MIME sniffing signature
table that common HTTP stacks implement.

Requirements:
- Deterministic: the same bytes always produce the same type
- Total: every input (including empty) yields a type string
- Only the first SNIFF_LENGTH bytes are inspected
"""

from __future__ import annotations

SNIFF_LENGTH = 512

OCTET_STREAM = "application/octet-stream"
TEXT_PLAIN_UTF8 = "text/plain; charset=utf-8"

_WHITESPACE = b"\t\n\x0c\r "
_TAG_TERMINATORS = b" >"

_HTML_TAGS: tuple[bytes, ...] = (
    b"<!DOCTYPE HTML",
    b"<HTML",
    b"<HEAD",
    b"<SCRIPT",
    b"<IFRAME",
    b"<H1",
    b"<DIV",
    b"<FONT",
    b"<TABLE",
    b"<A",
    b"<STYLE",
    b"<TITLE",
    b"<B",
    b"<BODY",
    b"<BR",
    b"<P",
    b"<!--",
)

# (prefix, media type) checked in order against the start of the payload
_EXACT_SIGNATURES: tuple[tuple[bytes, str], ...] = (
    (b"%PDF-", "application/pdf"),
    (b"%!PS-Adobe-", "application/postscript"),
    (b"\xfe\xff", "text/plain; charset=utf-16be"),
    (b"\xff\xfe", "text/plain; charset=utf-16le"),
    (b"\xef\xbb\xbf", TEXT_PLAIN_UTF8),
    (b"\x00\x00\x01\x00", "image/x-icon"),
    (b"\x00\x00\x02\x00", "image/x-icon"),
    (b"BM", "image/bmp"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"OggS\x00", "application/ogg"),
    (b"ID3", "audio/mpeg"),
    (b"wOFF", "font/woff"),
    (b"wOF2", "font/woff2"),
    (b"\x1f\x8b\x08", "application/x-gzip"),
    (b"PK\x03\x04", "application/zip"),
    (b"Rar!\x1a\x07\x00", "application/x-rar-compressed"),
    (b"Rar!\x1a\x07\x01\x00", "application/x-rar-compressed"),
    (b"\x00asm", "application/wasm"),
)

# control bytes that never occur in text
_BINARY_BYTES = frozenset(
    list(range(0x00, 0x09)) + [0x0B] + list(range(0x0E, 0x1B)) + list(range(0x1C, 0x20))
)


def _skip_whitespace(data: bytes) -> bytes:
    """Strip leading whitespace as defined by the sniffing algorithm."""
    return data.lstrip(_WHITESPACE)


def _is_html(data: bytes) -> bool:
    """Check for a known HTML tag followed by a tag-terminating byte."""
    upper = _skip_whitespace(data).upper()
    for tag in _HTML_TAGS:
        if not upper.startswith(tag):
            continue
        # an unterminated prefix such as "<Ball" is not a tag
        if len(upper) > len(tag) and upper[len(tag)] in _TAG_TERMINATORS:
            return True
    return False


def _is_webp(data: bytes) -> bool:
    """Check for a RIFF container holding WebP data."""
    return len(data) >= 14 and data[:4] == b"RIFF" and data[8:14] == b"WEBPVP"


def _is_mp4(data: bytes) -> bool:
    """Check for an ISO base media file with an mp4 brand."""
    if len(data) < 12:
        return False
    box_size = int.from_bytes(data[:4], "big")
    if box_size % 4 != 0 or len(data) < box_size or data[4:8] != b"ftyp":
        return False
    for offset in range(8, box_size, 4):
        if offset == 12:
            # skip the minor version field
            continue
        if data[offset : offset + 3] == b"mp4":
            return True
    return False


def _is_text(data: bytes) -> bool:
    """Check that no binary control bytes are present."""
    return not any(byte in _BINARY_BYTES for byte in data)


def sniff_media_type(data: bytes) -> str:
    """Detect a payload's media type from its leading bytes.

    Args:
        data: Payload bytes (only the first SNIFF_LENGTH are inspected).

    Returns:
        Media type string. Falls back to "text/plain; charset=utf-8" for
        text-like data and "application/octet-stream" for anything else.

    Detection priority:
        1. HTML / XML markers (after leading whitespace)
        2. Exact magic-byte signatures (documents, BOMs, images, archives)
        3. WebP and MP4 container checks
        4. Text heuristic
    """
    head = bytes(data[:SNIFF_LENGTH])

    if _is_html(head):
        return "text/html; charset=utf-8"

    if _skip_whitespace(head).startswith(b"<?xml"):
        return "text/xml; charset=utf-8"

    for prefix, media_type in _EXACT_SIGNATURES:
        if head.startswith(prefix):
            return media_type

    if _is_webp(head):
        return "image/webp"

    if _is_mp4(head):
        return "video/mp4"

    if _is_text(head):
        return TEXT_PLAIN_UTF8

    return OCTET_STREAM
