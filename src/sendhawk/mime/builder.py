# =============================================================================
# MIME Message Builder
# =============================================================================
# Serializes a Message into the bytes handed to an SMTP server's DATA command.
#
# Structure:
#
#   with attachments                      without attachments
#   ----------------                      -------------------
#   multipart/mixed                       multipart/alternative
#     multipart/alternative                 text/plain  (if any text)
#       text/plain  (if any text)           text/html   (if any HTML)
#       text/html   (if any HTML)
#     attachment 1 (base64)
#     attachment 2 (base64)
#
# Headers come out in a fixed order: From, To, Cc, Reply-To, Subject,
# MIME-Version, Content-Type. Bcc is never written.
#
# Every line ends in CRLF, bodies included.
# =============================================================================

import logging
import mimetypes
import re
import time
from email.header import Header
from pathlib import PurePath

from sendhawk.core.message import Message

logger = logging.getLogger(__name__)

CRLF = "\r\n"

# RFC 2045 line length limit for base64 bodies
BASE64_LINE_LENGTH = 76

# Used when the extension isn't in the mimetypes table
FALLBACK_MIME_TYPE = "application/octet-stream"

_LINE_BREAKS = re.compile(r"\r\n|\r|\n")


class SerializationError(Exception):
    """
    Raised when a message can't be turned into MIME bytes.

    The builder has no failure path of its own today; encoding errors are
    surfaced through this type so callers only need to handle one.
    """
    pass


def get_mime_type(filename: str) -> str:
    """
    Returns the MIME type for a filename based on its extension.

    Example:
        >>> get_mime_type("report.PDF")
        'application/pdf'
        >>> get_mime_type("data.unknownext")
        'application/octet-stream'
    """
    extension = PurePath(filename).suffix.lower()
    if not extension:
        return FALLBACK_MIME_TYPE
    mime_type, _ = mimetypes.guess_type(f"file{extension}", strict=False)
    return mime_type or FALLBACK_MIME_TYPE


def make_boundary(prefix: str) -> str:
    """Boundary token: fixed prefix plus a nanosecond timestamp."""
    return f"{prefix}{time.time_ns()}"


def build_mime_message(message: Message) -> bytes:
    """
    Build the complete MIME representation of a message.

    Args:
        message: The message to serialize. Only its sanitized, validated
                 view (the get_*() accessors) is used.

    Returns:
        UTF-8 encoded message bytes with CRLF line endings.

    Raises:
        SerializationError: If the message can't be encoded.

    Example:
        >>> raw = build_mime_message(Message(
        ...     sender="a@x.com", to=["b@x.com"], subject="Hi", text="Hello"))
        >>> b"Subject: Hi\\r\\n" in raw
        True
    """
    mixed_boundary = make_boundary("mixed-boundary-")
    alt_boundary = make_boundary("alt-boundary-")

    lines: list[str] = []

    # Headers
    lines.append(_header("From", message.get_from()))
    to = message.get_to()
    if to:
        lines.append(_header("To", ", ".join(to)))
    cc = message.get_cc()
    if cc:
        lines.append(_header("Cc", ", ".join(cc)))
    reply_to = message.get_reply_to()
    if reply_to:
        lines.append(_header("Reply-To", reply_to))
    lines.append(f"Subject: {_encode_header_value(message.get_subject())}")
    lines.append("MIME-Version: 1.0")

    attachments = message.get_attachments()
    if attachments:
        lines.append(f"Content-Type: multipart/mixed; boundary={mixed_boundary}")
        lines.append("")
        lines.append(f"--{mixed_boundary}")
    lines.append(f"Content-Type: multipart/alternative; boundary={alt_boundary}")
    lines.append("")

    # Bodies
    text = message.get_text()
    if text:
        lines.append(f"--{alt_boundary}")
        lines.append("Content-Type: text/plain; charset=UTF-8")
        lines.append("")
        lines.append(_normalize_line_breaks(text))

    html = message.get_html()
    if html:
        lines.append(f"--{alt_boundary}")
        lines.append("Content-Type: text/html; charset=UTF-8")
        lines.append("")
        lines.append(_normalize_line_breaks(html))

    lines.append(f"--{alt_boundary}--")

    # Attachments
    if attachments:
        for attachment in attachments:
            filename = _single_line(attachment.get_filename())
            lines.append(f"--{mixed_boundary}")
            lines.append(f"Content-Type: {get_mime_type(attachment.filename)}")
            lines.append("Content-Transfer-Encoding: base64")
            lines.append(f'Content-Disposition: attachment; filename="{filename}"')
            lines.append("")
            lines.extend(_wrap_base64(attachment.get_base64_string_content()))
        lines.append(f"--{mixed_boundary}--")

    # Trailing "" gives the final line its CRLF
    lines.append("")

    try:
        raw = CRLF.join(lines).encode("utf-8")
    except UnicodeEncodeError as e:
        raise SerializationError(f"Failed to encode message: {e}") from e

    logger.debug(
        f"Built MIME message: {len(raw)} bytes, "
        f"{len(attachments)} attachment(s)"
    )
    return raw


# =============================================================================
# Helpers
# =============================================================================

def _single_line(value: str) -> str:
    """Collapse CR/LF so a value can't start a new header."""
    return _LINE_BREAKS.sub(" ", value)


def _header(name: str, value: str) -> str:
    return f"{name}: {_single_line(value)}"


def _encode_header_value(value: str) -> str:
    """RFC 2047-encode non-ASCII values; ASCII is left untouched."""
    value = _single_line(value)
    if value.isascii():
        return value
    return Header(value, "utf-8").encode(linesep=CRLF)


def _normalize_line_breaks(body: str) -> str:
    return _LINE_BREAKS.sub(CRLF, body)


def _wrap_base64(encoded: str) -> list[str]:
    if not encoded:
        return [""]
    return [
        encoded[i:i + BASE64_LINE_LENGTH]
        for i in range(0, len(encoded), BASE64_LINE_LENGTH)
    ]
