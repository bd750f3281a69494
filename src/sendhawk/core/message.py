# =============================================================================
# Message Model
# =============================================================================
# Represents one outgoing email: sender, recipients, subject, text and/or
# HTML body, attachments.
#
# Raw field values are stored exactly as the caller set them. Nothing is
# validated or sanitized on write. Instead every get_*() accessor validates
# or sanitizes at the moment of reading and never touches the stored value.
# Two consequences worth knowing:
#
#   - swapping a sanitizer between two reads changes what the second read
#     (and therefore the serialized message) looks like
#   - invalid addresses simply disappear from the accessor output
#
# Every accessor also exists as a module-level function that accepts None,
# so transports can treat "no message" as "empty message":
#
#   >>> get_to(None)
#   []
# =============================================================================

import json
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any

from sendhawk.core.attachment import Attachment
from sendhawk.core.validation import validate_email, validate_email_list
from sendhawk.sanitize import (
    Sanitizer,
    as_sanitizer,
    default_html_sanitizer,
    default_text_sanitizer,
)

# 25 MiB, the limit most providers enforce for a whole message
DEFAULT_MAX_ATTACHMENT_SIZE = 25 * 1024 * 1024

# Best-effort: a tag opener followed anywhere later by ">" counts as markup,
# so "use <Enter> to confirm" is misclassified as HTML.
_TAG_OPEN_PATTERN = re.compile(r"</?[a-z]", re.IGNORECASE)


def is_html(text: str) -> bool:
    """Returns True if the string appears to contain HTML tags."""
    if not text:
        return False
    # Only the first opener matters: any later ">" also follows it
    match = _TAG_OPEN_PATTERN.search(text)
    return match is not None and ">" in text[match.end():]


def _address_list(addresses: Iterable[str] | str | None) -> list[str]:
    # A lone string is one address, not a sequence of characters
    if isinstance(addresses, str):
        return [addresses]
    return list(addresses or [])


@dataclass
class Message:
    """
    Represents an email being sent.

    This is a mutable builder owned by one caller until it's handed to a
    transport. Set fields directly or use the add_*() helpers, then pass the
    message to any EmailSender.

    Attributes:
        sender: The "From" address (raw). Read through get_from().
        to: "To" addresses.
        cc: "Cc" addresses.
        bcc: "Bcc" addresses. Used for the SMTP envelope only, never
             written into the message headers.
        reply_to: Optional "Reply-To" address.
        subject: Subject line.
        text: Plain text body.
        html: HTML body. If both text and html are set the message is sent
              as multipart/alternative.
        attachments: Attachments in the order they should appear.
        max_attachment_size: Byte ceiling per attachment. Larger ones are
                             silently left out by get_attachments().
                             Negative means no limit.
        text_sanitizer: Override for subject/text. None = escape-only.
        html_sanitizer: Override for html. None = allow-list HTML.

    WARNING: a custom sanitizer replaces the default protection entirely.
    A lax one lets injected markup through to the recipient's client.

    Example:
        >>> message = Message(
        ...     sender="alice@example.com",
        ...     to=["bob@example.com"],
        ...     subject="Hello",
        ...     text="Hi Bob!",
        ... )
        >>> message.add_cc("carol@example.com").get_cc()
        ['carol@example.com']
    """

    # Envelope information
    sender: str = ""
    to: list[str] = field(default_factory=list)
    cc: list[str] = field(default_factory=list)
    bcc: list[str] = field(default_factory=list)
    reply_to: str = ""

    # Content
    subject: str = ""
    text: str = ""
    html: str = ""
    attachments: list[Attachment] = field(default_factory=list)

    # Policy
    max_attachment_size: int = DEFAULT_MAX_ATTACHMENT_SIZE
    text_sanitizer: Sanitizer | Callable[[str], str] | None = None
    html_sanitizer: Sanitizer | Callable[[str], str] | None = None

    def __post_init__(self) -> None:
        # Own copies, so the caller's lists can't change the message later
        self.to = _address_list(self.to)
        self.cc = _address_list(self.cc)
        self.bcc = _address_list(self.bcc)
        self.attachments = list(self.attachments or [])
        self.text_sanitizer = as_sanitizer(self.text_sanitizer)
        self.html_sanitizer = as_sanitizer(self.html_sanitizer)

    @classmethod
    def from_body(cls, sender: str, to: Iterable[str] | str, subject: str, body: str) -> "Message":
        """
        Create a message from a single body, guessing its type.

        The body goes into `html` if is_html() says it contains tags,
        otherwise into `text`. This is a heuristic, not a classifier.
        """
        if is_html(body):
            return cls(sender=sender, to=_address_list(to), subject=subject, html=body)
        return cls(sender=sender, to=_address_list(to), subject=subject, text=body)

    # -------------------------------------------------------------------------
    # Builders
    # -------------------------------------------------------------------------

    def add_to(self, address: str) -> "Message":
        """Append a "To" recipient. Returns self for chaining."""
        self.to.append(address)
        return self

    def add_cc(self, address: str) -> "Message":
        self.cc.append(address)
        return self

    def add_bcc(self, address: str) -> "Message":
        self.bcc.append(address)
        return self

    def add_attachment(self, attachment: Attachment) -> "Message":
        self.attachments.append(attachment)
        return self

    def set_text_sanitizer(self, sanitizer: Sanitizer | Callable[[str], str] | None) -> "Message":
        """Replace the subject/text sanitizer (None restores the default)."""
        self.text_sanitizer = as_sanitizer(sanitizer)
        return self

    def set_html_sanitizer(self, sanitizer: Sanitizer | Callable[[str], str] | None) -> "Message":
        """Replace the HTML sanitizer (None restores the default)."""
        self.html_sanitizer = as_sanitizer(sanitizer)
        return self

    # -------------------------------------------------------------------------
    # Sanitized / validated view
    # -------------------------------------------------------------------------

    def get_from(self) -> str:
        return get_from(self)

    def get_to(self) -> list[str]:
        return get_to(self)

    def get_cc(self) -> list[str]:
        return get_cc(self)

    def get_bcc(self) -> list[str]:
        return get_bcc(self)

    def get_reply_to(self) -> str:
        return get_reply_to(self)

    def get_subject(self) -> str:
        return get_subject(self)

    def get_text(self) -> str:
        return get_text(self)

    def get_html(self) -> str:
        return get_html(self)

    def get_attachments(self) -> list[Attachment]:
        return get_attachments(self)

    # -------------------------------------------------------------------------
    # JSON representation
    # -------------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """
        Raw field values as a JSON-ready dict.

        Optional fields (cc, bcc, replyTo, html, attachments) are left out
        when empty. Sanitizers and the attachment limit are not included.
        """
        data: dict[str, Any] = {
            "from": self.sender,
            "to": list(self.to),
        }
        if self.cc:
            data["cc"] = list(self.cc)
        if self.bcc:
            data["bcc"] = list(self.bcc)
        if self.reply_to:
            data["replyTo"] = self.reply_to
        data["subject"] = self.subject
        data["text"] = self.text
        if self.html:
            data["html"] = self.html
        if self.attachments:
            data["attachments"] = [a.to_dict() for a in self.attachments]
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Message":
        """
        Build a message from a to_dict()-shaped dict.

        The attachment limit is reset to DEFAULT_MAX_ATTACHMENT_SIZE.

        Raises:
            binascii.Error: If an attachment's content isn't valid base64.
        """
        return cls(
            sender=data.get("from") or "",
            to=data.get("to") or [],
            cc=data.get("cc") or [],
            bcc=data.get("bcc") or [],
            reply_to=data.get("replyTo") or "",
            subject=data.get("subject") or "",
            text=data.get("text") or "",
            html=data.get("html") or "",
            attachments=[Attachment.from_dict(a) for a in data.get("attachments") or []],
        )

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_json(cls, text: str | bytes) -> "Message":
        """Parse a JSON document produced by to_json()."""
        return cls.from_dict(json.loads(text))

    def __repr__(self) -> str:
        return (
            f"Message(from={self.sender!r}, to={self.to!r}, "
            f"subject={self.subject!r}, attachments={len(self.attachments)})"
        )


# =============================================================================
# Accessors
# =============================================================================
# Pure functions over the raw fields. None behaves like an empty message.

def get_from(message: Message | None) -> str:
    """Validated sender address, or "" if missing/invalid."""
    if message is None:
        return ""
    return validate_email(message.sender)


def get_to(message: Message | None) -> list[str]:
    """Valid "To" addresses in their original order."""
    if message is None:
        return []
    return validate_email_list(message.to)


def get_cc(message: Message | None) -> list[str]:
    if message is None:
        return []
    return validate_email_list(message.cc)


def get_bcc(message: Message | None) -> list[str]:
    if message is None:
        return []
    return validate_email_list(message.bcc)


def get_reply_to(message: Message | None) -> str:
    if message is None:
        return ""
    return validate_email(message.reply_to)


def _text_sanitizer(message: Message) -> Sanitizer:
    # as_sanitizer again: the attribute may have been assigned a bare function
    return as_sanitizer(message.text_sanitizer) or default_text_sanitizer()


def get_subject(message: Message | None) -> str:
    """Subject passed through the text sanitizer."""
    if message is None:
        return ""
    return _text_sanitizer(message).sanitize(message.subject)


def get_text(message: Message | None) -> str:
    """Plain text body passed through the text sanitizer."""
    if message is None:
        return ""
    return _text_sanitizer(message).sanitize(message.text)


def get_html(message: Message | None) -> str:
    """HTML body passed through the HTML sanitizer."""
    if message is None:
        return ""
    sanitizer = as_sanitizer(message.html_sanitizer) or default_html_sanitizer()
    return sanitizer.sanitize(message.html)


def get_attachments(message: Message | None) -> list[Attachment]:
    """
    Attachments within max_attachment_size, order preserved.

    Oversized attachments are dropped silently, never truncated.
    """
    if message is None:
        return []
    if message.max_attachment_size < 0:
        return list(message.attachments)
    return [a for a in message.attachments if a.size <= message.max_attachment_size]
