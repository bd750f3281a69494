# =============================================================================
# SendHawk: Vendor-Neutral Email Composition and Delivery
# =============================================================================
#
# Build a message once, send it through any transport.
#
#   >>> from sendhawk import Message, SMTPTransport
#   >>> message = Message(
#   ...     sender="alice@example.com",
#   ...     to=["bob@example.com"],
#   ...     subject="Quarterly report",
#   ...     text="See attached.",
#   ... )
#   >>> SMTPTransport("smtp.example.com", 587, "alice", "secret").send_email(message)
#
# Features:
#   - Lazy address validation and content sanitization on every read
#   - RFC 2045/2046 multipart serialization with CRLF framing
#   - SMTP over implicit TLS or STARTTLS, PLAIN or CRAM-MD5 auth
#
# =============================================================================

__version__ = "0.1.0"
__app_name__ = "sendhawk"

from sendhawk.config import ConfigError, SMTPConfig
from sendhawk.core import Attachment, Message, validate_email, validate_email_list
from sendhawk.mime import SerializationError, build_mime_message
from sendhawk.sanitize import (
    HTMLSanitizer,
    NonSanitizer,
    Sanitizer,
    SanitizerFunc,
    TextSanitizer,
)
from sendhawk.sender import EmailSender
from sendhawk.smtp import (
    AuthMethod,
    ConnectionMethod,
    SendError,
    SMTPAuthenticationError,
    SMTPConnectionError,
    SMTPError,
    SMTPTransport,
)

__all__ = [
    "__version__",
    "__app_name__",
    "Attachment",
    "Message",
    "validate_email",
    "validate_email_list",
    "Sanitizer",
    "SanitizerFunc",
    "TextSanitizer",
    "HTMLSanitizer",
    "NonSanitizer",
    "build_mime_message",
    "SerializationError",
    "EmailSender",
    "SMTPTransport",
    "AuthMethod",
    "ConnectionMethod",
    "SMTPError",
    "SMTPConnectionError",
    "SMTPAuthenticationError",
    "SendError",
    "SMTPConfig",
    "ConfigError",
]
