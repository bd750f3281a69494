# =============================================================================
# SendHawk Core Module
# =============================================================================
# The message data model: what gets sent, independent of how it's sent.
#
#   - Message: one outgoing email with a sanitized, validated read view
#   - Attachment: a named blob of bytes owned by a Message
#   - validate_email / validate_email_list: the address filter every
#     header and envelope address goes through
#
# Nothing here does I/O (apart from Attachment.from_file reading its file).
# =============================================================================

from sendhawk.core.attachment import Attachment
from sendhawk.core.message import (
    DEFAULT_MAX_ATTACHMENT_SIZE,
    Message,
    get_attachments,
    get_bcc,
    get_cc,
    get_from,
    get_html,
    get_reply_to,
    get_subject,
    get_text,
    get_to,
    is_html,
)
from sendhawk.core.validation import EMAIL_PATTERN, validate_email, validate_email_list

__all__ = [
    "Attachment",
    "Message",
    "DEFAULT_MAX_ATTACHMENT_SIZE",
    "EMAIL_PATTERN",
    "is_html",
    "validate_email",
    "validate_email_list",
    "get_from",
    "get_to",
    "get_cc",
    "get_bcc",
    "get_reply_to",
    "get_subject",
    "get_text",
    "get_html",
    "get_attachments",
]
