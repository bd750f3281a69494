# =============================================================================
# Address Validation
# =============================================================================
# Trims and validates email addresses before they reach a header or the SMTP
# envelope.
#
# Invalid addresses are never an error here. They are silently dropped, so a
# single bad CC entry can't abort an otherwise valid send. Callers that need
# to tell "empty" apart from "all invalid" must inspect the raw input.
# =============================================================================

import re
from collections.abc import Iterable

# Conservative grammar: local-part@domain.tld with a 2+ letter final label.
EMAIL_PATTERN = re.compile(r"[a-zA-Z0-9._%+\-]+@[a-zA-Z0-9._\-]+\.[a-zA-Z]{2,}")


def validate_email(address: str | None) -> str:
    """
    Trim an address and check it against EMAIL_PATTERN.

    Args:
        address: Raw address as supplied by the caller.

    Returns:
        The trimmed address if valid, otherwise an empty string.

    Example:
        >>> validate_email("  user@example.com ")
        'user@example.com'
        >>> validate_email("user@com")
        ''
    """
    if not address:
        return ""
    trimmed = address.strip()
    if not EMAIL_PATTERN.fullmatch(trimmed):
        return ""
    return trimmed


def validate_email_list(addresses: Iterable[str] | None) -> list[str]:
    """
    Validate every address, keeping only the survivors in input order.
    """
    if not addresses:
        return []
    valid = []
    for address in addresses:
        checked = validate_email(address)
        if checked:
            valid.append(checked)
    return valid
