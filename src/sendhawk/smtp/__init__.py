# =============================================================================
# SMTP Module
# =============================================================================
# Handles sending emails via SMTP (Simple Mail Transfer Protocol).
#
# Features:
#   - Implicit TLS (SMTPS) or STARTTLS-when-offered connections
#   - PLAIN and CRAM-MD5 authentication
#   - Bcc delivered through the envelope only
#   - Typed errors carrying the server's own response text
# =============================================================================

from sendhawk.smtp.client import (
    AuthMethod,
    ConnectionMethod,
    SMTPTransport,
    SMTPError,
    SMTPConnectionError,
    SMTPTLSError,
    SMTPGreetingError,
    SMTPAuthenticationError,
    SendError,
    envelope_recipients,
)

__all__ = [
    "AuthMethod",
    "ConnectionMethod",
    "SMTPTransport",
    "SMTPError",
    "SMTPConnectionError",
    "SMTPTLSError",
    "SMTPGreetingError",
    "SMTPAuthenticationError",
    "SendError",
    "envelope_recipients",
]
