# =============================================================================
# MIME Module
# =============================================================================
# Turns a Message into RFC 2045/2046 multipart bytes for the SMTP transport.
# Provider transports with their own wire format don't use this.
# =============================================================================

from sendhawk.mime.builder import (
    SerializationError,
    build_mime_message,
    get_mime_type,
    make_boundary,
)

__all__ = [
    "SerializationError",
    "build_mime_message",
    "get_mime_type",
    "make_boundary",
]
