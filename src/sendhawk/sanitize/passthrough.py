# =============================================================================
# Pass-Through Sanitizer
# =============================================================================
# Returns its input unchanged.
#
# WARNING: opting into this sanitizer means the caller takes full
# responsibility for the content. Anything in the raw field, including
# <script> tags and unescaped markup in a subject, goes straight into the
# message bytes. It is never used unless explicitly configured on a Message.
# =============================================================================


class NonSanitizer:
    """Identity sanitizer for content that is already known to be safe."""

    def sanitize(self, text: str) -> str:
        return text

    def __repr__(self) -> str:
        return "NonSanitizer()"


_NON_SANITIZER = NonSanitizer()


def non_sanitizer() -> NonSanitizer:
    """Returns the shared pass-through sanitizer."""
    return _NON_SANITIZER
