# =============================================================================
# Escape-Only Text Sanitizer
# =============================================================================
# Default sanitizer for subjects, plain-text bodies and attachment filenames.
# Trims surrounding whitespace, then replaces the five HTML-significant
# characters with numeric/named entities so the value is inert wherever a
# client decides to render it.
# =============================================================================

# Quotes become numeric entities (&#34; and &#39;).
_ESCAPE_TABLE = str.maketrans({
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&#34;",
    "'": "&#39;",
})


class TextSanitizer:
    """
    Trim + HTML-escape.

    Example:
        >>> TextSanitizer().sanitize(' <b>hi</b> & "x" ')
        '&lt;b&gt;hi&lt;/b&gt; &amp; &#34;x&#34;'
    """

    def sanitize(self, text: str) -> str:
        if not text:
            return ""
        return text.strip().translate(_ESCAPE_TABLE)

    def __repr__(self) -> str:
        return "TextSanitizer()"


_DEFAULT_TEXT_SANITIZER = TextSanitizer()


def default_text_sanitizer() -> TextSanitizer:
    """Returns the shared escape-only sanitizer."""
    return _DEFAULT_TEXT_SANITIZER
