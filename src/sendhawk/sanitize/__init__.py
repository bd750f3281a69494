# =============================================================================
# Sanitize Module
# =============================================================================
# Strategies that neutralize user-supplied strings before they are written
# into message bytes.
#
# Bundled strategies:
#   - TextSanitizer: trim + HTML-escape (subjects, plain text, filenames)
#   - HTMLSanitizer: allow-list HTML cleaning (HTML bodies)
#   - NonSanitizer: pass-through, opt-in only
#
# Any object with `sanitize(str) -> str`, or a plain function wrapped in
# SanitizerFunc, can stand in for these on a per-message basis.
# =============================================================================

from sendhawk.sanitize.base import Sanitizer, SanitizerFunc, as_sanitizer
from sendhawk.sanitize.html import HTMLSanitizer, default_html_sanitizer
from sendhawk.sanitize.passthrough import NonSanitizer, non_sanitizer
from sendhawk.sanitize.text import TextSanitizer, default_text_sanitizer

__all__ = [
    "Sanitizer",
    "SanitizerFunc",
    "as_sanitizer",
    "TextSanitizer",
    "HTMLSanitizer",
    "NonSanitizer",
    "default_text_sanitizer",
    "default_html_sanitizer",
    "non_sanitizer",
]
