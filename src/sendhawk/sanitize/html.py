# =============================================================================
# Allow-List HTML Sanitizer
# =============================================================================
# Default sanitizer for HTML bodies. Parses the markup with BeautifulSoup and
# keeps only elements and attributes that are safe in user-generated content:
#
#   - <script>, <style>, <iframe>, ... are removed together with their content
#   - unknown elements are unwrapped (their text survives, the tag doesn't)
#   - attributes not on the per-element allow list are dropped, which takes
#     care of every on* event handler and of things like <p href="...">
#   - href/src/cite values must be relative or http(s)/mailto URLs, so
#     javascript: and data: URLs never survive
#   - links get rel="nofollow"
#   - comments, doctypes and processing instructions are dropped
#
# The policy mirrors the usual "UGC" policy of HTML sanitizers: rich enough
# for newsletters and signatures, nothing that executes.
# =============================================================================

from urllib.parse import urlsplit

from bs4 import BeautifulSoup, Tag
from bs4.element import PreformattedString

# Removed along with everything inside them
SKIP_CONTENT_ELEMENTS = frozenset({
    "frameset", "iframe", "noembed", "noframes", "noscript", "object",
    "script", "style", "template", "title",
})

ALLOWED_ELEMENTS = frozenset({
    "a", "abbr", "acronym", "address", "article", "aside", "b", "bdi", "bdo",
    "big", "blockquote", "br", "caption", "center", "cite", "code", "col",
    "colgroup", "dd", "del", "details", "dfn", "div", "dl", "dt", "em",
    "figcaption", "figure", "footer", "h1", "h2", "h3", "h4", "h5", "h6",
    "header", "hgroup", "hr", "i", "img", "ins", "kbd", "li", "mark", "nav",
    "ol", "p", "pre", "q", "rp", "rt", "ruby", "s", "samp", "section",
    "small", "span", "strike", "strong", "sub", "summary", "sup", "table",
    "tbody", "td", "tfoot", "th", "thead", "time", "tr", "tt", "u", "ul",
    "var", "wbr",
})

# Elements that are meaningless once all their attributes are stripped
REQUIRES_ATTRIBUTES = frozenset({"a", "img"})

GLOBAL_ATTRIBUTES = frozenset({"dir", "lang", "title"})

ELEMENT_ATTRIBUTES = {
    "a": frozenset({"href", "hreflang"}),
    "abbr": frozenset({"title"}),
    "blockquote": frozenset({"cite"}),
    "col": frozenset({"span", "width"}),
    "colgroup": frozenset({"span", "width"}),
    "del": frozenset({"cite", "datetime"}),
    "details": frozenset({"open"}),
    "img": frozenset({"src", "alt", "width", "height", "align"}),
    "ins": frozenset({"cite", "datetime"}),
    "li": frozenset({"value"}),
    "ol": frozenset({"start", "reversed", "type"}),
    "q": frozenset({"cite"}),
    "table": frozenset({"summary", "width", "height", "align"}),
    "td": frozenset({"abbr", "align", "colspan", "headers", "rowspan", "valign", "width", "height"}),
    "th": frozenset({"abbr", "align", "colspan", "headers", "rowspan", "valign", "scope", "width", "height"}),
    "time": frozenset({"datetime"}),
    "ul": frozenset({"type"}),
}

URL_ATTRIBUTES = frozenset({"href", "src", "cite"})
ALLOWED_URL_SCHEMES = frozenset({"http", "https", "mailto"})


def is_safe_url(value: str) -> bool:
    """
    Returns True for relative URLs and URLs with an allowed scheme.

    Whitespace and control characters are removed first, since browsers
    ignore them inside a scheme ("java\\tscript:" still runs).
    """
    compact = "".join(ch for ch in value if ord(ch) > 0x20 and ord(ch) != 0x7F)
    try:
        scheme = urlsplit(compact).scheme
    except ValueError:
        return False
    return not scheme or scheme.lower() in ALLOWED_URL_SCHEMES


class HTMLSanitizer:
    """
    BeautifulSoup-based allow-list sanitizer.

    Example:
        >>> HTMLSanitizer().sanitize("<div>Hello<script>alert(1)</script></div>")
        '<div>Hello</div>'
    """

    def sanitize(self, text: str) -> str:
        if not text:
            return ""
        # html.parser leaves fragments unwrapped (no <html><body> added)
        soup = BeautifulSoup(text, "html.parser")
        self._clean_children(soup)
        return soup.decode(formatter="minimal")

    def _clean_children(self, parent: Tag) -> None:
        # Snapshot: unwrap() moves grandchildren into `parent` and they
        # have already been cleaned by then.
        for child in list(parent.children):
            if isinstance(child, PreformattedString):
                child.extract()
                continue
            if not isinstance(child, Tag):
                continue

            name = child.name.lower()
            if name in SKIP_CONTENT_ELEMENTS:
                child.decompose()
                continue

            self._clean_children(child)

            if name not in ALLOWED_ELEMENTS:
                child.unwrap()
                continue

            child.attrs = self._clean_attributes(name, child.attrs)
            if not child.attrs and name in REQUIRES_ATTRIBUTES:
                child.unwrap()

    def _clean_attributes(self, name: str, attrs: dict) -> dict:
        allowed = GLOBAL_ATTRIBUTES | ELEMENT_ATTRIBUTES.get(name, frozenset())
        cleaned = {}
        for attr, value in attrs.items():
            attr = attr.lower()
            if attr not in allowed:
                continue
            if isinstance(value, list):
                value = " ".join(value)
            if attr in URL_ATTRIBUTES and not is_safe_url(value):
                continue
            cleaned[attr] = value

        if name == "a" and "href" in cleaned:
            cleaned["rel"] = "nofollow"
        return cleaned

    def __repr__(self) -> str:
        return "HTMLSanitizer()"


_DEFAULT_HTML_SANITIZER = HTMLSanitizer()


def default_html_sanitizer() -> HTMLSanitizer:
    """Returns the shared allow-list HTML sanitizer."""
    return _DEFAULT_HTML_SANITIZER
