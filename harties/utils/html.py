"""
HTML helpers: entity decoding, tag stripping and allow-list sanitization
"""
import re

from bs4 import BeautifulSoup, Comment

ALLOWED_TAGS = frozenset(
    ["p", "br", "strong", "em", "u", "h1", "h2", "h3", "h4", "h5", "h6", "ul", "ol", "li", "blockquote"]
)

# Removed together with everything inside them
FORBIDDEN_TAGS = frozenset(["script", "style", "object", "embed", "base", "link", "iframe", "noscript", "template"])

_HEX_ENTITY = re.compile(r"&#x([0-9A-Fa-f]+);")
_DEC_ENTITY = re.compile(r"&#(\d+);")


def _codepoint(value: str, base: int) -> str:
    try:
        return chr(int(value, base))
    except (ValueError, OverflowError):
        return ""


def decode_entities(text: str) -> str:
    """
    Decode numeric and the five standard named entities in one pass.

    Ampersand goes last so "&amp;amp;" becomes "&amp;", not "&".
    """
    if not text:
        return ""
    text = _HEX_ENTITY.sub(lambda m: _codepoint(m.group(1), 16), text)
    text = _DEC_ENTITY.sub(lambda m: _codepoint(m.group(1), 10), text)
    text = text.replace("&quot;", '"')
    text = text.replace("&apos;", "'")
    text = text.replace("&lt;", "<")
    text = text.replace("&gt;", ">")
    return text.replace("&amp;", "&")


def strip_tags(html: str) -> str:
    """Plain text of an HTML fragment with whitespace collapsed"""
    if not html:
        return ""
    text = BeautifulSoup(html, "html.parser").get_text(" ")
    return " ".join(text.split())


def sanitize_html(html: str) -> str:
    """Keep only basic formatting tags, drop every attribute"""
    if not html:
        return ""

    soup = BeautifulSoup(html, "html.parser")

    for comment in soup.find_all(string=lambda s: isinstance(s, Comment)):
        comment.extract()

    for tag in soup.find_all(True):
        if tag.decomposed:
            continue
        if tag.name in FORBIDDEN_TAGS:
            tag.decompose()
        elif tag.name in ALLOWED_TAGS:
            tag.attrs = {}
        else:
            tag.unwrap()

    return str(soup).strip()


def sanitize_text(text: str) -> str:
    """Neutralise markup in a plain-text field"""
    if not text:
        return ""
    text = re.sub(r"[<>]", "", text)
    text = re.sub(r"javascript:", "", text, flags=re.IGNORECASE)
    text = re.sub(r"on\w+=", "", text, flags=re.IGNORECASE)
    return text.strip()
