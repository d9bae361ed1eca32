"""Documentation header codec for the supported comment syntaxes."""

from .codec import apply_header, format_header, locate_header, parse_header
from .styles import CommentStyle, STYLES, normalize_language, style_for

__all__ = [
    "CommentStyle",
    "STYLES",
    "apply_header",
    "format_header",
    "locate_header",
    "normalize_language",
    "parse_header",
    "style_for",
]
