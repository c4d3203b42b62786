"""Text cleanup for model output."""
import re

_CONTROL_CHARS = re.compile(r'[\x00-\x08\x0B-\x0C\x0E-\x1F\x7F-\x9F]')
_TRAILING_SPACES = re.compile(r'[ \t]+\n')
_EXTRA_BLANK_LINES = re.compile(r'\n{3,}')


def sanitize_text(text) -> str:
    """Normalize a model reply before extraction and display.

    Removes control characters (keeping tab, newline and carriage return),
    normalizes line endings, drops trailing spaces on each line and collapses
    runs of blank lines to one so paragraph breaks survive.

    Examples:
        >>> sanitize_text("Mitose  \\r\\n\\n\\n\\nMeiose ✅")
        'Mitose\\n\\nMeiose ✅'
        >>> sanitize_text(None)
        ''
    """
    if text is None:
        return ""

    text = str(text).replace("\r\n", "\n")
    text = _CONTROL_CHARS.sub('', text)
    text = _TRAILING_SPACES.sub('\n', text)
    text = _EXTRA_BLANK_LINES.sub('\n\n', text)
    return text.strip()


def truncate(text: str, limit: int = 100) -> str:
    """Shorten text for log previews."""
    return text if len(text) <= limit else text[:limit] + "..."
