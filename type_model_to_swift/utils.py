"""
Utility functions for Swift source text.
"""

_SWIFT_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\0": "\\0",
}


def escape_string(text: str) -> str:
    """Escape text for use inside a Swift string literal.

    Examples:
        'say "hi"' -> 'say \\"hi\\"'
        "a\\b" -> "a\\\\b"
    """
    return "".join(_SWIFT_ESCAPES.get(char, char) for char in text)


def swift_string(text: str) -> str:
    """Quoted Swift string literal."""
    return f'"{escape_string(text)}"'


def doc_comment_lines(doc: str) -> list[str]:
    """Convert a documentation string to /// comment lines.

    Trailing blank lines are dropped; interior blank lines are kept as bare ///.
    """
    if not doc or not doc.strip():
        return []
    lines = doc.strip("\n").splitlines()
    while lines and not lines[-1].strip():
        lines.pop()
    return [f"/// {line.rstrip()}" if line.strip() else "///" for line in lines]


def deprecation_attribute(message: str | None) -> str | None:
    """@available attribute for a deprecated declaration (None when not deprecated)."""
    if message is None:
        return None
    if not message:
        return "@available(*, deprecated)"
    return f"@available(*, deprecated, message: {swift_string(message)})"


def indent(lines: list[str], level: int = 1, width: int = 4) -> list[str]:
    """Indent non-empty lines by `level` steps."""
    prefix = " " * (level * width)
    return [prefix + line if line else line for line in lines]
