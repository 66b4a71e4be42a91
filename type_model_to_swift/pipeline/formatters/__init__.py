"""
Code formatters for post-processing generated Swift.
"""

from __future__ import annotations

from .base import Formatter
from .swift_format_formatter import SwiftFormatFormatter, format_with_swift_format

__all__ = [
    "Formatter",
    "SwiftFormatFormatter",
    "format_with_swift_format",
]
