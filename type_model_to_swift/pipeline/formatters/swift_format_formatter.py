"""
swift-format formatter for generated Swift code.
"""

from __future__ import annotations

import subprocess

from ...logging import get_logger
from ..config import FormatterConfig
from .base import Formatter

logger = get_logger("formatters")


class SwiftFormatFormatter(Formatter):
    """Formatter running the swift-format executable over stdin."""

    def __init__(self):
        self._available: dict[str, bool] = {}

    def is_available(self, config: FormatterConfig) -> bool:
        """Check if swift-format is installed."""
        if config.executable not in self._available:
            try:
                result = subprocess.run(
                    [config.executable, "--version"],
                    capture_output=True,
                    text=True,
                    timeout=5,
                )
                self._available[config.executable] = result.returncode == 0
            except (subprocess.SubprocessError, FileNotFoundError):
                self._available[config.executable] = False
        return self._available[config.executable]

    def format(self, code: str, config: FormatterConfig) -> str:
        """
        Format Swift code with swift-format.

        Returns the input unchanged when the formatter is missing or fails.
        """
        if not self.is_available(config):
            logger.warning("%s not found; leaving generated code unformatted", config.executable)
            return code

        try:
            result = subprocess.run(
                [config.executable, "format"],
                input=code,
                capture_output=True,
                text=True,
                timeout=config.timeout,
            )
        except subprocess.SubprocessError as e:
            logger.warning("%s failed: %s", config.executable, e)
            return code

        if result.returncode != 0:
            logger.warning("%s exited with %d: %s", config.executable, result.returncode, result.stderr.strip())
            return code
        return result.stdout


def format_with_swift_format(code: str, executable: str = "swift-format", timeout: int = 30) -> str:
    """Convenience function to format Swift code with swift-format."""
    formatter = SwiftFormatFormatter()
    config = FormatterConfig(enabled=True, executable=executable, timeout=timeout)
    return formatter.format(code, config)
