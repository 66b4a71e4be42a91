"""
Output sinks for generated Swift.

The generator hands each output fragment (the prelude, then every type in
leaf-first order) to a sink; where the text ends up is the sink's concern.
"""

from __future__ import annotations

import tempfile
from abc import ABC, abstractmethod
from pathlib import Path


class Sink(ABC):
    """Receives named text fragments, then is closed once."""

    @abstractmethod
    def write(self, name: str, text: str) -> None:
        """Accept the text of one fragment."""

    def close(self) -> None:
        """Finish output; called once after the last fragment."""


class StringSink(Sink):
    """Collects fragments in memory, in arrival order."""

    def __init__(self):
        self.fragments: dict[str, str] = {}

    def write(self, name: str, text: str) -> None:
        self.fragments[name] = text

    def getvalue(self) -> str:
        return "\n\n".join(self.fragments.values()) + "\n"


class FileSink(StringSink):
    """Writes the assembled fragments to one file atomically.

    Uses a two-phase commit approach:
    1. Write to a temporary file in the same directory
    2. Atomically replace the target file

    This ensures that an interrupted run never leaves the target file
    in an incomplete state.
    """

    def __init__(self, path: str | Path):
        super().__init__()
        self.path = Path(path)

    def close(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)

        # Same directory ensures atomic rename on the same filesystem
        temp_fd, temp_path_str = tempfile.mkstemp(
            dir=self.path.parent,
            prefix=f".{self.path.name}.",
            suffix=".tmp",
            text=True,
        )
        temp_path = Path(temp_path_str)

        try:
            with open(temp_fd, "w", encoding="utf-8") as f:
                f.write(self.getvalue())
            temp_path.replace(self.path)
        except BaseException:
            temp_path.unlink(missing_ok=True)
            raise
