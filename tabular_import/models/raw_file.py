from __future__ import annotations

from dataclasses import dataclass

"""RawFile model: bytes of a user-selected file plus its declared name.

Created when a file is selected, consumed once by the import pipeline and
discarded afterwards.
"""

__all__ = [
    "RawFile",
]


@dataclass(frozen=True)
class RawFile:
    name: str  # declared file name (extension drives format detection)
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)
