"""
Header path tracking for Markdown sections.

Provides the HeaderPath stack used by semantic chunking to give each section
its ancestor context without building a document tree.
"""

import logging
from dataclasses import dataclass, field
from typing import List

logger = logging.getLogger(__name__)


@dataclass
class HeaderPath:
    """
    Stack of (level, label) pairs from the document root to the current section.

    Pushing a header first pops every entry whose level is greater than or
    equal to the new level, so the stack always holds strictly increasing
    levels.

    Example:
        >>> path = HeaderPath()
        >>> path.push("Guide", 1)
        >>> path.push("Install", 2)
        >>> path.push("Usage", 2)
        >>> path.get_path()
        'Guide > Usage'
    """
    labels: List[str] = field(default_factory=list)
    levels: List[int] = field(default_factory=list)

    def push(self, label: str, level: int) -> None:
        """Enter a section, replacing siblings and deeper descendants."""
        while self.levels and self.levels[-1] >= level:
            self.levels.pop()
            self.labels.pop()
        self.labels.append(label.strip())
        self.levels.append(level)

    @property
    def depth(self) -> int:
        return len(self.levels)

    def get_path(self, separator: str = " > ") -> str:
        """Get formatted header path for display."""
        return separator.join(self.labels) if self.labels else ""
