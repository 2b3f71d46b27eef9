"""
Semantic Chunker Module

Splits Markdown documents on ATX headers, with optional hybrid regex
filtering, merging of small sections and paragraph-level splitting of large
ones.
"""

import re
import logging
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

from ..documents import Document
from ...exceptions import InvalidArgumentError
from .base import BaseChunker, compile_pattern, require_non_negative
from .cancellation import CancellationToken, check_cancelled
from .chunk import ContentChunk
from .header_path import HeaderPath

logger = logging.getLogger(__name__)

PARAGRAPH_SEPARATOR = "\n\n"
MERGED_HEADER_SEPARATOR = " + "


@dataclass
class Section:
    """A header-delimited region of a document."""
    start: int
    end: int
    content: str
    header: str
    level: int
    merged_count: int = 1


def _strip_span(text: str, start: int, end: int) -> Tuple[int, int]:
    """Narrow [start, end) so that text[start:end] equals the stripped slice."""
    while start < end and text[start].isspace():
        start += 1
    while end > start and text[end - 1].isspace():
        end -= 1
    return start, end


def _paragraph_spans(text: str) -> List[Tuple[int, int]]:
    """Spans of the non-empty blocks between blank-line separators."""
    spans = []
    position = 0
    while True:
        found = text.find(PARAGRAPH_SEPARATOR, position)
        stop = len(text) if found == -1 else found
        if stop > position:
            spans.append((position, stop))
        if found == -1:
            return spans
        position = found + len(PARAGRAPH_SEPARATOR)


class SemanticChunker(BaseChunker):
    """
    Header-based chunking for Markdown documents.

    A section runs from a header whose level lies in [min_level, max_level]
    to the next such header. Each chunk carries its header, level and the
    " > "-joined path of ancestor headers. Text before the first qualifying
    header does not belong to any section and is not emitted.

    A document without qualifying headers becomes one whole-document chunk.
    In hybrid mode that chunk is emitted only when filter_pattern matches
    somewhere in the document; otherwise the stream is empty.

    Processing order:
        1. Extract sections
        2. Hybrid filter (filter_pattern matched against header or body)
        3. Merge small sections (merge_small with min_size > 0)
        4. Split large sections at paragraph boundaries (max_size > 0)

    Example:
        >>> chunker = SemanticChunker(min_level=1, max_level=2)
        >>> doc = Document.from_text("guide", "# Guide\\n\\nIntro\\n\\n## Install\\n\\nSteps")
        >>> [c.metadata["headerPath"] for c in chunker.chunk(doc)]
        ['Guide', 'Guide > Install']
    """

    strategy_name = "semantic"

    def __init__(
        self,
        min_level: int = 1,
        max_level: int = 3,
        min_size: int = 0,
        max_size: int = 0,
        merge_small: bool = False,
        filter_pattern: Optional[str] = None
    ) -> None:
        """
        Initialize the semantic chunker.

        Args:
            min_level: Lowest header level that starts a section (1-6)
            max_level: Highest header level that starts a section (1-6)
            min_size: Accumulated size a merged section must reach
            max_size: Size above which a section is split (0 disables)
            merge_small: Whether to merge consecutive small sections
            filter_pattern: Optional regex enabling hybrid mode

        Raises:
            InvalidArgumentError: If levels are out of range or the filter is malformed
        """
        if not isinstance(min_level, int) or not isinstance(max_level, int) \
                or not 1 <= min_level <= max_level <= 6:
            raise InvalidArgumentError(
                f"Header levels must satisfy 1 <= min_level <= max_level <= 6, "
                f"got: min_level={min_level}, max_level={max_level}",
                argument="min_level",
            )
        require_non_negative(min_size, "min_size")
        require_non_negative(max_size, "max_size")

        self.min_level = min_level
        self.max_level = max_level
        self.min_size = min_size
        self.max_size = max_size
        self.merge_small = merge_small
        self.filter_pattern = filter_pattern or None

        self._header_regex = re.compile(
            rf"^(#{{{min_level},{max_level}}})[ \t]+(.+)$",
            re.MULTILINE
        )
        self._filter = compile_pattern(filter_pattern, "filter_pattern") if filter_pattern else None

    @property
    def is_hybrid(self) -> bool:
        return self._filter is not None

    def extract_sections(self, content: str) -> List[Section]:
        """
        Find qualifying headers and build one section per header.

        Args:
            content: Document text

        Returns:
            Sections in document order; empty when no header qualifies
        """
        matches = list(self._header_regex.finditer(content))
        sections = []

        for i, match in enumerate(matches):
            end = matches[i + 1].start() if i + 1 < len(matches) else len(content)
            start, end = _strip_span(content, match.start(), end)
            sections.append(Section(
                start=start,
                end=end,
                content=content[start:end],
                header=match.group(2).strip(),
                level=len(match.group(1)),
            ))

        if matches and matches[0].start() > 0 and content[:matches[0].start()].strip():
            logger.debug(f"Skipping {matches[0].start()} characters before the first header")

        return sections

    def _matches_filter(self, section: Section) -> bool:
        return bool(self._filter.search(section.content) or self._filter.search(section.header))

    def merge_small_sections(self, sections: List[Section]) -> List[Section]:
        """
        Merge consecutive sections until each accumulated block reaches min_size.

        The final block is kept even when it is still below min_size.
        """
        merged = []
        accumulator: Optional[Section] = None

        for section in sections:
            if accumulator is None:
                accumulator = section
            elif len(accumulator.content) < self.min_size:
                accumulator = Section(
                    start=accumulator.start,
                    end=section.end,
                    content=accumulator.content + PARAGRAPH_SEPARATOR + section.content,
                    header=accumulator.header + MERGED_HEADER_SEPARATOR + section.header,
                    level=min(accumulator.level, section.level),
                    merged_count=accumulator.merged_count + 1,
                )
            else:
                merged.append(accumulator)
                accumulator = section

        if accumulator is not None:
            merged.append(accumulator)

        return merged

    def split_large_sections(self, sections: List[Section]) -> List[Section]:
        """
        Split sections longer than max_size at paragraph boundaries.

        Paragraphs are packed greedily; a paragraph longer than max_size on
        its own becomes a part by itself without being cut. Positions of a
        merged section's parts are relative to the merged text and therefore
        approximate.
        """
        result = []

        for section in sections:
            if len(section.content) <= self.max_size:
                result.append(section)
                continue

            parts = []
            part_start = part_end = None
            for paragraph_start, paragraph_end in _paragraph_spans(section.content):
                if part_start is not None and paragraph_end - part_start > self.max_size:
                    parts.append((part_start, part_end))
                    part_start = None
                if part_start is None:
                    part_start = paragraph_start
                part_end = paragraph_end
            if part_start is not None:
                parts.append((part_start, part_end))

            if len(parts) <= 1:
                result.append(section)
                continue

            for number, (start, end) in enumerate(parts, 1):
                start, end = _strip_span(section.content, start, end)
                result.append(Section(
                    start=min(section.start + start, section.end),
                    end=min(section.start + end, section.end),
                    content=section.content[start:end],
                    header=f"{section.header} (Part {number})",
                    level=section.level,
                ))

            logger.debug(f"Split section {section.header!r} into {len(parts)} parts")

        return result

    def chunk(
        self,
        document: Document,
        cancel_token: Optional[CancellationToken] = None
    ) -> Iterator[ContentChunk]:
        content = document.content
        if not content:
            return

        sections = self.extract_sections(content)

        if not sections:
            if self.is_hybrid and not self._filter.search(content):
                return
            check_cancelled(cancel_token, 0)
            yield ContentChunk(
                index=0,
                content=content,
                start_position=0,
                end_position=len(content),
                metadata={"documentId": document.id, "strategy": self.strategy_name},
            )
            return

        if self.is_hybrid:
            sections = [s for s in sections if self._matches_filter(s)]
            logger.debug(f"Hybrid filter kept {len(sections)} section(s)")

        if self.merge_small and self.min_size > 0:
            sections = self.merge_small_sections(sections)

        if self.max_size > 0:
            sections = self.split_large_sections(sections)

        header_path = HeaderPath()
        for index, section in enumerate(sections):
            check_cancelled(cancel_token, index)

            header_path.push(section.header, section.level)
            metadata = {
                "documentId": document.id,
                "sectionHeader": section.header,
                "headerLevel": str(section.level),
                "headerPath": header_path.get_path(),
                "strategy": self.strategy_name,
            }
            if section.merged_count > 1:
                metadata["mergedSections"] = str(section.merged_count)

            yield ContentChunk(
                index=index,
                content=section.content,
                start_position=section.start,
                end_position=section.end,
                metadata=metadata,
            )
