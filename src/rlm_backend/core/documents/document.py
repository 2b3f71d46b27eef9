"""
Document Model Module

Contains the Document and DocumentMetadata classes consumed by every chunking
strategy. Documents are produced by external readers; this module only holds
the value types and the derived statistics used when a reader did not supply
them.

Components:
- DocumentMetadata: Source, size and structure statistics of a document
- Document: Identifier, full text and metadata handed to a chunker
"""

import re
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Any, Optional

logger = logging.getLogger(__name__)

_WORD_PATTERN = re.compile(r"\b\w+\b")
_HEADER_PATTERN = re.compile(r"^#{1,6}[ \t]+\S", re.MULTILINE)


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class DocumentMetadata:
    """
    Statistics and provenance for a loaded document.

    Attributes:
        source: Where the document came from (path, "stdin", "memory", ...)
        total_length: Length of the content in characters
        token_estimate: Rough token count (characters / 4)
        line_count: Number of newline-delimited lines
        loaded_at: ISO-8601 timestamp of when the document was loaded
        content_type: MIME-like content type hint (e.g. "text/markdown")
        word_count: Optional number of words
        header_count: Optional number of Markdown ATX headers
        extended: Free-form reader-specific metadata
    """
    source: str
    total_length: int
    token_estimate: int
    line_count: int
    loaded_at: str = field(default_factory=_utc_now_iso)
    content_type: Optional[str] = None
    word_count: Optional[int] = None
    header_count: Optional[int] = None
    extended: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_content(
        cls,
        source: str,
        content: str,
        content_type: Optional[str] = None
    ) -> 'DocumentMetadata':
        """
        Derive metadata from raw document text.

        Args:
            source: Source description of the document
            content: Full document text
            content_type: Optional content type hint

        Returns:
            DocumentMetadata with computed statistics
        """
        return cls(
            source=source,
            total_length=len(content),
            token_estimate=len(content) // 4,
            line_count=len(content.split("\n")) if content else 0,
            content_type=content_type,
            word_count=len(_WORD_PATTERN.findall(content)),
            header_count=len(_HEADER_PATTERN.findall(content)),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert metadata to a JSON-compatible dictionary."""
        result = {
            "source": self.source,
            "totalLength": self.total_length,
            "tokenEstimate": self.token_estimate,
            "lineCount": self.line_count,
            "loadedAt": self.loaded_at,
        }
        if self.content_type is not None:
            result["contentType"] = self.content_type
        if self.word_count is not None:
            result["wordCount"] = self.word_count
        if self.header_count is not None:
            result["headerCount"] = self.header_count
        if self.extended:
            result["extended"] = dict(self.extended)
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DocumentMetadata':
        """Create metadata from a dictionary produced by to_dict()."""
        return cls(
            source=data.get("source", "unknown"),
            total_length=int(data.get("totalLength", 0)),
            token_estimate=int(data.get("tokenEstimate", 0)),
            line_count=int(data.get("lineCount", 0)),
            loaded_at=data.get("loadedAt") or _utc_now_iso(),
            content_type=data.get("contentType"),
            word_count=data.get("wordCount"),
            header_count=data.get("headerCount"),
            extended=dict(data.get("extended") or {}),
        )


@dataclass
class Document:
    """
    A document ready for chunking.

    The content is never modified by a chunker; every strategy is a pure
    function of the content and its own parameters.

    Example:
        >>> doc = Document.from_text("notes.md", "# Title\\n\\nBody")
        >>> doc.metadata.header_count
        1
    """
    id: str
    content: str
    metadata: DocumentMetadata

    @classmethod
    def from_text(
        cls,
        document_id: str,
        content: str,
        source: Optional[str] = None,
        content_type: Optional[str] = None
    ) -> 'Document':
        """Build a document and derive its metadata from the text."""
        metadata = DocumentMetadata.from_content(source or document_id, content, content_type)
        logger.debug(f"Document created: id={document_id}, length={metadata.total_length}")
        return cls(id=document_id, content=content, metadata=metadata)

    @property
    def is_empty(self) -> bool:
        return not self.content
