"""
Document Loader Service

Reads plain-text documents from a file, a directory or standard input and
wraps them as Document values for the chunking engine. Format-specific
parsing (PDF, HTML, Word) is not supported; every file is read as UTF-8 text.
"""

import logging
import sys
from pathlib import Path
from typing import List, Optional, TextIO

from ..core.documents import Document, DocumentMetadata
from ..exceptions import InvalidArgumentError

logger = logging.getLogger(__name__)

STDIN_SOURCE = "-"
DEFAULT_DIRECTORY_PATTERN = "*"
MERGE_SEPARATOR = "\n---\n\n"

_CONTENT_TYPES = {
    ".md": "text/markdown",
    ".markdown": "text/markdown",
    ".txt": "text/plain",
    ".json": "application/json",
    ".html": "text/html",
    ".htm": "text/html",
    ".csv": "text/csv",
}


def guess_content_type(path: Path) -> str:
    return _CONTENT_TYPES.get(path.suffix.lower(), "text/plain")


def read_text_file(path: Path) -> Document:
    """
    Read one file as a document.

    Raises:
        FileNotFoundError: If the file does not exist
        InvalidArgumentError: If the file is not valid UTF-8 text
    """
    try:
        content = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise InvalidArgumentError(
            f"File is not UTF-8 text: {path}",
            argument="source",
            suggestions=["Convert the document to plain text before loading it"],
        ) from e
    return Document.from_text(path.name, content, source=str(path), content_type=guess_content_type(path))


def read_stdin(stream: Optional[TextIO] = None) -> Document:
    stream = stream if stream is not None else sys.stdin
    content = stream.read()
    return Document.from_text("stdin", content, source="stdin", content_type="text/plain")


def merge_documents(documents: List[Document], source: str) -> Document:
    """
    Concatenate documents into one Markdown document.

    Each document becomes a "# <id>" section and sections are separated by a
    horizontal rule, so the semantic strategy can split them apart again.
    """
    content = MERGE_SEPARATOR.join(f"# {doc.id}\n\n{doc.content}" for doc in documents)
    metadata = DocumentMetadata.from_content(source, content, "text/markdown")
    metadata.extended = {"fileCount": str(len(documents))}
    return Document(id=f"merged-{len(documents)}-documents", content=content, metadata=metadata)


def find_documents(directory: Path, pattern: Optional[str] = None) -> List[Path]:
    """Files in a directory matching a glob pattern, in sorted order."""
    return sorted(p for p in directory.glob(pattern or DEFAULT_DIRECTORY_PATTERN) if p.is_file())


def load_document(
    source: str,
    pattern: Optional[str] = None,
    merge: bool = False,
    stdin: Optional[TextIO] = None
) -> Document:
    """
    Load a document from a path or standard input.

    Args:
        source: File path, directory path, or "-" for standard input
        pattern: Glob pattern applied when source is a directory
        merge: Combine every matching file instead of loading only the first
        stdin: Stream read when source is "-" (default: sys.stdin)

    Returns:
        The loaded document

    Raises:
        FileNotFoundError: If the source or any matching file is missing
        InvalidArgumentError: If a file is not UTF-8 text
    """
    if source == STDIN_SOURCE:
        return read_stdin(stdin)

    path = Path(source).expanduser()
    if path.is_dir():
        files = find_documents(path, pattern)
        if not files:
            raise FileNotFoundError(
                f"No documents found in {path} matching {pattern or DEFAULT_DIRECTORY_PATTERN!r}"
            )
        if len(files) == 1:
            return read_text_file(files[0])
        if not merge:
            logger.warning(f"Found {len(files)} files, loaded only the first. Use --merge to combine all.")
            return read_text_file(files[0])
        documents = [read_text_file(f) for f in files]
        logger.info(f"Merged {len(documents)} documents from {path}")
        return merge_documents(documents, str(path))

    if not path.exists():
        raise FileNotFoundError(f"Document not found: {path}")
    return read_text_file(path)
