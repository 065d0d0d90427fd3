"""Document builder — turn raw content into a bounded batch of documents."""

from __future__ import annotations
import logging

from .chunker import DEFAULT_MAX_BYTES, byte_size, split
from .errors import TooManyChunks
from .types import Document

logger = logging.getLogger(__name__)

DEFAULT_MAX_DOCUMENTS = 20


def build_documents(
    content: str,
    name: str,
    max_bytes: int = DEFAULT_MAX_BYTES,
    max_docs: int = DEFAULT_MAX_DOCUMENTS,
) -> list[Document]:
    """Return the documents to scan for ``content``.

    Content that fits is sent as one document.  Anything larger must be JSON
    and is chunked into ``{name}.part{i}`` documents.  Exceeding ``max_docs``
    raises TooManyChunks rather than scanning a truncated batch.
    """
    if byte_size(content) <= max_bytes:
        return [Document(name=name, body=content)]

    chunks = split(content, max_bytes)
    if len(chunks) > max_docs:
        raise TooManyChunks(len(chunks), max_docs)

    logger.debug("Split %s into %d chunks", name, len(chunks))
    return [
        Document(name=f"{name}.part{c.index}", body=c.body, chunk_index=c.index)
        for c in chunks
    ]
