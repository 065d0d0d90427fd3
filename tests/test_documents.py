"""Tests for the document builder."""

import json

import pytest

from secret_redactor.documents import build_documents
from secret_redactor.errors import TooManyChunks, UnsupportedRoot


def test_small_content_is_one_document():
    docs = build_documents("Small content", "test.txt")
    assert len(docs) == 1
    assert docs[0].name == "test.txt"
    assert docs[0].body == "Small content"
    assert docs[0].chunk_index is None
    assert docs[0].to_api() == {"filename": "test.txt", "document": "Small content"}


def test_oversized_json_is_chunked_into_named_parts():
    content = json.dumps([{"n": i, "pad": "p" * 30} for i in range(10)])
    docs = build_documents(content, "output.json", max_bytes=100, max_docs=20)

    assert len(docs) > 1
    assert [d.name for d in docs] == [f"output.json.part{i}" for i in range(len(docs))]
    assert [d.chunk_index for d in docs] == list(range(len(docs)))
    assert all(len(d.body.encode()) <= 100 for d in docs)


def test_too_many_chunks_is_a_hard_stop():
    # each element ends up alone in a chunk: three chunks, one allowed
    with pytest.raises(TooManyChunks) as exc:
        build_documents("[1,2,3]", "x.json", max_bytes=1, max_docs=1)
    assert exc.value.count == 3
    assert exc.value.limit == 1


def test_chunk_count_at_limit_is_allowed():
    docs = build_documents("[1,2,3]", "x.json", max_bytes=1, max_docs=3)
    assert len(docs) == 3


def test_oversized_plain_text_is_rejected():
    with pytest.raises(json.JSONDecodeError):
        build_documents("plain text " * 20, "chat.txt", max_bytes=50)


def test_oversized_json_primitive_is_rejected():
    with pytest.raises(UnsupportedRoot):
        build_documents('"' + "s" * 100 + '"', "x.json", max_bytes=50)
