"""
Unit tests for the Content Loader.
"""

import json
import os
import tempfile

import pytest
import yaml

from catalog_engine.stages.ingestion import ContentLoadError, ContentLoader


def write(root, relative, content):
    path = os.path.join(root, relative)
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        if relative.endswith(".json"):
            json.dump(content, f)
        elif isinstance(content, str):
            f.write(content)
        else:
            yaml.safe_dump(content, f)


@pytest.fixture
def content_root():
    with tempfile.TemporaryDirectory() as tmpdir:
        yield tmpdir


def test_manifest_order_and_categories(content_root, make_record):
    """Test that the manifest decides section order and category tags."""
    write(content_root, "catalog.yaml", {"sections": [
        {"category": "protocols", "topics": ["cn/tcp.yaml"]},
        {"category": "transactions", "topics": ["db/acid.json", "db/isolation.yaml"]},
    ]})
    write(content_root, "cn/tcp.yaml", make_record(id="tcp"))
    write(content_root, "db/acid.json", make_record(id="acid"))
    write(content_root, "db/isolation.yaml", make_record(id="isolation"))

    result = ContentLoader(content_root).load()

    assert [c.data["id"] for c in result.candidates] == ["tcp", "acid", "isolation"]
    assert [c.category for c in result.candidates] == ["protocols", "transactions", "transactions"]
    assert result.candidates[1].source == "db/acid.json"
    assert result.source_errors == {}


def test_directory_layout(content_root, make_record):
    """Test category directories in taxonomy order with files in filename order."""
    write(content_root, "protocols/b.yaml", make_record(id="b"))
    write(content_root, "protocols/a.yaml", make_record(id="a"))
    write(content_root, "oop/c.yaml", make_record(id="c"))
    write(content_root, "oop/notes.txt", "ignored")

    result = ContentLoader(content_root).load()

    # oop precedes protocols in the taxonomy
    assert [c.data["id"] for c in result.candidates] == ["c", "a", "b"]
    assert [c.category for c in result.candidates] == ["oop", "protocols", "protocols"]


def test_file_with_several_topics(content_root, make_record):
    write(content_root, "oop/all.yaml", [make_record(id="one"), make_record(id="two")])
    write(content_root, "oop/wrapped.json", {"topics": [make_record(id="three")]})

    result = ContentLoader(content_root).load()

    assert [c.data["id"] for c in result.candidates] == ["one", "two", "three"]
    assert [c.position for c in result.candidates] == [0, 1, 0]


def test_unparseable_file_is_source_error(content_root, make_record):
    """Test that a broken file is reported without stopping the load."""
    write(content_root, "oop/broken.yaml", "id: [unclosed\n")
    write(content_root, "oop/good.yaml", make_record(id="good"))

    result = ContentLoader(content_root).load()

    assert [c.data["id"] for c in result.candidates] == ["good"]
    assert list(result.source_errors) == ["oop/broken.yaml"]


def test_undecodable_file_is_source_error(content_root, make_record):
    """Test that a file that is not UTF-8 is reported like any unparseable file."""
    os.makedirs(os.path.join(content_root, "transactions"))
    with open(os.path.join(content_root, "transactions", "bad.yaml"), "wb") as f:
        f.write(b"id: bad\ntitle: \xff\xfe\n")
    write(content_root, "transactions/good.yaml", make_record(id="good"))

    result = ContentLoader(content_root).load()

    assert [c.data["id"] for c in result.candidates] == ["good"]
    assert list(result.source_errors) == ["transactions/bad.yaml"]


def test_empty_file_is_source_error(content_root):
    write(content_root, "oop/empty.yaml", "")

    result = ContentLoader(content_root).load()

    assert result.candidates == []
    assert "no topic records" in str(result.source_errors["oop/empty.yaml"][0])


def test_missing_listed_file_is_source_error(content_root):
    write(content_root, "catalog.yaml", {"sections": [
        {"category": "oop", "topics": ["oop/missing.yaml"]},
    ]})

    result = ContentLoader(content_root).load()

    assert "not found" in str(result.source_errors["oop/missing.yaml"][0])


def test_missing_content_root():
    with pytest.raises(ContentLoadError, match="not found"):
        ContentLoader("/nonexistent/content/root").load()


def test_malformed_manifest(content_root):
    write(content_root, "catalog.yaml", {"topics": ["a.yaml"]})

    with pytest.raises(ContentLoadError, match="sections"):
        ContentLoader(content_root).load()
