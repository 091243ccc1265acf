#!/usr/bin/env python3
"""
Tests for the format-preserving ARB patcher.

Tests:
1. Existing bytes survive and the result parses back to the expected object
2. Empty object gets no stray separator
3. Indent detection drives entry and metadata indentation
4. Trailing commas, trailing newlines and CRLF files
5. Malformed and unreadable files
"""

import json

import pytest

from xkey.errors import FileIOError, MalformedFile
from xkey.patcher import ArbPatcher


@pytest.fixture
def patcher():
    return ArbPatcher()


def test_insert_with_placeholder_round_trips(patcher):
    """Test 1: New key and @key metadata, existing entry bytes unchanged."""
    original = '{"existingKey": "value"}'

    result = patcher.insert_entry(original, "greet", "Hi {name}!", {"name": "String"})

    assert json.loads(result) == {
        "existingKey": "value",
        "greet": "Hi {name}!",
        "@greet": {"placeholders": {"name": {"type": "String"}}},
    }
    assert result.startswith('{"existingKey": "value",')
    assert result.endswith("}\n")


def test_insert_preserves_existing_layout(patcher):
    """Test 1b: Everything before the insertion point is byte-identical."""
    original = (
        '{\n'
        '    "@@locale": "en",\n'
        '    "zebra":   "Z",\n'
        '    "apple": "A \\u00e9",\n'
        '    "@apple": {"description": "kept on one line"}\n'
        '}\n'
    )
    head = original[:original.rindex('"}') + 2]

    result = patcher.insert_entry(original, "newKey", "New")

    assert result.startswith(head)
    assert list(json.loads(result)) == ["@@locale", "zebra", "apple", "@apple", "newKey"]


def test_insert_into_empty_object(patcher):
    """Test 2: '{}' gets no leading comma."""
    result = patcher.insert_entry("{}", "k", "v")

    assert result == '{\n  "k": "v"\n}\n'
    assert json.loads(result) == {"k": "v"}


def test_insert_into_empty_multiline_object(patcher):
    """Test 2b: Whitespace-only object body."""
    result = patcher.insert_entry("{\n}\n", "k", "v")

    assert ",\n" not in result
    assert json.loads(result) == {"k": "v"}


def test_detects_four_space_indent(patcher):
    """Test 3: Entry and nested metadata follow the file's indent."""
    original = '{\n    "title": "App"\n}\n'

    result = patcher.insert_entry(original, "greet", "Hi {name}!", {"name": "String"})

    assert result == (
        '{\n'
        '    "title": "App",\n'
        '    "greet": "Hi {name}!",\n'
        '    "@greet": {\n'
        '        "placeholders": {\n'
        '            "name": {\n'
        '                "type": "String"\n'
        '            }\n'
        '        }\n'
        '    }\n'
        '}\n'
    )


def test_default_indent_without_indented_entries(patcher):
    """Test 3b: Falls back to two spaces."""
    assert patcher.detect_indent('{"a": "b"}') == "  "
    assert patcher.detect_indent('{\n\t"a": "b"\n}') == "  "
    assert patcher.detect_indent('{\n   "a": "b"\n}') == "   "


def test_multiple_placeholders_keep_order(patcher):
    """Test 3c: Placeholder metadata keeps prompt order."""
    original = '{\n  "title": "App"\n}\n'

    result = patcher.insert_entry(
        original, "summary", "{user} has {count} items", {"user": "String", "count": "int"},
    )

    data = json.loads(result)
    assert list(data["@summary"]["placeholders"]) == ["user", "count"]
    assert data["@summary"]["placeholders"]["count"] == {"type": "int"}


def test_existing_trailing_comma_is_not_doubled(patcher):
    """Test 4: A separator already before '}' is reused."""
    result = patcher.insert_entry('{\n  "a": "b",\n}', "k", "v")

    assert ",," not in result
    assert result == '{\n  "a": "b",\n  "k": "v"\n}\n'


def test_trailing_newline_not_duplicated(patcher):
    """Test 4b: A file that already ends in a newline keeps exactly one."""
    result = patcher.insert_entry('{\n  "a": "b"\n}\n', "k", "v")

    assert result.endswith("}\n")
    assert not result.endswith("\n\n")


def test_crlf_file_stays_crlf(patcher):
    """Test 4c: Inserted lines use the file's line ending."""
    original = '{\r\n  "a": "b"\r\n}\r\n'

    result = patcher.insert_entry(original, "k", "v")

    assert result == '{\r\n  "a": "b",\r\n  "k": "v"\r\n}\r\n'


def test_values_are_json_escaped(patcher):
    """Test 4d: Quotes, backslashes and non-ASCII text are encoded safely."""
    text = 'Say "hi" \\ ça va'

    result = patcher.insert_entry("{}", "quote", text)

    assert json.loads(result)["quote"] == text
    assert "ça va" in result


def test_missing_closing_brace(patcher):
    """Test 5: No '}' at all."""
    with pytest.raises(MalformedFile):
        patcher.insert_entry('["not", "an", "object"]', "k", "v")


def test_validate_content(patcher):
    """Test 5b: Validation reports syntax errors and non-object roots."""
    assert patcher.validate_content('{"a": "b"}') == []
    assert patcher.validate_content("[]") == ["ARB root must be a JSON object"]
    errors = patcher.validate_content('{"a": ')
    assert len(errors) == 1 and errors[0].startswith("Invalid JSON syntax")


def test_patch_file_writes_in_place(patcher, tmp_path):
    """Test 5c: patch_file reads, patches and replaces the file."""
    arb = tmp_path / "app_en.arb"
    arb.write_text('{\n  "@@locale": "en"\n}\n', encoding="utf-8")

    patcher.patch_file(arb, "greet", "Hi {name}!", {"name": "String"})

    data = json.loads(arb.read_text(encoding="utf-8"))
    assert data["greet"] == "Hi {name}!"
    assert data["@greet"] == {"placeholders": {"name": {"type": "String"}}}
    assert [p.name for p in tmp_path.iterdir()] == ["app_en.arb"]


def test_patch_file_keeps_crlf_bytes(patcher, tmp_path):
    """Test 5d: No newline translation on read or write."""
    arb = tmp_path / "app.arb"
    arb.write_bytes(b'{\r\n  "a": "b"\r\n}\r\n')

    patcher.patch_file(arb, "k", "v")

    assert arb.read_bytes() == b'{\r\n  "a": "b",\r\n  "k": "v"\r\n}\r\n'


def test_patch_file_rejects_invalid_json(patcher, tmp_path):
    """Test 5e: Invalid files are left untouched."""
    arb = tmp_path / "broken.arb"
    arb.write_text('{"a": "b"', encoding="utf-8")

    with pytest.raises(MalformedFile):
        patcher.patch_file(arb, "k", "v")

    assert arb.read_text(encoding="utf-8") == '{"a": "b"'


def test_patch_file_missing(patcher, tmp_path):
    """Test 5f: Missing file is an IO error."""
    with pytest.raises(FileIOError):
        patcher.patch_file(tmp_path / "nope.arb", "k", "v")


def test_patch_file_duplicate_key_warns(patcher, tmp_path, caplog):
    """Test 5g: Existing key is appended again with a warning."""
    arb = tmp_path / "app.arb"
    arb.write_text('{\n  "k": "old"\n}\n', encoding="utf-8")

    with caplog.at_level("WARNING", logger="xkey.patcher"):
        patcher.patch_file(arb, "k", "new")

    assert "already exists" in caplog.text
    assert json.loads(arb.read_text(encoding="utf-8")) == {"k": "new"}
