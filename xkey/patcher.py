#!/usr/bin/env python3
"""
Format-preserving patcher for Flutter ARB (Application Resource Bundle) files.

New entries are spliced in as text right before the closing brace of the
top-level object. Nothing before the insertion point is re-serialized, so key
order, quoting, spacing and the trailing layout of hand-edited files survive
and diffs only show the added lines.
"""

import json
import logging
import os
import re
import tempfile
from pathlib import Path
from typing import Optional

from .errors import FileIOError, MalformedFile

logger = logging.getLogger(__name__)

# First indented key in the file: newline, spaces, opening quote
INDENT_PATTERN = re.compile(r'\n( +)"')
DEFAULT_INDENT = "  "
SEPARATORS = (",", "{")


class ArbPatcher:
    """
    Appends a key and its ``@key`` metadata to an ARB file.

    Given
    ```json
    {
      "@@locale": "en",
      "title": "My App"
    }
    ```
    inserting ``greet`` = ``"Hi {name}!"`` with ``{"name": "String"}`` yields
    ```json
    {
      "@@locale": "en",
      "title": "My App",
      "greet": "Hi {name}!",
      "@greet": {
        "placeholders": {
          "name": {
            "type": "String"
          }
        }
      }
    }
    ```
    """

    def validate_content(self, content: str) -> list[str]:
        """Validate that content is a JSON object we can append to."""
        errors = []

        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            errors.append(f"Invalid JSON syntax: {e.msg} at line {e.lineno}")
            return errors

        if not isinstance(data, dict):
            errors.append("ARB root must be a JSON object")

        return errors

    def existing_keys(self, content: str) -> set[str]:
        try:
            data = json.loads(content)
        except json.JSONDecodeError:
            return set()
        return set(data) if isinstance(data, dict) else set()

    def detect_indent(self, content: str) -> str:
        match = INDENT_PATTERN.search(content)
        return match.group(1) if match else DEFAULT_INDENT

    def build_metadata(self, placeholder_types: dict[str, str]) -> dict:
        return {
            "placeholders": {
                name: {"type": declared} for name, declared in placeholder_types.items()
            }
        }

    def build_payload(
        self,
        key: str,
        text: str,
        placeholder_types: dict[str, str],
        indent: str,
        newline: str = "\n",
    ) -> str:
        """Render the lines to insert, without the leading separator."""
        payload = f"{newline}{indent}{_quote(key)}: {_quote(text)}"

        if placeholder_types:
            metadata = json.dumps(
                self.build_metadata(placeholder_types),
                indent=indent,
                ensure_ascii=False,
            )
            # Nest the serialized object one level under the top-level object
            metadata = metadata.replace("\n", newline + indent)
            payload += f",{newline}{indent}{_quote('@' + key)}: {metadata}"

        return payload

    def insert_entry(
        self,
        content: str,
        key: str,
        text: str,
        placeholder_types: Optional[dict[str, str]] = None,
    ) -> str:
        """
        Return ``content`` with the new entry spliced in before the last ``}``.

        Raises:
            MalformedFile: no closing brace in content
        """
        placeholder_types = placeholder_types or {}

        end = content.rfind("}")
        if end == -1:
            raise MalformedFile("No closing '}' found")

        head = content[:end].rstrip()
        separator = "" if head.endswith(SEPARATORS) else ","
        indent = self.detect_indent(content)
        newline = "\r\n" if "\r\n" in content else "\n"
        payload = self.build_payload(key, text, placeholder_types, indent, newline)

        result = head + separator + payload + newline + content[end:]
        if not result.endswith("\n"):
            result += newline
        return result

    def patch_file(
        self,
        path: Path,
        key: str,
        text: str,
        placeholder_types: Optional[dict[str, str]] = None,
    ) -> None:
        """
        Insert the entry into the file at ``path`` and write it back.

        Raises:
            FileIOError: file cannot be read or written
            MalformedFile: file is not a JSON object
        """
        path = Path(path)
        try:
            with open(path, encoding="utf-8", newline="") as f:
                content = f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise FileIOError(f"Cannot read {path}: {e}")

        errors = self.validate_content(content)
        if errors:
            raise MalformedFile(f"{path}: {'; '.join(errors)}")

        if key in self.existing_keys(content):
            logger.warning("Key '%s' already exists in %s; appending a duplicate", key, path)

        patched = self.insert_entry(content, key, text, placeholder_types)

        try:
            atomic_write(path, patched)
        except OSError as e:
            raise FileIOError(f"Cannot write {path}: {e}")

        logger.info("Added '%s' to %s", key, path)


def _quote(value: str) -> str:
    return json.dumps(value, ensure_ascii=False)


def atomic_write(path: Path, data: str) -> None:
    """
    Replace ``path`` with ``data`` via a temp file in the same directory.

    The previous content stays in place until the new content is fully
    flushed. Permission bits of the original file are kept.
    """
    try:
        orig_mode = path.stat().st_mode & 0o777
    except OSError:
        orig_mode = None

    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as tf:
            tf.write(data)
            tf.flush()
            os.fsync(tf.fileno())
        if orig_mode is not None:
            os.chmod(tmp_name, orig_mode)
        os.replace(tmp_name, path)
    finally:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
