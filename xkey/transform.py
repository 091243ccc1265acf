#!/usr/bin/env python3
"""
Derivation of localization keys, templates and placeholders from selected text.

Selected text is a string literal taken from Dart-style source, so it may
contain ``$name`` or ``${name}`` interpolation markers:

    "Hello, ${name}!"  ->  key "helloName", template "Hello, {name}!",
                           placeholders ["name"]
"""

import re
from typing import Optional

from .errors import InvalidKey, MissingPlaceholderType

# \w is restricted to ASCII so Dart identifiers match the same way everywhere
BRACED_PATTERN = re.compile(r'\$\{(\w+)\}', re.ASCII)
BARE_PATTERN = re.compile(r'\$(\w+)', re.ASCII)
PLACEHOLDER_PATTERN = re.compile(r'\$\{(\w+)\}|\$(\w+)', re.ASCII)

DELIMITER_PATTERN = re.compile(r'[${}]')
SEPARATOR_RUN_PATTERN = re.compile(r'[^A-Za-z0-9]+(.?)')
KEY_PATTERN = re.compile(r'[A-Za-z0-9]+')
QUOTE_PATTERN = re.compile(r'^["\']|["\']$')


def clean_selection(text: str) -> str:
    """Trim whitespace and one surrounding quote character from each end."""
    return QUOTE_PATTERN.sub('', text.strip())


def key_from_selection(text: str) -> str:
    """
    Build a camelCase key candidate from selected text.

    Every run of non-alphanumeric characters is removed and the character
    after it is uppercased; a run at the very end is simply dropped.

    Example:
        "Hello, World!" -> "helloWorld"
    """
    key = DELIMITER_PATTERN.sub('', text)
    key = SEPARATOR_RUN_PATTERN.sub(lambda m: m.group(1).upper(), key)
    return key[:1].lower() + key[1:]


def meaning_from_selection(text: str) -> str:
    """
    Rewrite interpolation markers to ICU ``{name}`` placeholders.

    Examples:
        "Hello, ${name}!" -> "Hello, {name}!"
        "Hello, $name!"   -> "Hello, {name}!"
    """
    text = BRACED_PATTERN.sub(r'{\1}', text)
    text = BARE_PATTERN.sub(r'{\1}', text)
    return text.replace('$', '')


def extract_placeholders(text: str) -> list[str]:
    """
    Return placeholder names in the order they appear.

    Repeated names are kept: "${a} and $b and ${a}" -> ["a", "b", "a"].
    """
    return [m.group(1) or m.group(2) for m in PLACEHOLDER_PATTERN.finditer(text)]


def is_valid_key(key: Optional[str]) -> bool:
    return bool(key) and KEY_PATTERN.fullmatch(key) is not None


def validate_key(key: Optional[str]) -> str:
    """Return ``key`` unchanged or raise InvalidKey."""
    if not is_valid_key(key):
        raise InvalidKey(f"Localization key is invalid: {key!r}")
    return key


def require_placeholder_type(name: str, declared: Optional[str]) -> str:
    """Return the stripped type or raise MissingPlaceholderType."""
    if declared is None or not declared.strip():
        raise MissingPlaceholderType(name)
    return declared.strip()


def build_reference(prefix: str, key: str, placeholders: list[str]) -> str:
    """
    Build the token that replaces the selection in source code.

    Examples:
        ("S.of(context)", "greet", [])       -> "S.of(context).greet"
        ("S.of(context)", "greet", ["name"]) -> "S.of(context).greet(name)"
    """
    reference = f"{prefix}.{key}"
    if placeholders:
        reference += f"({', '.join(placeholders)})"
    return reference
