#!/usr/bin/env python3
"""
End-to-end key extraction.

Ties the pieces together for one user-initiated command:

    selection -> key/template/placeholders -> prompts -> patch every output
    file -> reference token -> optional generator run

Config, key and placeholder-type problems abort before any file is touched.
Each output file is then patched on its own: a broken file is reported and
skipped, files already written stay written.
"""

import concurrent.futures as cf
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .config import ExtractConfig, load_config
from .errors import ExtractError, FileIOError, MalformedFile
from .generator import GeneratorResult, describe_outcome, run_generator
from .patcher import ArbPatcher
from .transform import (
    build_reference,
    clean_selection,
    extract_placeholders,
    key_from_selection,
    meaning_from_selection,
    require_placeholder_type,
    validate_key,
)

logger = logging.getLogger(__name__)


class Prompter(ABC):
    """Collects the user's answers. Returning None means the user cancelled."""

    @abstractmethod
    def ask_key(self, default: str) -> Optional[str]:
        pass

    @abstractmethod
    def ask_placeholder_type(self, name: str) -> Optional[str]:
        pass


class PresetPrompter(Prompter):
    """Answers from values supplied up front (flags, tests)."""

    def __init__(self, key: Optional[str] = None, types: Optional[dict[str, str]] = None):
        self.key = key
        self.types = types or {}

    def ask_key(self, default: str) -> Optional[str]:
        return self.key if self.key is not None else default

    def ask_placeholder_type(self, name: str) -> Optional[str]:
        return self.types.get(name)


@dataclass
class FileOutcome:
    """Result of patching a single output file."""
    path: str
    status: str = "ok"  # ok, failed
    error: Optional[ExtractError] = None

    def to_dict(self) -> dict:
        result = {"path": self.path, "status": self.status}
        if self.error is not None:
            result["error_type"] = self.error.error_type
            result["error"] = str(self.error)
        return result


@dataclass
class ExtractionResult:
    key: str
    text: str
    placeholders: list[str]
    placeholder_types: dict[str, str]
    reference: str
    files: list[FileOutcome] = field(default_factory=list)
    generator: Optional["cf.Future[GeneratorResult]"] = None

    @property
    def failed_files(self) -> list[FileOutcome]:
        return [f for f in self.files if f.status != "ok"]

    @property
    def ok(self) -> bool:
        return not self.failed_files

    def to_dict(self) -> dict:
        return {
            "status": "ok" if self.ok else "partial",
            "key": self.key,
            "text": self.text,
            "placeholders": self.placeholders,
            "placeholder_types": self.placeholder_types,
            "reference": self.reference,
            "files": [f.to_dict() for f in self.files],
            "generator_started": self.generator is not None,
            "summary": self._summary(),
        }

    def _summary(self) -> str:
        if self.ok:
            return f"Localization key '{self.key}' created successfully."
        failed = len(self.failed_files)
        return (f"Localization key '{self.key}' written to {len(self.files) - failed} "
                f"of {len(self.files)} file(s); {failed} failed.")


def collect_placeholder_types(placeholders: list[str], prompter: Prompter) -> dict[str, str]:
    """
    Ask for a type per distinct placeholder name.

    Raises MissingPlaceholderType on the first unanswered prompt, so either
    every type is known or nothing gets written.
    """
    types: dict[str, str] = {}
    for name in placeholders:
        if name in types:
            continue
        types[name] = require_placeholder_type(name, prompter.ask_placeholder_type(name))
    return types


def patch_output_files(
    config: ExtractConfig,
    project_root: Path,
    key: str,
    text: str,
    placeholder_types: dict[str, str],
    patcher: Optional[ArbPatcher] = None,
) -> list[FileOutcome]:
    """Patch each configured output file in order, continuing past failures."""
    patcher = patcher or ArbPatcher()
    outcomes = []

    for path in config.resolve_output_files(project_root):
        try:
            patcher.patch_file(path, key, text, placeholder_types)
        except (MalformedFile, FileIOError) as e:
            logger.error("Skipping %s: %s", path, e)
            outcomes.append(FileOutcome(path=str(path), status="failed", error=e))
            continue
        outcomes.append(FileOutcome(path=str(path)))

    return outcomes


def _log_generator_outcome(future: "cf.Future[GeneratorResult]") -> None:
    outcome = describe_outcome(future)
    if outcome["status"] == "ok":
        logger.info(outcome["summary"])
    else:
        logger.error(outcome["error"])


def extract_localization_key(
    selection: str,
    project_root: Path,
    prompter: Prompter,
    run_gen: bool = True,
) -> ExtractionResult:
    """
    Run one extraction.

    Args:
        selection: Raw selected text, quotes included
        project_root: Directory holding the config and output files
        prompter: Source of the key and placeholder types
        run_gen: Launch the configured generator when all files were patched

    Returns:
        ExtractionResult; ``generator`` holds the Future if one was started

    Raises:
        ConfigNotFound, ConfigParseError, InvalidKey, MissingPlaceholderType
    """
    project_root = Path(project_root)
    config = load_config(project_root)

    cleaned = clean_selection(selection)
    key = validate_key(prompter.ask_key(key_from_selection(cleaned)))
    text = meaning_from_selection(cleaned)
    placeholders = extract_placeholders(cleaned)
    placeholder_types = collect_placeholder_types(placeholders, prompter)

    files = patch_output_files(config, project_root, key, text, placeholder_types)

    result = ExtractionResult(
        key=key,
        text=text,
        placeholders=placeholders,
        placeholder_types=placeholder_types,
        reference=build_reference(config.prefix, key, placeholders),
        files=files,
    )

    command = config.generator.command
    if run_gen and command:
        if result.ok:
            result.generator = run_generator(command, project_root, on_done=_log_generator_outcome)
        else:
            logger.warning("Not running '%s': %d output file(s) failed", command, len(result.failed_files))

    return result
