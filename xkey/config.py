#!/usr/bin/env python3
"""
Project configuration for key extraction.

The config lives in ``extract_localization_config.yaml`` at the project root
and is read fresh on every invocation:

```yaml
outputFiles:
  - lib/l10n/app_en.arb
  - lib/l10n/app_vi.arb
prefix: S.of(context)
generator: default   # none | default | any other command string
```

Older configs used ``genCommand: <string>`` or ``runFlutterGen: <bool>``
instead of ``generator``; both are still understood.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Optional

import yaml

from .errors import ConfigNotFound, ConfigParseError

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "extract_localization_config.yaml"
DEFAULT_GENERATOR_COMMAND = "flutter gen-l10n"


class GeneratorKind(Enum):
    NONE = "none"
    DEFAULT = "default"
    CUSTOM = "custom"


@dataclass(frozen=True)
class GeneratorDirective:
    """What to run after the output files are patched."""
    kind: GeneratorKind = GeneratorKind.NONE
    custom_command: Optional[str] = None

    @property
    def command(self) -> Optional[str]:
        """Command string to run, or None when nothing should run."""
        if self.kind is GeneratorKind.DEFAULT:
            return DEFAULT_GENERATOR_COMMAND
        if self.kind is GeneratorKind.CUSTOM:
            return self.custom_command
        return None

    @classmethod
    def from_value(cls, value: Any) -> "GeneratorDirective":
        """Interpret a ``generator`` field value."""
        if value is None or value is False:
            return cls(GeneratorKind.NONE)
        if value is True:
            return cls(GeneratorKind.DEFAULT)
        if not isinstance(value, str):
            raise ConfigParseError(f"'generator' must be a string or boolean, got {type(value).__name__}")

        stripped = value.strip()
        if not stripped or stripped.lower() == GeneratorKind.NONE.value:
            return cls(GeneratorKind.NONE)
        if stripped.lower() == GeneratorKind.DEFAULT.value:
            return cls(GeneratorKind.DEFAULT)
        return cls(GeneratorKind.CUSTOM, stripped)

    def to_dict(self) -> dict:
        return {"kind": self.kind.value, "command": self.command}


@dataclass
class ExtractConfig:
    """Parsed extraction config."""
    output_files: list[str]
    prefix: str
    generator: GeneratorDirective = field(default_factory=GeneratorDirective)

    def resolve_output_files(self, project_root: Path) -> list[Path]:
        """Absolute paths of the output files, in declaration order."""
        root = Path(project_root)
        return [(root / rel).resolve() for rel in self.output_files]

    def to_dict(self) -> dict:
        return {
            "outputFiles": list(self.output_files),
            "prefix": self.prefix,
            "generator": self.generator.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Any) -> "ExtractConfig":
        """Create from a parsed YAML document."""
        if not isinstance(data, dict):
            raise ConfigParseError("Config root must be a mapping")

        output_files = data.get("outputFiles")
        if not isinstance(output_files, list) or not all(isinstance(p, str) for p in output_files):
            raise ConfigParseError("'outputFiles' must be a list of file paths")

        prefix = data.get("prefix")
        if not isinstance(prefix, str):
            raise ConfigParseError("'prefix' must be a string")

        return cls(
            output_files=output_files,
            prefix=prefix,
            generator=_generator_from_dict(data),
        )


def _generator_from_dict(data: dict) -> GeneratorDirective:
    # Precedence: generator > genCommand > runFlutterGen
    if "generator" in data:
        return GeneratorDirective.from_value(data["generator"])

    gen_command = data.get("genCommand")
    if gen_command is not None:
        if not isinstance(gen_command, str):
            raise ConfigParseError("'genCommand' must be a string")
        if gen_command.strip():
            return GeneratorDirective(GeneratorKind.CUSTOM, gen_command.strip())
        return GeneratorDirective(GeneratorKind.NONE)

    run_flutter_gen = data.get("runFlutterGen")
    if run_flutter_gen is not None:
        if not isinstance(run_flutter_gen, bool):
            raise ConfigParseError("'runFlutterGen' must be a boolean")
        if run_flutter_gen:
            return GeneratorDirective(GeneratorKind.DEFAULT)

    return GeneratorDirective(GeneratorKind.NONE)


def config_path(project_root: Path) -> Path:
    return Path(project_root) / CONFIG_FILENAME


def load_config(project_root: Path) -> ExtractConfig:
    """
    Load the config from ``project_root``.

    Raises:
        ConfigNotFound: config file does not exist
        ConfigParseError: file is unreadable, not valid YAML, or has bad fields
    """
    path = config_path(project_root)
    if not path.is_file():
        raise ConfigNotFound(f"Config file not found at {path}")

    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigParseError(f"Cannot read {path}: {e}")

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigParseError(f"Failed to parse {CONFIG_FILENAME}: {e}")

    config = ExtractConfig.from_dict(data)
    logger.debug("Loaded config from %s: %d output file(s)", path, len(config.output_files))
    return config
