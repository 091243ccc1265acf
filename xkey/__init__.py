"""
xkey - extract string literals into Flutter ARB localization files

Turns a selected string literal into a localization key, appends it to every
configured ARB file without reformatting existing content, and returns the
reference that replaces the literal in code.

Quick start:
    # extract_localization_config.yaml
    outputFiles: [lib/l10n/app_en.arb]
    prefix: S.of(context)
    generator: default

    xkey extract --text '"Hello, $name!"' --type name=String
    # -> S.of(context).helloName(name)
"""

__version__ = "1.0.0"

from .config import ExtractConfig, GeneratorDirective, GeneratorKind, load_config
from .errors import (
    ConfigNotFound,
    ConfigParseError,
    ExtractError,
    FileIOError,
    GeneratorLaunchError,
    GeneratorNonZeroExit,
    InvalidKey,
    MalformedFile,
    MissingPlaceholderType,
)
from .extractor import ExtractionResult, PresetPrompter, Prompter, extract_localization_key
from .patcher import ArbPatcher
from .transform import (
    build_reference,
    extract_placeholders,
    key_from_selection,
    meaning_from_selection,
)

__all__ = [
    "ArbPatcher",
    "ExtractConfig",
    "ExtractionResult",
    "GeneratorDirective",
    "GeneratorKind",
    "PresetPrompter",
    "Prompter",
    "build_reference",
    "extract_localization_key",
    "extract_placeholders",
    "key_from_selection",
    "load_config",
    "meaning_from_selection",
    "ExtractError",
    "ConfigNotFound",
    "ConfigParseError",
    "InvalidKey",
    "MissingPlaceholderType",
    "MalformedFile",
    "FileIOError",
    "GeneratorLaunchError",
    "GeneratorNonZeroExit",
]
