#!/usr/bin/env python3
"""
Error taxonomy for key extraction.

Every failure carries an ``error_type`` and a ``suggestion`` so the CLI can
report it in the same structured shape it uses for successful results.
"""

from typing import Optional


class ExtractError(Exception):
    """Base class for all extraction failures."""

    error_type = "EXTRACT_ERROR"
    suggestion = ""

    def __init__(self, message: str, suggestion: Optional[str] = None):
        super().__init__(message)
        if suggestion is not None:
            self.suggestion = suggestion

    def to_dict(self) -> dict:
        result = {
            "status": "error",
            "error_type": self.error_type,
            "error": str(self),
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        return result


class ConfigNotFound(ExtractError):
    error_type = "CONFIG_NOT_FOUND"
    suggestion = "Create extract_localization_config.yaml in the project root"


class ConfigParseError(ExtractError):
    error_type = "CONFIG_PARSE_ERROR"
    suggestion = "Config must be a YAML mapping with 'outputFiles' (list) and 'prefix' (string)"


class InvalidKey(ExtractError):
    error_type = "INVALID_KEY"
    suggestion = "Keys may only contain ASCII letters and digits"


class MissingPlaceholderType(ExtractError):
    error_type = "MISSING_PLACEHOLDER_TYPE"
    suggestion = "Provide a type for every placeholder, e.g. --type name=String"

    def __init__(self, placeholder: str):
        super().__init__(f"Data type for placeholder '{placeholder}' is required.")
        self.placeholder = placeholder


class MalformedFile(ExtractError):
    error_type = "MALFORMED_FILE"
    suggestion = "Output files must already contain a JSON object, at least '{}'"


class FileIOError(ExtractError):
    error_type = "FILE_IO_ERROR"
    suggestion = "Ensure the file exists and is readable/writable (UTF-8)"


class GeneratorLaunchError(ExtractError):
    error_type = "GENERATOR_LAUNCH_ERROR"
    suggestion = "Check that the generator command is installed and on PATH"


class GeneratorNonZeroExit(ExtractError):
    error_type = "GENERATOR_NON_ZERO_EXIT"
    suggestion = "Run the generator command manually to inspect its output"

    def __init__(self, command: str, returncode: int):
        super().__init__(f'Command "{command}" failed with exit code {returncode}.')
        self.command = command
        self.returncode = returncode
