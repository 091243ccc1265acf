#!/usr/bin/env python3
"""
Launches the code generator (``flutter gen-l10n`` by default) after the
localization files were patched.

The process runs on a single worker thread; callers get a Future and may
attach a callback. There is no retry and no cancellation.
"""

import concurrent.futures as cf
import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from .errors import GeneratorLaunchError, GeneratorNonZeroExit

logger = logging.getLogger(__name__)


@dataclass
class GeneratorResult:
    """Outcome of a successful generator run."""
    command: str
    returncode: int
    cwd: str

    def to_dict(self) -> dict:
        return {
            "status": "ok",
            "command": self.command,
            "returncode": self.returncode,
            "summary": f'Command "{self.command}" completed successfully.',
        }


def parse_command(command_string: str) -> tuple[str, list[str]]:
    """
    Split a command string on whitespace into command and arguments.

    Example:
        "flutter gen-l10n --verbose" -> ("flutter", ["gen-l10n", "--verbose"])
    """
    parts = command_string.split()
    if not parts:
        raise GeneratorLaunchError("Generator command is empty")
    return parts[0], parts[1:]


def _run(command: str, args: list[str], cwd: Path) -> GeneratorResult:
    display = " ".join([command] + args)
    logger.info("Running %s in %s", display, cwd)
    try:
        completed = subprocess.run(
            [command] + args,
            cwd=cwd,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            errors="replace",
        )
    except OSError as e:
        raise GeneratorLaunchError(f'Failed to run "{display}": {e}')

    # stdout is reserved for the JSON report
    for line in completed.stdout.splitlines():
        logger.debug("[%s] %s", command, line)

    if completed.returncode != 0:
        raise GeneratorNonZeroExit(display, completed.returncode)
    return GeneratorResult(command=display, returncode=completed.returncode, cwd=str(cwd))


def run_generator(
    command_string: str,
    project_root: Path,
    on_done: Optional[Callable[["cf.Future[GeneratorResult]"], None]] = None,
) -> "cf.Future[GeneratorResult]":
    """
    Start the generator in ``project_root`` without waiting for it.

    Args:
        command_string: Command line, split on whitespace
        project_root: Working directory for the process
        on_done: Called with the finished Future

    Returns:
        Future resolving to a GeneratorResult, or raising
        GeneratorLaunchError / GeneratorNonZeroExit
    """
    command, args = parse_command(command_string)

    executor = cf.ThreadPoolExecutor(max_workers=1, thread_name_prefix="xkey-gen")
    future = executor.submit(_run, command, args, Path(project_root))
    executor.shutdown(wait=False)

    if on_done is not None:
        future.add_done_callback(on_done)
    return future


def describe_outcome(future: "cf.Future[GeneratorResult]") -> dict:
    """Turn a finished generator Future into a result dict for reporting."""
    error = future.exception()
    if error is None:
        return future.result().to_dict()
    if isinstance(error, (GeneratorLaunchError, GeneratorNonZeroExit)):
        return error.to_dict()
    return {
        "status": "error",
        "error_type": type(error).__name__,
        "error": str(error),
    }
