# Copyright Advanced Micro Devices, Inc.
# SPDX-License-Identifier: MIT

"""Runs external tools (tar, rpmbuild) on behalf of the packaging pipeline.

The pipeline only talks to a `CommandRunner`, so tests can substitute a fake
that records the argument lists instead of spawning processes.
"""

from dataclasses import dataclass
import logging
from pathlib import Path
import shlex
import subprocess

from packaging_exceptions import ExternalToolError

logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    args: list[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def output(self) -> str:
        """Diagnostic output of the command: stderr if any, else stdout."""
        return self.stderr if self.stderr.strip() else self.stdout


class CommandRunner:
    """Runs a command synchronously and captures its output.

    A non-zero exit status is returned, not raised; see `run_checked`.
    """

    def run(self, args: list[str | Path], cwd: Path) -> CommandResult:
        args = [str(arg) for arg in args]
        logger.info(f"++ Exec [{cwd}]$ {shlex.join(args)}")
        try:
            result = subprocess.run(
                args,
                cwd=str(cwd),
                stdin=subprocess.DEVNULL,
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as e:
            raise ExternalToolError(args[0], None, str(e)) from e

        if result.stdout:
            logger.info(result.stdout.rstrip())
        if result.stderr:
            logger.info(result.stderr.rstrip())
        return CommandResult(
            args=args,
            returncode=result.returncode,
            stdout=result.stdout or "",
            stderr=result.stderr or "",
        )


def run_checked(
    runner: CommandRunner, args: list[str | Path], cwd: Path, tool: str | None = None
) -> CommandResult:
    """Runs |args| with |runner| and raises if the command fails.

    Raises:
        ExternalToolError: when the command exits non-zero. The tool's own
            output is carried unmodified.
    """
    result = runner.run(args, cwd)
    if result.returncode != 0:
        raise ExternalToolError(
            tool or str(args[0]), result.returncode, result.output.rstrip()
        )
    return result
