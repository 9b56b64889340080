# Copyright Advanced Micro Devices, Inc.
# SPDX-License-Identifier: MIT

"""
Exceptions raised while packaging build artifacts into an RPM.
"""


class PackagingError(Exception):
    """Base exception for all packaging failures."""

    pass


class ConfigurationError(PackagingError):
    """Missing or malformed inputs (empty metadata, bad manifest entries, missing hooks)."""

    pass


class StagingError(PackagingError):
    """Directory creation or file copy failures while staging sources."""

    pass


class ExternalToolError(PackagingError):
    """An external tool (tar, rpmbuild) could not be run or exited non-zero.

    The message carries the tool's own diagnostic output unmodified.
    """

    def __init__(self, tool: str, returncode: int | None, output: str = ""):
        self.tool = tool
        self.returncode = returncode
        self.output = output
        if returncode is None:
            header = f"{tool} could not be executed"
        elif returncode == 0:
            header = f"{tool} did not produce the expected output"
        else:
            header = f"{tool} failed with exit code {returncode}"
        message = f"{header}:\n{output}" if output else header
        super().__init__(message)
