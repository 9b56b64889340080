"""Utilities for working with GitHub Actions from Python.

See also https://pypi.org/project/github-action-utils/.
"""

import json
import os
from pathlib import Path
import sys
from typing import Mapping
import uuid


def _log(*args, **kwargs):
    print(*args, **kwargs)
    sys.stdout.flush()


def gha_warn_if_not_running_on_ci():
    # https://docs.github.com/en/actions/reference/variables-reference
    if not os.getenv("CI"):
        _log("Warning: 'CI' env var not set, not running under GitHub Actions?")


def gha_input_env_name(name: str) -> str:
    """Returns the environment variable GitHub Actions uses for input |name|.

    The runner upper-cases the input name and replaces spaces with '_'.
    Hyphens are kept, so `before-install` becomes `INPUT_BEFORE-INSTALL`.
    """
    return f"INPUT_{name.replace(' ', '_').upper()}"


def gha_get_input(name: str, default: str = "") -> str:
    """Gets the value of an action input, stripped of surrounding whitespace.

    See
      * https://docs.github.com/en/actions/reference/workflows-and-actions/metadata-syntax#inputs
    """
    value = os.getenv(gha_input_env_name(name))
    if value is None:
        return default
    return value.strip()


def _append_to_workflow_file(env_var: str, text: str) -> bool:
    """Appends |text| to the runner file named by |env_var|.

    Returns False, after a warning, when the variable is not set.
    """
    path = os.getenv(env_var)
    if not path:
        _log(f"  Warning: {env_var} env var not set, skipping")
        return False
    with open(path, "a", encoding="utf-8") as f:
        f.write(text)
    return True


def _format_output_line(name: str, value: str) -> str:
    # Multiline values need the heredoc form of the output file.
    if "\n" not in value:
        return f"{name}={value}\n"
    delimiter = f"ghadelimiter_{uuid.uuid4()}"
    return f"{name}<<{delimiter}\n{value}\n{delimiter}\n"


def gha_set_output(vars: Mapping[str, str | Path]):
    """Sets step outputs by appending to $GITHUB_OUTPUT.

    See
      * https://docs.github.com/en/actions/reference/workflow-commands-for-github-actions#setting-an-output-parameter
    """
    outputs = {name: str(value) for name, value in vars.items()}
    _log(f"Setting github output:\n{json.dumps(outputs, indent=2)}")
    _append_to_workflow_file(
        "GITHUB_OUTPUT",
        "".join(_format_output_line(name, value) for name, value in outputs.items()),
    )


def gha_append_step_summary(summary: str):
    """Adds a markdown section to the job summary in $GITHUB_STEP_SUMMARY.

    See
      * https://docs.github.com/en/actions/reference/workflow-commands-for-github-actions#adding-a-job-summary
    """
    _log(f"Writing job summary:\n{summary}")
    # Sections are separated by a blank line
    _append_to_workflow_file("GITHUB_STEP_SUMMARY", summary + "\n\n")


def _escape_workflow_command_data(data: str) -> str:
    # https://github.com/actions/toolkit/blob/main/packages/core/src/command.ts
    return data.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def gha_error(message: str):
    """Reports an error annotation for the current step.

    The caller is responsible for exiting with a non-zero status, which is
    what marks the step as failed.

    See
      * https://docs.github.com/en/actions/reference/workflow-commands-for-github-actions#setting-an-error-message
    """
    _log(f"::error::{_escape_workflow_command_data(message)}")


_TRUE_STRINGS = frozenset(
    {"1", "true", "t", "yes", "y", "on", "enable", "enabled", "found"}
)
_FALSE_STRINGS = frozenset(
    {
        "0",
        "false",
        "f",
        "no",
        "n",
        "off",
        "disable",
        "disabled",
        "notfound",
        "none",
        "null",
        "nil",
        "undefined",
        "n/a",
    }
)


def str2bool(value: str | None) -> bool:
    """Converts a boolean action input or environment variable."""
    if not value:
        return False
    if not isinstance(value, str):
        raise ValueError(
            f"Expected a string value for boolean conversion, got {type(value)}"
        )
    normalized = value.strip().lower()
    if normalized in _TRUE_STRINGS:
        return True
    if normalized in _FALSE_STRINGS:
        return False
    raise ValueError(f"Invalid string value for boolean conversion: {value}")
