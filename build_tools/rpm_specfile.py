# Copyright Advanced Micro Devices, Inc.
# SPDX-License-Identifier: MIT

"""Renders the RPM spec file for a PackageConfig.

rpmbuild reads the spec file positionally, so the document is assembled from
an explicit, ordered list of sections. Each section is its own jinja2 template
under template/rpm/ and can be rendered on its own.
"""

import logging
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined
from packaging_utils import PackageConfig, log_function_name

logger = logging.getLogger(__name__)

SCRIPT_DIR = Path(__file__).resolve().parent
TEMPLATE_SUBDIR = "template/rpm"

# Order matters: this is the order the sections appear in the spec file.
SPEC_SECTIONS = (
    "header",
    "description",
    "debug_package",
    "prep",
    "build",
    "install",
    "clean",
    "files",
    "changelog",
    "scriptlets",
)


def create_template_environment() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(SCRIPT_DIR)),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
        undefined=StrictUndefined,
    )


def build_spec_context(config: PackageConfig) -> dict:
    """Builds the template context shared by all sections.

    Parameters:
    config: Configuration object containing package metadata

    Returns: Context dictionary
    """
    return {
        "package": config.package,
        "version": config.version,
        "release": config.release,
        "architecture": config.architecture,
        "summary": config.summary,
        "license": config.license,
        "website": config.website,
        "description": config.description,
        "suggested_packages": list(config.suggested_packages),
        # Installed paths only, the sources are staged separately
        "files": list(config.files.values()),
        "config_files": list(config.config_files),
        "hooks": config.hooks,
    }


def render_spec_section(
    section: str, context: dict, env: Environment | None = None
) -> str:
    """Renders a single spec file section.

    Parameters:
    section: One of SPEC_SECTIONS
    context: Context built by build_spec_context()
    env: Optional jinja2 environment to reuse

    Returns: Rendered section text, ending with a newline
    """
    if section not in SPEC_SECTIONS:
        raise ValueError(f"Unknown spec file section: {section}")
    env = env or create_template_environment()
    template = env.get_template(f"{TEMPLATE_SUBDIR}/{section}.j2")
    return template.render(context)


def render_spec_file(config: PackageConfig) -> str:
    """Renders the complete spec file text for |config|.

    Sections are separated by one blank line.
    """
    log_function_name()
    env = create_template_environment()
    context = build_spec_context(config)
    return "\n".join(
        render_spec_section(section, context, env) for section in SPEC_SECTIONS
    )


def generate_spec_file(config: PackageConfig) -> Path:
    """Writes the rendered spec file to config.spec_path.

    Parameters:
    config: Configuration object containing package metadata

    Returns: Path of the written spec file
    """
    log_function_name()
    spec_path = config.spec_path
    spec_path.parent.mkdir(parents=True, exist_ok=True)
    with spec_path.open("w", encoding="utf-8") as f:
        f.write(render_spec_file(config))
    logger.info(f"Wrote spec file: {spec_path}")
    return spec_path
