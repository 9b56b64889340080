import logging
from pathlib import Path

from github_actions.github_actions_utils import gha_append_step_summary
from packaging_utils import PackageConfig
from prettytable import PrettyTable

logger = logging.getLogger(__name__)


def get_staged_files_table(config: PackageConfig) -> PrettyTable:
    """Build a table of the staged files and %config declarations.

    Parameters:
    config: Configuration object containing package metadata

    Returns: PrettyTable with one row per manifest entry
    """
    table = PrettyTable(["Source", "Installed path", "Type"])
    table.align = "l"
    for source, destination in config.files.items():
        table.add_row([source, destination, "file"])
    for entry in config.config_files:
        kind = f"config({entry.attribute})" if entry.attribute else "config"
        table.add_row(["", entry.path, kind])
    return table


def format_step_summary(config: PackageConfig, rpm_path: Path) -> str:
    """Format the markdown job summary for a built package."""
    lines = [
        f"## RPM package `{config.rpm_filename}`",
        "",
        "| Field | Value |",
        "| --- | --- |",
        f"| Package | {config.package} |",
        f"| Version | {config.version} |",
        f"| Release | {config.release} |",
        f"| Architecture | {config.architecture} |",
        f"| Output | `{rpm_path}` |",
    ]
    if config.suggested_packages:
        lines.append(f"| Suggests | {' '.join(config.suggested_packages)} |")

    if config.files or config.config_files:
        lines.extend(
            [
                "",
                "<details><summary>Packaged files</summary>",
                "",
                "```",
                get_staged_files_table(config).get_string(),
                "```",
                "",
                "</details>",
            ]
        )
    return "\n".join(lines)


def print_build_status(config: PackageConfig, rpm_path: Path):
    """Log a summary of the build.

    Parameters:
    config: Configuration object containing package metadata
    rpm_path: Path of the produced package

    Returns: None
    """
    logger.info("=" * 80)
    logger.info("BUILD SUMMARY")
    logger.info("=" * 80)
    logger.info(f"Package: {config.package}")
    logger.info(f"Version: {config.version}-{config.release}")
    logger.info(f"Architecture: {config.architecture}")
    logger.info(
        f"Files: {len(config.files)}, config files: {len(config.config_files)}"
    )
    if config.files or config.config_files:
        logger.info("\n" + get_staged_files_table(config).get_string())
    logger.info(f"Output: {rpm_path}")
    logger.info("=" * 80)


def print_build_summary(config: PackageConfig, rpm_path: Path):
    print_build_status(config, rpm_path)
    gha_append_step_summary(format_step_summary(config, rpm_path))
