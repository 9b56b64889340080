#!/usr/bin/env python3

# Copyright Advanced Micro Devices, Inc.
# SPDX-License-Identifier: MIT


"""Packages pre-built artifacts into an RPM.

Files are staged under the rpmbuild topdir, tarred into the Source0 archive,
described by a generated spec file and built with `rpmbuild -bb`. The path
of the produced package is set as the `file` step output.

Every option falls back to the matching GitHub Actions input (`INPUT_<NAME>`
environment variable), so the script can run as an action step or locally:

```
./build_rpm_package.py --package demo --version 1.2-3 --release 1 \
        --architecture x86_64 \
        --summary "Demo package" --license MIT \
        --files "./out/demo:/usr/bin/demo, ./conf/demo.conf:/etc/demo.conf" \
        --config "/etc/demo.conf:noreplace" \
        --after-install ./scripts/postinst.sh
```
"""

import argparse
import logging
import shutil
import sys

from command_runner import CommandRunner, run_checked
from github_actions.github_actions_utils import (
    gha_error,
    gha_get_input,
    gha_set_output,
    gha_warn_if_not_running_on_ci,
    str2bool,
)
from packaging_exceptions import ExternalToolError, PackagingError, StagingError
from packaging_summary import print_build_summary
from packaging_utils import *
from pathlib import Path
from rpm_specfile import generate_spec_file

logger = logging.getLogger(__name__)

# Input name -> LifecycleHooks field
HOOK_INPUTS = {
    "before-install": "before_install",
    "after-install": "after_install",
    "before-remove": "before_remove",
    "after-remove": "after_remove",
    "before-upgrade": "before_upgrade",
    "after-upgrade": "after_upgrade",
}


######################## Input resolution ####################
def resolve_package_config(args: argparse.Namespace) -> PackageConfig:
    """Validate user inputs and build the PackageConfig.

    Everything that can be rejected is rejected here, before the first
    directory is created: metadata, manifest entries and hook scripts.

    Parameters:
    args: Parsed command line arguments

    Returns: PackageConfig
    """
    log_function_name()
    package = (args.package or "").strip()
    version = normalize_version(args.version or "")
    release = (args.release or "").strip()
    architecture = (args.architecture or "").strip()
    validate_package_metadata(package, version, release, architecture)
    summary = (args.summary or "").strip()
    license = (args.license or "").strip()
    website = (args.website or "").strip()
    validate_package_description(summary, license, website)

    files = parse_file_manifest(args.files, "files")
    config_files = parse_config_manifest(args.config, "config")
    suggested_packages = parse_list(args.suggested_packages)

    hooks = LifecycleHooks(
        **{
            field_name: read_hook_file(getattr(args, field_name), input_name)
            for input_name, field_name in HOOK_INPUTS.items()
        }
    )

    return PackageConfig(
        package=package,
        version=version,
        release=release,
        architecture=architecture,
        summary=summary,
        license=license,
        website=website,
        description=args.description or "",
        files=files,
        config_files=config_files,
        suggested_packages=suggested_packages,
        hooks=hooks,
        root_dir=Path(args.root_dir).expanduser().resolve(),
        spec_dir=Path(args.spec_dir).expanduser().resolve(),
    )


######################## Staging ####################
def create_rpmbuild_tree(config: PackageConfig):
    """Create the rpmbuild topdir layout and a fresh versioned source directory.

    Parameters:
    config: Configuration object containing package metadata

    Returns: None
    """
    log_function_name()
    try:
        for subdir in RPMBUILD_SUBDIRS:
            (Path(config.root_dir) / subdir).mkdir(parents=True, exist_ok=True)
        # Leftovers from an earlier run in the same topdir would end up in the package
        remove_dir(config.source_dir)
        config.source_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise StagingError(
            f"Could not create rpmbuild tree under {config.root_dir}: {e}"
        ) from e


def get_staged_path(config: PackageConfig, destination: str) -> Path:
    """Map an installed path to its location inside the versioned source directory."""
    return config.source_dir / destination.lstrip("/")


def copy_package_contents(source, destination):
    """Copy a file or directory the way `cp -r` does.

    Copying onto an existing directory places the source inside it.

    Parameters:
    source : Source file or directory
    destination: Target path

    Returns: Path the source was copied to
    """
    source = Path(source)
    destination = Path(destination)

    if not source.exists():
        raise StagingError(f"Source path does not exist: {source}")

    if destination.is_dir():
        destination = destination / source.name

    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
        if source.is_dir():
            shutil.copytree(
                source,
                destination,
                dirs_exist_ok=True,
                symlinks=True,
            )
        else:
            shutil.copy2(source, destination)
    except (OSError, shutil.Error) as e:
        raise StagingError(f"Failed to copy {source} to {destination}: {e}") from e
    return destination


def stage_package_files(config: PackageConfig) -> list[Path]:
    """Copy every manifest entry into the versioned source directory.

    Parameters:
    config: Configuration object containing package metadata

    Returns: List of staged paths, in manifest order
    """
    log_function_name()
    staged = []
    for source, destination in config.files.items():
        staged_path = get_staged_path(config, destination)
        if destination.endswith("/"):
            # Trailing separator: copy into this directory
            try:
                staged_path.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise StagingError(
                    f"Could not create directory {staged_path}: {e}"
                ) from e
        logger.info(f"Copying {source} to {destination}")
        staged.append(copy_package_contents(source, staged_path))
    return staged


######################## External tools ####################
def create_source_tarball(config: PackageConfig, runner: CommandRunner) -> Path:
    """Compress the versioned source directory into the Source0 tarball.

    Parameters:
    config: Configuration object containing package metadata
    runner: Command runner used to invoke tar

    Returns: Path of the tarball
    """
    log_function_name()
    run_checked(
        runner,
        ["tar", "-zcf", config.tarball_name, config.source_name],
        cwd=config.sources_dir,
        tool="tar",
    )
    return config.sources_dir / config.tarball_name


def package_with_rpmbuild(config: PackageConfig, runner: CommandRunner) -> Path:
    """Generate the binary RPM using `rpmbuild`

    Parameters:
    config: Configuration object containing package metadata
    runner: Command runner used to invoke rpmbuild

    Returns: Path of the built package
    """
    log_function_name()
    run_checked(
        runner,
        [
            "rpmbuild",
            "-bb",
            f"--target={config.architecture}",
            "--define",
            f"_topdir {config.root_dir}",
            "--define",
            f"_rpmfilename {config.rpm_filename}",
            config.spec_path,
        ],
        cwd=config.spec_dir,
        tool="rpmbuild",
    )

    if not config.rpm_path.is_file():
        raise ExternalToolError(
            "rpmbuild", 0, f"Expected package was not produced: {config.rpm_path}"
        )
    logger.info(f"RPM build completed successfully: {config.rpm_path}")
    return config.rpm_path


######################## Begin Packaging Process ####################
def run(config: PackageConfig, runner: CommandRunner) -> Path:
    """Stage, archive, describe and build the package.

    Parameters:
    config: Configuration object containing package metadata
    runner: Command runner used for tar and rpmbuild

    Returns: Path of the built package
    """
    create_rpmbuild_tree(config)
    stage_package_files(config)
    create_source_tarball(config, runner)
    try:
        generate_spec_file(config)
    except OSError as e:
        raise StagingError(f"Could not write spec file {config.spec_path}: {e}") from e
    return package_with_rpmbuild(config, runner)


def parse_arguments(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        description="Package pre-built artifacts into an RPM",
    )

    p.add_argument(
        "--package", default=gha_get_input("package"), help="Package name"
    )
    p.add_argument(
        "--version",
        default=gha_get_input("version"),
        help="Package version, hyphens are converted to tildes",
    )
    p.add_argument(
        "--release", default=gha_get_input("release"), help="Package release"
    )
    p.add_argument(
        "--architecture",
        default=gha_get_input("architecture"),
        help="Target architecture (e.g. x86_64, aarch64, noarch)",
    )
    p.add_argument(
        "--summary", default=gha_get_input("summary"), help="One line summary"
    )
    p.add_argument(
        "--license", default=gha_get_input("license"), help="License of the package"
    )
    p.add_argument(
        "--website", default=gha_get_input("website"), help="Homepage URL"
    )
    p.add_argument(
        "--description",
        default=gha_get_input("description"),
        help="Long description",
    )
    p.add_argument(
        "--files",
        default=gha_get_input("files"),
        help="Newline or comma separated list of source:destination entries",
    )
    p.add_argument(
        "--config",
        default=gha_get_input("config"),
        help="Newline or comma separated list of path[:attribute] %%config entries",
    )
    p.add_argument(
        "--suggested-packages",
        default=gha_get_input("suggested-packages"),
        help="Newline or comma separated list of suggested packages",
    )
    for input_name, field_name in HOOK_INPUTS.items():
        p.add_argument(
            f"--{input_name}",
            dest=field_name,
            default=gha_get_input(input_name),
            help=f"Shell script run {input_name.replace('-', ' ')}",
        )
    p.add_argument(
        "--root-dir",
        type=Path,
        default=Path(gha_get_input("root-dir") or DEFAULT_ROOT_DIR),
        help="rpmbuild topdir used for staging",
    )
    p.add_argument(
        "--spec-dir",
        type=Path,
        default=Path(gha_get_input("spec-dir") or Path.cwd()),
        help="Directory where the spec file is written",
    )
    p.add_argument(
        "--verbose",
        action="store_true",
        default=str2bool(gha_get_input("verbose")),
        help="Enable debug logging",
    )

    return p.parse_args(argv)


def main(argv: list[str], runner: CommandRunner | None = None) -> int:
    args = parse_arguments(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)
    gha_warn_if_not_running_on_ci()

    try:
        config = resolve_package_config(args)
        rpm_path = run(config, runner or CommandRunner())
    except PackagingError as e:
        logger.error(f"Packaging failed: {e}")
        gha_error(str(e))
        return 1

    try:
        gha_set_output({"file": rpm_path})
        print_build_summary(config, rpm_path)
    except OSError as e:
        logger.error(f"Could not report the built package: {e}")
        gha_error(f"Could not report the built package {rpm_path}: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
