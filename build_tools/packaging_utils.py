# Copyright Advanced Micro Devices, Inc.
# SPDX-License-Identifier: MIT


import logging
import re
import shutil
import sys

from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath

from packaging_exceptions import ConfigurationError


logger = logging.getLogger(__name__)

# Default rpmbuild topdir
DEFAULT_ROOT_DIR = "/tmp/rpmbuild"

# Subdirectories rpmbuild expects under its topdir
RPMBUILD_SUBDIRS = ("BUILD", "BUILDROOT", "RPMS", "SOURCES", "SPECS", "SRPMS")

# Characters accepted by rpm in Name and Release tags
_NAME_RE = re.compile(r"^[A-Za-z0-9._+~-]+$")
_RELEASE_RE = re.compile(r"^[A-Za-z0-9._+~]+$")
_ARCH_RE = re.compile(r"^[A-Za-z0-9_]+$")
_LIST_LINE_SPLIT_RE = re.compile(r"\r?\n")

currentFuncName = lambda n=0: sys._getframe(n + 1).f_code.co_name


def log_function_name():
    """Log the name of the calling function at debug level."""
    logger.debug("In function: %s", currentFuncName(1))


@dataclass(frozen=True)
class ConfigFileEntry:
    """A `%config` declaration: installed path plus optional attribute (e.g. noreplace)."""

    path: str
    attribute: str | None = None

    def to_spec_line(self) -> str:
        if self.attribute:
            return f"%config({self.attribute}) {self.path}"
        return f"%config {self.path}"


# Shell snippets inlined into the %pre/%post/%preun/%postun scriptlets.
# Every field holds the file contents, or "" when the hook was not given.
@dataclass(frozen=True)
class LifecycleHooks:
    before_install: str = ""
    after_install: str = ""
    before_remove: str = ""
    after_remove: str = ""
    before_upgrade: str = ""
    after_upgrade: str = ""


# Inputs required for packaging
# package - RPM Name
# version - RPM Version, hyphens already replaced with tildes
# release - RPM Release
# architecture - Target architecture, also used for --target
# files - Ordered mapping of source path on the build host to installed path
# config_files - %config declarations appended to the %files list
# suggested_packages - Rendered on the Suggests line
# hooks - Lifecycle scriptlet contents
# root_dir - rpmbuild topdir used for staging
# spec_dir - Directory where the generated spec file is written
@dataclass(frozen=True)
class PackageConfig:
    package: str
    version: str
    release: str
    architecture: str
    summary: str = ""
    license: str = ""
    website: str = ""
    description: str = ""
    files: dict[str, str] = field(default_factory=dict)
    config_files: list[ConfigFileEntry] = field(default_factory=list)
    suggested_packages: list[str] = field(default_factory=list)
    hooks: LifecycleHooks = field(default_factory=LifecycleHooks)
    root_dir: Path = Path(DEFAULT_ROOT_DIR)
    spec_dir: Path = field(default_factory=Path.cwd)

    @property
    def source_name(self) -> str:
        return f"{self.package}-{self.version}"

    @property
    def sources_dir(self) -> Path:
        return Path(self.root_dir) / "SOURCES"

    @property
    def source_dir(self) -> Path:
        return self.sources_dir / self.source_name

    @property
    def tarball_name(self) -> str:
        return f"{self.source_name}.tar.gz"

    @property
    def spec_path(self) -> Path:
        return Path(self.spec_dir) / f"{self.source_name}.spec"

    @property
    def rpm_filename(self) -> str:
        return f"{self.source_name}-{self.release}.{self.architecture}.rpm"

    @property
    def rpm_path(self) -> Path:
        return Path(self.root_dir) / "RPMS" / self.rpm_filename


def normalize_version(version):
    """Replace hyphens in a version with tildes.

    rpm rejects '-' in the Version tag, and '~' sorts before the release it
    precedes, so "1.2-rc1" orders before "1.2".
    Ex : 1.2-3 -> 1.2~3
         2.0.0-beta-1 -> 2.0.0~beta~1

    Parameters:
    version: Version string as given by the user

    Returns: Normalized version string
    """
    return version.strip().replace("-", "~")


def parse_list(text):
    """Split a newline and/or comma delimited input into its entries.

    Both "\\n" and "\\r\\n" line endings are accepted. Every entry is stripped
    and empty entries are dropped.

    Parameters:
    text : Raw input text

    Returns: List of entries in input order
    """
    entries = []
    for line in _LIST_LINE_SPLIT_RE.split(text or ""):
        for token in line.split(","):
            token = token.strip()
            if token:
                entries.append(token)
    return entries


def parse_file_manifest(text, input_name="files"):
    """Parse `source:destination` entries into an ordered mapping.

    The mapping is keyed by source, so a repeated source keeps only its last
    destination. Entries are validated here so that nothing touches the
    filesystem when the manifest is malformed.

    Parameters:
    text : Raw manifest text
    input_name : Input name used in error messages

    Returns: dict of source path -> destination path, in input order
    """
    files = {}
    for entry in parse_list(text):
        source, sep, destination = entry.partition(":")
        source = source.strip()
        destination = destination.strip()
        if not sep:
            raise ConfigurationError(
                f"Input '{input_name}': entry '{entry}' is missing a ':destination' part"
            )
        if not source or not destination:
            raise ConfigurationError(
                f"Input '{input_name}': entry '{entry}' must be in 'source:destination' form"
            )
        validate_install_path(destination, input_name)
        files[source] = destination
    return files


def parse_config_manifest(text, input_name="config"):
    """Parse `path[:attribute]` entries into %config declarations.

    Parameters:
    text : Raw manifest text
    input_name : Input name used in error messages

    Returns: List of ConfigFileEntry in input order
    """
    entries = []
    for entry in parse_list(text):
        path, _, attribute = entry.partition(":")
        path = path.strip()
        attribute = attribute.strip()
        if not path:
            raise ConfigurationError(
                f"Input '{input_name}': entry '{entry}' has an empty path"
            )
        validate_install_path(path, input_name)
        entries.append(ConfigFileEntry(path=path, attribute=attribute or None))
    return entries


def validate_install_path(path, input_name):
    """Check that an installed path is absolute and stays inside the package root."""
    posix_path = PurePosixPath(path)
    if not posix_path.is_absolute():
        raise ConfigurationError(
            f"Input '{input_name}': '{path}' must be an absolute path"
        )
    if ".." in posix_path.parts:
        raise ConfigurationError(
            f"Input '{input_name}': '{path}' must not contain '..'"
        )


def validate_package_metadata(package, version, release, architecture):
    """Validate the metadata rpm uses to name the package.

    Raises:
        ConfigurationError: naming the first offending input.
    """
    required = {
        "package": package,
        "version": version,
        "release": release,
        "architecture": architecture,
    }
    for name, value in required.items():
        if not value:
            raise ConfigurationError(f"Input '{name}' is required")

    if not _NAME_RE.match(package):
        raise ConfigurationError(
            f"Input 'package': '{package}' contains characters not allowed in a package name"
        )
    if not _NAME_RE.match(version):
        raise ConfigurationError(
            f"Input 'version': '{version}' contains characters not allowed in a version"
        )
    if not _RELEASE_RE.match(release):
        raise ConfigurationError(
            f"Input 'release': '{release}' contains characters not allowed in a release"
        )
    if not _ARCH_RE.match(architecture):
        raise ConfigurationError(
            f"Input 'architecture': '{architecture}' is not a valid architecture name"
        )


def validate_package_description(summary, license, website=""):
    """Validate the single-line preamble tags rpmbuild refuses to leave empty.

    Summary and License are mandatory. URL is optional and only rendered
    when given.

    Raises:
        ConfigurationError: naming the first offending input.
    """
    for name, value in (("summary", summary), ("license", license)):
        if not value:
            raise ConfigurationError(f"Input '{name}' is required")
    for name, value in (
        ("summary", summary),
        ("license", license),
        ("website", website),
    ):
        if value and len(value.splitlines()) > 1:
            raise ConfigurationError(f"Input '{name}' must be a single line")


def read_hook_file(hook_path, input_name):
    """Read a lifecycle hook script.

    Parameters:
    hook_path : Path to the script, or "" when the hook is not used
    input_name : Input name used in error messages

    Returns: Script contents, or "" when no path was given
    """
    if not hook_path:
        return ""
    path = Path(hook_path)
    if not path.is_file():
        raise ConfigurationError(
            f"Input '{input_name}': hook script '{hook_path}' does not exist"
        )
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigurationError(
            f"Input '{input_name}': could not read hook script '{hook_path}': {e}"
        ) from e


def remove_dir(dir_name):
    """Remove the directory if it exists

    Parameters:
    dir_name : Path or str
        Directory to be removed

    Returns: None
    """
    dir_path = Path(dir_name)

    if dir_path.exists() and dir_path.is_dir():
        shutil.rmtree(dir_path)
        logger.info(f"Removed directory: {dir_path}")
    else:
        logger.debug(f"Directory does not exist: {dir_path}")
