from pathlib import Path
import os
import shutil
import sys
import tempfile
import unittest

sys.path.insert(0, os.fspath(Path(__file__).parent.parent))

from packaging_exceptions import ConfigurationError
from packaging_utils import (
    ConfigFileEntry,
    PackageConfig,
    normalize_version,
    parse_config_manifest,
    parse_file_manifest,
    parse_list,
    read_hook_file,
    remove_dir,
    validate_package_description,
    validate_package_metadata,
)


class ParseListTest(unittest.TestCase):
    def test_empty_input(self):
        self.assertEqual(parse_list(""), [])
        self.assertEqual(parse_list(None), [])
        self.assertEqual(parse_list(" \n , \r\n"), [])

    def test_newlines_and_commas(self):
        self.assertEqual(
            parse_list("a, b\nc\r\nd,,e\n"),
            ["a", "b", "c", "d", "e"],
        )

    def test_entries_are_stripped(self):
        self.assertEqual(parse_list("  bash-completion  ,\tvim "), ["bash-completion", "vim"])


class ParseFileManifestTest(unittest.TestCase):
    def test_single_entry(self):
        self.assertEqual(
            parse_file_manifest("/a/b.txt:/usr/bin/b.txt"),
            {"/a/b.txt": "/usr/bin/b.txt"},
        )

    def test_empty_manifest_is_valid(self):
        self.assertEqual(parse_file_manifest(""), {})

    def test_comma_and_newline_separated_are_equivalent(self):
        on_one_line = parse_file_manifest("/a:/opt/a, /b:/opt/b,/c:/opt/c")
        on_many_lines = parse_file_manifest("/a:/opt/a\n/b:/opt/b\r\n/c:/opt/c\n")
        self.assertEqual(on_one_line, on_many_lines)

    def test_parsing_is_idempotent(self):
        text = "./out/demo:/usr/bin/demo\n./conf:/etc/demo/"
        self.assertEqual(parse_file_manifest(text), parse_file_manifest(text))

    def test_insertion_order_is_kept(self):
        files = parse_file_manifest("/z:/opt/z\n/a:/opt/a\n/m:/opt/m")
        self.assertEqual(list(files), ["/z", "/a", "/m"])

    def test_duplicate_source_last_wins(self):
        files = parse_file_manifest("/a:/opt/first\n/a:/opt/second")
        self.assertEqual(files, {"/a": "/opt/second"})

    def test_splits_on_first_colon_only(self):
        files = parse_file_manifest("/a:/opt/odd:name")
        self.assertEqual(files, {"/a": "/opt/odd:name"})

    def test_missing_colon_is_rejected(self):
        with self.assertRaises(ConfigurationError) as ctx:
            parse_file_manifest("/a:/opt/a\n/just/a/source")
        self.assertIn("files", str(ctx.exception))
        self.assertIn("/just/a/source", str(ctx.exception))

    def test_empty_destination_is_rejected(self):
        with self.assertRaises(ConfigurationError):
            parse_file_manifest("/a:")

    def test_empty_source_is_rejected(self):
        with self.assertRaises(ConfigurationError):
            parse_file_manifest(":/usr/bin/a")

    def test_relative_destination_is_rejected(self):
        with self.assertRaises(ConfigurationError):
            parse_file_manifest("/a:usr/bin/a")

    def test_parent_reference_in_destination_is_rejected(self):
        with self.assertRaises(ConfigurationError):
            parse_file_manifest("/a:/usr/../../etc/passwd")


class ParseConfigManifestTest(unittest.TestCase):
    def test_with_and_without_attribute(self):
        entries = parse_config_manifest("/etc/app.conf:noreplace\n/etc/other.conf")
        self.assertEqual(
            entries,
            [
                ConfigFileEntry("/etc/app.conf", "noreplace"),
                ConfigFileEntry("/etc/other.conf", None),
            ],
        )

    def test_empty_attribute_is_absent(self):
        self.assertEqual(
            parse_config_manifest("/etc/app.conf:"),
            [ConfigFileEntry("/etc/app.conf", None)],
        )

    def test_spec_lines(self):
        self.assertEqual(
            ConfigFileEntry("/etc/app.conf", "noreplace").to_spec_line(),
            "%config(noreplace) /etc/app.conf",
        )
        self.assertEqual(
            ConfigFileEntry("/etc/app.conf").to_spec_line(), "%config /etc/app.conf"
        )

    def test_relative_path_is_rejected(self):
        with self.assertRaises(ConfigurationError) as ctx:
            parse_config_manifest("etc/app.conf")
        self.assertIn("config", str(ctx.exception))


class NormalizeVersionTest(unittest.TestCase):
    def test_hyphens_become_tildes(self):
        self.assertEqual(normalize_version("1.2-3"), "1.2~3")
        self.assertEqual(normalize_version("2.0.0-beta-1"), "2.0.0~beta~1")

    def test_plain_version_is_unchanged(self):
        self.assertEqual(normalize_version(" 1.0.0 "), "1.0.0")


class ValidatePackageMetadataTest(unittest.TestCase):
    def test_valid_metadata(self):
        validate_package_metadata("demo", "1.2~3", "1", "x86_64")
        validate_package_metadata("demo-tools", "1.0", "1.el9", "noarch")

    def test_missing_values_are_named(self):
        for missing in ("package", "version", "release", "architecture"):
            values = {
                "package": "demo",
                "version": "1.0",
                "release": "1",
                "architecture": "x86_64",
            }
            values[missing] = ""
            with self.subTest(missing=missing):
                with self.assertRaises(ConfigurationError) as ctx:
                    validate_package_metadata(**values)
                self.assertIn(f"'{missing}'", str(ctx.exception))

    def test_invalid_architecture(self):
        with self.assertRaises(ConfigurationError) as ctx:
            validate_package_metadata("demo", "1.0", "1", "x86 64")
        self.assertIn("architecture", str(ctx.exception))

    def test_release_with_hyphen(self):
        with self.assertRaises(ConfigurationError):
            validate_package_metadata("demo", "1.0", "1-2", "x86_64")

    def test_package_with_space(self):
        with self.assertRaises(ConfigurationError):
            validate_package_metadata("my package", "1.0", "1", "x86_64")

    def test_summary_and_license_are_required(self):
        for missing in ("summary", "license"):
            values = {"summary": "Demo", "license": "MIT"}
            values[missing] = ""
            with self.subTest(missing=missing):
                with self.assertRaises(ConfigurationError) as ctx:
                    validate_package_description(**values)
                self.assertIn(f"'{missing}'", str(ctx.exception))

    def test_multi_line_summary_is_rejected(self):
        with self.assertRaises(ConfigurationError) as ctx:
            validate_package_description("Demo\nsecond line", "MIT")
        self.assertIn("summary", str(ctx.exception))

    def test_website_is_optional(self):
        validate_package_description("Demo", "MIT", "")
        validate_package_description("Demo", "MIT", "https://example.com")


class ReadHookFileTest(unittest.TestCase):
    def setUp(self):
        self.temp_dir = Path(tempfile.mkdtemp())

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_empty_path_means_no_hook(self):
        self.assertEqual(read_hook_file("", "after-install"), "")

    def test_reads_contents_verbatim(self):
        hook = self.temp_dir / "postinst.sh"
        hook.write_text("systemctl daemon-reload\n", encoding="utf-8")
        self.assertEqual(
            read_hook_file(str(hook), "after-install"), "systemctl daemon-reload\n"
        )

    def test_missing_hook_is_rejected(self):
        with self.assertRaises(ConfigurationError) as ctx:
            read_hook_file(str(self.temp_dir / "missing.sh"), "before-remove")
        self.assertIn("before-remove", str(ctx.exception))


class PackageConfigTest(unittest.TestCase):
    def test_derived_paths(self):
        config = PackageConfig(
            package="demo",
            version="1.2~3",
            release="1",
            architecture="x86_64",
            root_dir=Path("/tmp/rpmbuild"),
            spec_dir=Path("/work"),
        )
        self.assertEqual(config.source_name, "demo-1.2~3")
        self.assertEqual(config.source_dir, Path("/tmp/rpmbuild/SOURCES/demo-1.2~3"))
        self.assertEqual(config.tarball_name, "demo-1.2~3.tar.gz")
        self.assertEqual(config.spec_path, Path("/work/demo-1.2~3.spec"))
        self.assertEqual(config.rpm_filename, "demo-1.2~3-1.x86_64.rpm")
        self.assertEqual(
            config.rpm_path, Path("/tmp/rpmbuild/RPMS/demo-1.2~3-1.x86_64.rpm")
        )


class RemoveDirTest(unittest.TestCase):
    def test_removes_existing_and_ignores_missing(self):
        temp_dir = Path(tempfile.mkdtemp())
        (temp_dir / "nested").mkdir()
        remove_dir(temp_dir)
        self.assertFalse(temp_dir.exists())
        # Removing again is a no-op
        remove_dir(temp_dir)


if __name__ == "__main__":
    unittest.main()
