"""Tests for module resolution strategy selection and staging."""

import shutil
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from kitchen_puppet.sandbox.errors import ConfigurationError
from kitchen_puppet.sandbox.modules import (
    STRATEGY_MODULEFILE,
    STRATEGY_MODULES,
    STRATEGY_PUPPETFILE,
    resolve_modules,
    select_strategy,
)


class RecordingResolver:
    """Stands in for librarian-puppet, installing one fixed module."""

    calls = []

    def __init__(self, puppetfile, install_path):
        self.puppetfile = puppetfile
        self.install_path = install_path

    def resolve(self):
        RecordingResolver.calls.append(("resolve", self.puppetfile, self.install_path))

    def install(self):
        RecordingResolver.calls.append(("install", self.puppetfile, self.install_path))
        manifests = self.install_path / "stdlib" / "manifests"
        manifests.mkdir(parents=True)
        (manifests / "init.pp").write_text("class stdlib {}\n")


def write(path: Path, content: str = "") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    return path


class ModuleTestCase(unittest.TestCase):
    def setUp(self):
        """Set up test fixtures."""
        self.tmp = Path(tempfile.mkdtemp(prefix="kitchen_puppet_test_"))
        self.root = self.tmp / "project"
        self.root.mkdir()
        self.sandbox = self.tmp / "sandbox"
        self.sandbox.mkdir()
        RecordingResolver.calls = []

    def tearDown(self):
        """Clean up test fixtures."""
        shutil.rmtree(self.tmp, ignore_errors=True)

    def resolve(self):
        return resolve_modules(self.root, self.sandbox, RecordingResolver)


class TestSelectStrategy(ModuleTestCase):
    """Strategy priority: Puppetfile > modules/ > Modulefile."""

    def test_each_marker_alone(self):
        write(self.root / "Modulefile", "name 'me-app'\n")
        self.assertEqual(select_strategy(self.root), STRATEGY_MODULEFILE)

        (self.root / "modules").mkdir()
        self.assertEqual(select_strategy(self.root), STRATEGY_MODULES)

        write(self.root / "Puppetfile")
        self.assertEqual(select_strategy(self.root), STRATEGY_PUPPETFILE)

    def test_priority_independent_of_creation_order(self):
        write(self.root / "Puppetfile")
        write(self.root / "Modulefile", "name 'me-app'\n")
        (self.root / "modules").mkdir()

        self.assertEqual(select_strategy(self.root), STRATEGY_PUPPETFILE)

        (self.root / "Puppetfile").unlink()
        self.assertEqual(select_strategy(self.root), STRATEGY_MODULES)

    def test_modules_file_is_not_a_directory(self):
        write(self.root / "modules", "not a directory")

        self.assertIsNone(select_strategy(self.root))

    def test_nothing_found(self):
        self.assertIsNone(select_strategy(self.root))


class TestResolveModules(ModuleTestCase):
    """Test cases for resolve_modules."""

    def test_puppetfile_wins_over_modules_directory(self):
        write(self.root / "Puppetfile", "mod 'puppetlabs/stdlib'\n")
        write(self.root / "modules" / "stale" / "manifests" / "init.pp")

        with patch("kitchen_puppet.sandbox.modules.shutil.copytree") as mock_copytree:
            strategy = self.resolve()

        self.assertEqual(strategy, STRATEGY_PUPPETFILE)
        mock_copytree.assert_not_called()
        self.assertEqual([call[0] for call in RecordingResolver.calls], ["resolve", "install"])
        self.assertEqual(RecordingResolver.calls[1][1], self.root / "Puppetfile")
        self.assertEqual(RecordingResolver.calls[1][2], self.sandbox / "modules")
        self.assertFalse((self.sandbox / "modules" / "stale").exists())
        self.assertTrue((self.sandbox / "modules" / "stdlib" / "manifests" / "init.pp").exists())

    def test_modules_directory_copied_byte_identical(self):
        files = {
            "ntp/manifests/init.pp": "class ntp {}\n",
            "ntp/templates/ntp.conf.erb": "server <%= @server %>\n",
            "ntp/files/deep/nested/blob.bin": "\x00\x01binary",
            "ntp/spec/ntp_spec.rb": "describe 'ntp' do end\n",
        }
        for relative, content in files.items():
            write(self.root / "modules" / relative, content)

        self.assertEqual(self.resolve(), STRATEGY_MODULES)

        for relative, content in files.items():
            source = (self.root / "modules" / relative).read_bytes()
            self.assertEqual((self.sandbox / "modules" / relative).read_bytes(), source)
        self.assertEqual(RecordingResolver.calls, [])

    def test_modules_directory_plus_modulefile(self):
        write(self.root / "modules" / "ntp" / "manifests" / "init.pp")
        write(self.root / "Modulefile", "name 'me-app'\n")
        write(self.root / "manifests" / "init.pp", "class app {}\n")

        self.assertEqual(self.resolve(), STRATEGY_MODULES)

        self.assertTrue((self.sandbox / "modules" / "ntp" / "manifests" / "init.pp").exists())
        self.assertTrue((self.sandbox / "modules" / "app" / "manifests" / "init.pp").exists())

    def test_project_packaged_as_module(self):
        write(self.root / "Modulefile", "name 'me-app'\nversion '0.1.0'\n")
        write(self.root / "README.md", "# app\n")
        write(self.root / "manifests" / "init.pp", "class app {}\n")
        write(self.root / "templates" / "app.erb")
        write(self.root / "lib" / "facter" / "app.rb")
        write(self.root / "spec" / "app_spec.rb")
        write(self.root / "Rakefile")

        with self.assertLogs("kitchen_puppet.sandbox.modules", level="DEBUG") as logs:
            self.assertEqual(self.resolve(), STRATEGY_MODULEFILE)

        packaged = [line for line in logs.output if "Packaging module app" in line]
        self.assertEqual(len(packaged), 1)
        self.assertIn("by me", packaged[0])
        self.assertIn("version 0.1.0", packaged[0])

        module = self.sandbox / "modules" / "app"
        self.assertEqual(
            sorted(p.name for p in module.iterdir()),
            ["Modulefile", "README.md", "lib", "manifests", "templates"],
        )
        self.assertEqual((module / "manifests" / "init.pp").read_text(), "class app {}\n")

    def test_modulefile_without_name(self):
        write(self.root / "Modulefile", "version '0.1.0'\n")
        write(self.root / "manifests" / "init.pp")

        with self.assertRaises(ConfigurationError) as ctx:
            self.resolve()

        self.assertIn("name '<author>-<module_name>'", str(ctx.exception))
        self.assertFalse((self.sandbox / "modules").exists())

    def test_no_module_source_removes_sandbox(self):
        write(self.sandbox / "base.pp", "include ntp\n")

        with self.assertRaises(ConfigurationError) as ctx:
            self.resolve()

        message = str(ctx.exception)
        self.assertIn("Puppetfile", message)
        self.assertIn("modules/ directory", message)
        self.assertIn("Modulefile", message)
        self.assertIn(str(self.root), message)
        self.assertFalse(self.sandbox.exists())


if __name__ == "__main__":
    unittest.main()
