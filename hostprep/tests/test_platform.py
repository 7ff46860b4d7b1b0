# Copyright 2018-present Network Optix, Inc. Licensed under MPL 2.0: www.mozilla.org/MPL/2.0/
import contextlib
import io
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from hostprep._platform import Platform
from hostprep._platform import UnsupportedPlatform
from hostprep._platform import detect_platform
from hostprep._platform import pinentry_program
from hostprep.tests._fake_shell import FakeShell

_UBUNTU_RELEASE = 'NAME="Ubuntu"\nID=ubuntu\nID_LIKE=debian\nVERSION_ID="24.04"\n'
_FEDORA_RELEASE = 'NAME="Fedora Linux"\nID=fedora\nVERSION_ID=40\n'


def _existing(*paths):
    return mock.patch.object(Path, 'exists', autospec=True, side_effect=lambda self: str(self) in paths)


class TestDetectPlatform(unittest.TestCase):

    def setUp(self):
        self._temp_dir = tempfile.TemporaryDirectory()
        self._os_release = Path(self._temp_dir.name) / 'os-release'
        self._stdout = io.StringIO()
        self._patches = contextlib.ExitStack()
        self._patches.enter_context(contextlib.redirect_stdout(self._stdout))

    def tearDown(self):
        self._patches.close()
        self._temp_dir.cleanup()

    def _detect(self, system, machine):
        with mock.patch('platform.system', return_value=system), \
                mock.patch('platform.machine', return_value=machine):
            return detect_platform(self._os_release)

    def test_unsupported(self):
        with self.assertRaisesRegex(UnsupportedPlatform, "Windows"):
            self._detect('Windows', 'AMD64')

    def test_macos_arm(self):
        self.assertEqual(self._detect('Darwin', 'arm64'), Platform('macos', 'arm64'))
        self.assertNotIn("optimized for ARM", self._stdout.getvalue())

    def test_macos_intel_warns(self):
        self.assertEqual(self._detect('Darwin', 'x86_64'), Platform('macos', 'x86_64'))
        self.assertIn("optimized for ARM", self._stdout.getvalue())

    def test_ubuntu(self):
        self._os_release.write_text(_UBUNTU_RELEASE)
        result = self._detect('Linux', 'x86_64')
        self.assertEqual(result, Platform('linux', 'x86_64', 'ubuntu', 'debian'))
        self.assertTrue(result.is_debian_like())
        self.assertNotIn("optimized for Ubuntu/Debian", self._stdout.getvalue())

    def test_other_linux_warns(self):
        self._os_release.write_text(_FEDORA_RELEASE)
        result = self._detect('Linux', 'aarch64')
        self.assertEqual(result.distro_id, 'fedora')
        self.assertFalse(result.is_debian_like())
        self.assertIn("Detected fedora - optimized for Ubuntu/Debian", self._stdout.getvalue())

    def test_linux_without_os_release(self):
        self.assertEqual(self._detect('Linux', 'x86_64'), Platform('linux', 'x86_64'))


class TestPinentryProgram(unittest.TestCase):

    _macos = Platform('macos', 'arm64')
    _linux = Platform('linux', 'x86_64', 'ubuntu', 'debian')

    def test_macos_homebrew_arm(self):
        with _existing('/opt/homebrew/bin/pinentry-mac', '/usr/local/bin/pinentry-mac'):
            self.assertEqual(pinentry_program(self._macos, FakeShell()), '/opt/homebrew/bin/pinentry-mac')

    def test_macos_homebrew_intel(self):
        with _existing('/usr/local/bin/pinentry-mac'):
            self.assertEqual(pinentry_program(self._macos, FakeShell()), '/usr/local/bin/pinentry-mac')

    def test_macos_not_installed_yet(self):
        with _existing():
            self.assertEqual(pinentry_program(self._macos, FakeShell()), '/usr/local/bin/pinentry-mac')

    def test_linux_system_tty(self):
        shell = FakeShell(installed=['pinentry'], bin_dir='/usr/local/bin')
        with _existing('/usr/bin/pinentry-tty'):
            self.assertEqual(pinentry_program(self._linux, shell), '/usr/bin/pinentry-tty')

    def test_linux_tty_on_path(self):
        shell = FakeShell(installed=['pinentry-tty', 'pinentry'], bin_dir='/usr/local/bin')
        with _existing():
            self.assertEqual(pinentry_program(self._linux, shell), '/usr/local/bin/pinentry-tty')

    def test_linux_generic_on_path(self):
        shell = FakeShell(installed=['pinentry'], bin_dir='/usr/local/bin')
        with _existing():
            self.assertEqual(pinentry_program(self._linux, shell), '/usr/local/bin/pinentry')

    def test_linux_fallback(self):
        with _existing():
            self.assertEqual(pinentry_program(self._linux, FakeShell()), '/usr/bin/pinentry')


if __name__ == '__main__':
    unittest.main()
