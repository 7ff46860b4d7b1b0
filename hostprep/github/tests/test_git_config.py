# Copyright 2018-present Network Optix, Inc. Licensed under MPL 2.0: www.mozilla.org/MPL/2.0/
import unittest

from hostprep._shell import CommandFailed
from hostprep.github._git_config import ConfigureGitIdentity
from hostprep.github._git_config import SetSigningKey
from hostprep.github._gpg import KeyExportFailed
from hostprep.github.tests._github_fixtures import FINGERPRINT
from hostprep.github.tests._github_fixtures import secret_keys
from hostprep.tests._fake_shell import FakeShell


class TestGitConfig(unittest.TestCase):

    def test_identity(self):
        shell = FakeShell()
        shell.respond(['git', 'config', '--global', '--unset'], returncode=5)
        ConfigureGitIdentity('Mona Octocat', 'octocat@example.com').run(shell)
        self.assertEqual(shell.calls, [
            ('git', 'config', '--global', '--unset', 'gpg.format'),
            ('git', 'config', '--global', 'user.name', 'Mona Octocat'),
            ('git', 'config', '--global', 'user.email', 'octocat@example.com'),
            ('git', 'config', '--global', 'commit.gpgSign', 'true'),
            ('git', 'config', '--global', 'tag.gpgSign', 'true'),
            ])

    def test_set_failure(self):
        shell = FakeShell()
        shell.respond(['git', 'config', '--global', 'user.name'], stderr="could not lock config file", returncode=255)
        with self.assertRaises(CommandFailed):
            ConfigureGitIdentity('Mona Octocat', 'octocat@example.com').run(shell)

    def test_signing_key(self):
        shell = FakeShell()
        shell.respond(['gpg', '--list-secret-keys'], stdout=secret_keys())
        SetSigningKey('octocat@example.com').run(shell)
        self.assertEqual(shell.calls[-1], ('git', 'config', '--global', 'user.signingkey', FINGERPRINT))

    def test_no_signing_key(self):
        shell = FakeShell()
        shell.respond(['gpg', '--list-secret-keys'], stderr="No secret key", returncode=2)
        with self.assertRaises(KeyExportFailed):
            SetSigningKey('octocat@example.com').run(shell)


if __name__ == '__main__':
    unittest.main()
