# Copyright 2018-present Network Optix, Inc. Licensed under MPL 2.0: www.mozilla.org/MPL/2.0/
import tempfile
import unittest
from pathlib import Path

from hostprep._pubkey import HomePubKey
from hostprep._pubkey import PubKey

_GITHUB_ED25519 = b'ssh-ed25519 AAAAC3NzaC1lZDI1NTE5AAAAIOMqqnkVzrm0SdG6UOoqKLsabgH5C9okWi0dh2l9GKJl'


class TestPubKey(unittest.TestCase):

    def test_fingerprint(self):
        key = PubKey(_GITHUB_ED25519)
        self.assertEqual(key.fingerprint(), 'SHA256:+DiY3wvvV6TuJJhbpZisF/zLDA0zPMSvHdkr4UvCOqU')

    def test_comment_does_not_matter(self):
        with_comment = PubKey(_GITHUB_ED25519 + b' jane@example.com\n')
        self.assertTrue(with_comment.equal(PubKey(_GITHUB_ED25519)))

    def test_invalid(self):
        with self.assertRaises(ValueError):
            PubKey(b'ssh-ed25519 bm90IGEga2V5')
        with self.assertRaises(ValueError):
            PubKey(b'garbage')

    def test_home_key(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            home = Path(temp_dir)
            (home / '.ssh').mkdir()
            (home / '.ssh' / 'octocat.work.pub').write_bytes(_GITHUB_ED25519 + b' octocat\n')
            key = HomePubKey('octocat.work', home)
            self.assertTrue(key.equal(PubKey(_GITHUB_ED25519)))


if __name__ == '__main__':
    unittest.main()
