# Copyright 2018-present Network Optix, Inc. Licensed under MPL 2.0: www.mozilla.org/MPL/2.0/
import unittest

from hostprep._core import SetupCancelled
from hostprep._prompt import InvalidInput
from hostprep._prompt import Prompter
from hostprep.tests._fake_shell import scripted_prompter


class TestPrompter(unittest.TestCase):

    def test_default_on_empty_answer(self):
        questions = []

        def read_line(question):
            questions.append(question)
            return '  '

        prompter = Prompter(read_line=read_line)
        self.assertEqual(prompter.ask("Email address", 'jane@example.com'), 'jane@example.com')
        self.assertEqual(questions, ["Email address [jane@example.com]: "])

    def test_answer_is_stripped(self):
        prompter = scripted_prompter([' octocat '])
        self.assertEqual(prompter.ask("GitHub username"), 'octocat')

    def test_confirm(self):
        self.assertTrue(scripted_prompter(['']).confirm("Continue?", default=True))
        self.assertFalse(scripted_prompter(['']).confirm("Overwrite?", default=False))
        self.assertTrue(scripted_prompter(['Y']).confirm("Overwrite?", default=False))
        self.assertFalse(scripted_prompter(['yes']).confirm("Overwrite?", default=False))

    def test_secret_confirmed(self):
        prompter = scripted_prompter([], secrets=['s3cret', 's3cret'])
        self.assertEqual(prompter.ask_secret_confirmed("GPG Passphrase", "Passphrases do not match"), 's3cret')

    def test_empty_secret_is_not_confirmed(self):
        prompter = scripted_prompter([], secrets=[''])
        self.assertEqual(prompter.ask_secret_confirmed("SSH Passphrase", "SSH passphrases do not match"), '')

    def test_secret_mismatch(self):
        prompter = scripted_prompter([], secrets=['s3cret', 'secret'])
        with self.assertRaisesRegex(InvalidInput, "do not match"):
            prompter.ask_secret_confirmed("SSH Passphrase", "SSH passphrases do not match")

    def test_closed_input(self):
        with self.assertRaises(SetupCancelled):
            scripted_prompter([]).ask("Full name")


if __name__ == '__main__':
    unittest.main()
