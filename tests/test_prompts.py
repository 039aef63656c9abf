"""Tests for console prompts."""

from unittest.mock import patch

from gh_archive.ui.prompts import Prompter


class TestPrompter:
    """Test the rich prompt wrapper."""

    @patch('gh_archive.ui.prompts.Prompt.ask', return_value='secret')
    def test_ask_hidden(self, mock_ask, console):
        prompter = Prompter(console)

        assert prompter.ask('Token', password=True) == 'secret'
        mock_ask.assert_called_once_with('Token', password=True, console=console)

    @patch('gh_archive.ui.prompts.Confirm.ask', return_value=True)
    def test_confirm(self, mock_ask, console):
        assert Prompter(console).confirm('Proceed?') is True
        mock_ask.assert_called_once_with('Proceed?', default=False, console=console)

    @patch('gh_archive.ui.prompts.Prompt.ask', side_effect=['', 'acme/widgets'])
    def test_ask_valid_repeats_until_accepted(self, mock_ask, console, output):
        prompter = Prompter(console)

        answer = prompter.ask_valid(
            'Repository',
            validate=lambda value: None if value else 'Required [value]',
        )

        assert answer == 'acme/widgets'
        assert mock_ask.call_count == 2
        assert 'Required [value]' in output()
