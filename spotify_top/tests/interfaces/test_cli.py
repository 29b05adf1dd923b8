import json
import threading
from unittest.mock import Mock, patch

import pytest

from spotify_top.crosscutting.config import Settings
from spotify_top.infrastructure.spotify_client import SpotifyTopClient
from spotify_top.interfaces.cli import CLI, main
from spotify_top.tests.payloads import artist_item, payload_bytes, track_item

ENV = {'SPOTIFY_KEY': 'test_token_0123456789'}


def _response(status_code=200, content=b'{"items": []}', reason='OK'):
    response = Mock()
    response.status_code = status_code
    response.content = content
    response.reason = reason
    return response


class FakeAPI:
    """Routes mocked requests.get calls by endpoint family and time range."""

    def __init__(self, responses):
        self.responses = responses
        self.urls = []
        self._lock = threading.Lock()

    def __call__(self, url, headers=None, timeout=None):
        with self._lock:
            self.urls.append(url)
        family = 'artists' if '/artists?' in url else 'tracks'
        time_range = 'long_term' if 'time_range=long_term' in url else 'short_term'
        response = self.responses[(family, time_range)]
        if isinstance(response, Exception):
            raise response
        return response


def _ok_responses():
    return {
        ('artists', 'long_term'): _response(content=payload_bytes([artist_item('A'), artist_item('B')])),
        ('artists', 'short_term'): _response(content=payload_bytes([artist_item('X')])),
        ('tracks', 'long_term'): _response(content=payload_bytes([track_item('Song', ['Lead'])], 'tracks')),
        ('tracks', 'short_term'): _response(content=payload_bytes([track_item('Lonely', [])], 'tracks')),
    }


class TestCLI:
    """Tests for the spotify-top command line flow."""

    def setup_method(self):
        self.cli = CLI(environ=ENV, use_dotenv=False)

    def test_parser_takes_no_options(self):
        args = self.cli.parser.parse_args([])
        assert vars(args) == {}

    def test_unknown_argument_is_rejected(self):
        with pytest.raises(SystemExit) as exc_info:
            self.cli.run(['--verbose'])
        assert exc_info.value.code == 2

    def test_create_client_from_settings(self):
        client = self.cli._create_client(Settings(spotify_key='k', base_url='http://localhost:1/top'))

        assert isinstance(client, SpotifyTopClient)
        assert client.base_url == 'http://localhost:1/top'
        assert client.timeout_s == 2.0
        assert client.limit == 5

    @patch('spotify_top.infrastructure.spotify_client.requests.get')
    def test_prints_both_flows(self, mock_get, capsys):
        mock_get.side_effect = FakeAPI(_ok_responses())

        self.cli.run([])

        assert capsys.readouterr().out == (
            "Top five artists all time:\n1. A\n2. B\n"
            "\n"
            "Top five artists last four weeks:\n1. X\n"
            "\n"
            "Top five tracks all time:\n1. Song - Lead\n"
            "\n"
            "Top five tracks last four weeks:\n1. Lonely - Unknown Artist\n"
        )
        assert mock_get.call_count == 4
        for call in mock_get.call_args_list:
            assert call[1]['headers']['Authorization'] == 'Bearer test_token_0123456789'

    @pytest.mark.parametrize('status_code,reason', [
        (401, 'Unauthorized'),
        (429, 'Too Many Requests'),
        (500, 'Internal Server Error'),
    ])
    @patch('spotify_top.infrastructure.spotify_client.requests.get')
    def test_artists_failure_exits_nonzero_without_output(self, mock_get, status_code, reason, capsys):
        responses = _ok_responses()
        responses[('artists', 'short_term')] = _response(status_code=status_code, reason=reason)
        fake_api = FakeAPI(responses)
        mock_get.side_effect = fake_api

        with pytest.raises(SystemExit) as exc_info:
            self.cli.run([])

        assert exc_info.value.code == 1
        captured = capsys.readouterr()
        assert captured.out == ''
        assert f'{status_code} {reason}' in captured.err
        # Both artist windows requested, tracks flow never ran
        assert len(fake_api.urls) == 2
        assert all('/artists?' in url for url in fake_api.urls)

    @patch('spotify_top.infrastructure.spotify_client.requests.get')
    def test_tracks_failure_keeps_artists_output(self, mock_get, capsys):
        responses = _ok_responses()
        responses[('tracks', 'long_term')] = _response(content=b'{"items": "nope"}')
        mock_get.side_effect = FakeAPI(responses)

        with pytest.raises(SystemExit) as exc_info:
            self.cli.run([])

        assert exc_info.value.code == 1
        captured = capsys.readouterr()
        assert captured.out.startswith("Top five artists all time:\n")
        assert 'Top five tracks' not in captured.out
        assert 'DecodeError' in captured.err

    @patch('spotify_top.infrastructure.spotify_client.requests.get')
    def test_dual_failure_logs_both_errors(self, mock_get, capsys):
        responses = _ok_responses()
        responses[('artists', 'long_term')] = _response(status_code=500, reason='Internal Server Error')
        responses[('artists', 'short_term')] = _response(status_code=401, reason='Unauthorized')
        mock_get.side_effect = FakeAPI(responses)

        with pytest.raises(SystemExit):
            self.cli.run([])

        records = [json.loads(line) for line in capsys.readouterr().err.splitlines() if line.startswith('{')]
        errors = [r for r in records if r['level'] == 'ERROR']
        assert [r['fields']['time_range'] for r in errors] == ['long_term', 'short_term']
        assert '500 Internal Server Error' in errors[0]['fields']['error_message']
        assert '401 Unauthorized' in errors[1]['fields']['error_message']

    @patch('spotify_top.infrastructure.spotify_client.requests.get')
    def test_token_is_masked_in_debug_logs(self, mock_get, capsys):
        mock_get.side_effect = FakeAPI(_ok_responses())
        cli = CLI(environ=dict(ENV, SPOTIFY_TOP_LOG_LEVEL='DEBUG'), use_dotenv=False)

        cli.run([])

        err = capsys.readouterr().err
        assert err
        assert 'test_token_0123456789' not in err

    def test_invalid_config_exits_nonzero(self, capsys):
        cli = CLI(environ={'SPOTIFY_TOP_LOG_LEVEL': 'LOUD'}, use_dotenv=False)

        with pytest.raises(SystemExit) as exc_info:
            cli.run([])

        assert exc_info.value.code == 1
        assert capsys.readouterr().out == ''

    @patch('spotify_top.interfaces.cli.TopItemsService')
    def test_keyboard_interrupt_exits_130(self, mock_service_class):
        mock_service_class.return_value.top_artists.side_effect = KeyboardInterrupt

        with pytest.raises(SystemExit) as exc_info:
            self.cli.run([])

        assert exc_info.value.code == 130

    @patch('spotify_top.interfaces.cli.TopItemsService')
    def test_unexpected_error_exits_nonzero(self, mock_service_class):
        mock_service_class.return_value.top_artists.side_effect = RuntimeError('bug')

        with pytest.raises(SystemExit) as exc_info:
            self.cli.run([])

        assert exc_info.value.code == 1

    @patch('spotify_top.infrastructure.spotify_client.requests.get')
    def test_main_reads_process_environment(self, mock_get, monkeypatch, capsys):
        monkeypatch.setenv('SPOTIFY_KEY', 'env_token')
        monkeypatch.setattr('spotify_top.crosscutting.config.load_dotenv', Mock())
        mock_get.side_effect = FakeAPI(_ok_responses())

        main([])

        assert mock_get.call_args[1]['headers']['Authorization'] == 'Bearer env_token'
        assert 'Top five tracks last four weeks:' in capsys.readouterr().out
