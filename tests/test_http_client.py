"""
Tests for RemoteFilesystem with mocked HTTP.
"""

from unittest.mock import Mock, patch

import pytest
import requests

from repodriver.config import get_default_config
from repodriver.exit_codes import AUTH_ERROR, NETWORK_ERROR, TransportError
from repodriver.infra.http_client import RemoteFilesystem
from repodriver.io import CredentialStore

API_URL = "https://api.github.com/repos/acme/widgets"


def response(status_code=200, content=b"{}"):
    mock_response = Mock()
    mock_response.status_code = status_code
    mock_response.content = content
    return mock_response


class TestGetContents:

    def test_returns_body(self):
        fetcher = RemoteFilesystem()
        with patch.object(fetcher.session, 'get', return_value=response(content=b'{"a": 1}')) as mock_get:
            assert fetcher.get_contents(API_URL) == b'{"a": 1}'
        mock_get.assert_called_once()
        assert mock_get.call_args.args[0] == API_URL

    def test_not_found_raises_with_status(self):
        fetcher = RemoteFilesystem()
        with patch.object(fetcher.session, 'get', return_value=response(404)):
            with pytest.raises(TransportError) as exc_info:
                fetcher.get_contents(API_URL)
        assert exc_info.value.status == 404
        assert exc_info.value.url == API_URL
        assert exc_info.value.exit_code == NETWORK_ERROR

    def test_unauthorized_maps_to_auth_exit_code(self):
        fetcher = RemoteFilesystem()
        with patch.object(fetcher.session, 'get', return_value=response(401)):
            with pytest.raises(TransportError) as exc_info:
                fetcher.get_contents(API_URL)
        assert exc_info.value.exit_code == AUTH_ERROR

    def test_network_failure_has_status_zero(self):
        fetcher = RemoteFilesystem()
        with patch.object(fetcher.session, 'get', side_effect=requests.ConnectionError("refused")):
            with pytest.raises(TransportError) as exc_info:
                fetcher.get_contents(API_URL)
        assert exc_info.value.status == 0


class TestAuthentication:

    def test_stored_credentials_used_for_origin_host(self):
        store = CredentialStore()
        store.set("github.com", "octocat", "s3cret")
        fetcher = RemoteFilesystem(credentials=store, token="ghp_token")
        with patch.object(fetcher.session, 'get', return_value=response()) as mock_get:
            fetcher.get_contents(API_URL, "github.com")
        kwargs = mock_get.call_args.kwargs
        assert kwargs['auth'] == ("octocat", "s3cret")
        assert 'Authorization' not in kwargs['headers']

    def test_token_used_for_github_hosts(self):
        fetcher = RemoteFilesystem(token="ghp_token")
        with patch.object(fetcher.session, 'get', return_value=response()) as mock_get:
            fetcher.get_contents(API_URL, "github.com")
        kwargs = mock_get.call_args.kwargs
        assert kwargs['headers']['Authorization'] == "token ghp_token"
        assert kwargs['headers']['Accept'] == "application/vnd.github.v3+json"
        assert kwargs['auth'] is None

    def test_token_not_sent_elsewhere(self):
        fetcher = RemoteFilesystem(token="ghp_token")
        with patch.object(fetcher.session, 'get', return_value=response()) as mock_get:
            fetcher.get_contents("https://example.org/file.json")
        assert 'Authorization' not in mock_get.call_args.kwargs['headers']

    def test_from_config(self):
        config = get_default_config()
        config['github']['token'] = "ghp_cfg"
        config['http']['timeout_seconds'] = 7
        fetcher = RemoteFilesystem.from_config(config, CredentialStore())
        assert fetcher.token == "ghp_cfg"
        assert fetcher.timeout == 7
        assert fetcher.session.headers['User-Agent'] == "repodriver"
