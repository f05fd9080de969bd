"""Shared fixtures for repodriver tests."""

import json
from unittest.mock import Mock

import pytest

from repodriver.config import get_default_config
from repodriver.drivers.base import DriverContext
from repodriver.exit_codes import TransportError
from repodriver.infra.git_client import GitClient
from repodriver.io import BufferIO, CredentialStore, NullIO

API = "https://api.github.com/repos/acme/widgets"
RAW = "https://raw.githubusercontent.com/acme/widgets"

SHA_TAG = "abc1234" + "0" * 33
SHA_MAIN = "f" * 40
SHA_DEV = "1" * 40


class FakeRemoteFilesystem:
    """
    Scripted stand-in for RemoteFilesystem.

    Each URL maps to a list of results consumed in order; the last result
    repeats. A result is bytes, a JSON-serializable dict/list, or an int
    HTTP status that is raised as TransportError.
    """

    def __init__(self):
        self.responses = {}
        self.calls = []

    def add(self, url, *results):
        self.responses[url] = list(results)
        return self

    def count(self, url=None):
        if url is None:
            return len(self.calls)
        return self.calls.count(url)

    def get_contents(self, url, origin_host=None):
        self.calls.append(url)
        if url not in self.responses:
            raise AssertionError(f"unexpected fetch of {url}")

        results = self.responses[url]
        result = results.pop(0) if len(results) > 1 else results[0]
        if isinstance(result, int):
            raise TransportError(f"HTTP {result} for {url}", status=result, url=url)
        if isinstance(result, (dict, list)):
            return json.dumps(result).encode('utf-8')
        return result


@pytest.fixture(autouse=True)
def isolated_user_config(monkeypatch, tmp_path):
    """Keep the developer's own ~/.repodriver out of every test."""
    monkeypatch.setenv('HOME', str(tmp_path / 'user'))
    monkeypatch.delenv('REPODRIVER_CONFIG', raising=False)


@pytest.fixture
def config(tmp_path):
    config = get_default_config()
    config['home'] = str(tmp_path / 'home')
    return config


@pytest.fixture
def fetcher():
    return FakeRemoteFilesystem()


@pytest.fixture
def git_client():
    return Mock(spec=GitClient)


@pytest.fixture
def make_context(config, fetcher, git_client):
    def factory(io=None, credentials=None):
        return DriverContext(
            config=config,
            io=io or NullIO(),
            credentials=credentials or CredentialStore(),
            fetcher=fetcher,
            git=git_client,
        )
    return factory


@pytest.fixture
def context(make_context):
    return make_context()


@pytest.fixture
def scripted_io():
    return BufferIO(interactive=True)


def repo_metadata(**overrides):
    data = {
        "name": "widgets",
        "full_name": "acme/widgets",
        "default_branch": "main",
        "has_issues": True,
    }
    data.update(overrides)
    return data


def tags_listing():
    return [
        {"name": "v1.0.0", "commit": {"sha": SHA_TAG}},
    ]


def branches_listing():
    return [
        {"ref": "refs/heads/main", "object": {"sha": SHA_MAIN}},
        {"ref": "refs/heads/feature/dev", "object": {"sha": SHA_DEV}},
    ]
