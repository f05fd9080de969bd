"""
Tests for default-branch resolution.

Covers the tagged attempt outcomes, the retry bound, credential negotiation
and the fallback paths, both on the bare state machine and through the
GitHub driver.
"""

from unittest.mock import Mock, patch

import pytest

from repodriver.drivers.github import GitHubDriver
from repodriver.drivers.resolver import (
    MAX_ATTEMPTS,
    AttemptOutcome,
    OutcomeKind,
    ResolutionState,
    RootIdentifierResolver,
    root_identifier_from_metadata,
)
from repodriver.exit_codes import (
    DriverError,
    GitOperationError,
    ResolutionExhaustedError,
    TransportError,
)
from repodriver.io import BufferIO, Credential, CredentialNegotiator, CredentialStore

from conftest import API, repo_metadata

URL = "https://github.com/acme/widgets"
SSH_URL = "git@github.com:acme/widgets.git"


def ambiguous(status=401):
    return AttemptOutcome.from_error(TransportError("denied", status=status, url=API))


def make_resolver(outcomes, fallback=None, io=None, store=None):
    io = io or BufferIO(interactive=False)
    store = store if store is not None else CredentialStore()
    fetch = Mock(side_effect=list(outcomes))
    build = Mock(side_effect=fallback) if isinstance(fallback, Exception) else Mock(return_value=fallback)
    resolver = RootIdentifierResolver(
        fetch_metadata=fetch,
        build_fallback=build,
        negotiator=CredentialNegotiator(io, store),
        io=io,
        origin_host="github.com",
        url=URL,
        fallback_url=SSH_URL,
    )
    return resolver, fetch, build


class TestAttemptOutcome:

    @pytest.mark.parametrize("status", [401, 404])
    def test_auth_statuses_are_ambiguous(self, status):
        assert ambiguous(status).kind is OutcomeKind.AMBIGUOUS_AUTHORIZATION

    def test_other_statuses_are_fatal(self):
        outcome = AttemptOutcome.from_error(TransportError("boom", status=500))
        assert outcome.kind is OutcomeKind.FATAL

    def test_non_transport_errors_are_fatal(self):
        outcome = AttemptOutcome.from_error(DriverError("bad json"))
        assert outcome.kind is OutcomeKind.FATAL


class TestRootIdentifierFromMetadata:

    def test_prefers_default_branch(self):
        assert root_identifier_from_metadata({"default_branch": "main", "master_branch": "old"}) == "main"

    def test_legacy_field(self):
        assert root_identifier_from_metadata({"master_branch": "old"}) == "old"

    def test_literal_master(self):
        assert root_identifier_from_metadata({}) == "master"


class TestResolverStateMachine:

    def test_success_first_try(self):
        resolver, fetch, build = make_resolver([AttemptOutcome.success(repo_metadata())])
        resolution = resolver.resolve()
        assert resolution.state is ResolutionState.RESOLVED
        assert resolution.root_identifier == "main"
        assert resolution.has_issues is True
        assert resolution.is_private is False
        assert fetch.call_count == 1
        build.assert_not_called()

    def test_ambiguous_then_fallback_delegates(self):
        fallback = object()
        resolver, fetch, build = make_resolver([ambiguous(404)], fallback=fallback)
        resolution = resolver.resolve()
        assert resolution.state is ResolutionState.DELEGATED
        assert resolution.fallback is fallback
        assert resolution.is_private is True
        assert fetch.call_count == 1

    def test_fatal_error_propagates_without_retry(self):
        error = TransportError("server error", status=500, url=API)
        resolver, fetch, build = make_resolver([AttemptOutcome.from_error(error)])
        with pytest.raises(TransportError) as exc_info:
            resolver.resolve()
        assert exc_info.value is error
        assert resolver.resolution.state is ResolutionState.FAILED
        assert resolver.resolution.is_private is False
        assert fetch.call_count == 1
        build.assert_not_called()

    def test_non_interactive_surfaces_fallback_error(self):
        io = BufferIO(interactive=False)
        resolver, fetch, build = make_resolver(
            [ambiguous()], fallback=GitOperationError("clone failed"), io=io
        )
        with pytest.raises(GitOperationError):
            resolver.resolve()
        assert resolver.resolution.state is ResolutionState.FAILED
        assert fetch.call_count == 1
        assert any("Failed to clone" in line and SSH_URL in line for line in io.output)
        assert io.prompts == []

    def test_retries_with_credentials_until_success(self):
        io = BufferIO(answers=["octocat", "s3cret"] * 3, interactive=True)
        store = CredentialStore()
        outcomes = [ambiguous(), ambiguous(), ambiguous(), AttemptOutcome.success(repo_metadata())]
        resolver, fetch, build = make_resolver(
            outcomes, fallback=GitOperationError("clone failed"), io=io, store=store
        )
        resolution = resolver.resolve()
        assert resolution.state is ResolutionState.RESOLVED
        assert resolution.is_private is True
        assert resolution.attempts == 4
        assert fetch.call_count == 4
        assert build.call_count == 3
        assert store.get("github.com") == Credential("octocat", "s3cret")
        assert io.prompts == ["Username: ", "Password: "] * 3

    def test_exhausted_after_max_attempts(self):
        io = BufferIO(answers=["octocat", "wrong"] * MAX_ATTEMPTS, interactive=True)
        resolver, fetch, build = make_resolver(
            [ambiguous()] * MAX_ATTEMPTS, fallback=GitOperationError("clone failed"), io=io
        )
        with pytest.raises(ResolutionExhaustedError) as exc_info:
            resolver.resolve()
        message = str(exc_info.value)
        assert "invalid credentials" in message
        assert "does not exist" in message
        assert fetch.call_count == MAX_ATTEMPTS
        assert resolver.resolution.state is ResolutionState.FAILED
        # No prompt once the last attempt has been used
        assert len(io.prompts) == 2 * (MAX_ATTEMPTS - 1)


class TestDriverResolution:
    """Resolution through GitHubDriver with a scripted fetcher."""

    def test_three_unauthorized_then_success(self, make_context, fetcher):
        io = BufferIO(answers=["octocat", "s3cret"] * 3, interactive=True)
        store = CredentialStore()
        context = make_context(io=io, credentials=store)
        fetcher.add(API, 401, 401, 401, repo_metadata())

        with patch('repodriver.drivers.github.GitDriver') as git_driver_class:
            git_driver_class.return_value.initialize.side_effect = GitOperationError("clone failed")
            driver = GitHubDriver(URL, context)
            driver.initialize()

        assert driver.get_root_identifier() == "main"
        assert driver.is_private is True
        assert driver.git_driver is None
        assert driver.resolution.state is ResolutionState.RESOLVED
        assert fetcher.count(API) == 4
        assert store.get("github.com").username == "octocat"

    def test_five_unauthorized_exhausts(self, make_context, fetcher):
        io = BufferIO(answers=["octocat", "wrong"] * 5, interactive=True)
        context = make_context(io=io)
        fetcher.add(API, 401)

        with patch('repodriver.drivers.github.GitDriver') as git_driver_class:
            git_driver_class.return_value.initialize.side_effect = GitOperationError("clone failed")
            driver = GitHubDriver(URL, context)
            with pytest.raises(ResolutionExhaustedError):
                driver.initialize()

        assert fetcher.count(API) == 5
        assert driver.is_private is True

    def test_server_error_propagates(self, context, fetcher):
        fetcher.add(API, 502)
        driver = GitHubDriver(URL, context)
        with pytest.raises(TransportError) as exc_info:
            driver.initialize()
        assert exc_info.value.status == 502
        assert fetcher.count(API) == 1
        assert driver.is_private is False

    def test_non_interactive_fallback_failure(self, context, fetcher):
        fetcher.add(API, 404)
        with patch('repodriver.drivers.github.GitDriver') as git_driver_class:
            git_driver_class.return_value.initialize.side_effect = GitOperationError("clone failed")
            driver = GitHubDriver(URL, context)
            with pytest.raises(GitOperationError):
                driver.initialize()
        assert fetcher.count(API) == 1
