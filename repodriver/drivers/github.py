"""
GitHub driver for repodriver.

Answers repository metadata questions through the GitHub REST API:
- Default branch and issue tracker from the repository endpoint
- Tags and branches from the tag and ref listings
- Manifests from raw.githubusercontent.com, cached by commit sha

When the API refuses access (401/404) the driver switches to a GitDriver on
the SSH URL and forwards every call to it from then on.
"""

import copy
import logging
import re
from typing import Any, Dict, Optional

from ..exit_codes import DriverError, TransportError
from ..infra.cache import Cache
from ..config import get_home
from ..io import IOInterface
from ..manifest import encode_manifest, ensure_support, is_commit_sha, parse_json, parse_manifest
from .base import DistDescriptor, DriverContext, RepositoryIdentity, SourceDescriptor, VcsDriver
from .git import GitDriver
from .resolver import AttemptOutcome, Resolution, ResolutionState, RootIdentifierResolver

logger = logging.getLogger(__name__)

GITHUB_URL_PATTERN = re.compile(
    r'^(?:(?:https?|git)://github\.com/|git@github\.com:)([^/]+)/(.+?)(?:\.git)?$'
)
ORIGIN_HOST = 'github.com'


def ssl_available() -> bool:
    """Check whether the interpreter was built with TLS support."""
    try:
        import ssl  # noqa: F401
    except ImportError:
        return False
    return True


def parse_github_url(url: str):
    """
    Extract owner and repository name from a GitHub URL.

    Returns:
        Tuple (owner, repo) or (None, None) if the URL is not a GitHub URL
    """
    match = GITHUB_URL_PATTERN.match(url or '')
    if not match:
        return None, None
    return match.group(1), match.group(2)


class GitHubDriver(VcsDriver):
    """
    VCS driver backed by the GitHub API.

    Example:
        driver = GitHubDriver("https://github.com/owner/repo", context)
        driver.initialize()
        driver.get_manifest(driver.get_root_identifier())
    """

    def __init__(self, url: str, context: DriverContext):
        super().__init__(url, context)
        owner, repository = parse_github_url(url)
        if owner is None:
            raise DriverError(f"{url} is not a GitHub repository URL")

        self.identity = RepositoryIdentity(owner, repository, ORIGIN_HOST)
        github = self.config.get('github', {})
        self.api_url = github.get('api_url', 'https://api.github.com').rstrip('/')
        self.raw_url = github.get('raw_url', 'https://raw.githubusercontent.com').rstrip('/')
        self.cache = Cache(get_home(self.config) / 'cache.github' / owner / repository)

        self.root_identifier: Optional[str] = None
        self.has_issues = False
        self.tags: Optional[Dict[str, str]] = None
        self.branches: Optional[Dict[str, str]] = None
        self.info_cache: Dict[str, Optional[Dict[str, Any]]] = {}
        self.git_driver: Optional[VcsDriver] = None
        self.resolution: Optional[Resolution] = None

    @classmethod
    def supports(cls, io: IOInterface, url: str, deep: bool = False) -> bool:
        if not GITHUB_URL_PATTERN.match(url or ''):
            return False

        if not ssl_available():
            if io.is_verbose():
                io.write(f"Skipping GitHub driver for {url} because the ssl module is missing.")
            return False

        return True

    @property
    def owner(self) -> str:
        return self.identity.owner

    @property
    def repository(self) -> str:
        return self.identity.repository

    @property
    def is_private(self) -> bool:
        return self.identity.is_private

    def initialize(self) -> None:
        self.fetch_root_identifier()

    def get_root_identifier(self) -> str:
        if self.git_driver:
            return self.git_driver.get_root_identifier()
        return self.root_identifier

    def get_url(self) -> str:
        if self.git_driver:
            return self.git_driver.get_url()
        return self.url

    def get_source(self, identifier: str) -> SourceDescriptor:
        if self.git_driver:
            return self.git_driver.get_source(identifier)

        label = self._tag_label(identifier) or identifier
        if self.is_private:
            # Private repositories are cloned over SSH
            url = self.generate_ssh_url()
        else:
            url = self.get_url()
        return SourceDescriptor('git', url, label)

    def get_dist(self, identifier: str) -> Optional[DistDescriptor]:
        if self.git_driver:
            return self.git_driver.get_dist(identifier)

        label = self._tag_label(identifier) or identifier
        url = f"https://github.com/{self.owner}/{self.repository}/zipball/{label}"
        return DistDescriptor('zip', url, label, '')

    def get_manifest(self, identifier: str) -> Optional[Dict[str, Any]]:
        """
        Manifest at identifier.

        Records are memoized per driver; each call returns its own copy.
        """
        if self.git_driver:
            return self.git_driver.get_manifest(identifier)

        if identifier not in self.info_cache:
            self.info_cache[identifier] = self._load_manifest(identifier)
        return copy.deepcopy(self.info_cache[identifier])

    def _load_manifest(self, identifier: str) -> Optional[Dict[str, Any]]:
        cacheable = is_commit_sha(identifier)
        if cacheable:
            cached = self.cache.read(identifier)
            if cached is not None:
                return parse_manifest(cached, str(self.cache.root / identifier))

        record = self._fetch_manifest(identifier)

        if cacheable:
            self.cache.write(identifier, encode_manifest(record))

        return record

    def _fetch_manifest(self, identifier: str) -> Optional[Dict[str, Any]]:
        filename = self.context.manifest_filename
        resource = f"{self.raw_url}/{self.owner}/{self.repository}/{identifier}/{filename}"
        try:
            raw = self.get_contents(resource, ORIGIN_HOST)
        except TransportError as e:
            if e.status != 404:
                raise
            logger.debug(f"No {filename} at {identifier} in {self.identity.full_name}")
            return None

        record = parse_manifest(raw, resource)
        if record is None:
            return None

        if 'time' not in record:
            resource = f"{self.api_url}/repos/{self.owner}/{self.repository}/commits/{identifier}"
            commit = parse_json(self.get_contents(resource, ORIGIN_HOST), resource)
            record['time'] = commit['commit']['committer']['date']

        support = ensure_support(record)
        if 'source' not in support:
            label = self._tag_label(identifier) or self._branch_label(identifier) or identifier
            support['source'] = f"https://github.com/{self.owner}/{self.repository}/tree/{label}"
        if 'issues' not in support and self.has_issues:
            support['issues'] = f"https://github.com/{self.owner}/{self.repository}/issues"

        return record

    def get_tags(self) -> Dict[str, str]:
        if self.git_driver:
            return self.git_driver.get_tags()

        if self.tags is None:
            resource = f"{self.api_url}/repos/{self.owner}/{self.repository}/tags"
            tags_data = parse_json(self.get_contents(resource, ORIGIN_HOST), resource)
            self.tags = {}
            for tag in tags_data:
                self.tags[tag['name']] = tag['commit']['sha']

        return self.tags

    def get_branches(self) -> Dict[str, str]:
        if self.git_driver:
            return self.git_driver.get_branches()

        if self.branches is None:
            resource = f"{self.api_url}/repos/{self.owner}/{self.repository}/git/refs/heads"
            branch_data = parse_json(self.get_contents(resource, ORIGIN_HOST), resource)
            self.branches = {}
            for branch in branch_data:
                name = branch['ref'][len('refs/heads/'):]
                self.branches[name] = branch['object']['sha']

        return self.branches

    def cleanup(self) -> None:
        if self.git_driver:
            self.git_driver.cleanup()

    def _tag_label(self, identifier: str) -> Optional[str]:
        for name, sha in self.get_tags().items():
            if sha == identifier:
                return name
        return None

    def _branch_label(self, identifier: str) -> Optional[str]:
        for name, sha in self.get_branches().items():
            if sha == identifier:
                return name
        return None

    def generate_ssh_url(self) -> str:
        """SSH clone URL, used for private repositories."""
        return f"git@github.com:{self.owner}/{self.repository}.git"

    def _request_repository_metadata(self) -> AttemptOutcome:
        resource = f"{self.api_url}/repos/{self.owner}/{self.repository}"
        try:
            data = parse_json(self.get_contents(resource, ORIGIN_HOST), resource)
        except DriverError as e:
            return AttemptOutcome.from_error(e)
        if not isinstance(data, dict):
            return AttemptOutcome.from_error(
                DriverError(f"Unexpected repository metadata from {resource}")
            )
        return AttemptOutcome.success(data)

    def _build_git_driver(self) -> VcsDriver:
        driver = GitDriver(self.generate_ssh_url(), self.context)
        driver.initialize()
        return driver

    def fetch_root_identifier(self) -> None:
        """
        Resolve the default branch, switching to git access if the API refuses.

        Raises:
            ResolutionExhaustedError: if credentials never worked
            DriverError: on any other failure
        """
        resolver = RootIdentifierResolver(
            fetch_metadata=self._request_repository_metadata,
            build_fallback=self._build_git_driver,
            negotiator=self.context.negotiator,
            io=self.io,
            origin_host=ORIGIN_HOST,
            url=self.url,
            fallback_url=self.generate_ssh_url(),
        )
        try:
            self.resolution = resolver.resolve()
        finally:
            if resolver.resolution.is_private:
                self.identity.is_private = True

        if self.resolution.state is ResolutionState.DELEGATED:
            self.git_driver = self.resolution.fallback
            return

        self.root_identifier = self.resolution.root_identifier
        self.has_issues = self.resolution.has_issues
