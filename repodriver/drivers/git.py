"""
Plain git driver for repodriver.

Works on a bare mirror of the remote kept under ``{home}/vcs``, or on a
local repository in place. Used directly for non-GitHub URLs and as the
fallback when the GitHub API refuses access.
"""

import copy
import logging
import os
import re
from typing import Any, Dict, Optional

from ..config import get_home, load_config
from ..infra.git_client import GitClient
from ..io import IOInterface
from ..manifest import parse_manifest
from .base import DistDescriptor, DriverContext, SourceDescriptor, VcsDriver

logger = logging.getLogger(__name__)

GIT_URL_PATTERN = re.compile(r'(^git://|\.git$|git@|//git\.)', re.IGNORECASE)
SCP_URL_PATTERN = re.compile(r'^[^/@:]+@[^/:]+:')


def mirror_dirname(url: str) -> str:
    """Filesystem-safe directory name for a mirror of url."""
    return re.sub(r'[^a-z0-9.]', '-', url.lower())


class GitDriver(VcsDriver):
    """
    VCS driver that reads everything from a git repository.

    Example:
        driver = GitDriver("git@github.com:owner/repo.git", context)
        driver.initialize()
        driver.get_tags()
    """

    def __init__(self, url: str, context: DriverContext):
        super().__init__(url, context)
        self.git = context.git
        self.repo_dir: Optional[str] = None
        self.root_identifier: Optional[str] = None
        self.tags: Optional[Dict[str, str]] = None
        self.branches: Optional[Dict[str, str]] = None
        self.info_cache: Dict[str, Optional[Dict[str, Any]]] = {}

    @classmethod
    def supports(cls, io: IOInterface, url: str, deep: bool = False) -> bool:
        if GIT_URL_PATTERN.search(url or ''):
            return True

        if _is_local_path(url):
            path = os.path.expanduser(url)
            return os.path.isdir(path) and _local_git_client().is_git_repo(path)

        if not deep:
            return False

        return _local_git_client().ls_remote_heads(url)

    def initialize(self) -> None:
        """
        Create or refresh the local mirror.

        Raises:
            GitOperationError: if cloning or updating fails
        """
        if _is_local_path(self.url) and os.path.isdir(os.path.expanduser(self.url)):
            self.repo_dir = os.path.expanduser(self.url)
            return

        mirror = get_home(self.config) / 'vcs' / mirror_dirname(self.url)
        self.repo_dir = str(mirror)

        if mirror.is_dir() and self.git.is_git_repo(self.repo_dir):
            logger.debug(f"Updating mirror of {self.url} in {mirror}")
            self.git.update_mirror(self.repo_dir)
        else:
            logger.debug(f"Cloning {self.url} into {mirror}")
            mirror.parent.mkdir(parents=True, exist_ok=True)
            self.git.clone_mirror(self.url, self.repo_dir)

    def get_root_identifier(self) -> str:
        if self.root_identifier is None:
            self.root_identifier = self.git.head_branch(self.repo_dir) or 'master'
        return self.root_identifier

    def get_source(self, identifier: str) -> SourceDescriptor:
        return SourceDescriptor('git', self.get_url(), identifier)

    def get_dist(self, identifier: str) -> Optional[DistDescriptor]:
        return None

    def get_tags(self) -> Dict[str, str]:
        if self.tags is None:
            self.tags = self.git.tags(self.repo_dir)
        return self.tags

    def get_branches(self) -> Dict[str, str]:
        if self.branches is None:
            self.branches = self.git.branches(self.repo_dir)
        return self.branches

    def get_manifest(self, identifier: str) -> Optional[Dict[str, Any]]:
        if identifier not in self.info_cache:
            self.info_cache[identifier] = self._read_manifest(identifier)
        return copy.deepcopy(self.info_cache[identifier])

    def _read_manifest(self, identifier: str) -> Optional[Dict[str, Any]]:
        filename = self.context.manifest_filename
        content = self.git.show_file(self.repo_dir, identifier, filename)
        record = None
        if content is not None and content.strip():
            record = parse_manifest(content, f"{self.url}@{identifier}:{filename}")

        if record is not None and 'time' not in record:
            date = self.git.commit_date(self.repo_dir, identifier)
            if date:
                record['time'] = date

        return record


def _is_local_path(url: str) -> bool:
    return bool(url) and '://' not in url and SCP_URL_PATTERN.match(url) is None


def _local_git_client() -> GitClient:
    # Probes run before a DriverContext exists
    return GitClient.from_config(load_config())
