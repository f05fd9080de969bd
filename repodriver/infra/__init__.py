"""
Infrastructure layer for repodriver.

Contains abstractions for external systems:
- GitClient: Git command execution
- RemoteFilesystem: authenticated HTTP content fetching
- Cache: write-once on-disk content cache

These provide clean interfaces that can be mocked for testing.
"""

from .git_client import GitClient
from .http_client import RemoteFilesystem
from .cache import Cache

__all__ = [
    'GitClient',
    'RemoteFilesystem',
    'Cache',
]
