"""
Driver contract shared by every VCS driver.

A driver answers metadata questions about one repository URL: its default
branch, its tags and branches, where to fetch sources and archives, and the
manifest stored at any reference.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from ..config import get_default_config
from ..exit_codes import DriverError
from ..infra.git_client import GitClient
from ..infra.http_client import RemoteFilesystem
from ..io import CredentialNegotiator, CredentialStore, IOInterface, NullIO


@dataclass(frozen=True)
class SourceDescriptor:
    """Where to clone a reference from."""
    type: str
    url: str
    reference: str

    def to_dict(self) -> Dict[str, Any]:
        return {'type': self.type, 'url': self.url, 'reference': self.reference}


@dataclass(frozen=True)
class DistDescriptor:
    """Where to download an archive of a reference from."""
    type: str
    url: str
    reference: str
    shasum: str = ''

    def to_dict(self) -> Dict[str, Any]:
        return {
            'type': self.type,
            'url': self.url,
            'reference': self.reference,
            'shasum': self.shasum,
        }


@dataclass
class RepositoryIdentity:
    """Who owns a hosted repository and whether it is private."""
    owner: str
    repository: str
    origin_host: str
    is_private: bool = False

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repository}"


@dataclass
class DriverContext:
    """
    Everything a driver needs from its environment.

    Passed explicitly to every driver instead of reaching for globals.
    """
    config: Dict[str, Any] = field(default_factory=get_default_config)
    io: IOInterface = field(default_factory=NullIO)
    credentials: CredentialStore = field(default_factory=CredentialStore)
    fetcher: Optional[RemoteFilesystem] = None
    git: Optional[GitClient] = None

    def __post_init__(self):
        if self.fetcher is None:
            self.fetcher = RemoteFilesystem.from_config(self.config, self.credentials)
        if self.git is None:
            self.git = GitClient.from_config(self.config)

    @classmethod
    def from_config(cls, config: Dict[str, Any], io: Optional[IOInterface] = None) -> 'DriverContext':
        return cls(
            config=config,
            io=io or NullIO(),
            credentials=CredentialStore.from_config(config),
        )

    @property
    def negotiator(self) -> CredentialNegotiator:
        return CredentialNegotiator(self.io, self.credentials)

    @property
    def manifest_filename(self) -> str:
        return self.config.get('manifest', {}).get('filename', 'composer.json')


class VcsDriver(ABC):
    """Base class for VCS drivers."""

    def __init__(self, url: str, context: DriverContext):
        self.url = url
        self.context = context
        self.io = context.io
        self.config = context.config

    @classmethod
    @abstractmethod
    def supports(cls, io: IOInterface, url: str, deep: bool = False) -> bool:
        """Check whether this driver can handle url."""

    @abstractmethod
    def initialize(self) -> None:
        """Prepare the driver; called once before any other operation."""

    @abstractmethod
    def get_root_identifier(self) -> str:
        """Name of the default branch."""

    def get_url(self) -> str:
        return self.url

    @abstractmethod
    def get_source(self, identifier: str) -> SourceDescriptor:
        ...

    @abstractmethod
    def get_dist(self, identifier: str) -> Optional[DistDescriptor]:
        ...

    @abstractmethod
    def get_tags(self) -> Dict[str, str]:
        ...

    @abstractmethod
    def get_branches(self) -> Dict[str, str]:
        ...

    @abstractmethod
    def get_manifest(self, identifier: str) -> Optional[Dict[str, Any]]:
        """
        Manifest at identifier, with derived fields backfilled.

        Returns None when the reference has no manifest.
        """

    def has_manifest(self, identifier: str) -> bool:
        """Check whether identifier carries a readable manifest."""
        try:
            return self.get_manifest(identifier) is not None
        except DriverError:
            return False

    def cleanup(self) -> None:
        """Release resources held by the driver."""

    def get_contents(self, url: str, origin_host: Optional[str] = None) -> bytes:
        return self.context.fetcher.get_contents(url, origin_host)
