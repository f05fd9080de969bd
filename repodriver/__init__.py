"""
repodriver - repository metadata drivers for hosted and plain git repositories.

Given a repository URL, repodriver determines who owns it, resolves its
default branch, lists tags and branches, and reads the dependency manifest
(``composer.json`` by default) at any reference. The GitHub REST API is
preferred; when it refuses access the driver falls back to git over SSH.

Quick Start:
    from repodriver import ConsoleIO, DriverContext, create_driver, load_config

    context = DriverContext.from_config(load_config(), ConsoleIO())
    driver = create_driver("https://github.com/owner/repo", context)

    driver.get_root_identifier()        # "main"
    driver.get_tags()                   # {"v1.0.0": "<sha>", ...}
    driver.get_manifest("v1.0.0")       # parsed manifest or None
    driver.get_dist("v1.0.0").to_dict() # {"type": "zip", ...}

Drivers:
    GitHubDriver - GitHub API, cached by commit sha, falls back to GitDriver
    GitDriver    - bare mirror clone driven by the git command line
"""

__version__ = "0.1.0"

from .config import load_config
from .drivers import (
    DistDescriptor,
    DriverContext,
    GitDriver,
    GitHubDriver,
    SourceDescriptor,
    VcsDriver,
    create_driver,
)
from .exit_codes import (
    DriverError,
    GitOperationError,
    MalformedManifestError,
    ResolutionExhaustedError,
    TransportError,
    UnsupportedUrlError,
)
from .io import BufferIO, ConsoleIO, CredentialStore, NullIO

__all__ = [
    'BufferIO',
    'ConsoleIO',
    'CredentialStore',
    'DistDescriptor',
    'DriverContext',
    'DriverError',
    'GitDriver',
    'GitHubDriver',
    'GitOperationError',
    'MalformedManifestError',
    'NullIO',
    'ResolutionExhaustedError',
    'SourceDescriptor',
    'TransportError',
    'UnsupportedUrlError',
    'VcsDriver',
    'create_driver',
    'load_config',
]
