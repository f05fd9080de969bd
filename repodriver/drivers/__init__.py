"""
VCS drivers for repodriver.

Drivers are tried in priority order; the first whose ``supports`` accepts
the URL is instantiated and initialized.

Example:
    context = DriverContext.from_config(load_config(), ConsoleIO())
    driver = create_driver("https://github.com/owner/repo", context)
    print(driver.get_root_identifier(), driver.get_tags())
"""

from typing import List, Optional, Type

from ..exit_codes import UnsupportedUrlError
from .base import (
    DistDescriptor,
    DriverContext,
    RepositoryIdentity,
    SourceDescriptor,
    VcsDriver,
)
from .git import GitDriver
from .github import GitHubDriver

DRIVERS: List[Type[VcsDriver]] = [GitHubDriver, GitDriver]


def find_driver_class(url: str, context: DriverContext, deep: bool = False) -> Optional[Type[VcsDriver]]:
    """First driver class that supports url, or None."""
    for driver_class in DRIVERS:
        if driver_class.supports(context.io, url, deep):
            return driver_class
    return None


def create_driver(url: str, context: DriverContext) -> VcsDriver:
    """
    Instantiate and initialize the driver for url.

    A cheap pattern match is tried first; drivers that need to contact the
    remote to decide are only consulted when nothing matched.

    Raises:
        UnsupportedUrlError: if no driver handles url
    """
    driver_class = find_driver_class(url, context) or find_driver_class(url, context, deep=True)
    if driver_class is None:
        raise UnsupportedUrlError(url)

    driver = driver_class(url, context)
    driver.initialize()
    return driver


__all__ = [
    'DRIVERS',
    'DistDescriptor',
    'DriverContext',
    'GitDriver',
    'GitHubDriver',
    'RepositoryIdentity',
    'SourceDescriptor',
    'VcsDriver',
    'create_driver',
    'find_driver_class',
]
