"""
Remote content fetching for repodriver.

Provides a clean abstraction over authenticated HTTP GET:
- Uses a shared requests.Session
- Attaches basic auth from the credential store for the origin host
- Falls back to a configured GitHub token
- Converts every failure into a TransportError carrying the status code
"""

import logging
from typing import Optional
from urllib.parse import urlparse

import requests

from ..exit_codes import TransportError
from ..io import CredentialStore

logger = logging.getLogger(__name__)

GITHUB_HOSTS = ('github.com', 'api.github.com', 'raw.githubusercontent.com')


class RemoteFilesystem:
    """
    HTTP content fetcher.

    Example:
        fetcher = RemoteFilesystem(credentials=store, token="ghp_...")
        data = fetcher.get_contents("https://api.github.com/repos/o/r", "github.com")
    """

    def __init__(
        self,
        credentials: Optional[CredentialStore] = None,
        token: Optional[str] = None,
        timeout: int = 30,
        user_agent: str = 'repodriver'
    ):
        """
        Initialize RemoteFilesystem.

        Args:
            credentials: Store consulted for per-host basic auth
            token: GitHub token, used when no credential is stored
            timeout: HTTP request timeout in seconds
            user_agent: User-Agent header value
        """
        self.credentials = credentials if credentials is not None else CredentialStore()
        self.token = token or None
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update({
            'User-Agent': user_agent,
        })

    @classmethod
    def from_config(cls, config, credentials: CredentialStore) -> 'RemoteFilesystem':
        http = config.get('http', {})
        return cls(
            credentials=credentials,
            token=config.get('github', {}).get('token'),
            timeout=http.get('timeout_seconds', 30),
            user_agent=http.get('user_agent', 'repodriver'),
        )

    def _request_options(self, url: str, origin_host: str) -> dict:
        headers = {}
        auth = None

        credential = self.credentials.get(origin_host)
        if credential is not None:
            auth = (credential.username, credential.password)
        elif self.token and urlparse(url).hostname in GITHUB_HOSTS:
            headers['Authorization'] = f'token {self.token}'

        if urlparse(url).hostname == 'api.github.com':
            headers['Accept'] = 'application/vnd.github.v3+json'

        return {'headers': headers, 'auth': auth, 'timeout': self.timeout}

    def get_contents(self, url: str, origin_host: Optional[str] = None) -> bytes:
        """
        Fetch a URL.

        Args:
            url: Resource to fetch
            origin_host: Host credentials are scoped to (defaults to the URL's host)

        Returns:
            Response body

        Raises:
            TransportError: on any non-2xx response or network failure
        """
        origin_host = origin_host or urlparse(url).hostname or ''
        logger.debug(f"Fetching {url}")

        try:
            response = self.session.get(url, **self._request_options(url, origin_host))
        except requests.RequestException as e:
            raise TransportError(f"Failed to fetch {url}: {e}", status=0, url=url) from e

        if not 200 <= response.status_code < 300:
            raise TransportError(
                f"The \"{url}\" file could not be downloaded (HTTP {response.status_code})",
                status=response.status_code,
                url=url
            )

        return response.content
