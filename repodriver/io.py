"""
Console input/output and credential handling for repodriver.

Drivers never talk to the terminal directly. They receive an IOInterface
that can ask questions, write diagnostics to stderr, and say whether the
session is interactive. Credentials collected through it are kept in a
CredentialStore scoped by origin host for the rest of the process.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional
import logging

import click
from rich.console import Console

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Credential:
    """Username/password pair for one origin host."""
    username: str
    password: str


class CredentialStore:
    """
    In-memory credential store keyed by origin host.

    Example:
        store = CredentialStore.from_config(config)
        store.set("github.com", "octocat", "hunter2")
        store.get("github.com").username
    """

    def __init__(self, credentials: Optional[Dict[str, Credential]] = None):
        self._credentials: Dict[str, Credential] = dict(credentials or {})

    @classmethod
    def from_config(cls, config) -> 'CredentialStore':
        """Seed the store from the ``credentials`` config section."""
        store = cls()
        for host, entry in (config.get('credentials') or {}).items():
            if isinstance(entry, dict) and entry.get('username'):
                store.set(host, entry['username'], entry.get('password', ''))
        return store

    def get(self, origin_host: str) -> Optional[Credential]:
        return self._credentials.get(origin_host)

    def has(self, origin_host: str) -> bool:
        return origin_host in self._credentials

    def set(self, origin_host: str, username: str, password: str) -> None:
        logger.debug(f"Storing credentials for {origin_host}")
        self._credentials[origin_host] = Credential(username, password)


class IOInterface(ABC):
    """Interaction surface handed to drivers."""

    @abstractmethod
    def is_interactive(self) -> bool:
        ...

    @abstractmethod
    def is_verbose(self) -> bool:
        ...

    @abstractmethod
    def write(self, message: str) -> None:
        """Write a diagnostic line to stderr."""

    @abstractmethod
    def ask(self, prompt: str, default: Optional[str] = None) -> str:
        ...

    @abstractmethod
    def ask_hidden(self, prompt: str) -> str:
        """Ask without echoing the answer."""


class ConsoleIO(IOInterface):
    """Terminal IO: click prompts on stdin, rich output on stderr."""

    def __init__(self, interactive: bool = True, verbose: bool = False,
                 console: Optional[Console] = None):
        self.interactive = interactive
        self.verbose = verbose
        self.console = console or Console(stderr=True)

    def is_interactive(self) -> bool:
        return self.interactive

    def is_verbose(self) -> bool:
        return self.verbose

    def write(self, message: str) -> None:
        self.console.print(message, highlight=False)

    def ask(self, prompt: str, default: Optional[str] = None) -> str:
        return click.prompt(prompt.rstrip(': '), default=default, err=True)

    def ask_hidden(self, prompt: str) -> str:
        return click.prompt(prompt.rstrip(': '), hide_input=True, err=True)


class NullIO(IOInterface):
    """Non-interactive IO that discards output."""

    def is_interactive(self) -> bool:
        return False

    def is_verbose(self) -> bool:
        return False

    def write(self, message: str) -> None:
        pass

    def ask(self, prompt: str, default: Optional[str] = None) -> str:
        return default or ''

    def ask_hidden(self, prompt: str) -> str:
        return ''


class BufferIO(IOInterface):
    """
    Scripted IO: answers come from a list, output is captured.

    Useful for embedding the drivers in non-terminal programs and for tests.
    """

    def __init__(self, answers: Iterable[str] = (), interactive: bool = True,
                 verbose: bool = False):
        self.answers: List[str] = list(answers)
        self.interactive = interactive
        self.verbose = verbose
        self.output: List[str] = []
        self.prompts: List[str] = []

    def is_interactive(self) -> bool:
        return self.interactive

    def is_verbose(self) -> bool:
        return self.verbose

    def write(self, message: str) -> None:
        self.output.append(message)

    def _next_answer(self, prompt: str, default: Optional[str] = None) -> str:
        self.prompts.append(prompt)
        if self.answers:
            return self.answers.pop(0)
        return default or ''

    def ask(self, prompt: str, default: Optional[str] = None) -> str:
        return self._next_answer(prompt, default)

    def ask_hidden(self, prompt: str) -> str:
        return self._next_answer(prompt)


class CredentialNegotiator:
    """Prompts the user for credentials and records them in a store."""

    def __init__(self, io: IOInterface, credentials: CredentialStore):
        self.io = io
        self.credentials = credentials

    def can_negotiate(self) -> bool:
        return self.io.is_interactive()

    def negotiate(self, origin_host: str, url: str) -> bool:
        """
        Ask for a username and password for origin_host.

        Returns:
            False when the session is non-interactive, True once stored
        """
        if not self.can_negotiate():
            return False

        self.io.write(f"Authentication required ([cyan]{url}[/cyan]):")
        username = self.io.ask("Username: ")
        password = self.io.ask_hidden("Password: ")
        self.credentials.set(origin_host, username, password)
        return True
