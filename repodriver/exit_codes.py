"""
Standard exit codes and error types for repodriver.

Following Unix/POSIX conventions for command-line tools. Every error the
drivers raise carries the exit code the CLI should terminate with.
"""
from typing import Optional

# Standard POSIX exit codes
SUCCESS = 0              # Successful termination
GENERAL_ERROR = 1        # General errors
USAGE_ERROR = 2          # Misuse of shell command (wrong arguments, etc.)

# Application-specific exit codes (64-113 are typically available)
CONFIG_ERROR = 66        # Configuration file error
NETWORK_ERROR = 68       # Network connection failed
AUTH_ERROR = 69          # Authentication/authorization failed
DATA_ERROR = 70          # Data format or validation error
INTERRUPTED = 130        # Terminated by Ctrl+C (SIGINT)

# Exit code mappings for common exceptions
EXCEPTION_EXIT_CODES = {
    'FileNotFoundError': GENERAL_ERROR,
    'ConnectionError': NETWORK_ERROR,
    'TimeoutError': NETWORK_ERROR,
    'ValueError': DATA_ERROR,
    'KeyError': DATA_ERROR,
    'JSONDecodeError': DATA_ERROR,
    'KeyboardInterrupt': INTERRUPTED,
}


def get_exit_code_for_exception(exc: Exception) -> int:
    """
    Get the appropriate exit code for an exception.

    Args:
        exc: The exception that occurred

    Returns:
        Appropriate exit code
    """
    exit_code = getattr(exc, 'exit_code', None)
    if isinstance(exit_code, int):
        return exit_code
    return EXCEPTION_EXIT_CODES.get(exc.__class__.__name__, GENERAL_ERROR)


class CommandError(Exception):
    """
    Exception that commands can raise to indicate specific exit codes.
    """
    def __init__(self, message: str, exit_code: int = GENERAL_ERROR):
        super().__init__(message)
        self.exit_code = exit_code


class ConfigError(CommandError):
    """Raised when there's a configuration error."""
    def __init__(self, message: str):
        super().__init__(message, CONFIG_ERROR)


class DriverError(CommandError):
    """Base class for failures inside a VCS driver."""


class TransportError(DriverError):
    """
    Raised when a remote fetch fails.

    ``status`` is the HTTP status code, or 0 when no response was received
    (connection refused, timeout, ...).
    """
    def __init__(self, message: str, status: int = 0, url: Optional[str] = None):
        exit_code = AUTH_ERROR if status in (401, 403) else NETWORK_ERROR
        super().__init__(message, exit_code)
        self.status = status
        self.url = url


class ResolutionExhaustedError(DriverError):
    """Raised when the default branch could not be resolved after all retries."""
    def __init__(self, message: str):
        super().__init__(message, AUTH_ERROR)


class MalformedManifestError(DriverError):
    """Raised when a fetched manifest is not valid JSON."""
    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message, DATA_ERROR)
        self.url = url


class GitOperationError(DriverError):
    """Raised when a git command fails."""
    def __init__(self, message: str, command: Optional[str] = None):
        super().__init__(message, GENERAL_ERROR)
        self.command = command


class UnsupportedUrlError(DriverError):
    """Raised when no driver is able to handle a repository URL."""
    def __init__(self, url: str):
        super().__init__(f"No driver found to handle VCS repository {url}", USAGE_ERROR)
        self.url = url
