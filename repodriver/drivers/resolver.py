"""
Default-branch resolution for hosted repositories.

Resolution is a bounded retry loop. Every attempt yields a tagged
AttemptOutcome instead of raising, so the loop decides what to do next from
data alone:

    SUCCESS                  -> RESOLVED
    AMBIGUOUS_AUTHORIZATION  -> try the fallback driver (DELEGATED), or ask
                                for credentials and try again
    FATAL                    -> FAILED, the carried error is raised

An HTTP 401 and an HTTP 404 both mean "ambiguous": the hosting API answers
404 for private repositories the caller cannot see, so a missing repository
and a private one look the same until a fallback or a retry succeeds.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from ..exit_codes import DriverError, ResolutionExhaustedError, TransportError
from ..io import CredentialNegotiator, IOInterface

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 5
AMBIGUOUS_STATUSES = (401, 404)
DEFAULT_ROOT_IDENTIFIER = 'master'


class ResolutionState(Enum):
    UNRESOLVED = 'unresolved'
    RESOLVING = 'resolving'
    RESOLVED = 'resolved'
    DELEGATED = 'delegated'
    FAILED = 'failed'


class OutcomeKind(Enum):
    SUCCESS = 'success'
    AMBIGUOUS_AUTHORIZATION = 'ambiguous_authorization'
    FATAL = 'fatal'


@dataclass
class AttemptOutcome:
    """Result of one metadata request."""
    kind: OutcomeKind
    data: Optional[Dict[str, Any]] = None
    error: Optional[Exception] = None

    @classmethod
    def success(cls, data: Dict[str, Any]) -> 'AttemptOutcome':
        return cls(OutcomeKind.SUCCESS, data=data)

    @classmethod
    def from_error(cls, error: Exception) -> 'AttemptOutcome':
        if isinstance(error, TransportError) and error.status in AMBIGUOUS_STATUSES:
            return cls(OutcomeKind.AMBIGUOUS_AUTHORIZATION, error=error)
        return cls(OutcomeKind.FATAL, error=error)


@dataclass
class Resolution:
    """Final state of a resolver run."""
    state: ResolutionState = ResolutionState.UNRESOLVED
    root_identifier: Optional[str] = None
    has_issues: bool = False
    is_private: bool = False
    fallback: Any = None
    attempts: int = 0
    outcomes: List[OutcomeKind] = field(default_factory=list)


def root_identifier_from_metadata(data: Dict[str, Any]) -> str:
    """Pick the default branch out of a repository metadata document."""
    if data.get('default_branch'):
        return data['default_branch']
    if data.get('master_branch'):
        return data['master_branch']
    return DEFAULT_ROOT_IDENTIFIER


class RootIdentifierResolver:
    """
    Runs the resolution state machine once.

    Args:
        fetch_metadata: Performs one metadata request and reports its outcome
        build_fallback: Constructs and initializes the fallback driver;
            raises DriverError when that is impossible
        negotiator: Collects credentials when the session is interactive
        io: Where user-facing messages go
        origin_host: Host the collected credentials are scoped to
        url: Repository URL shown in prompts
        fallback_url: URL the fallback driver clones, shown in errors
    """

    def __init__(
        self,
        fetch_metadata: Callable[[], AttemptOutcome],
        build_fallback: Callable[[], Any],
        negotiator: CredentialNegotiator,
        io: IOInterface,
        origin_host: str,
        url: str,
        fallback_url: str,
        max_attempts: int = MAX_ATTEMPTS,
    ):
        self.fetch_metadata = fetch_metadata
        self.build_fallback = build_fallback
        self.negotiator = negotiator
        self.io = io
        self.origin_host = origin_host
        self.url = url
        self.fallback_url = fallback_url
        self.max_attempts = max_attempts
        self.resolution = Resolution()

    def resolve(self) -> Resolution:
        """
        Resolve the default branch.

        Raises:
            ResolutionExhaustedError: if every attempt was ambiguous
            DriverError: a fatal transport error, or the fallback's error in a
                non-interactive session
        """
        resolution = self.resolution
        resolution.state = ResolutionState.RESOLVING

        while resolution.attempts < self.max_attempts:
            resolution.attempts += 1
            outcome = self.fetch_metadata()
            resolution.outcomes.append(outcome.kind)

            if outcome.kind is OutcomeKind.SUCCESS:
                resolution.root_identifier = root_identifier_from_metadata(outcome.data)
                resolution.has_issues = bool(outcome.data.get('has_issues'))
                resolution.state = ResolutionState.RESOLVED
                return resolution

            if outcome.kind is OutcomeKind.FATAL:
                resolution.state = ResolutionState.FAILED
                raise outcome.error

            resolution.is_private = True
            logger.debug(
                f"Metadata request for {self.url} answered {outcome.error.status}, "
                f"trying {self.fallback_url}"
            )

            try:
                resolution.fallback = self.build_fallback()
            except DriverError as e:
                resolution.fallback = None
                if not self.negotiator.can_negotiate():
                    self.io.write(
                        f"[red]Failed to clone the {self.fallback_url} repository, try running "
                        f"in interactive mode so that you can enter your username and password[/red]"
                    )
                    resolution.state = ResolutionState.FAILED
                    raise e
            else:
                logger.info(f"Using git access through {self.fallback_url} for {self.url}")
                resolution.state = ResolutionState.DELEGATED
                return resolution

            if resolution.attempts < self.max_attempts:
                self.negotiator.negotiate(self.origin_host, self.url)

        resolution.state = ResolutionState.FAILED
        raise ResolutionExhaustedError(
            "Either you have entered invalid credentials or this GitHub repository "
            f"does not exist (404): {self.url}"
        )
