"""
Git client infrastructure for repodriver.

Provides a clean abstraction over git command execution.
All git operations go through this client, making them:
- Easy to mock for testing
- Consistent in error handling
- Isolated from driver logic
"""

import subprocess
from pathlib import Path
from typing import Dict, List, Optional, Tuple
import logging

from ..exit_codes import GitOperationError

logger = logging.getLogger(__name__)


class GitClient:
    """
    Abstraction over git commands.

    Example:
        client = GitClient()
        client.clone_mirror("git@github.com:o/r.git", "/tmp/mirror")
        tags = client.tags("/tmp/mirror")
    """

    def __init__(self, timeout: int = 300):
        """
        Initialize GitClient.

        Args:
            timeout: Command timeout in seconds (default: 300)
        """
        self.timeout = timeout

    @classmethod
    def from_config(cls, config) -> 'GitClient':
        return cls(timeout=config.get('git', {}).get('timeout_seconds', 300))

    def run(
        self,
        args: List[str],
        cwd: Optional[str] = None,
    ) -> Tuple[Optional[str], int]:
        """
        Run a git command.

        Args:
            args: Arguments passed to git
            cwd: Working directory

        Returns:
            Tuple of (stdout, returncode); returncode is -1 when git could not run
        """
        cmd = ['git'] + list(args)
        logger.debug(f"Running {' '.join(cmd)}")
        try:
            result = subprocess.run(
                cmd,
                cwd=cwd,
                capture_output=True,
                text=True,
                timeout=self.timeout
            )
        except subprocess.TimeoutExpired:
            logger.warning(f"Git command timed out: {' '.join(cmd)}")
            return None, -1
        except OSError as e:
            logger.error(f"Git command failed: {' '.join(cmd)} - {e}")
            return None, -1

        if result.returncode != 0 and result.stderr:
            logger.debug(result.stderr.strip())
        return result.stdout, result.returncode

    def check(self, args: List[str], cwd: Optional[str] = None) -> str:
        """Run a git command, raising GitOperationError on failure."""
        output, code = self.run(args, cwd=cwd)
        if code != 0:
            command = 'git ' + ' '.join(args)
            raise GitOperationError(f"Failed to execute {command}", command=command)
        return output or ''

    def is_git_repo(self, path: str) -> bool:
        """Check if path is a git repository (bare or with a work tree)."""
        p = Path(path)
        if (p / '.git').exists():
            return True
        return (p / 'HEAD').is_file() and (p / 'refs').is_dir()

    def clone_mirror(self, url: str, path: str) -> None:
        self.check(['clone', '--mirror', url, path])

    def update_mirror(self, path: str) -> None:
        self.check(['remote', 'update', '--prune', 'origin'], cwd=path)

    def ls_remote_heads(self, url: str) -> bool:
        """True when the remote answers ``git ls-remote --heads``."""
        _, code = self.run(['ls-remote', '--heads', url])
        return code == 0

    def head_branch(self, path: str) -> Optional[str]:
        """Branch marked as current in ``git branch --no-color``."""
        output, code = self.run(['branch', '--no-color'], cwd=path)
        if code != 0 or not output:
            return None
        for line in output.splitlines():
            if line.startswith('* '):
                return line[2:].strip()
        return None

    def tags(self, path: str) -> Dict[str, str]:
        """
        Map tag names to the commit they point at.

        Annotated tags are peeled to their commit.
        """
        output, code = self.run(['show-ref', '--tags', '--dereference'], cwd=path)
        if code != 0 or not output:
            return {}

        tags: Dict[str, str] = {}
        peeled = set()
        for line in output.splitlines():
            parts = line.strip().split(' ', 1)
            if len(parts) != 2 or not parts[1].startswith('refs/tags/'):
                continue
            sha, ref = parts
            name = ref[len('refs/tags/'):]
            if name.endswith('^{}'):
                name = name[:-3]
                tags[name] = sha
                peeled.add(name)
            elif name not in peeled:
                tags[name] = sha
        return tags

    def branches(self, path: str) -> Dict[str, str]:
        """Map local branch names to their head commit."""
        output, code = self.run(
            ['for-each-ref', '--format=%(refname:short) %(objectname)', 'refs/heads'],
            cwd=path
        )
        if code != 0 or not output:
            return {}

        branches: Dict[str, str] = {}
        for line in output.splitlines():
            parts = line.strip().rsplit(' ', 1)
            if len(parts) == 2:
                branches[parts[0]] = parts[1]
        return branches

    def show_file(self, path: str, ref: str, filename: str) -> Optional[str]:
        """Content of filename at ref, or None if it does not exist there."""
        output, code = self.run(['show', f'{ref}:{filename}'], cwd=path)
        if code != 0:
            return None
        return output

    def commit_date(self, path: str, ref: str) -> Optional[str]:
        """ISO 8601 date of the commit ref points at."""
        output, code = self.run(['log', '-1', '--format=%aI', ref], cwd=path)
        if code != 0 or not output:
            return None
        return output.strip()
