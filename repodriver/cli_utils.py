"""
Common CLI utilities and decorators for consistent command behavior.
"""

import json
import sys
import click
from functools import wraps
from typing import Any, Generator

from .config import logger
from .exit_codes import (
    SUCCESS, INTERRUPTED,
    get_exit_code_for_exception, CommandError
)


def standard_command(func):
    """
    Decorator that provides standard CLI behavior:
    - Clean JSON output on stdout (one object per line)
    - Errors reported on stderr and as a JSON object on stdout
    - Exit codes taken from the raised CommandError

    The wrapped function returns a dict, a list of dicts, or None when it
    rendered its own output.
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            result = func(*args, **kwargs)
            output_result(result)
            sys.exit(SUCCESS)

        except KeyboardInterrupt:
            click.echo("Interrupted by user", err=True)
            sys.exit(INTERRUPTED)
        except click.ClickException:
            raise
        except CommandError as e:
            click.echo(f"Error: {e}", err=True)
            print(json.dumps({
                "error": str(e),
                "type": type(e).__name__,
                "exit_code": e.exit_code
            }, ensure_ascii=False), flush=True)
            sys.exit(e.exit_code)
        except Exception as e:
            logger.debug("Command failed", exc_info=True)
            click.echo(f"Command failed: {e}", err=True)
            print(json.dumps({
                "error": str(e),
                "type": type(e).__name__
            }, ensure_ascii=False), flush=True)
            sys.exit(get_exit_code_for_exception(e))

    return wrapper


def output_result(result: Any):
    """
    Standard output handler for results.

    Args:
        result: The result to output (dict, list, or generator)
    """
    if result is None:
        return
    if isinstance(result, (Generator, list, tuple)):
        for item in result:
            print(json.dumps(item, ensure_ascii=False), flush=True)
    elif isinstance(result, dict):
        print(json.dumps(result, ensure_ascii=False), flush=True)
    else:
        print(result, flush=True)


# Standard options that many commands share
common_options = {
    'verbose': click.option('-v', '--verbose', is_flag=True,
                           help='Show diagnostics and debug logging'),
    'no_interaction': click.option('-n', '--no-interaction', is_flag=True,
                                  help='Never prompt for credentials'),
    'pretty': click.option('--pretty', is_flag=True,
                          help='Render a table instead of JSONL'),
}


def add_common_options(*option_names):
    """
    Decorator to add common options to a command.

    Example:
        @add_common_options('verbose', 'pretty')
        def my_command(verbose, pretty):
            ...
    """
    def decorator(func):
        for name in reversed(option_names):
            if name in common_options:
                func = common_options[name](func)
        return func
    return decorator
