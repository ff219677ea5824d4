"""
CLI Error Reporting
===================

Maps the exceptions a command can meet onto one stderr line and an exit
code, so every ``lmc`` command fails the same way.

    Exception                         Exit  Message
    --------------------------------  ----  ------------------------------------
    AssemblerError                    1     ``file:line:col: error: ...`` as is
    TestFileError                     1     ``Test file error: line N: ...``
    StateError                        1     ``State error: ...``
    other LMCError                    1     ``<stage> error: ...``
    click.ClickException              2     ``Usage error: ...``
    OSError with a filename           2     ``Cannot open <file>: <reason>``
    anything else                     3     ``Internal error: ...``
"""

import sys
import traceback
from enum import IntEnum
from typing import NoReturn

import click

from lmc_sdk.errors import AssemblerError, LMCError, StateError, TestFileError


class ExitCode(IntEnum):
    """Exit codes shared by the ``lmc`` commands."""
    SUCCESS = 0
    FAILURE = 1     # source, state or test file rejected, or a test failed
    USAGE = 2       # bad arguments or unreadable files
    INTERNAL = 3


def describe_error(error: Exception, stage: str | None = None) -> tuple[str, ExitCode]:
    """
    Pick the message and exit code for an exception.

    Args:
        error: The exception a command caught
        stage: What the command was doing (e.g. "Assembly"), used as the
            prefix for library errors without a more specific form

    Returns:
        (message, exit code)
    """
    if isinstance(error, AssemblerError):
        return str(error), ExitCode.FAILURE
    if isinstance(error, TestFileError):
        return f"Test file error: {error}", ExitCode.FAILURE
    if isinstance(error, StateError):
        return f"State error: {error}", ExitCode.FAILURE
    if isinstance(error, LMCError):
        return f"{stage or 'LMC'} error: {error}", ExitCode.FAILURE

    if isinstance(error, click.ClickException):
        return f"Usage error: {error.format_message()}", ExitCode.USAGE
    if isinstance(error, OSError) and error.filename is not None:
        reason = error.strerror or str(error)
        return f"Cannot open {error.filename}: {reason}", ExitCode.USAGE

    return f"Internal error: {type(error).__name__}: {error}", ExitCode.INTERNAL


def handle_cli_exception(
    error: Exception,
    verbose: bool = False,
    stage: str | None = None,
) -> NoReturn:
    """
    Report ``error`` on stderr and exit.

    With ``verbose`` an internal error also prints its traceback.

    Raises:
        SystemExit: Always
    """
    message, code = describe_error(error, stage)
    click.echo(message, err=True)
    if code is ExitCode.INTERNAL and verbose:
        traceback.print_exc()
    sys.exit(code)
