"""Host command execution."""

import logging
import shlex
import subprocess
from dataclasses import dataclass
from typing import Callable, List, Optional


logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    """Result from running a command."""
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


# Signature shared by run_command and the fakes used in tests.
CommandRunner = Callable[..., CommandResult]

# Same code as coreutils timeout(1).
TIMEOUT_RETURNCODE = 124


def _called_process_error(shown: List[str], result: CommandResult) -> subprocess.CalledProcessError:
    error = subprocess.CalledProcessError(result.returncode, shown)
    error.stdout = result.stdout
    error.stderr = result.stderr
    return error


def run_command(
    cmd: List[str],
    check: bool = True,
    capture_output: bool = True,
    timeout: Optional[int] = None,
    input: Optional[str] = None,
    redact: Optional[List[str]] = None,
) -> CommandResult:
    """Run a command and wait for it.

    With ``capture_output=False`` the child writes straight to the
    terminal and the result carries empty stdout/stderr. A timeout is
    reported like a failed command with returncode 124.
    """
    shown = cmd
    if redact:
        shown = ["***" if part in redact else part for part in cmd]
    logger.debug(f"Running command: {shlex.join(shown)}")

    try:
        process = subprocess.run(
            cmd,
            stdout=subprocess.PIPE if capture_output else None,
            stderr=subprocess.PIPE if capture_output else None,
            input=input,
            text=True,
            timeout=timeout,
        )
    except FileNotFoundError:
        result = CommandResult(returncode=127, stderr=f"{cmd[0]}: command not found")
        if check:
            raise _called_process_error(shown, result)
        return result
    except subprocess.TimeoutExpired:
        logger.error(f"Command timed out after {timeout}s: {shlex.join(shown)}")
        result = CommandResult(
            returncode=TIMEOUT_RETURNCODE,
            stderr=f"{cmd[0]}: timed out after {timeout} seconds",
        )
        if check:
            raise _called_process_error(shown, result)
        return result

    result = CommandResult(
        returncode=process.returncode,
        stdout=process.stdout or "",
        stderr=process.stderr or "",
    )

    if check and process.returncode != 0:
        raise _called_process_error(shown, result)

    return result
