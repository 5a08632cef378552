"""Subprocess helpers for querying installed client tools."""

import logging
import shutil
import subprocess

from sx.core.cancellation import CancelToken
from sx.core.errors import OperationCancelledError

logger = logging.getLogger(__name__)

_POLL_INTERVAL_SECONDS = 0.1


def query_version(
    argv: list[str], cancel: CancelToken, timeout: float | None = None
) -> str | None:
    """Run `argv` (e.g. `["claude", "--version"]`) and return its trimmed stdout.

    No timeout applies unless the caller passes one. Cancellation kills the
    process.

    Returns:
        The first line of output, or None if the tool is missing, fails,
        times out or prints nothing

    Raises:
        OperationCancelledError: If `cancel` fires while the process runs
    """
    if shutil.which(argv[0]) is None:
        logger.debug("%s not found on PATH", argv[0])
        return None

    process = subprocess.Popen(
        argv,
        stdout=subprocess.PIPE,
        stderr=subprocess.DEVNULL,
        text=True,
    )
    waited = 0.0
    while True:
        try:
            stdout, _ = process.communicate(timeout=_POLL_INTERVAL_SECONDS)
            break
        except subprocess.TimeoutExpired:
            waited += _POLL_INTERVAL_SECONDS
            if cancel.is_cancelled:
                process.kill()
                process.wait()
                raise OperationCancelledError(f"cancelled while running {argv[0]}") from None
            if timeout is not None and waited >= timeout:
                process.kill()
                process.wait()
                logger.debug("%s timed out after %.1fs", argv[0], timeout)
                return None

    if process.returncode != 0:
        logger.debug("%s exited with %d", argv[0], process.returncode)
        return None
    lines = stdout.strip().splitlines()
    if not lines:
        return None
    return lines[0].strip()
