# utils.py

import os
import logging
import subprocess
import threading
from contextlib import contextmanager
from datetime import datetime, tzinfo
from typing import Dict, List, Optional

from models.deploy_step import StepResult

logger = logging.getLogger(__name__)

_directory_locks: Dict[str, threading.Lock] = {}
_directory_locks_guard = threading.Lock()


def run_command(command: List[str], cwd: str, timeout: Optional[float] = None) -> StepResult:
    """
    Run a command in cwd and capture stdout and stderr as one text blob.

    A non-zero exit status is reported through the result, never raised.
    The output is empty only when the process could not be started.
    """
    logger.debug(f"Executing command: {' '.join(command)} in {cwd}")
    try:
        result = subprocess.run(
            command,
            cwd=cwd,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            errors="replace",
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as e:
        output = e.output or ""
        if isinstance(output, bytes):
            output = output.decode("utf-8", errors="replace")
        logger.error(f"Command timed out after {timeout} seconds: {' '.join(command)}")
        output = f"{output}\nCommand timed out after {timeout} seconds.".lstrip("\n")
        return StepResult(command=command, output=output, returncode=None)
    except OSError as e:
        logger.error(f"Could not start command {' '.join(command)}: {e}")
        return StepResult(command=command, output="", returncode=None)

    output = result.stdout.strip()
    if result.returncode != 0:
        logger.warning(f"Command exited with status {result.returncode}: {' '.join(command)}")
    else:
        logger.debug(f"Command executed successfully: {' '.join(command)}")
    return StepResult(command=command, output=output, returncode=result.returncode)


def format_timestamp(moment: datetime, date_format: str) -> str:
    """strftime that also understands %:z (UTC offset as +HH:MM)."""
    if "%:z" in date_format:
        offset = moment.strftime("%z")
        if offset:
            offset = f"{offset[:3]}:{offset[3:5]}"
        date_format = date_format.replace("%:z", offset)
    return moment.strftime(date_format)


def to_display_time(moment: datetime, tz: tzinfo) -> datetime:
    # naive timestamps are taken to be in the display zone already
    if moment.tzinfo is None:
        return moment.replace(tzinfo=tz)
    return moment.astimezone(tz)


@contextmanager
def directory_lock(directory: str, on_wait=None):
    """
    Serialize deployments that target the same working directory.

    on_wait is called once if another deployment currently holds the lock.
    """
    key = os.path.realpath(directory)
    with _directory_locks_guard:
        lock = _directory_locks.setdefault(key, threading.Lock())

    if not lock.acquire(blocking=False):
        if on_wait is not None:
            on_wait()
        lock.acquire()
    try:
        yield
    finally:
        lock.release()
