"""Run a shell command with secrets in its environment.

Run mode and env file mode are exclusive: when a run command is set the
secrets live only in the child's environment and nothing is written to
GITHUB_ENV. By default no mask commands are emitted in this mode either, so
anything the child prints is not redacted; pass mask=True (the
mask_run_secrets input) to mask every value before the child starts.
"""
import logging
import os
import subprocess
import sys
from typing import Dict, List, Optional, TextIO

from ..domains.errors import CommandFailed, SpawnFailed
from .env_file import mask_value

logger = logging.getLogger(__name__)


def get_shell() -> List[str]:
    """Shell and flag that take the command as a single argument."""
    if sys.platform == "win32":
        return ["powershell", "-Command"]
    # should be safe for any POSIX OS
    return ["/bin/sh", "-c"]


def execute_run_command(
    run_cmd: str,
    secret_envs: Dict[str, str],
    mask: bool = False,
    stream: Optional[TextIO] = None,
) -> None:
    """
    Execute a run command with the provided secrets as environment variables.

    Args:
        run_cmd: Command text, passed to the shell untokenized
        secret_envs: Desired name to value, merged over the inherited environment
        mask: Emit mask commands for every value before spawning
        stream: Where mask commands go (defaults to stdout)

    Raises:
        CommandFailed: If the command exits with a non-zero status
        SpawnFailed: If the shell cannot be started
    """
    if not run_cmd.strip():
        logger.debug("Run command is empty, nothing to execute")
        return

    if mask:
        for value in secret_envs.values():
            mask_value(value, stream)

    env = dict(os.environ)
    env.update(secret_envs)

    try:
        result = subprocess.run(get_shell() + [run_cmd], env=env, check=False)
    except (OSError, ValueError) as e:
        # ValueError: the environment was rejected before any process started
        raise SpawnFailed(e) from e

    if result.returncode != 0:
        raise CommandFailed(result.returncode)

    logger.debug("Commands executed successfully.")
