"""Write secrets to the GitHub Actions environment file.

Values are written with the heredoc-style file command::

    NAME<<ghadelimiter_<uuid4>
    value, possibly spanning lines
    ghadelimiter_<uuid4>

The runner reads everything between the two delimiter lines as the value,
so values are written verbatim. Each value is masked on stdout before it is
written.
"""
import logging
import os
import sys
import uuid
from typing import Dict, Optional, TextIO

logger = logging.getLogger(__name__)

DELIMITER_PREFIX = "ghadelimiter_"


def escape_command_data(value: str) -> str:
    """Escape workflow command data the way the Actions runner unescapes it."""
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def mask_value(value: str, stream: Optional[TextIO] = None) -> None:
    """
    Mask a value in the GitHub Actions logs.

    Workflow commands are line based, so a multi-line value is registered
    one line at a time; otherwise every line after the first would print
    unmasked.
    """
    stream = sys.stdout if stream is None else stream
    # the runner ignores blank masks
    parts = [line for line in value.splitlines() if line.strip()]
    for part in parts:
        stream.write(f"::add-mask::{escape_command_data(part)}\n")
    stream.flush()


def new_delimiter(key: str, value: str) -> str:
    """Generate a delimiter that does not occur in the key or the value."""
    while True:
        delimiter = f"{DELIMITER_PREFIX}{uuid.uuid4()}"
        if delimiter not in key and delimiter not in value:
            return delimiter


def format_file_command(key: str, value: str, delimiter: str) -> str:
    """Render one ``NAME<<DELIMITER`` frame; the value is written verbatim."""
    return f"{key}<<{delimiter}\n{value}\n{delimiter}\n"


class EnvFile:
    """
    Append-only handle on the environment propagation file.

    The caller owns the handle; use EnvFile.open() as a context manager.
    Without a usable path, writes go to os.devnull so that a run outside
    GitHub Actions still succeeds.
    """

    def __init__(self, handle: TextIO, path: Optional[str] = None):
        self._handle = handle
        self.path = path

    @classmethod
    def open(cls, path: Optional[str]) -> "EnvFile":
        """
        Open the environment file for appending, creating it if absent.

        Args:
            path: Value of GITHUB_ENV, or None

        Returns:
            EnvFile writing to path, or to a no-op sink if path is unset or
            cannot be opened
        """
        if path:
            try:
                handle = open(path, "a", encoding="utf-8")
                logger.debug(f"Writing to GITHUB_ENV: {path}")
                return cls(handle, path)
            except OSError as e:
                logger.warning(f"Cannot open GITHUB_ENV file {path}, secrets will not be persisted: {e}")
        else:
            logger.debug("GITHUB_ENV is not set, secrets will not be persisted")
        return cls(open(os.devnull, "a", encoding="utf-8"), None)

    @property
    def is_null(self) -> bool:
        return self.path is None

    def append(self, key: str, value: str) -> None:
        """
        Append one framed entry and make it durable before returning.

        The whole frame goes out in a single write so entries never interleave.
        """
        delimiter = new_delimiter(key, value)
        self._handle.write(format_file_command(key, value, delimiter))
        self._handle.flush()
        if not self.is_null:
            os.fsync(self._handle.fileno())

    def close(self) -> None:
        self._handle.close()

    def __enter__(self) -> "EnvFile":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def set_secret(env_file: EnvFile, secret_name: str, secret_value: str, stream: Optional[TextIO] = None) -> None:
    """Mask a secret, then persist it to the environment file."""
    mask_value(secret_value, stream)
    env_file.append(secret_name, secret_value)
    logger.debug(f"Successfully wrote '{secret_name}' to GITHUB_ENV")


def set_secrets(secret_envs: Dict[str, str], env_file: EnvFile, stream: Optional[TextIO] = None) -> None:
    """
    Persist every secret for later steps in the job.

    Args:
        secret_envs: Desired name to value
        env_file: Open environment file
        stream: Where progress lines and mask commands go (defaults to stdout)
    """
    stream = sys.stdout if stream is None else stream
    for name, value in secret_envs.items():
        stream.write(f"Setting secret: {name}\n")
        set_secret(env_file, name, value, stream)
