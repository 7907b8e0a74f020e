"""Error kinds raised while injecting secrets.

Every error except a duplicate identifier (which is only a warning) aborts
the run. The CLI prints ``str(error)`` once on stderr, prefixed with
``Error: ``; the message leads with a one-line summary and may continue
with the vault's detail or guidance on following lines.
"""


class SmActionError(Exception):
    """Base class for all fatal sm-action errors."""
    pass


class MalformedIdentifier(SmActionError):
    """A secrets input line did not start with a valid UUID."""

    def __init__(self, identifier: str):
        self.identifier = identifier
        super().__init__(
            f"Invalid UUID format: {identifier}\n"
            f"Ensure each secrets line has the format 'UUID > Name'."
        )


class AuthenticationFailed(SmActionError):
    """The vault rejected the access token."""

    def __init__(self, detail: str, provider: str = "Bitwarden"):
        self.detail = detail
        super().__init__(f"Authentication with {provider} failed.\nError: {detail}")


class ResolutionFailed(SmActionError):
    """The vault could not return the requested identifiers."""

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(
            "The secrets provided could not be found. "
            "Please check the machine account has access to the secret UUIDs provided.\n"
            f"Error: {detail}"
        )


class CommandFailed(SmActionError):
    """The run command started but exited with a non-zero status."""

    def __init__(self, returncode: int):
        self.returncode = returncode
        super().__init__(f"Commands exited with non-zero status: {returncode}")


class SpawnFailed(SmActionError):
    """The run command could not be started at all."""

    def __init__(self, cause: BaseException):
        self.cause = cause
        super().__init__(f"Failed to execute commands: {cause}")
