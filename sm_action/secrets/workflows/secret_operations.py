"""Workflow that resolves secrets and hands them to the job."""
import logging
import sys
from typing import Dict, Optional, TextIO

from ..domains.config_loader import Config
from ..domains.gateway import VaultGateway
from ..domains.identifiers import parse_secret_input
from ..domains.projection import prepare_secret_env_vars
from .env_file import EnvFile, set_secrets
from .run_command import execute_run_command

logger = logging.getLogger(__name__)


def resolve_secrets(config: Config, gateway: VaultGateway, out: Optional[TextIO] = None) -> Dict[str, str]:
    """
    Parse the secrets input and fetch the values from the vault.

    Args:
        config: Run configuration
        gateway: Vault gateway to authenticate and resolve against
        out: Progress output (defaults to stdout)

    Returns:
        Desired name to secret value

    Raises:
        MalformedIdentifier: Before any network call, if an input line is invalid
        AuthenticationFailed: If the vault rejects the access token
        ResolutionFailed: If the vault cannot return the requested secrets
    """
    out = sys.stdout if out is None else out

    print("Parsing secrets input...", file=out)
    id_to_name_map = parse_secret_input(config.secrets)

    print(f"Authenticating with {gateway.display_name}...", file=out)
    session = gateway.authenticate(config.access_token)

    secrets_data = gateway.resolve(session, set(id_to_name_map))
    logger.debug(f"Resolved {len(secrets_data)} of {len(id_to_name_map)} requested secrets")

    return prepare_secret_env_vars(secrets_data, id_to_name_map)


def inject_secrets(config: Config, gateway: VaultGateway, out: Optional[TextIO] = None) -> None:
    """
    Expose secrets to the job, either through GITHUB_ENV or a run command.

    Behavior:
        - Without a run command, each secret is masked and then appended to
          the GITHUB_ENV file (a no-op sink when GITHUB_ENV is unset)
        - With a run command, the command gets the secrets in its environment
          and GITHUB_ENV is left untouched
        - Steps run strictly in order; the first error stops the run
    """
    out = sys.stdout if out is None else out
    secret_envs = resolve_secrets(config, gateway, out)

    if config.run is not None:
        out.flush()
        execute_run_command(config.run, secret_envs, mask=config.mask_run_secrets, stream=out)
        return

    with EnvFile.open(config.env_file) as env_file:
        set_secrets(secret_envs, env_file, out)
