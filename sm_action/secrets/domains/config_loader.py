"""Configuration loader for sm-action.

Configuration comes from GitHub Actions inputs, which the runner exposes as
``INPUT_<NAME>`` environment variables. For local runs the same keys can be
read from a YAML file passed with ``--config``; inputs override the file.
"""
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

import yaml

from .errors import SmActionError

logger = logging.getLogger(__name__)

INPUT_NAMES = (
    "access_token",
    "secrets",
    "run",
    "base_url",
    "api_url",
    "identity_url",
    "cloud_region",
    "provider",
    "gcp_project",
    "mask_run_secrets",
)

PROVIDERS = ("bitwarden", "gcp")

CLOUD_REGIONS = {
    "us": ("https://api.bitwarden.com", "https://identity.bitwarden.com"),
    "eu": ("https://api.bitwarden.eu", "https://identity.bitwarden.eu"),
}

_TRUE_VALUES = {"1", "true", "yes", "on"}


class ConfigError(SmActionError):
    """Configuration error exception."""
    pass


@dataclass
class Config:
    """Resolved configuration for one run."""
    access_token: str
    secrets: List[str] = field(default_factory=list)
    run: Optional[str] = None
    base_url: Optional[str] = None
    api_url: Optional[str] = None
    identity_url: Optional[str] = None
    cloud_region: str = "us"
    provider: str = "bitwarden"
    gcp_project: Optional[str] = None
    env_file: Optional[str] = None
    mask_run_secrets: bool = False

    def __repr__(self) -> str:
        return (
            f"Config(provider={self.provider!r}, secrets={len(self.secrets)} lines, "
            f"run={'set' if self.run is not None else 'unset'}, env_file={self.env_file!r})"
        )


def get_env(name: str, environ: Optional[Mapping[str, str]] = None) -> Optional[str]:
    """Read an environment variable, treating an empty string as unset."""
    environ = os.environ if environ is None else environ
    value = environ.get(name)
    if value is None or value == "":
        return None
    return value


def split_secret_lines(raw: Any) -> List[str]:
    """
    Normalize the secrets input to a list of non-blank lines.

    Accepts a multi-line string (the Actions input form) or a YAML list.
    """
    if raw is None:
        return []
    if isinstance(raw, str):
        items = raw.splitlines()
    elif isinstance(raw, (list, tuple)):
        items = [str(item) for item in raw]
    else:
        raise ConfigError(f"'secrets' must be a string or a list, got {type(raw).__name__}")
    return [item.strip() for item in items if item.strip()]


def _load_yaml(config_path: str) -> Dict[str, Any]:
    if not os.path.exists(config_path):
        raise ConfigError(f"Configuration file not found at: {config_path}")

    try:
        with open(config_path, 'r') as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse YAML config at {config_path}: {e}")
    except OSError as e:
        raise ConfigError(f"Failed to read config file at {config_path}: {e}")

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file at {config_path} must contain a mapping of input names")

    unknown = sorted(set(data) - set(INPUT_NAMES))
    if unknown:
        logger.warning(f"Ignoring unknown keys in {config_path}: {', '.join(unknown)}")
    return data


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUE_VALUES


def load_config(
    config_path: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Config:
    """
    Load and validate configuration.

    Args:
        config_path: Optional YAML file with input names as keys
        environ: Environment to read from (defaults to os.environ)

    Returns:
        Config for this run

    Raises:
        ConfigError: If the YAML is invalid, access_token is missing or the
            provider is unknown
    """
    environ = os.environ if environ is None else environ

    values: Dict[str, Any] = {}
    if config_path:
        values.update(_load_yaml(config_path))
        logger.debug(f"Loaded config file: {config_path}")

    for name in INPUT_NAMES:
        env_value = get_env(f"INPUT_{name.upper()}", environ)
        if env_value is not None:
            values[name] = env_value

    # empty strings behave like unset inputs, as they do in action.yml
    values = {k: v for k, v in values.items() if v is not None and v != ""}

    access_token = values.get("access_token")
    if not access_token:
        raise ConfigError(
            "Missing 'access_token'.\n"
            "Provide it with the access_token input (INPUT_ACCESS_TOKEN) or in the config file."
        )

    provider = str(values.get("provider", "bitwarden")).strip().lower()
    if provider not in PROVIDERS:
        raise ConfigError(
            f"Unsupported provider: {provider}\n"
            f"Supported providers: {', '.join(PROVIDERS)}"
        )

    config = Config(
        access_token=str(access_token),
        secrets=split_secret_lines(values.get("secrets")),
        run=None if values.get("run") is None else str(values["run"]),
        base_url=values.get("base_url"),
        api_url=values.get("api_url"),
        identity_url=values.get("identity_url"),
        cloud_region=str(values.get("cloud_region", "us")).strip().lower(),
        provider=provider,
        gcp_project=values.get("gcp_project"),
        env_file=get_env("GITHUB_ENV", environ),
        mask_run_secrets=_parse_bool(values.get("mask_run_secrets", False)),
    )
    logger.debug(f"Configuration loaded: {config!r}")
    return config


def infer_urls(config: Config) -> Tuple[str, str]:
    """
    Work out the Bitwarden API and identity URLs.

    Priority order:
    1. base_url (self-hosted): <base_url>/api and <base_url>/identity
    2. api_url and identity_url, when both are set
    3. cloud_region: us or eu

    Raises:
        ConfigError: If the cloud region is unknown
    """
    if config.base_url:
        base_url = config.base_url.rstrip("/")
        return f"{base_url}/api", f"{base_url}/identity"

    if config.api_url and config.identity_url:
        return config.api_url, config.identity_url

    if config.api_url or config.identity_url:
        logger.warning("Both api_url and identity_url are needed; falling back to cloud_region")

    try:
        return CLOUD_REGIONS[config.cloud_region]
    except KeyError:
        raise ConfigError(
            f"Unsupported cloud_region: {config.cloud_region}\n"
            f"Use one of: {', '.join(CLOUD_REGIONS)}, or set base_url for self-hosted servers."
        ) from None


def build_gateway(config: Config):
    """Create the vault gateway for the configured provider."""
    if config.provider == "gcp":
        from .gcp_client import GCPSecretGateway
        return GCPSecretGateway(project_id=config.gcp_project)

    from .bitwarden_client import BitwardenGateway
    api_url, identity_url = infer_urls(config)
    return BitwardenGateway(api_url=api_url, identity_url=identity_url)
