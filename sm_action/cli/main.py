"""CLI entrypoint for sm-action."""
import argparse
import logging
import os
import sys

from sm_action import VERSION

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    """Log to stderr; RUNNER_DEBUG=1 (GitHub debug re-runs) enables debug output."""
    level = logging.DEBUG if os.getenv("RUNNER_DEBUG") == "1" else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        stream=sys.stderr
    )


def cmd_inject(args):
    """Resolve secrets and expose them to the job."""
    from sm_action.secrets.domains.config_loader import build_gateway, load_config
    from sm_action.secrets.workflows.secret_operations import inject_secrets

    config = load_config(args.config)
    gateway = build_gateway(config)
    inject_secrets(config, gateway)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sm-action",
        description="Inject Bitwarden Secrets Manager secrets into a GitHub Actions job",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Inputs (environment variables set by the Actions runner):
  INPUT_ACCESS_TOKEN    - Machine account access token (required)
  INPUT_SECRETS         - One 'UUID > NAME' mapping per line
  INPUT_RUN             - Command to run with the secrets in its environment
                          (secrets are not written to GITHUB_ENV in this mode)
  INPUT_BASE_URL        - Self-hosted server URL
  INPUT_API_URL         - API URL (with INPUT_IDENTITY_URL)
  INPUT_IDENTITY_URL    - Identity URL (with INPUT_API_URL)
  INPUT_CLOUD_REGION    - us (default) or eu
  INPUT_PROVIDER        - bitwarden (default) or gcp
  INPUT_GCP_PROJECT     - Project holding the secrets when provider is gcp
  INPUT_MASK_RUN_SECRETS - Also mask secret values in run mode

Exit codes:
  0 - Success
  1 - Runtime error (invalid input, authentication, secret not found, command failed)
  2 - Usage error (invalid arguments)
        """
    )
    parser.add_argument(
        "--config",
        help="YAML file with input names as keys; INPUT_* variables take precedence"
    )
    parser.add_argument(
        "--test",
        action="store_true",
        help="Print 'success' and exit (smoke test for installed builds)"
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"sm-action {VERSION}"
    )
    return parser


def main(argv=None):
    """Main CLI entrypoint.

    Exit codes:
        0 - Success
        1 - Runtime errors (invalid input, authentication, secret not found, command failed)
        2 - Usage errors (invalid arguments)
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.test:
        print("success")
        sys.exit(0)

    configure_logging()

    try:
        cmd_inject(args)
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        logger.debug("Run failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    sys.exit(0)


if __name__ == "__main__":
    main()
