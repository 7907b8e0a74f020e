"""Inject Bitwarden Secrets Manager secrets into CI jobs."""

VERSION = "0.1.0"
