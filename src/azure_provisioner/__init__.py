"""Idempotent Azure VM provisioning."""

__version__ = "0.1.0"
