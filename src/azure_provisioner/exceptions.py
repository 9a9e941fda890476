"""Exceptions raised by Azure Provisioner.

Errors returned by the Azure SDK are not wrapped here; they propagate to the
caller unchanged.
"""


class ProvisionerError(Exception):
    """Base class for provisioner errors."""


class AuthenticationFailure(ProvisionerError):
    """Credentials file is missing, unreadable or incomplete."""


class MissingDependencyError(ProvisionerError):
    """A provisioning request lacks a handle its resource type requires."""
