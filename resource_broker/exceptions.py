"""Resource broker exception hierarchy.

Centralised base classes so callers can catch broker failures narrowly
instead of relying on bare ``except Exception`` blocks.
"""


class ResourceBrokerError(Exception):
    """Root of all resource broker exceptions."""


class ResourceConfigurationError(ResourceBrokerError):
    """Invalid resource registration or configuration value."""


class BackendUnavailableError(ResourceBrokerError):
    """The advanced resource backend could not be bound at start-up."""
