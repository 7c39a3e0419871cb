"""Backend discovery configuration."""

from dataclasses import dataclass

# Module that exposes the advanced resource subsystem API
DEFAULT_API_MODULE = "kerbalism.api"

# Entry points looked up on the API module
RESOURCE_AMOUNT_ENTRY_POINT = "resource_amount"
CONSUME_RESOURCE_ENTRY_POINT = "consume_resource"
PRODUCE_RESOURCE_ENTRY_POINT = "produce_resource"


@dataclass(frozen=True)
class BackendConfig:
    """Where to find the advanced resource subsystem.

    Attributes:
        api_module: Dotted module path imported by the start-up probe.
        resource_amount: Name of the availability query function.
        consume_resource: Name of the consumption mutation function.
        produce_resource: Name of the production mutation function.
    """

    api_module: str = DEFAULT_API_MODULE
    resource_amount: str = RESOURCE_AMOUNT_ENTRY_POINT
    consume_resource: str = CONSUME_RESOURCE_ENTRY_POINT
    produce_resource: str = PRODUCE_RESOURCE_ENTRY_POINT

    @property
    def entry_points(self) -> tuple[str, str, str]:
        return (self.resource_amount, self.consume_resource, self.produce_resource)
