"""Settlement and fallback configuration."""

from dataclasses import dataclass

# Host fallback path (unconstrained per-tick consumption)
FALLBACK_RATE_MULTIPLIER = 1.0
FALLBACK_THRESHOLD = 0.99

# Throttle factor bounds
MIN_THROTTLE = 0.0
MAX_THROTTLE = 1.0

# Scale producers by the throttle factor like consumers
THROTTLE_PRODUCTION = False


@dataclass(frozen=True)
class SettlementConfig:
    """Toggles for settlement and the fallback consumption path.

    Attributes:
        throttle_production: Scale production requests by the throttle factor.
            When False producers always run at their full requested rate.
        fallback_rate_multiplier: Rate multiplier handed to the host fallback.
        fallback_threshold: Satisfaction threshold handed to the host fallback.
    """

    throttle_production: bool = THROTTLE_PRODUCTION
    fallback_rate_multiplier: float = FALLBACK_RATE_MULTIPLIER
    fallback_threshold: float = FALLBACK_THRESHOLD
