"""Configuration classes for reliasim components."""

from dataclasses import dataclass


@dataclass
class ReliabilityConfig:
    """Tunables shared by reliability modules and the simulated core."""

    # Failure rate used whenever no curve is available; also the floor for MTBF math
    min_failure_rate: float = 1e-12

    # Minimum advance of operating time between two accepted reliability checks
    check_interval: float = 1.0

    # Operating time reported by a core that is not accumulating
    operating_time_reset: float = -1.0

    # Largest MTBF value shown before escalating to the next unit
    mtbf_display_maximum: int = 999

    def is_check_due(self, operating_time: float, last_check: float) -> bool:
        """Return True when ``operating_time`` has advanced a full interval."""
        return operating_time >= last_check + self.check_interval


# Global configuration instance
RELIABILITY_CONFIG = ReliabilityConfig()
