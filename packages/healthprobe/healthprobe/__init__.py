from .lib import HealthLabel, ProbeOutcome, HealthCheckResult, ClientConstructionError, health_label, \
    next_failure_count, build_client, probe, check, iter_health_checks
from .model import HealthCheckConfig

__version__ = "0.1.0"

__all__ = [
    "HealthLabel",
    "ProbeOutcome",
    "HealthCheckResult",
    "ClientConstructionError",
    "HealthCheckConfig",
    "health_label",
    "next_failure_count",
    "build_client",
    "probe",
    "check",
    "iter_health_checks",
]
