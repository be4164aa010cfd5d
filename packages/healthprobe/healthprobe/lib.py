__all__ = [
    "HealthLabel", "ProbeOutcome", "HealthCheckResult", "ClientConstructionError",
    "health_label", "next_failure_count", "build_client", "probe", "check", "iter_health_checks"
]

import logging
import time
from datetime import datetime
from enum import Enum
from typing import NamedTuple, Iterator

import httpx

from healthprobe.common import describe_error
from healthprobe.model import HealthCheckConfig
from healthprobe.transport import DeadlineTransport

logger = logging.getLogger(__name__)


class HealthLabel(str, Enum):
    up = "UP"
    unhealthy = "UNHEALTHY"
    down = "DOWN"


class ProbeOutcome(NamedTuple):
    failed: bool
    description: str
    elapsed: float
    timestamp: str


class HealthCheckResult(NamedTuple):
    outcome: ProbeOutcome
    consecutive_failures: int
    label: HealthLabel


class ClientConstructionError(RuntimeError):
    pass


def health_label(consecutive_failures: int, failure_threshold: int) -> HealthLabel:
    """
    Derive the health label from the amount of consecutive failed probes.

    Args:
        consecutive_failures: amount of failed probes in the current trailing run
        failure_threshold: amount of consecutive failures at which a target is considered down

    Returns:
        DOWN if the threshold is reached, UNHEALTHY if any probe failed, UP otherwise
    """
    if consecutive_failures >= failure_threshold:
        return HealthLabel.down

    if consecutive_failures > 0:
        return HealthLabel.unhealthy

    return HealthLabel.up


def next_failure_count(consecutive_failures: int, outcome: ProbeOutcome) -> int:
    if outcome.failed:
        return consecutive_failures + 1

    return 0


def build_client(timeout_secs: float) -> httpx.Client:
    """
    Construct the HTTP client used for probing.
    Keep-alive is disabled so that every probe opens a new connection, and each connection must complete
    within the timeout as a whole, not just per read or write.

    Args:
        timeout_secs: seconds until a request times out

    Returns:
        HTTP client that follows redirects

    Raises:
        ClientConstructionError: if the client could not be set up, e.g. due to a broken TLS configuration
    """
    try:
        return httpx.Client(
            timeout=timeout_secs,
            follow_redirects=True,
            transport=DeadlineTransport(timeout_secs),
        )
    except (OSError, ValueError) as e:
        raise ClientConstructionError(f"failed to construct HTTP client: {describe_error(e)}") from e


def _status_description(r: httpx.Response) -> str:
    if r.reason_phrase == "":
        return str(r.status_code)

    return f"{r.status_code} {r.reason_phrase}"


def _send(client: httpx.Client, url: str, timeout_secs: float, deadline: float) -> tuple[bool, str]:
    try:
        with client.stream("GET", url) as r:
            # body must be read in full, each chunk is checked against the overall deadline
            for _ in r.iter_bytes():
                if time.monotonic() > deadline:
                    break

            if time.monotonic() > deadline:
                return True, f"request timed out after {timeout_secs}s"

            return r.is_error, _status_description(r)
    except httpx.HTTPError as e:
        return True, describe_error(e)


def probe(client: httpx.Client, url: str, timeout_secs: float) -> ProbeOutcome:
    """
    Send a single GET request to a URL and classify the result.
    Transport errors, responses with a 4xx or 5xx status code and responses that take longer than
    the timeout to complete are classified as failures.

    Args:
        client: HTTP client to send the request with
        url: URL to send the request to
        timeout_secs: seconds until the request, including reading the response body, times out

    Returns:
        outcome of the probe
    """
    timestamp = datetime.now().astimezone().isoformat()
    start = time.monotonic()

    logger.debug("GET %s", url)
    failed, description = _send(client, url, timeout_secs, start + timeout_secs)
    elapsed = time.monotonic() - start
    logger.debug("GET %s %s after %.3fs: %s", url, "failed" if failed else "succeeded", elapsed, description)

    return ProbeOutcome(failed=failed, description=description, elapsed=elapsed, timestamp=timestamp)


def check(client: httpx.Client, config: HealthCheckConfig, consecutive_failures: int) -> HealthCheckResult:
    outcome = probe(client, config.url, config.timeout_secs)
    consecutive_failures = next_failure_count(consecutive_failures, outcome)
    label = health_label(consecutive_failures, config.failure_threshold)

    logger.debug("%d consecutive failures (threshold %d): %s", consecutive_failures, config.failure_threshold,
                 label.value)

    return HealthCheckResult(outcome=outcome, consecutive_failures=consecutive_failures, label=label)


def iter_health_checks(client: httpx.Client, config: HealthCheckConfig) -> Iterator[HealthCheckResult]:
    """
    Probe the configured URL indefinitely, sleeping for the configured delay between probes.

    Args:
        client: HTTP client to send requests with
        config: health check configuration

    Returns:
        infinite iterator of health check results, one per probe
    """
    consecutive_failures = 0

    while True:
        result = check(client, config, consecutive_failures)
        consecutive_failures = result.consecutive_failures

        yield result

        time.sleep(config.delay_secs)
