import pytest
from pydantic import ValidationError

from healthprobe.model import HealthCheckConfig


def test_config_defaults():
    config = HealthCheckConfig(url="http://localhost:8000/healthz")

    assert config.delay_secs == 15
    assert config.failure_threshold == 3
    assert config.timeout_secs == 10


@pytest.mark.parametrize("kwargs", [
    {"url": "not-a-url"},
    {"url": "http://localhost", "failure_threshold": 0},
    {"url": "http://localhost", "delay_secs": -1},
    {"url": "http://localhost", "timeout_secs": 0},
    {"url": "http://localhost", "method": "POST"},
])
def test_config_invalid(kwargs):
    with pytest.raises(ValidationError):
        HealthCheckConfig(**kwargs)


def test_config_is_immutable():
    config = HealthCheckConfig(url="http://localhost:8000/healthz")

    with pytest.raises(ValidationError):
        config.failure_threshold = 1
