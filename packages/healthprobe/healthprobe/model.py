from pydantic import BaseModel, ConfigDict, conint, field_validator

from healthprobe.common import validate_url


class ParentModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class HealthCheckConfig(ParentModel):
    url: str
    delay_secs: conint(ge=0) = 15
    failure_threshold: conint(ge=1) = 3
    timeout_secs: conint(ge=1) = 10

    @field_validator("url")
    @classmethod
    def check_url_is_absolute(cls, v: str) -> str:
        return validate_url(v)
