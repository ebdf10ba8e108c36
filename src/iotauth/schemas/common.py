"""Response envelope shared by every endpoint."""

from pydantic import BaseModel

from src.iotauth.models.enums import MqttDecision


class Envelope[DataT](BaseModel):
    """``{status, message, data?, result?}`` - success shape of every response."""

    status: bool = True
    message: str
    data: DataT | None = None
    result: MqttDecision | None = None


class FieldError(BaseModel):
    field: str
    message: str


class ErrorEnvelope(BaseModel):
    """Failure shape, documented for OpenAPI."""

    status: bool = False
    message: str
    details: list[FieldError] | None = None
    result: MqttDecision | None = None
    request_id: str | None = None
