"""Pydantic request/response models for the tempo worker."""

from pydantic import BaseModel, ConfigDict, Field, FiniteFloat, field_validator

from tempodetect.analysis.models import TempoMethod


class TempoRequest(BaseModel):
    """Already-decoded samples to analyse."""
    model_config = ConfigDict(populate_by_name=True)

    method: TempoMethod = TempoMethod.AUTOCORRELATION
    channel_data: list[FiniteFloat] = Field(alias="channelData")
    sample_rate: int = Field(alias="sampleRate", gt=0)

    @field_validator("method", mode="before")
    @classmethod
    def _default_unknown_method(cls, value):
        return TempoMethod.parse(value)


class TempoResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    bpm: int | None = None
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    method: str
    bucket: str | None = None
    error: str | None = None
    encoding_error: bool | None = Field(default=None, alias="encodingError")

    def to_message(self) -> dict:
        """Wire form: camelCase keys, unset optional fields dropped."""
        data = self.model_dump(by_alias=True, exclude_none=True)
        data["bpm"] = self.bpm  # always present, null when there is no estimate
        return data
