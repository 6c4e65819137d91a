from pydantic import BaseModel, ConfigDict, Field


class JobOutcomeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: str
    ok: bool
    rows: int = 0
    error: str | None = None
    duration_ms: float = 0.0
    writes: dict[str, str] = Field(default_factory=dict)


class RunSummaryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    started_at: str
    skipped: bool = False
    skip_reason: str | None = None
    duration_ms: float = 0.0
    failed: list[str] = Field(default_factory=list)
    outcomes: list[JobOutcomeOut] = Field(default_factory=list)


class SinkStatusOut(BaseModel):
    configured: bool
    ok: bool
    table: str
    error: str | None = None
    sample: list[dict] = Field(default_factory=list)
