from typing import Any, Dict, Optional
from pydantic import BaseModel, ConfigDict, Field, StrictInt


class TelemetryPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    vessel_id: str = Field(..., alias="vesselId")
    timestamp_utc: str = Field(..., alias="timestampUTC")
    # format-checked only, never compared with timestampUTC
    epoch_utc: Optional[StrictInt] = Field(None, alias="epochUTC")
    signals: Dict[str, Any]


class IngestResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    ok: bool = True
    vessel_id: str = Field(..., alias="vesselId")
    valid_signals: int = Field(..., alias="validSignals")
    validation_ms: int = Field(..., alias="validationMs")
    ingestion_ms: int = Field(..., alias="ingestionMs")
    total_ms: int = Field(..., alias="totalMs")
