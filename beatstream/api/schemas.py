"""Pydantic response models for API."""

from pydantic import BaseModel


class EnergyBeatResponse(BaseModel):
    previous_baseline: float
    observed_energy: float


class BeatResponse(BaseModel):
    time: float
    sample_offset: int
    main: EnergyBeatResponse | None = None
    bands: list[EnergyBeatResponse | None]


class AnalysisResponse(BaseModel):
    sample_rate: int
    band_count: int
    window_size: int
    duration: float
    windows: int
    beats: list[BeatResponse]


# WebSocket message types

class StartMessage(BaseModel):
    type: str = "start"
    sample_rate: int
    band_count: int
    window_size: int


class BeatMessage(BaseModel):
    type: str = "beat"
    time: float
    main: bool
    bands: list[bool]


class StopMessage(BaseModel):
    type: str = "stop"
    time: float
