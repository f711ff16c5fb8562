"""File upload endpoint for beat analysis."""

import logging
import os
import tempfile

from fastapi import APIRouter, UploadFile, File, HTTPException

from beatstream.analysis.analyzer import Analyzer, AnalyzerConfig
from beatstream.analysis.models import BeatInfo, ConfigurationError
from beatstream.analysis.observer import RecordingObserver
from beatstream.api.schemas import AnalysisResponse, BeatResponse, EnergyBeatResponse
from beatstream.audio.loader import load_audio
from beatstream.config import settings

logger = logging.getLogger(__name__)

router = APIRouter()

ALLOWED_EXTENSIONS = {".wav", ".mp3", ".flac", ".ogg", ".m4a", ".aac", ".wma"}


def _beat_response(beat: BeatInfo | None) -> EnergyBeatResponse | None:
    if beat is None:
        return None
    return EnergyBeatResponse(
        previous_baseline=beat.previous_baseline,
        observed_energy=beat.observed_energy,
    )


def observer_to_response(observer: RecordingObserver) -> AnalysisResponse:
    """Convert a finished recording to the JSON response model."""
    return AnalysisResponse(
        sample_rate=observer.sample_rate,
        band_count=observer.band_count,
        window_size=observer.window_size,
        duration=observer.duration,
        windows=len(observer.windows),
        beats=[
            BeatResponse(
                time=event.time,
                sample_offset=event.timecode.sample_offset,
                main=_beat_response(event.main),
                bands=[_beat_response(b) for b in event.bands],
            )
            for event in observer.beats
        ],
    )


@router.post("/analyze", response_model=AnalysisResponse)
async def analyze_file(
    file: UploadFile = File(...),
    window_size: int | None = None,
    band_count: int | None = None,
    energy_threshold_factor: float | None = None,
    energy_decay: float | None = None,
):
    """Detect energy beats in an uploaded audio file."""
    # Validate file
    if file.filename:
        ext = "." + file.filename.rsplit(".", 1)[-1].lower() if "." in file.filename else ""
        if ext and ext not in ALLOWED_EXTENSIONS:
            raise HTTPException(400, f"Unsupported format. Use: {', '.join(sorted(ALLOWED_EXTENSIONS))}")

    try:
        config = AnalyzerConfig(
            window_size=window_size if window_size is not None else settings.window_size,
            band_count=band_count if band_count is not None else settings.band_count,
            energy_threshold_factor=(energy_threshold_factor if energy_threshold_factor is not None
                                     else settings.energy_threshold_factor),
            energy_decay=energy_decay if energy_decay is not None else settings.energy_decay,
        )
    except ConfigurationError as e:
        raise HTTPException(400, f"Invalid configuration: {e}")

    content = await file.read()
    if len(content) > settings.max_upload_mb * 1024 * 1024:
        raise HTTPException(400, f"File too large (max {settings.max_upload_mb} MB)")

    # Write to temp file (librosa needs file path for some formats)
    suffix = ""
    if file.filename and "." in file.filename:
        suffix = "." + file.filename.rsplit(".", 1)[-1].lower()

    tmp_path = None
    try:
        with tempfile.NamedTemporaryFile(suffix=suffix, delete=False) as tmp:
            tmp.write(content)
            tmp_path = tmp.name

        source = load_audio(tmp_path)
        observer = RecordingObserver()
        Analyzer(config).run(source, observer)
        return observer_to_response(observer)
    except Exception as e:
        logger.exception("Analysis failed")
        raise HTTPException(500, f"Analysis failed: {str(e)}")
    finally:
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
