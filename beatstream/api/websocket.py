"""WebSocket endpoint for live beat detection."""

import asyncio
import logging
from typing import Sequence

import numpy as np
from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from beatstream.analysis.analyzer import Analyzer, AnalyzerConfig
from beatstream.analysis.models import BeatInfo, Timecode
from beatstream.analysis.observer import NullObserver
from beatstream.api.schemas import BeatMessage, StartMessage, StopMessage
from beatstream.config import settings

logger = logging.getLogger(__name__)

router = APIRouter()


class MessageObserver(NullObserver):
    """Turns analysis notifications into JSON-ready WebSocket messages."""

    def __init__(self) -> None:
        self.outbox: list[dict] = []

    def start(self, sample_rate: int, band_count: int, window_size: int) -> None:
        self.outbox.append(StartMessage(
            sample_rate=sample_rate, band_count=band_count, window_size=window_size,
        ).model_dump())

    def stop(self, timecode: Timecode) -> None:
        self.outbox.append(StopMessage(time=timecode.as_seconds()).model_dump())

    def beat(self, timecode: Timecode, main: BeatInfo | None, bands: Sequence[BeatInfo | None]) -> None:
        self.outbox.append(BeatMessage(
            time=timecode.as_seconds(),
            main=main is not None,
            bands=[b is not None for b in bands],
        ).model_dump())

    def drain(self) -> list[dict]:
        messages, self.outbox = self.outbox, []
        return messages


@router.websocket("/ws/live")
async def live_analysis(websocket: WebSocket):
    """Live beat detection via WebSocket.

    Protocol:
    - Client sends binary little-endian Float32 PCM chunks (mono, at the
      configured sample rate)
    - Client sends the text frame "stop" to end the stream
    - Server sends JSON messages:
      - {"type": "start", "sample_rate": R, "band_count": B, "window_size": W}
      - {"type": "beat", "time": T, "main": bool, "bands": [bool, ...]}
      - {"type": "stop", "time": T}
    """
    await websocket.accept()

    observer = MessageObserver()
    session = Analyzer(AnalyzerConfig.from_settings(settings)).session(settings.sample_rate, observer)

    try:
        for message in observer.drain():
            await websocket.send_json(message)

        while True:
            data = await websocket.receive()
            if data["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(data.get("code", 1000))

            if data.get("text") == "stop":
                session.finish()
                for message in observer.drain():
                    await websocket.send_json(message)
                await websocket.close()
                return

            payload = data.get("bytes")
            if not payload:
                continue
            # Drop a trailing partial float
            usable = len(payload) - len(payload) % 4
            chunk = np.frombuffer(payload[:usable], dtype="<f4")
            # Run analysis in thread pool to avoid blocking
            loop = asyncio.get_event_loop()
            await loop.run_in_executor(None, session.feed, chunk)
            for message in observer.drain():
                await websocket.send_json(message)

    except WebSocketDisconnect:
        if not session.finished:
            session.finish()
        logger.info(f"Live client disconnected after {session.samples_consumed} samples")
    except Exception as e:
        logger.exception("Live analysis failed")
        try:
            if not session.finished:
                session.finish()
                for message in observer.drain():
                    await websocket.send_json(message)
            await websocket.send_json({"type": "error", "message": str(e)})
            await websocket.close()
        except Exception:
            pass
