"""FastAPI application - serves the beat detection API."""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from beatstream.api.upload import router as upload_router
from beatstream.api.websocket import router as ws_router
from beatstream.config import settings

app = FastAPI(title="Beatstream", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(upload_router, prefix="/api")
app.include_router(ws_router, prefix="/api")


@app.get("/api/health")
async def health():
    return {"status": "ok"}


def run():
    import uvicorn
    logging.basicConfig(level=settings.log_level.upper(), format="%(name)s %(levelname)s: %(message)s")
    uvicorn.run(
        "beatstream.main:app",
        host=settings.host,
        port=settings.port,
        reload=True,
    )
