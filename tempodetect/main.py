"""FastAPI application - serves the tempo worker API."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tempodetect.api.tempo import router as tempo_router

app = FastAPI(title="tempodetect", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(tempo_router, prefix="/api")


@app.get("/api/health")
async def health():
    return {"status": "ok"}


def run():
    import uvicorn
    from tempodetect.config import settings
    uvicorn.run(
        "tempodetect.main:app",
        host=settings.host,
        port=settings.port,
    )
