import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.api.routes.history import router as history_router
from src.api.routes.process import router as process_router
from src.api.routes.transcribe import router as transcribe_router
from src.config import settings

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title="Retail Audio Intelligence API",
    description="Transcribe store audio, classify it against the retail taxonomy, keep a history",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
    ],
    allow_origin_regex=r"https://.*\.vercel\.app|http://localhost:\d+",
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(process_router)
app.include_router(transcribe_router)
app.include_router(history_router)


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "healthy"}
