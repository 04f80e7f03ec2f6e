import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from gomoku_play.api import router as api_router
from gomoku_play.config import get_settings
from gomoku_play.session import session_manager
from gomoku_play.ws_handler import router as ws_router

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await session_manager.aclose()


app = FastAPI(title="Gomoku Play", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


app.include_router(ws_router)
app.include_router(api_router)


@app.get("/health")
async def health():
    return {"status": "ok"}
