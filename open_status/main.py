"""FastAPI アプリケーション"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import LOG_LEVEL
from .routes.status import router as status_router
from .routes.places import router as places_router
from .database import SessionLocal, init_db
from .services.cache import purge_expired

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """起動時にキャッシュテーブルを用意し、期限切れを掃除"""
    init_db()
    db = SessionLocal()
    try:
        purged = purge_expired(db)
        if purged:
            logger.info(f"Cache: purged {purged:,} expired entries")
    finally:
        db.close()
    yield


app = FastAPI(
    title="Open Status API",
    description="近くの店舗が今営業中かを調べるAPI",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS（開発用に全許可、本番では制限する）
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(status_router)
app.include_router(places_router)


if __name__ == "__main__":
    import uvicorn
    from .config import API_HOST, API_PORT
    uvicorn.run(app, host=API_HOST, port=API_PORT)
