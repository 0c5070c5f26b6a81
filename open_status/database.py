"""キャッシュ用DBの接続・セッション管理"""
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, DeclarativeBase

from .config import DATABASE_URL

IS_SQLITE = DATABASE_URL.startswith("sqlite")

# リクエストごとのセッションがスレッドプール上で作られるため、SQLiteのスレッド検査は外す
engine = create_engine(
    DATABASE_URL,
    connect_args={"check_same_thread": False} if IS_SQLITE else {},
    echo=False,
)

if IS_SQLITE:
    @event.listens_for(engine, "connect")
    def enable_wal(dbapi_conn, connection_record):
        """読み取り中でもキャッシュ書き込みが待たされないようWALにする"""
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


class Base(DeclarativeBase):
    pass


def init_db():
    """cache_entries テーブルを作成（存在しなければ）"""
    from . import models  # noqa: F401  テーブル定義の登録
    Base.metadata.create_all(bind=engine)


def get_db():
    """FastAPI Depends用。1リクエスト1セッション"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
