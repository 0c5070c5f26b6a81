"""テスト共通設定（一時SQLite、ダミーのAPIキー）"""
import os
import tempfile
from pathlib import Path

_TMP_DIR = Path(tempfile.mkdtemp(prefix="open_status_test_"))
os.environ["DATABASE_URL"] = f"sqlite:///{_TMP_DIR / 'test.db'}"
os.environ.setdefault("GOOGLE_PLACES_API_KEY", "test-key")

import pytest  # noqa: E402

from open_status.database import SessionLocal, init_db  # noqa: E402
from open_status.models import CacheEntry  # noqa: E402

init_db()


@pytest.fixture
def db():
    session = SessionLocal()
    session.query(CacheEntry).delete()
    session.commit()
    try:
        yield session
    finally:
        session.close()
