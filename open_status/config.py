"""アプリケーション設定"""
import os
from pathlib import Path

BASE_DIR = Path(__file__).parent.parent

DATABASE_URL = os.getenv(
    "DATABASE_URL",
    f"sqlite:///{BASE_DIR / 'data' / 'open_status.db'}"
)

API_HOST = os.getenv("API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("API_PORT", "8000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Google Places / Geocoding
GOOGLE_PLACES_API_KEY = os.getenv("GOOGLE_PLACES_API_KEY")
PLACES_BASE_URL = os.getenv("PLACES_BASE_URL", "https://maps.googleapis.com/maps/api")
SEARCH_RADIUS_M = int(os.getenv("SEARCH_RADIUS_M", "16000"))  # 約10マイル
SEARCH_LIMIT = int(os.getenv("SEARCH_LIMIT", "6"))
HTTP_TIMEOUT = float(os.getenv("HTTP_TIMEOUT", "10"))

# キャッシュTTL（秒）
CACHE_TTL_STATUS = int(os.getenv("CACHE_TTL_STATUS", "300"))
CACHE_TTL_SEARCH = int(os.getenv("CACHE_TTL_SEARCH", "900"))
