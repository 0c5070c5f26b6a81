"""SQLAlchemy モデル定義"""
from datetime import datetime
from sqlalchemy import Column, String, DateTime, JSON, Index

from .database import Base


class CacheEntry(Base):
    """Places API 応答のキャッシュ（キー・値・有効期限）"""
    __tablename__ = "cache_entries"

    key = Column(String(255), primary_key=True)  # "status:{place_id}" / "search:{query}:{lat}:{lng}"
    value = Column(JSON, nullable=False)
    expires_at = Column(DateTime, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        Index("idx_cache_entries_expires", "expires_at"),
    )
