from sqlalchemy import Column, Integer, String, Boolean, DateTime
from sqlalchemy.sql import func
from station_sync.core.database import Base

class Video(Base):
    __tablename__ = "videos"
    id = Column(Integer, primary_key=True)
    label = Column(String(64), unique=True, nullable=False)
    playback_ref = Column(String(128), nullable=False)
    sort_order = Column(Integer, nullable=True)
    active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
