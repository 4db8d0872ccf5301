from sqlalchemy import Column, String, DateTime
from sqlalchemy.sql import func
from station_sync.core.database import Base

class LicenseeVideoAccess(Base):
    __tablename__ = "licensee_video_access"
    licensee_id = Column(String(64), primary_key=True)
    video_label = Column(String(64), primary_key=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

class LicenseeRoom(Base):
    __tablename__ = "licensee_rooms"
    # Una sala pertenece a lo sumo a un licenciatario
    room_id = Column(String(64), primary_key=True)
    licensee_id = Column(String(64), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
