from sqlalchemy import Column, Integer, String, Float, DateTime
from station_sync.core.database import Base
from enum import Enum

class PlaybackState(str, Enum):
    IDLE = "idle"
    PLAYING = "playing"
    PAUSED = "paused"
    STOPPED = "stopped"

class RoomSession(Base):
    __tablename__ = "room_sessions"
    room_id = Column(String(64), primary_key=True)
    state = Column(String(20), nullable=False, default=PlaybackState.IDLE.value)

    # Etiqueta cargada; solo no nula en 'playing' o 'paused'
    playback_ref = Column(String(64), nullable=True)
    started_at = Column(DateTime(timezone=True), nullable=True)
    paused_at = Column(DateTime(timezone=True), nullable=True)

    # Último comando transitorio (seek); los lectores detectan cambios por command_id
    command_id = Column(Integer, nullable=False, default=0)
    command_type = Column(String(20), nullable=True)
    command_value = Column(Float, nullable=True)

    updated_at = Column(DateTime(timezone=True), nullable=True)
