from pydantic import BaseModel, field_validator
from typing import Optional
from datetime import datetime
from enum import Enum
from station_sync.core.time import as_utc
from station_sync.models.room_session import PlaybackState

class CommandType(str, Enum):
    PLAY = "play"
    PAUSE = "pause"
    STOP = "stop"
    SEEK_DELTA = "seek_delta"

class SessionCommand(BaseModel):
    command: CommandType
    label: Optional[str] = None   # solo 'play'
    value: Optional[float] = None # solo 'seek_delta', en segundos

class RoomSessionSchema(BaseModel):
    room_id: str
    state: PlaybackState
    playback_ref: Optional[str] = None
    started_at: Optional[datetime] = None
    paused_at: Optional[datetime] = None
    command_id: int = 0
    command_type: Optional[str] = None
    command_value: Optional[float] = None
    updated_at: Optional[datetime] = None

    @field_validator("started_at", "paused_at", "updated_at")
    @classmethod
    def ensure_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_utc(value)

    class Config:
        from_attributes = True

class CommandAccepted(BaseModel):
    room_id: str
    command_id: int
    command_type: str
    command_value: float

    class Config:
        from_attributes = True
