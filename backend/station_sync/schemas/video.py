from pydantic import BaseModel
from typing import Optional, List

class VideoSchema(BaseModel):
    id: int
    label: str
    playback_ref: str
    sort_order: Optional[int] = None
    active: bool

    class Config:
        from_attributes = True

class VideoList(BaseModel):
    videos: List[VideoSchema] = []
