from pydantic import BaseModel
from typing import List

class VideoLabels(BaseModel):
    licensee_id: str
    video_labels: List[str] = []

class ReplaceVideoLabels(BaseModel):
    video_labels: List[str]

class AddVideoLabel(BaseModel):
    video_label: str

class LicenseeRooms(BaseModel):
    licensee_id: str
    rooms: List[str] = []

class ReplaceRooms(BaseModel):
    rooms: List[str]

class AddRoom(BaseModel):
    room_id: str
