from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
from station_sync.dependencies import get_db
from station_sync.schemas.video import VideoList, VideoSchema
from station_sync.services import catalog_service

router = APIRouter()

@router.get("", response_model=VideoList)
async def read_videos(room: Optional[str] = None, search: Optional[str] = None, db: AsyncSession = Depends(get_db)):
    videos = await catalog_service.list_videos(db, search=search, room_id=room)
    return VideoList(videos=[VideoSchema.model_validate(v) for v in videos])
