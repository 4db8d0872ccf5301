from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession
from station_sync.dependencies import get_db, require_admin
from station_sync.schemas.licensee import AddRoom, AddVideoLabel, LicenseeRooms, ReplaceRooms, ReplaceVideoLabels, VideoLabels
from station_sync.services import access_service, licensee_service

router = APIRouter(dependencies=[Depends(require_admin)])

@router.get("/{licensee_id}/videos", response_model=VideoLabels)
async def read_allowed_videos(licensee_id: str, db: AsyncSession = Depends(get_db)):
    labels = await access_service.get_allowed(db, licensee_id)
    return VideoLabels(licensee_id=licensee_id, video_labels=sorted(labels))

@router.put("/{licensee_id}/videos", status_code=204)
async def replace_allowed_videos(licensee_id: str, request: ReplaceVideoLabels, db: AsyncSession = Depends(get_db)):
    await access_service.replace_allowed(db, licensee_id, request.video_labels)
    return Response(status_code=204)

@router.post("/{licensee_id}/videos", status_code=204)
async def add_allowed_video(licensee_id: str, request: AddVideoLabel, db: AsyncSession = Depends(get_db)):
    await access_service.add_allowed(db, licensee_id, request.video_label)
    return Response(status_code=204)

@router.delete("/{licensee_id}/videos", status_code=204)
async def remove_allowed_video(licensee_id: str, video_label: str = "", db: AsyncSession = Depends(get_db)):
    await access_service.remove_allowed(db, licensee_id, video_label)
    return Response(status_code=204)

@router.get("/{licensee_id}/rooms", response_model=LicenseeRooms)
async def read_rooms(licensee_id: str, db: AsyncSession = Depends(get_db)):
    rooms = await licensee_service.get_rooms(db, licensee_id)
    return LicenseeRooms(licensee_id=licensee_id, rooms=rooms)

@router.put("/{licensee_id}/rooms", status_code=204)
async def replace_rooms(licensee_id: str, request: ReplaceRooms, db: AsyncSession = Depends(get_db)):
    await licensee_service.replace_rooms(db, licensee_id, request.rooms)
    return Response(status_code=204)

@router.post("/{licensee_id}/rooms", status_code=204)
async def add_room(licensee_id: str, request: AddRoom, db: AsyncSession = Depends(get_db)):
    await licensee_service.add_room(db, licensee_id, request.room_id)
    return Response(status_code=204)
