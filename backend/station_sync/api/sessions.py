from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession
from station_sync.dependencies import get_db
from station_sync.schemas.session import CommandAccepted, CommandType, RoomSessionSchema, SessionCommand
from station_sync.services import session_service

router = APIRouter()

@router.get("/{room_id}", response_model=RoomSessionSchema)
async def read_session(room_id: str, db: AsyncSession = Depends(get_db)):
    """Lectura idempotente; los reproductores y controles la sondean ~1 vez por segundo."""
    return await session_service.get_room_session(db, room_id)

@router.post("/{room_id}/commands", response_model=RoomSessionSchema)
async def send_command(room_id: str, command: SessionCommand, db: AsyncSession = Depends(get_db)):
    if command.command == CommandType.PLAY:
        return await session_service.play(db, room_id, command.label)
    if command.command == CommandType.PAUSE:
        return await session_service.pause(db, room_id)
    if command.command == CommandType.STOP:
        return await session_service.stop(db, room_id)

    # seek_delta: solo se acusa recibo, el estado duradero no cambia
    db_session = await session_service.seek_delta(db, room_id, command.value)
    ack = CommandAccepted.model_validate(db_session)
    return JSONResponse(status_code=202, content=ack.model_dump())
