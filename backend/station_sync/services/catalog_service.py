from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from typing import Iterable, List, Optional
from station_sync.core.text import clean, normalize_label
from station_sync.models.video import Video
from station_sync.services import access_service, licensee_service

async def get_active_video(db: AsyncSession, label: str) -> Optional[Video]:
    result = await db.execute(
        select(Video).where(Video.label == normalize_label(label), Video.active == True)
    )
    return result.scalars().first()

async def list_videos(db: AsyncSession, search: Optional[str] = None, room_id: Optional[str] = None) -> List[Video]:
    """
    Videos activos ordenados por sort_order (nulos al final). Con `room_id`
    solo devuelve los permitidos al licenciatario de la sala; una sala sin
    licenciatario no ve ninguno.
    """
    query = select(Video).where(Video.active == True)

    room_id = clean(room_id)
    if room_id:
        licensee_id = await licensee_service.get_room_licensee(db, room_id)
        if licensee_id is None:
            return []
        allowed = await access_service.get_allowed(db, licensee_id)
        if not allowed:
            return []
        query = query.where(Video.label.in_(sorted(allowed)))

    search = clean(search)
    if search:
        query = query.where(Video.label.ilike(f"%{search}%"))

    query = query.order_by(Video.sort_order.is_(None), Video.sort_order, Video.created_at, Video.id)
    result = await db.execute(query)
    return result.scalars().all()

async def upsert_video(db: AsyncSession, label: str, playback_ref: str, sort_order: Optional[int] = None, active: bool = True) -> Video:
    # Solo para sembrar el catálogo (scripts y pruebas); el CRUD vive fuera de este servicio
    label = normalize_label(label)
    result = await db.execute(select(Video).where(Video.label == label))
    db_video = result.scalars().first()
    if db_video is None:
        db_video = Video(label=label)
        db.add(db_video)
    db_video.playback_ref = playback_ref
    db_video.sort_order = sort_order
    db_video.active = active
    await db.commit()
    await db.refresh(db_video)
    return db_video

async def seed_videos(db: AsyncSession, entries: Iterable[dict]) -> List[Video]:
    return [await upsert_video(db, **entry) for entry in entries]
