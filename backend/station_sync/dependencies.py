import logging
import secrets
from fastapi import Header
from typing import Optional
from station_sync.core.config import settings
from station_sync.core.database import SessionLocal
from station_sync.core.errors import AuthError

logger = logging.getLogger(__name__)

async def get_db():
    async with SessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise

async def require_admin(
    x_admin_key: Optional[str] = Header(None),
    authorization: Optional[str] = Header(None),
) -> None:
    """Acepta la clave de administración en X-Admin-Key o como Bearer."""
    expected = settings.ADMIN_API_KEY
    if not expected:
        logger.error("ADMIN_API_KEY no configurada; se rechazan las operaciones de administración")
        raise AuthError("Admin API key not configured")

    provided = (x_admin_key or "").strip()
    if not provided and authorization and authorization.lower().startswith("bearer "):
        provided = authorization[len("bearer "):].strip()

    if not provided or not secrets.compare_digest(provided.encode(), expected.encode()):
        raise AuthError("Unauthorized")
