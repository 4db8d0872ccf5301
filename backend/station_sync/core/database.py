from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker, declarative_base
from station_sync.core.config import settings

# Crear el motor de la base de datos (asyncpg en producción)
engine = create_async_engine(settings.DATABASE_URL, echo=settings.DATABASE_ECHO)

# Una sesión por solicitud; los objetos siguen legibles tras el commit
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, class_=AsyncSession, expire_on_commit=False)

# Declarar una base para los modelos de SQLAlchemy
Base = declarative_base()
