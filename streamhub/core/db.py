from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from streamhub.core.config import settings

engine = create_async_engine(settings.async_database_url, echo=settings.SQL_ECHO)

# Objects stay readable after commit; responses are built from them.
SessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

Base = declarative_base()

async def get_db():
    async with SessionLocal() as session:
        yield session
