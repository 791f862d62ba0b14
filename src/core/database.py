from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime
from sqlalchemy.ext.asyncio import create_async_engine
from sqlmodel import Field, SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from src.core.config import settings

engine = create_async_engine(
    settings.ASYNC_DATABASE_URL,
    #  echo=True,
)


@asynccontextmanager
async def get_session():
    async with AsyncSession(engine, expire_on_commit=False) as session:
        yield session


async def create_tables() -> None:
    """Create every table registered on SQLModel.metadata."""
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


async def drop_tables() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)


class BaseModel(SQLModel):
    """Base model with common fields."""

    id: Optional[int] = Field(default=None, primary_key=True)
    created_at: datetime = Field(
        default_factory=settings.get_now, sa_type=DateTime(timezone=True)
    )
    # Refreshed by the store on every UPDATE
    updated_at: datetime = Field(
        default_factory=settings.get_now,
        sa_type=DateTime(timezone=True),
        sa_column_kwargs={"onupdate": settings.get_now},
        index=True,
    )
