"""Database tables / schema"""

from datetime import datetime
from typing import Optional

from sqlalchemy import BigInteger, DateTime, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from src.core.models import utc_now


class Base(DeclarativeBase):
    pass


class DBMatch(Base):
    __tablename__ = "matches"
    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    mode: Mapped[str] = mapped_column(String(8), default="pvp")
    initiator: Mapped[int] = mapped_column(BigInteger)
    opponent: Mapped[Optional[int]] = mapped_column(BigInteger)
    initiator_move: Mapped[Optional[str]] = mapped_column(String(8))
    opponent_move: Mapped[Optional[str]] = mapped_column(String(8))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, index=True
    )
