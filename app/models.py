"""SQLAlchemy ORM models for the URL shortener application.

Data Model Layout
=================
::
    urls table
    ├─ id (INTEGER PRIMARY KEY, AUTOINCREMENT)
    ├─ original_url (TEXT NOT NULL)
    ├─ short_code (VARCHAR(64) NOT NULL UNIQUE, INDEXED)
    ├─ click_count (INTEGER NOT NULL DEFAULT 0)
    └─ created_at (TIMESTAMP, DEFAULT CURRENT_TIMESTAMP)

Key Behaviours
===============
- The unique index on short_code is the final authority on collisions.
- click_count starts at 0 and is only ever bumped by a single-row UPDATE.
- Rows are never deleted or rewritten apart from click_count.

Classes:
    URL:  A short code → original URL mapping with its click counter.
"""

import datetime

from sqlalchemy import DateTime, Integer, String, Text, func, text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base

__all__ = ["SHORT_CODE_MAX_LENGTH", "URL"]

SHORT_CODE_MAX_LENGTH = 64


class URL(Base):
    __tablename__ = "urls"
    __mapper_args__ = {"eager_defaults": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    original_url: Mapped[str] = mapped_column(Text, nullable=False)
    short_code: Mapped[str] = mapped_column(String(SHORT_CODE_MAX_LENGTH), unique=True, index=True, nullable=False)
    click_count: Mapped[int] = mapped_column(Integer, default=0, server_default=text("0"), nullable=False)
    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    def __repr__(self) -> str:
        return f"<URL(id={self.id}, short_code='{self.short_code}', click_count={self.click_count})>"
