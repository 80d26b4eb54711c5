"""문서 저장소 SQLAlchemy ORM 모델 정의.

Document store SQLAlchemy ORM model definition.
Every collection (Member, Course, Event, Group, MemberCourse, MemberEvent)
shares one table; a document is addressed by (collection, id) and its
schemaless body lives in a JSON column (JSONB on PostgreSQL).

Tables:
    - documents: 컬렉션별 스키마 없는 문서 (Schemaless documents keyed by collection + id)
"""

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import JSON, DateTime, Index, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from membership.database import Base


class Document(Base):
    """문서 모델 — 컬렉션 내 하나의 레코드.

    Document model — A single record inside a named collection.
    The store never interprets the body beyond field-equality queries.

    Attributes:
        collection: 컬렉션 이름 (Collection name, e.g. "Member")
        id: 컬렉션 내 문서 ID (Document id, unique within its collection)
        data: 문서 본문 JSON (Document body)
        created_at: 생성 일시 UTC (Creation timestamp)
        updated_at: 수정 일시 UTC (Last update timestamp)
    """

    __tablename__ = "documents"
    __table_args__ = (
        # 컬렉션 단위 스캔용 인덱스 — Collection scans for field-equality queries
        Index("ix_documents_collection", "collection"),
    )

    # 컬렉션 이름 — Collection name (composite primary key part 1)
    collection: Mapped[str] = mapped_column(String(100), primary_key=True)
    # 문서 ID — Document id (composite primary key part 2)
    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    # 문서 본문 — Schemaless body (JSONB on PostgreSQL, JSON elsewhere)
    data: Mapped[dict[str, Any]] = mapped_column(
        JSON().with_variant(JSONB(), "postgresql"), nullable=False, default=dict
    )
    # 생성 일시 — Record creation timestamp (UTC)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    # 수정 일시 — Last modification timestamp (UTC, auto-updated)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict[str, Any]:
        """ID를 포함한 문서 본문을 반환합니다 (Body merged with its id)."""
        return {"id": self.id, **self.data}
