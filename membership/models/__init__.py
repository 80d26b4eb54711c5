"""SQLAlchemy ORM 모델 패키지 — 모든 도메인 모델의 중앙 임포트 지점.

SQLAlchemy ORM models package — Central import point for all models.
Importing from this package ensures all models are registered with the
SQLAlchemy metadata before ``Base.metadata.create_all`` runs.

Modules:
    document: 컬렉션 단위 문서 (Schemaless documents keyed by collection + id)
"""

from membership.models.document import Document

__all__ = ["Document"]
