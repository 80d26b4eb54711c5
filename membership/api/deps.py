"""FastAPI 의존성 주입 모듈 — 문서 저장소 클라이언트.

FastAPI dependency injection module — Document store client.
Route handlers receive the store through ``get_document_store`` so tests can
override it with a store bound to a test database.
"""

from membership.config import settings
from membership.database import async_session
from membership.repositories.document_store import DocumentStore

# 프로세스 단위 문서 저장소 — Process-wide store; holds only the session factory
_document_store: DocumentStore = DocumentStore(
    async_session,
    isolation_level=settings.TRANSACTION_ISOLATION_LEVEL,
)


def get_document_store() -> DocumentStore:
    """문서 저장소 클라이언트를 반환합니다 (Return the document store client)."""
    return _document_store
