"""테스트 인프라 — 임시 SQLite 문서 저장소, 가짜 저장소, httpx 클라이언트 픽스처.

Test infrastructure — Temporary SQLite document store, in-memory fake store,
and httpx client fixtures.
Each test gets its own on-disk SQLite file (aiosqlite) under tmp_path, so no
cleanup between tests is needed.
"""

import copy
import os
from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import asynccontextmanager
from types import SimpleNamespace
from typing import Any

# 앱 임포트 전에 테스트용 설정 주입 — Test settings before the app is imported
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test_membership.db")
os.environ.setdefault("TRANSACTION_ISOLATION_LEVEL", "SERIALIZABLE")
os.environ.setdefault("LOG_FORMAT", "text")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from membership.api.deps import get_document_store
from membership.database import Base
from membership.main import app
from membership.models import Document  # noqa: F401  register model with metadata
from membership.repositories.document_store import DocumentStore


# ---------------------------------------------------------------------------
# SQLite 문서 저장소 — Function-scoped engine and store
# ---------------------------------------------------------------------------
@pytest_asyncio.fixture
async def engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """테스트별 SQLite 엔진. 스키마를 생성합니다."""
    eng = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'documents.db'}")
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
def store(engine: AsyncEngine) -> DocumentStore:
    """테스트 DB에 연결된 문서 저장소."""
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    return DocumentStore(factory, isolation_level="SERIALIZABLE")


@pytest_asyncio.fixture
async def client(store: DocumentStore) -> AsyncGenerator[AsyncClient, None]:
    """FastAPI 테스트 클라이언트 — 문서 저장소를 오버라이드합니다."""
    app.dependency_overrides[get_document_store] = lambda: store

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# 가짜 저장소 — In-memory store for validation unit tests
# ---------------------------------------------------------------------------
class FakeTransaction:
    """트랜잭션 시작 시점의 스냅샷을 보관하는 가짜 트랜잭션."""

    def __init__(self, snapshot: dict[str, dict[str, dict]]) -> None:
        self.snapshot = snapshot
        self.is_open = True


class FakeDocumentStore:
    """메모리 기반 문서 저장소. fail_with가 설정되면 모든 조회가 실패합니다."""

    def __init__(self) -> None:
        self.collections: dict[str, dict[str, dict]] = {}
        self.fail_with: Exception | None = None
        self.calls: list[tuple] = []

    def insert(self, collection: str, document_id: str, data: dict[str, Any] | None = None) -> None:
        self.collections.setdefault(collection, {})[document_id] = dict(data or {})

    def remove(self, collection: str, document_id: str) -> None:
        self.collections.get(collection, {}).pop(document_id, None)

    async def get_by_id(self, collection, document_id, transaction=None):
        self.calls.append(("get_by_id", collection, document_id, transaction))
        if self.fail_with is not None:
            raise self.fail_with
        if transaction is not None:
            if not transaction.is_open:
                raise RuntimeError("Transaction is no longer open")
            source = transaction.snapshot
        else:
            source = self.collections
        data = source.get(collection, {}).get(document_id)
        return None if data is None else SimpleNamespace(id=document_id, data=data)

    async def query_equals(self, collection, field, value):
        self.calls.append(("query_equals", collection, field, value))
        if self.fail_with is not None:
            raise self.fail_with
        return [
            SimpleNamespace(id=doc_id, data=data)
            for doc_id, data in self.collections.get(collection, {}).items()
            if field in data and data[field] == value and type(data[field]) is type(value)
        ]

    @asynccontextmanager
    async def begin_transaction(self) -> AsyncIterator[FakeTransaction]:
        transaction = FakeTransaction(copy.deepcopy(self.collections))
        try:
            yield transaction
        finally:
            transaction.is_open = False


@pytest.fixture
def fake_store() -> FakeDocumentStore:
    """빈 가짜 문서 저장소."""
    return FakeDocumentStore()
