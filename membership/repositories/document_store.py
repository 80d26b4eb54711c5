"""문서 저장소 클라이언트 — 독립 조회와 트랜잭션 컨텍스트.

Document Store Client — Independent reads and transaction contexts.

The validation layer only depends on the DocumentStoreClient protocol:
by-id lookup (optionally through a transaction), field-equality queries,
and ``begin_transaction``. DocumentStore is the SQLAlchemy implementation:

    - 독립 조회: 호출마다 새 세션 (Independent read: a fresh session per call)
    - 트랜잭션: 하나의 세션/연결을 격리 수준과 함께 열고, 정상 종료 시 커밋,
      예외 시 롤백 (Transaction: one session opened with the configured
      isolation level; commit on clean exit, rollback on exception)

Usage:
    async with store.begin_transaction() as tx:
        member = await store.get_by_id("Member", member_id, tx)
        await tx.put("MemberCourse", relation_id, {...})
"""

import logging
from collections.abc import AsyncIterator, Iterator
from contextlib import AbstractAsyncContextManager, asynccontextmanager, contextmanager
from typing import Any, Protocol, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from membership.models.document import Document
from membership.repositories.document_repository import Scalar, document_repository
from membership.utils.exceptions import StoreAccessError

logger = logging.getLogger(__name__)


@contextmanager
def _store_errors(operation: str, collection: str, target: str) -> Iterator[None]:
    """데이터베이스 오류를 StoreAccessError로 변환합니다.

    Log a database or connection failure and re-raise it as StoreAccessError
    chaining the original exception.
    """
    try:
        yield
    except (SQLAlchemyError, OSError) as exc:
        logger.error(
            "Document store %s failed for %s/%s", operation, collection, target, exc_info=exc
        )
        raise StoreAccessError(operation, collection, target) from exc



class TransactionClosedError(RuntimeError):
    """이미 종료된 트랜잭션을 사용하려 할 때 발생합니다.

    Raised when a transaction handle is used after commit or rollback.
    """


class DocumentTransaction:
    """하나의 일관된 스냅샷을 공유하는 트랜잭션 핸들.

    Transaction handle scoping reads and writes to one consistent snapshot.
    Only obtainable from ``DocumentStore.begin_transaction``; unusable once the
    surrounding ``async with`` block exits.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session: AsyncSession = session
        self._open: bool = True

    @property
    def is_open(self) -> bool:
        return self._open

    def _close(self) -> None:
        self._open = False

    def _require_session(self) -> AsyncSession:
        if not self._open:
            raise TransactionClosedError("Transaction is no longer open")
        return self._session

    async def get(self, collection: str, document_id: str) -> Document | None:
        """트랜잭션 스냅샷에서 문서를 조회합니다 (Read through this transaction)."""
        session = self._require_session()
        with _store_errors("get", collection, document_id):
            return await document_repository.get(session, collection, document_id)

    async def put(self, collection: str, document_id: str, data: dict[str, Any]) -> Document:
        """트랜잭션 안에서 문서를 저장합니다 (Write as part of this transaction)."""
        session = self._require_session()
        with _store_errors("put", collection, document_id):
            return await document_repository.upsert(session, collection, document_id, data)

    async def delete(self, collection: str, document_id: str) -> bool:
        """트랜잭션 안에서 문서를 삭제합니다 (Delete as part of this transaction)."""
        session = self._require_session()
        with _store_errors("delete", collection, document_id):
            return await document_repository.delete(session, collection, document_id)


class DocumentStoreClient(Protocol):
    """검증 계층이 사용하는 문서 저장소 인터페이스.

    Document store capability consumed by the validation layer.
    Any error raised by an implementation is treated as opaque.
    """

    async def get_by_id(
        self,
        collection: str,
        document_id: str,
        transaction: DocumentTransaction | None = None,
    ) -> Document | None: ...

    async def query_equals(
        self,
        collection: str,
        field: str,
        value: Scalar,
    ) -> Sequence[Document]: ...

    def begin_transaction(self) -> AbstractAsyncContextManager[DocumentTransaction]: ...


class DocumentStore:
    """SQLAlchemy 기반 문서 저장소 클라이언트.

    SQLAlchemy-backed document store client. Database and connection errors
    from every operation surface as StoreAccessError (HTTP 503).

    Attributes:
        session_factory: 비동기 세션 팩토리 (Async session factory)
        isolation_level: 트랜잭션 격리 수준, None이면 드라이버 기본값
                         (Transaction isolation level; None keeps the driver default)
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        isolation_level: str | None = None,
    ) -> None:
        self.session_factory: async_sessionmaker[AsyncSession] = session_factory
        self.isolation_level: str | None = isolation_level or None

    async def get_by_id(
        self,
        collection: str,
        document_id: str,
        transaction: DocumentTransaction | None = None,
    ) -> Document | None:
        """ID로 문서를 조회합니다. 트랜잭션이 주어지면 그 스냅샷에서 읽습니다.

        Look up a document by id, through ``transaction`` when one is given,
        otherwise as an independent read.
        """
        if transaction is not None:
            return await transaction.get(collection, document_id)

        with _store_errors("get", collection, document_id):
            async with self.session_factory() as session:
                return await document_repository.get(session, collection, document_id)

    async def query_equals(
        self,
        collection: str,
        field: str,
        value: Scalar,
    ) -> Sequence[Document]:
        """필드 동등 조건으로 문서를 조회합니다 (항상 독립 조회).

        Find documents whose ``field`` equals ``value``. Always an independent read.
        """
        with _store_errors("query", collection, field):
            async with self.session_factory() as session:
                return await document_repository.find_by_field(session, collection, field, value)

    async def list_page(
        self,
        collection: str,
        page: int = 1,
        per_page: int = 20,
        order_field: str = "name",
        prefix: str | None = None,
    ) -> tuple[Sequence[Document], int]:
        """컬렉션의 한 페이지를 조회합니다 (항상 독립 조회).

        Fetch one page of ``collection`` ordered by ``order_field``, optionally
        restricted to values starting with ``prefix``.

        Returns:
            tuple[Sequence[Document], int]: (문서 목록, 전체 개수) (Items, total count)
        """
        with _store_errors("list", collection, order_field):
            async with self.session_factory() as session:
                return await document_repository.get_paginated(
                    session, collection, page, per_page, order_field, prefix
                )

    async def put(self, collection: str, document_id: str, data: dict[str, Any]) -> Document:
        """단일 문서를 독립 트랜잭션으로 저장합니다 (Store one document and commit)."""
        with _store_errors("put", collection, document_id):
            async with self.session_factory() as session:
                document: Document = await document_repository.upsert(
                    session, collection, document_id, data
                )
                await session.commit()
                return document

    async def delete(self, collection: str, document_id: str) -> bool:
        """단일 문서를 독립 트랜잭션으로 삭제합니다 (Delete one document and commit)."""
        with _store_errors("delete", collection, document_id):
            async with self.session_factory() as session:
                deleted: bool = await document_repository.delete(session, collection, document_id)
                await session.commit()
                return deleted

    @asynccontextmanager
    async def begin_transaction(self) -> AsyncIterator[DocumentTransaction]:
        """하나의 스냅샷을 공유하는 트랜잭션을 엽니다.

        Open a transaction whose reads share one snapshot. Commits when the
        block exits cleanly, rolls back when it raises; the handle is closed
        either way. A failed commit surfaces as StoreAccessError.

        Yields:
            DocumentTransaction: 트랜잭션 핸들 (Transaction handle)
        """
        async with self.session_factory() as session:
            if self.isolation_level is not None:
                # 첫 쿼리 전에 연결의 격리 수준 고정 — Pin isolation before the first statement
                with _store_errors("begin", "transaction", self.isolation_level):
                    await session.connection(
                        execution_options={"isolation_level": self.isolation_level}
                    )
            transaction = DocumentTransaction(session)
            try:
                yield transaction
            except Exception:
                logger.debug("Rolling back document store transaction")
                await session.rollback()
                raise
            else:
                with _store_errors("commit", "transaction", "-"):
                    await session.commit()
            finally:
                transaction._close()
