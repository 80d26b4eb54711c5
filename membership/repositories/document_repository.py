"""문서 레포지토리 — 컬렉션 단위 문서 쿼리.

Document Repository — Session-level queries against the documents table.
Every method takes the AsyncSession to run on, so the same queries serve
both independent reads and reads inside a caller-owned transaction.

Usage:
    doc = await document_repository.get(db, "Member", member_id)
    docs = await document_repository.find_by_field(db, "Member", "email", email)
    docs, total = await document_repository.get_paginated(db, "Course", page=2, per_page=10)
"""

from typing import Any, Sequence

from sqlalchemy import ColumnElement, Select, String, case, func, literal, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.sql.functions import FunctionElement

from membership.models.document import Document

# 필드 동등 비교가 가능한 스칼라 타입 — Scalar types supported by field-equality queries
Scalar = str | int | float | bool

# JSON 값 타입 이름 (SQLite json_type / PostgreSQL jsonb_typeof)
# JSON value type names as reported by SQLite json_type and PostgreSQL jsonb_typeof
_BOOLEAN_TYPES: tuple[str, ...] = ("true", "false", "boolean")
_NUMBER_TYPES: tuple[str, ...] = ("integer", "real", "number")
_STRING_TYPES: tuple[str, ...] = ("text", "string")

# 접두사 검색 상한 문자 — Upper bound appended to a prefix for range search
_PREFIX_UPPER_BOUND = "\uf8ff"


class json_field_type(FunctionElement):
    """문서 본문 필드의 JSON 타입 이름을 반환하는 SQL 함수.

    SQL expression returning the JSON type name of one body field.
    Compiles to ``json_type`` on SQLite and ``jsonb_typeof`` on PostgreSQL.
    """

    name = "json_field_type"
    type = String()
    inherit_cache = True

    def __init__(self, column: Any, field: str) -> None:
        super().__init__(column, column[field], literal(f'$."{field}"'))


@compiles(json_field_type)
def _compile_json_type(element: json_field_type, compiler: Any, **kw: Any) -> str:
    column, _, path = list(element.clauses)
    return f"json_type({compiler.process(column, **kw)}, {compiler.process(path, **kw)})"


@compiles(json_field_type, "postgresql")
def _compile_jsonb_typeof(element: json_field_type, compiler: Any, **kw: Any) -> str:
    _, indexed, _ = list(element.clauses)
    return f"jsonb_typeof({compiler.process(indexed, **kw)})"


def _field_equals(field: str, value: Scalar) -> ColumnElement[bool]:
    """JSON 필드와 스칼라 값의 정확한 동등 조건을 만듭니다.

    Build an exact-equality predicate between a JSON body field and a scalar.
    The field is only cast when its JSON type matches the value's type, so a
    stored ``1`` never equals ``True`` and a stored string is never cast to a
    number. bool is checked before int because bool is a subclass of int.
    """
    element = Document.data[field]
    field_type = json_field_type(Document.data, field)
    if isinstance(value, bool):
        types, extracted = _BOOLEAN_TYPES, element.as_boolean()
    elif isinstance(value, (int, float)):
        types, extracted = _NUMBER_TYPES, element.as_float()
    elif isinstance(value, str):
        types, extracted = _STRING_TYPES, element.as_string()
    else:
        raise TypeError(f"Unsupported value type for equality query: {type(value).__name__}")
    # CASE로 타입 확인 후에만 캐스팅 — Cast only after the type check
    return case((field_type.in_(types), extracted), else_=None) == value


class DocumentRepository:
    """문서 테이블에 대한 데이터베이스 쿼리를 담당하는 레포지토리.

    Repository handling database queries for the documents table.
    Holds no state; every call runs on the session it is given.
    """

    async def get(
        self,
        db: AsyncSession,
        collection: str,
        document_id: str,
    ) -> Document | None:
        """ID로 단일 문서를 조회합니다.

        Retrieve a single document by collection and id.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            collection: 컬렉션 이름 (Collection name)
            document_id: 문서 ID (Document id)

        Returns:
            Document | None: 조회된 문서 또는 None (Found document or None)
        """
        query: Select = select(Document).where(
            Document.collection == collection,
            Document.id == document_id,
        )
        result = await db.execute(query)
        return result.scalar_one_or_none()

    async def find_by_field(
        self,
        db: AsyncSession,
        collection: str,
        field: str,
        value: Scalar,
    ) -> Sequence[Document]:
        """필드 값이 정확히 일치하는 문서를 조회합니다.

        Retrieve all documents in a collection whose body field equals ``value``.
        Equality only; no range or fuzzy matching.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            collection: 컬렉션 이름 (Collection name)
            field: 문서 본문 필드 이름 (Body field name)
            value: 비교할 스칼라 값 (Scalar to compare against)

        Returns:
            Sequence[Document]: 일치하는 문서 목록 (Matching documents)
        """
        query: Select = (
            select(Document)
            .where(Document.collection == collection)
            .where(_field_equals(field, value))
            .order_by(Document.id)
        )
        result = await db.execute(query)
        return result.scalars().all()

    async def get_paginated(
        self,
        db: AsyncSession,
        collection: str,
        page: int = 1,
        per_page: int = 20,
        order_field: str = "name",
        prefix: str | None = None,
    ) -> tuple[Sequence[Document], int]:
        """페이지네이션된 문서 목록을 조회합니다.

        Retrieve one page of a collection ordered by a body field, optionally
        limited to documents whose field starts with ``prefix``.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            collection: 컬렉션 이름 (Collection name)
            page: 페이지 번호, 1부터 시작 (Page number, 1-based)
            per_page: 페이지당 항목 수 (Items per page)
            order_field: 정렬 기준 필드 (Body field to order and search by)
            prefix: 접두사 검색어 (Optional prefix search term)

        Returns:
            tuple[Sequence[Document], int]: (문서 목록, 전체 개수) (Items, total count)
        """
        ordered = Document.data[order_field].as_string()
        query: Select = select(Document).where(Document.collection == collection)
        if prefix:
            query = query.where(ordered >= prefix, ordered <= prefix + _PREFIX_UPPER_BOUND)

        count_query = select(func.count()).select_from(query.subquery())
        total: int = (await db.execute(count_query)).scalar() or 0

        offset: int = (page - 1) * per_page
        result = await db.execute(
            query.order_by(ordered, Document.id).offset(offset).limit(per_page)
        )
        return result.scalars().all(), total

    async def upsert(
        self,
        db: AsyncSession,
        collection: str,
        document_id: str,
        data: dict[str, Any],
    ) -> Document:
        """문서를 생성하거나 본문을 교체합니다.

        Create a document, or replace the body of an existing one.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            collection: 컬렉션 이름 (Collection name)
            document_id: 문서 ID (Document id)
            data: 저장할 본문 (Body to store, ``id`` key excluded)

        Returns:
            Document: 저장된 문서 (The stored document)
        """
        body: dict[str, Any] = {k: v for k, v in data.items() if k != "id"}
        db_obj: Document | None = await self.get(db, collection, document_id)
        if db_obj is None:
            db_obj = Document(collection=collection, id=document_id, data=body)
            db.add(db_obj)
        else:
            db_obj.data = body

        await db.flush()
        await db.refresh(db_obj)
        return db_obj

    async def delete(
        self,
        db: AsyncSession,
        collection: str,
        document_id: str,
    ) -> bool:
        """문서를 삭제합니다.

        Delete a document by collection and id.

        Returns:
            bool: 삭제 성공 여부 (Whether a document was deleted)
        """
        db_obj: Document | None = await self.get(db, collection, document_id)
        if db_obj is None:
            return False

        await db.delete(db_obj)
        await db.flush()
        return True


# 싱글턴 인스턴스 — Singleton instance
document_repository: DocumentRepository = DocumentRepository()
