"""검증 서비스 — 참조 무결성 및 고유성 검사.

Validation Service — Referential and uniqueness checks against the document store.

Checks (검사 종류):
    - exists: 컬렉션 내 문서 존재 여부, 선택적으로 트랜잭션 스냅샷에서 조회
      (Document existence, optionally read through a caller-supplied transaction)
    - member_exists / course_exists / event_exists / group_exists:
      컬렉션이 고정된 존재 검사 (Existence checks bound to one collection)
    - validate_event_date: 행사 일자 필수 검사 (Event date presence check)
    - is_unique: 필드 값 고유성 검사, 트랜잭션 미적용
      (Field-value uniqueness; never transactional)

Consistency:
    Checks that share one DocumentTransaction observe the same snapshot and must
    be awaited one after another. is_unique always reads independently, so two
    concurrent inserts of the same value can both see "unique"; callers that
    need a hard guarantee must enforce it at write time.

Store failures are logged here and re-raised as StoreAccessError chaining the
original exception; they are never reported as "does not exist".
"""

import logging
from typing import Any

from membership.repositories.document_store import DocumentStoreClient, DocumentTransaction
from membership.utils.exceptions import MissingFieldError, StoreAccessError

logger = logging.getLogger(__name__)

# 컬렉션 이름 — Collection names in the document store
MEMBER_COLLECTION = "Member"
COURSE_COLLECTION = "Course"
EVENT_COLLECTION = "Event"
GROUP_COLLECTION = "Group"

_SCALAR_TYPES = (str, int, float, bool)


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class ValidationService:
    """문서 저장소에 대한 검증 로직을 처리하는 서비스.

    Stateless service wrapping a document store client. Holds nothing but the
    store reference, so one instance can be shared per process or built per
    request.
    """

    __slots__ = ("_store",)

    def __init__(self, store: DocumentStoreClient) -> None:
        self._store: DocumentStoreClient = store

    @property
    def store(self) -> DocumentStoreClient:
        return self._store

    async def exists(
        self,
        collection: str,
        document_id: str,
        transaction: DocumentTransaction | None = None,
    ) -> bool:
        """컬렉션에 해당 ID의 문서가 존재하는지 확인합니다.

        Check whether a document with ``document_id`` exists in ``collection``.
        With ``transaction`` the read joins that transaction's snapshot;
        otherwise it is an independent read. Document contents are not inspected.

        Args:
            collection: 컬렉션 이름 (Collection name, non-empty)
            document_id: 문서 ID (Document id, non-empty)
            transaction: 열려 있는 트랜잭션 핸들 (Open transaction handle, optional)

        Returns:
            bool: 문서 존재 여부 (Whether the document exists)

        Raises:
            MissingFieldError: collection 또는 document_id가 비어 있을 때
            StoreAccessError: 저장소 조회 실패 시 (Underlying store failure)
        """
        if _is_blank(collection):
            raise MissingFieldError("collection")
        if _is_blank(document_id):
            raise MissingFieldError("document_id")

        try:
            document = await self._store.get_by_id(collection, document_id, transaction)
        except StoreAccessError:
            raise
        except Exception as exc:
            logger.error(
                "Existence check failed for %s/%s", collection, document_id, exc_info=exc
            )
            raise StoreAccessError("exists", collection, document_id) from exc
        return document is not None

    async def member_exists(
        self, member_id: str, transaction: DocumentTransaction | None = None
    ) -> bool:
        """회원 존재 여부 (Whether the member exists)."""
        return await self.exists(MEMBER_COLLECTION, member_id, transaction)

    async def course_exists(
        self, course_id: str, transaction: DocumentTransaction | None = None
    ) -> bool:
        """과정 존재 여부 (Whether the course exists)."""
        return await self.exists(COURSE_COLLECTION, course_id, transaction)

    async def event_exists(
        self, event_id: str, transaction: DocumentTransaction | None = None
    ) -> bool:
        """행사 존재 여부 (Whether the event exists)."""
        return await self.exists(EVENT_COLLECTION, event_id, transaction)

    async def group_exists(
        self, group_id: str, transaction: DocumentTransaction | None = None
    ) -> bool:
        """그룹 존재 여부 (Whether the group exists)."""
        return await self.exists(GROUP_COLLECTION, group_id, transaction)

    @staticmethod
    def validate_event_date(date: Any) -> bool:
        """행사 일자가 주어졌는지 확인합니다.

        Only presence is checked; format and range rules are not applied.

        Raises:
            MissingFieldError: 일자가 없거나 비어 있을 때 (Date absent or empty)
        """
        if _is_blank(date):
            raise MissingFieldError("date")
        return True

    async def is_unique(
        self,
        collection: str,
        field: str,
        value: Any,
        *,
        exclude_id: str | None = None,
    ) -> bool:
        """컬렉션 내에서 필드 값이 고유한지 확인합니다.

        Check that no document in ``collection`` has ``field`` equal to ``value``.
        Always an independent read, never part of a transaction.

        Args:
            collection: 컬렉션 이름 (Collection name, non-empty)
            field: 필드 이름 (Field name, non-empty)
            value: 비교할 스칼라 값 (str, int, float or bool)
            exclude_id: 무시할 문서 ID, 수정 시 자기 자신 제외
                (Document id to ignore, so an update does not collide with itself)

        Returns:
            bool: 일치하는 문서가 없으면 True (True when no document matches)

        Raises:
            MissingFieldError: collection 또는 field가 비어 있을 때
            TypeError: value가 스칼라가 아닐 때 (Non-scalar value)
            StoreAccessError: 저장소 조회 실패 시 (Underlying store failure)
        """
        if _is_blank(collection):
            raise MissingFieldError("collection")
        if _is_blank(field):
            raise MissingFieldError("field")
        if not isinstance(value, _SCALAR_TYPES):
            raise TypeError(
                f"Uniqueness value must be a scalar, got {type(value).__name__}"
            )

        try:
            matches = await self._store.query_equals(collection, field, value)
        except StoreAccessError:
            raise
        except Exception as exc:
            logger.error(
                "Uniqueness check failed for %s.%s", collection, field, exc_info=exc
            )
            raise StoreAccessError("is_unique", collection, field) from exc
        return not any(doc.id != exclude_id for doc in matches)
