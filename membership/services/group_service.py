"""그룹 서비스 — 그룹 생성, 조회, 수정, 삭제 비즈니스 로직.

Group Service — Business logic for member groups.

Field rules (생성/수정 공통):
    - name: 필수, 공백 제거 후 3~50자 (Required, 3-50 characters after trimming)
    - description: 최대 500자 (At most 500 characters)
    - note: 최대 1000자 (At most 1000 characters)
"""

import logging
import uuid

from membership.models.document import Document
from membership.repositories.document_store import DocumentStore
from membership.schemas.catalog import GroupCreate, GroupResponse, GroupUpdate
from membership.services.validation_service import GROUP_COLLECTION, ValidationService
from membership.utils.exceptions import (
    DuplicateError,
    FieldValidationError,
    MissingFieldError,
    NotFoundError,
)
from membership.utils.pagination import Page, build_page

logger = logging.getLogger(__name__)

# 필드 길이 제한 — (field, min, max)
_LENGTH_LIMITS: tuple[tuple[str, int, int], ...] = (
    ("name", 3, 50),
    ("description", 0, 500),
    ("note", 0, 1000),
)


def _clean(changes: dict) -> dict:
    """문자열 값의 앞뒤 공백을 제거합니다 (Trim string values)."""
    return {k: v.strip() if isinstance(v, str) else v for k, v in changes.items()}


def _check_fields(changes: dict) -> None:
    if "name" in changes and not changes["name"]:
        raise MissingFieldError("name")
    for field, minimum, maximum in _LENGTH_LIMITS:
        value = changes.get(field)
        if value is None:
            continue
        if not minimum <= len(value) <= maximum:
            raise FieldValidationError(
                field, f"Field '{field}' must be between {minimum} and {maximum} characters"
            )


class GroupService:
    """그룹 관련 비즈니스 로직을 처리하는 서비스.

    Service handling group business logic.
    """

    async def create_group(
        self,
        store: DocumentStore,
        data: GroupCreate,
    ) -> GroupResponse:
        """새 그룹을 생성합니다.

        Create a new group. An id is generated when none is supplied.

        Raises:
            MissingFieldError: 이름이 없을 때 (Name missing)
            FieldValidationError: 길이 제한 위반 (Length limit violated)
            DuplicateError: 같은 ID의 그룹이 이미 존재할 때 (Group id taken)
        """
        fields: dict = _clean(data.model_dump(exclude_none=True))
        group_id: str = fields.pop("id", None) or uuid.uuid4().hex
        fields.setdefault("name", None)
        _check_fields(fields)

        validations = ValidationService(store)
        if await validations.group_exists(group_id):
            raise DuplicateError("A group with this id already exists")

        document: Document = await store.put(GROUP_COLLECTION, group_id, fields)
        logger.info("Created group %s", group_id)
        return GroupResponse.model_validate(document.to_dict())

    async def get_group(self, store: DocumentStore, group_id: str) -> GroupResponse:
        """그룹을 조회합니다 (NotFoundError if absent)."""
        document: Document | None = await store.get_by_id(GROUP_COLLECTION, group_id)
        if document is None:
            raise NotFoundError("Group not found")
        return GroupResponse.model_validate(document.to_dict())

    async def update_group(
        self,
        store: DocumentStore,
        group_id: str,
        data: GroupUpdate,
    ) -> GroupResponse:
        """그룹을 수정합니다.

        Update a group with the fields present in ``data``.

        Raises:
            NotFoundError: 그룹이 없을 때 (Group not found)
            MissingFieldError / FieldValidationError: 필드 규칙 위반
        """
        document: Document | None = await store.get_by_id(GROUP_COLLECTION, group_id)
        if document is None:
            raise NotFoundError("Group not found")

        changes: dict = _clean(data.model_dump(exclude_unset=True))
        _check_fields(changes)

        document = await store.put(GROUP_COLLECTION, group_id, {**document.data, **changes})
        return GroupResponse.model_validate(document.to_dict())

    async def delete_group(self, store: DocumentStore, group_id: str) -> None:
        """그룹을 삭제합니다 (NotFoundError if absent)."""
        if not await store.delete(GROUP_COLLECTION, group_id):
            raise NotFoundError("Group not found")
        logger.info("Deleted group %s", group_id)

    async def list_groups(
        self,
        store: DocumentStore,
        page: int = 1,
        per_page: int = 20,
        search: str | None = None,
    ) -> Page[GroupResponse]:
        """그룹 목록을 이름순으로 조회합니다 (name prefix search optional)."""
        documents, total = await store.list_page(
            GROUP_COLLECTION, page, per_page, order_field="name", prefix=search
        )
        groups = [GroupResponse.model_validate(d.to_dict()) for d in documents]
        return build_page(groups, total, page, per_page)


# 싱글턴 인스턴스 — Singleton instance
group_service: GroupService = GroupService()
