"""회원 서비스 — 회원 생성, 조회, 수정, 삭제 비즈니스 로직.

Member Service — Business logic for the member lifecycle.
Creation and update both run the member factory and check email uniqueness
before writing the member document.
"""

import logging
import uuid

from membership.models.document import Document
from membership.repositories.document_store import DocumentStore
from membership.schemas.member import Member, MemberCreate, MemberUpdate
from membership.services.member_factory import construct_member
from membership.services.validation_service import MEMBER_COLLECTION, ValidationService
from membership.utils.exceptions import DuplicateError, NotFoundError
from membership.utils.pagination import Page, build_page

logger = logging.getLogger(__name__)


class MemberService:
    """회원 관련 비즈니스 로직을 처리하는 서비스.

    Service handling member business logic.
    """

    async def create_member(
        self,
        store: DocumentStore,
        data: MemberCreate,
    ) -> Member:
        """새 회원을 생성합니다.

        Create a new member. An id is generated when none is supplied.

        Args:
            store: 문서 저장소 클라이언트 (Document store client)
            data: 회원 생성 데이터 (Member creation data)

        Returns:
            Member: 생성된 회원 (Created member)

        Raises:
            MissingFieldError / InvalidEnumError / InvalidFormatError: 구조 검증 실패
            DuplicateError: 같은 ID 또는 이메일의 회원이 이미 존재할 때
                            (When a member with the same id or email already exists)
        """
        fields: dict = data.model_dump(exclude_none=True)
        fields.setdefault("id", uuid.uuid4().hex)
        member: Member = construct_member(fields)

        validations = ValidationService(store)
        if await validations.member_exists(member.id):
            raise DuplicateError("A member with this id already exists")

        # 이메일 중복 확인, 트랜잭션 미적용 (Email uniqueness; not transactional)
        if member.email is not None:
            if not await validations.is_unique(MEMBER_COLLECTION, "email", member.email):
                raise DuplicateError("A member with this email already exists")

        await store.put(MEMBER_COLLECTION, member.id, member.to_document())
        logger.info("Created member %s", member.id)
        return member

    async def get_member(
        self,
        store: DocumentStore,
        member_id: str,
    ) -> Member:
        """회원을 조회합니다.

        Retrieve a member by id.

        Raises:
            NotFoundError: 회원을 찾을 수 없을 때 (Member not found)
        """
        document: Document | None = await store.get_by_id(MEMBER_COLLECTION, member_id)
        if document is None:
            raise NotFoundError("Member not found")
        return Member.model_validate(document.to_dict())

    async def update_member(
        self,
        store: DocumentStore,
        member_id: str,
        data: MemberUpdate,
    ) -> Member:
        """회원 정보를 수정합니다.

        Update a member. The fields in ``data`` are merged over the stored
        member and the result goes through the member factory again, so the
        same ordered checks apply as on creation.

        Raises:
            NotFoundError: 회원을 찾을 수 없을 때 (Member not found)
            MissingFieldError / InvalidEnumError / InvalidFormatError: 구조 검증 실패
            DuplicateError: 다른 회원이 같은 이메일을 사용 중일 때
                            (Another member already uses the email)
        """
        document: Document | None = await store.get_by_id(MEMBER_COLLECTION, member_id)
        if document is None:
            raise NotFoundError("Member not found")

        fields: dict = {
            **document.to_dict(),
            **data.model_dump(by_alias=True, exclude_unset=True),
            "id": member_id,
        }
        member: Member = construct_member(fields)

        if member.email is not None:
            validations = ValidationService(store)
            if not await validations.is_unique(
                MEMBER_COLLECTION, "email", member.email, exclude_id=member_id
            ):
                raise DuplicateError("A member with this email already exists")

        await store.put(MEMBER_COLLECTION, member_id, member.to_document())
        logger.info("Updated member %s", member_id)
        return member

    async def delete_member(self, store: DocumentStore, member_id: str) -> None:
        """회원을 삭제합니다 (NotFoundError when absent).

        Relation documents are left in place; member listings skip targets
        that no longer exist.
        """
        if not await store.delete(MEMBER_COLLECTION, member_id):
            raise NotFoundError("Member not found")
        logger.info("Deleted member %s", member_id)

    async def list_members(
        self,
        store: DocumentStore,
        page: int = 1,
        per_page: int = 20,
        search: str | None = None,
    ) -> Page[Member]:
        """회원 목록을 이름순으로 조회합니다.

        List members ordered by name, optionally limited to names starting
        with ``search``.

        Args:
            store: 문서 저장소 클라이언트 (Document store client)
            page: 페이지 번호, 1부터 시작 (Page number, 1-based)
            per_page: 페이지당 항목 수 (Items per page)
            search: 이름 접두사 검색어 (Name prefix, case-sensitive)

        Returns:
            Page[Member]: 회원 페이지 (One page of members)
        """
        documents, total = await store.list_page(
            MEMBER_COLLECTION, page, per_page, order_field="name", prefix=search
        )
        members = [Member.model_validate(d.to_dict()) for d in documents]
        return build_page(members, total, page, per_page)


# 싱글턴 인스턴스 — Singleton instance
member_service: MemberService = MemberService()
