"""등록 서비스 — 회원-과정, 회원-행사, 회원-그룹 관계 관리.

Enrollment Service — Member↔Course enrollments, Member↔Event registrations
and Member↔Group memberships, plus listings in both directions.

Write flow (한 트랜잭션 / one transaction):
    1. 회원 존재 확인 (member_exists through the transaction)
    2. 과정/행사/그룹 존재 확인 (course_exists / event_exists / group_exists)
    3. 기존 관계 확인, 중복이면 DuplicateError
    4. 관계 문서 저장 "{memberId}_{targetId}"

All three reads share the transaction's snapshot, so a member or course
deleted concurrently either is seen as missing or blocks the commit.
"""

import asyncio
from datetime import date

from membership.models.document import Document
from membership.repositories.document_store import DocumentStore
from membership.schemas.catalog import (
    CourseResponse,
    EnrollmentResponse,
    EventResponse,
    GroupResponse,
)
from membership.schemas.member import Member
from membership.services.validation_service import (
    COURSE_COLLECTION,
    EVENT_COLLECTION,
    GROUP_COLLECTION,
    MEMBER_COLLECTION,
    ValidationService,
)
from membership.utils.exceptions import DuplicateError, MissingFieldError, NotFoundError

# 관계 컬렉션 — Relation collections
MEMBER_COURSE_COLLECTION = "MemberCourse"
MEMBER_EVENT_COLLECTION = "MemberEvent"
MEMBER_GROUP_COLLECTION = "MemberGroup"

DEFAULT_COURSE_ROLE = "student"


def _relation_id(member_id: str, target_id: str) -> str:
    return f"{member_id}_{target_id}"


class EnrollmentService:
    """회원 관계 관련 비즈니스 로직을 처리하는 서비스.

    Service handling member relation business logic.
    """

    async def enroll_member_in_course(
        self,
        store: DocumentStore,
        member_id: str,
        course_id: str,
        role: str | None = None,
        enrollment_date: str | None = None,
    ) -> EnrollmentResponse:
        """회원을 과정에 등록합니다.

        Enroll a member in a course. Both references are checked inside the
        same transaction that writes the enrollment.

        Args:
            store: 문서 저장소 클라이언트 (Document store client)
            member_id: 회원 ID (Member id)
            course_id: 과정 ID (Course id)
            role: 과정 역할, 기본값 "student" (Course role)
            enrollment_date: 등록 일자, 기본값 오늘 (ISO date, defaults to today)

        Returns:
            EnrollmentResponse: 생성된 등록 (Created enrollment)

        Raises:
            NotFoundError: 회원 또는 과정이 없을 때 (Member or course missing)
            DuplicateError: 이미 등록된 경우 (Already enrolled)
            StoreAccessError: 저장소 조회 실패 시 (Underlying store failure)
        """
        validations = ValidationService(store)
        relation_id: str = _relation_id(member_id, course_id)
        body: dict = {
            "memberId": member_id,
            "courseId": course_id,
            "role": role or DEFAULT_COURSE_ROLE,
            "enrollmentDate": enrollment_date or date.today().isoformat(),
        }

        async with store.begin_transaction() as tx:
            if not await validations.member_exists(member_id, tx):
                raise NotFoundError(f"Member {member_id} not found")
            if not await validations.course_exists(course_id, tx):
                raise NotFoundError(f"Course {course_id} not found")
            if await validations.exists(MEMBER_COURSE_COLLECTION, relation_id, tx):
                raise DuplicateError("Member is already enrolled in this course")
            await tx.put(MEMBER_COURSE_COLLECTION, relation_id, body)

        return EnrollmentResponse(
            id=relation_id,
            member_id=member_id,
            target_id=course_id,
            role=body["role"],
            date=body["enrollmentDate"],
        )

    async def register_member_for_event(
        self,
        store: DocumentStore,
        member_id: str,
        event_id: str,
    ) -> EnrollmentResponse:
        """회원을 행사에 등록합니다.

        Register a member for an event, checking both references inside the
        writing transaction.

        Raises:
            NotFoundError: 회원 또는 행사가 없을 때 (Member or event missing)
            DuplicateError: 이미 등록된 경우 (Already registered)
        """
        validations = ValidationService(store)
        relation_id: str = _relation_id(member_id, event_id)
        body: dict = {
            "memberId": member_id,
            "eventId": event_id,
            "registrationDate": date.today().isoformat(),
        }

        async with store.begin_transaction() as tx:
            if not await validations.member_exists(member_id, tx):
                raise NotFoundError(f"Member {member_id} not found")
            if not await validations.event_exists(event_id, tx):
                raise NotFoundError(f"Event {event_id} not found")
            if await validations.exists(MEMBER_EVENT_COLLECTION, relation_id, tx):
                raise DuplicateError("Member is already registered for this event")
            await tx.put(MEMBER_EVENT_COLLECTION, relation_id, body)

        return EnrollmentResponse(
            id=relation_id,
            member_id=member_id,
            target_id=event_id,
            date=body["registrationDate"],
        )

    async def add_member_to_group(
        self,
        store: DocumentStore,
        member_id: str,
        group_id: str,
        member_roll: str | None,
        membership_date: str | None = None,
    ) -> EnrollmentResponse:
        """회원을 그룹에 추가합니다.

        Add a member to a group with their role in it (``memberRoll``). Both
        references are checked inside the writing transaction.

        Raises:
            MissingFieldError: memberRoll이 없을 때 (memberRoll missing)
            NotFoundError: 회원 또는 그룹이 없을 때 (Member or group missing)
            DuplicateError: 이미 그룹에 속한 경우 (Already a member of the group)
        """
        if not member_roll or not member_roll.strip():
            raise MissingFieldError("memberRoll")

        validations = ValidationService(store)
        relation_id: str = _relation_id(member_id, group_id)
        body: dict = {
            "memberId": member_id,
            "groupId": group_id,
            "memberRoll": member_roll,
            "date": membership_date or date.today().isoformat(),
        }

        async with store.begin_transaction() as tx:
            if not await validations.member_exists(member_id, tx):
                raise NotFoundError(f"Member {member_id} not found")
            if not await validations.group_exists(group_id, tx):
                raise NotFoundError(f"Group {group_id} not found")
            if await validations.exists(MEMBER_GROUP_COLLECTION, relation_id, tx):
                raise DuplicateError("Member already belongs to this group")
            await tx.put(MEMBER_GROUP_COLLECTION, relation_id, body)

        return EnrollmentResponse(
            id=relation_id,
            member_id=member_id,
            target_id=group_id,
            role=member_roll,
            date=body["date"],
        )

    async def remove_member_from_course(
        self, store: DocumentStore, member_id: str, course_id: str
    ) -> None:
        """과정 등록을 삭제합니다 (NotFoundError when not enrolled)."""
        deleted: bool = await store.delete(
            MEMBER_COURSE_COLLECTION, _relation_id(member_id, course_id)
        )
        if not deleted:
            raise NotFoundError("Enrollment not found")

    async def remove_member_from_event(
        self, store: DocumentStore, member_id: str, event_id: str
    ) -> None:
        """행사 등록을 삭제합니다 (NotFoundError when not registered)."""
        deleted: bool = await store.delete(
            MEMBER_EVENT_COLLECTION, _relation_id(member_id, event_id)
        )
        if not deleted:
            raise NotFoundError("Registration not found")

    async def remove_member_from_group(
        self, store: DocumentStore, member_id: str, group_id: str
    ) -> None:
        """그룹 가입을 삭제합니다 (NotFoundError when not a member)."""
        deleted: bool = await store.delete(
            MEMBER_GROUP_COLLECTION, _relation_id(member_id, group_id)
        )
        if not deleted:
            raise NotFoundError("Group membership not found")

    async def list_courses_of_member(
        self, store: DocumentStore, member_id: str
    ) -> list[CourseResponse]:
        """회원이 등록한 과정 목록을 조회합니다.

        List the courses a member is enrolled in. Enrollments pointing at
        courses that no longer exist are skipped.

        Raises:
            NotFoundError: 회원이 없을 때 (Member missing)
        """
        documents = await self._related_documents(
            store, MEMBER_COLLECTION, member_id,
            MEMBER_COURSE_COLLECTION, "memberId", "courseId", COURSE_COLLECTION,
        )
        return [CourseResponse.model_validate(d.to_dict()) for d in documents]

    async def list_events_of_member(
        self, store: DocumentStore, member_id: str
    ) -> list[EventResponse]:
        """회원이 등록한 행사 목록을 조회합니다 (Events a member is registered for)."""
        documents = await self._related_documents(
            store, MEMBER_COLLECTION, member_id,
            MEMBER_EVENT_COLLECTION, "memberId", "eventId", EVENT_COLLECTION,
        )
        return [EventResponse.model_validate(d.to_dict()) for d in documents]

    async def list_groups_of_member(
        self, store: DocumentStore, member_id: str
    ) -> list[GroupResponse]:
        """회원이 속한 그룹 목록을 조회합니다 (Groups a member belongs to)."""
        documents = await self._related_documents(
            store, MEMBER_COLLECTION, member_id,
            MEMBER_GROUP_COLLECTION, "memberId", "groupId", GROUP_COLLECTION,
        )
        return [GroupResponse.model_validate(d.to_dict()) for d in documents]

    async def list_members_of_course(
        self, store: DocumentStore, course_id: str
    ) -> list[Member]:
        """과정에 등록한 회원 목록을 조회합니다.

        List the members enrolled in a course, skipping members that no
        longer exist.

        Raises:
            NotFoundError: 과정이 없을 때 (Course missing)
        """
        documents = await self._related_documents(
            store, COURSE_COLLECTION, course_id,
            MEMBER_COURSE_COLLECTION, "courseId", "memberId", MEMBER_COLLECTION,
        )
        return [Member.model_validate(d.to_dict()) for d in documents]

    async def list_members_of_event(
        self, store: DocumentStore, event_id: str
    ) -> list[Member]:
        """행사에 등록한 회원 목록을 조회합니다 (Members registered for an event)."""
        documents = await self._related_documents(
            store, EVENT_COLLECTION, event_id,
            MEMBER_EVENT_COLLECTION, "eventId", "memberId", MEMBER_COLLECTION,
        )
        return [Member.model_validate(d.to_dict()) for d in documents]

    async def list_members_of_group(
        self, store: DocumentStore, group_id: str
    ) -> list[Member]:
        """그룹에 속한 회원 목록을 조회합니다 (Members of a group)."""
        documents = await self._related_documents(
            store, GROUP_COLLECTION, group_id,
            MEMBER_GROUP_COLLECTION, "groupId", "memberId", MEMBER_COLLECTION,
        )
        return [Member.model_validate(d.to_dict()) for d in documents]

    async def _related_documents(
        self,
        store: DocumentStore,
        owner_collection: str,
        owner_id: str,
        relation_collection: str,
        owner_field: str,
        target_field: str,
        target_collection: str,
    ) -> list[Document]:
        validations = ValidationService(store)
        if not await validations.exists(owner_collection, owner_id):
            raise NotFoundError(f"{owner_collection} {owner_id} not found")

        relations = await store.query_equals(relation_collection, owner_field, owner_id)
        # 독립 조회는 동시에 실행 가능 — Independent reads may run concurrently
        targets = await asyncio.gather(
            *(store.get_by_id(target_collection, r.data[target_field]) for r in relations)
        )
        return [t for t in targets if t is not None]


# 싱글턴 인스턴스 — Singleton instance
enrollment_service: EnrollmentService = EnrollmentService()
