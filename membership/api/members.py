"""회원 라우터 — 회원 관리 및 과정·행사·그룹 관계 엔드포인트.

Member Router — Member CRUD and course/event/group relation endpoints.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from membership.api.deps import get_document_store
from membership.repositories.document_store import DocumentStore
from membership.schemas.catalog import (
    CourseResponse,
    EnrollmentCreate,
    EnrollmentResponse,
    EventResponse,
    GroupMembershipCreate,
    GroupResponse,
)
from membership.schemas.member import Member, MemberCreate, MemberUpdate
from membership.services.enrollment_service import enrollment_service
from membership.services.member_service import member_service
from membership.utils.pagination import MAX_PER_PAGE, Page

router: APIRouter = APIRouter()


@router.get("", response_model=Page[Member])
async def list_members(
    store: Annotated[DocumentStore, Depends(get_document_store)],
    page: Annotated[int, Query(ge=1)] = 1,
    per_page: Annotated[int, Query(ge=1, le=MAX_PER_PAGE)] = 20,
    search: Annotated[str | None, Query(description="이름 접두사 검색")] = None,
) -> Page[Member]:
    """회원 목록을 이름순으로 조회합니다 (Paginated member list, name prefix search)."""
    return await member_service.list_members(store, page, per_page, search)


@router.post("", response_model=Member, status_code=201)
async def create_member(
    data: MemberCreate,
    store: Annotated[DocumentStore, Depends(get_document_store)],
) -> Member:
    """새 회원을 생성합니다.

    Create a new member (400 on invalid fields, 409 on duplicate email).
    """
    return await member_service.create_member(store, data)


@router.get("/{member_id}", response_model=Member)
async def get_member(
    member_id: str,
    store: Annotated[DocumentStore, Depends(get_document_store)],
) -> Member:
    """회원을 조회합니다 (Retrieve a member)."""
    return await member_service.get_member(store, member_id)


@router.put("/{member_id}", response_model=Member)
async def update_member(
    member_id: str,
    data: MemberUpdate,
    store: Annotated[DocumentStore, Depends(get_document_store)],
) -> Member:
    """회원 정보를 수정합니다.

    Update a member (400 on invalid fields, 404 when missing, 409 when the
    email belongs to another member).
    """
    return await member_service.update_member(store, member_id, data)


@router.delete("/{member_id}", status_code=204)
async def delete_member(
    member_id: str,
    store: Annotated[DocumentStore, Depends(get_document_store)],
) -> None:
    """회원을 삭제합니다 (Delete a member)."""
    await member_service.delete_member(store, member_id)


# === 과정 등록 (Course enrollment) ===

@router.get("/{member_id}/courses", response_model=list[CourseResponse])
async def list_member_courses(
    member_id: str,
    store: Annotated[DocumentStore, Depends(get_document_store)],
) -> list[CourseResponse]:
    """회원이 등록한 과정 목록을 조회합니다 (Courses a member is enrolled in)."""
    return await enrollment_service.list_courses_of_member(store, member_id)


@router.post(
    "/{member_id}/courses/{course_id}",
    response_model=EnrollmentResponse,
    status_code=201,
)
async def enroll_in_course(
    member_id: str,
    course_id: str,
    store: Annotated[DocumentStore, Depends(get_document_store)],
    data: EnrollmentCreate | None = None,
) -> EnrollmentResponse:
    """회원을 과정에 등록합니다.

    Enroll a member in a course (404 when either side is missing, 409 when
    already enrolled).
    """
    data = data or EnrollmentCreate()
    return await enrollment_service.enroll_member_in_course(
        store, member_id, course_id, data.role, data.enrollment_date
    )


@router.delete("/{member_id}/courses/{course_id}", status_code=204)
async def remove_from_course(
    member_id: str,
    course_id: str,
    store: Annotated[DocumentStore, Depends(get_document_store)],
) -> None:
    """과정 등록을 삭제합니다 (Remove a course enrollment)."""
    await enrollment_service.remove_member_from_course(store, member_id, course_id)


# === 행사 등록 (Event registration) ===

@router.get("/{member_id}/events", response_model=list[EventResponse])
async def list_member_events(
    member_id: str,
    store: Annotated[DocumentStore, Depends(get_document_store)],
) -> list[EventResponse]:
    """회원이 등록한 행사 목록을 조회합니다 (Events a member is registered for)."""
    return await enrollment_service.list_events_of_member(store, member_id)


@router.post(
    "/{member_id}/events/{event_id}",
    response_model=EnrollmentResponse,
    status_code=201,
)
async def register_for_event(
    member_id: str,
    event_id: str,
    store: Annotated[DocumentStore, Depends(get_document_store)],
) -> EnrollmentResponse:
    """회원을 행사에 등록합니다 (Register a member for an event)."""
    return await enrollment_service.register_member_for_event(store, member_id, event_id)


@router.delete("/{member_id}/events/{event_id}", status_code=204)
async def remove_from_event(
    member_id: str,
    event_id: str,
    store: Annotated[DocumentStore, Depends(get_document_store)],
) -> None:
    """행사 등록을 삭제합니다 (Remove an event registration)."""
    await enrollment_service.remove_member_from_event(store, member_id, event_id)


# === 그룹 가입 (Group membership) ===

@router.get("/{member_id}/groups", response_model=list[GroupResponse])
async def list_member_groups(
    member_id: str,
    store: Annotated[DocumentStore, Depends(get_document_store)],
) -> list[GroupResponse]:
    """회원이 속한 그룹 목록을 조회합니다 (Groups a member belongs to)."""
    return await enrollment_service.list_groups_of_member(store, member_id)


@router.post(
    "/{member_id}/groups/{group_id}",
    response_model=EnrollmentResponse,
    status_code=201,
)
async def add_to_group(
    member_id: str,
    group_id: str,
    data: GroupMembershipCreate,
    store: Annotated[DocumentStore, Depends(get_document_store)],
) -> EnrollmentResponse:
    """회원을 그룹에 추가합니다.

    Add a member to a group (400 without memberRoll, 404 when either side is
    missing, 409 when already a member).
    """
    return await enrollment_service.add_member_to_group(
        store, member_id, group_id, data.member_roll, data.date
    )


@router.delete("/{member_id}/groups/{group_id}", status_code=204)
async def remove_from_group(
    member_id: str,
    group_id: str,
    store: Annotated[DocumentStore, Depends(get_document_store)],
) -> None:
    """그룹 가입을 삭제합니다 (Remove a group membership)."""
    await enrollment_service.remove_member_from_group(store, member_id, group_id)
