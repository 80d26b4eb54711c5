"""과정·행사·그룹 라우터 — 과정/행사/그룹 관리 엔드포인트.

Catalog Router — Course, event and group CRUD endpoints, plus the members
related to each.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from membership.api.deps import get_document_store
from membership.repositories.document_store import DocumentStore
from membership.schemas.catalog import (
    CourseCreate,
    CourseResponse,
    CourseUpdate,
    EventCreate,
    EventResponse,
    EventUpdate,
    GroupCreate,
    GroupResponse,
    GroupUpdate,
)
from membership.schemas.member import Member
from membership.services.catalog_service import catalog_service
from membership.services.enrollment_service import enrollment_service
from membership.services.group_service import group_service
from membership.utils.pagination import MAX_PER_PAGE, Page

courses_router: APIRouter = APIRouter()
events_router: APIRouter = APIRouter()
groups_router: APIRouter = APIRouter()

PageNumber = Annotated[int, Query(ge=1)]
PerPage = Annotated[int, Query(ge=1, le=MAX_PER_PAGE)]
NamePrefix = Annotated[str | None, Query(description="이름 접두사 검색")]


# === 과정 (Course) ===

@courses_router.get("", response_model=Page[CourseResponse])
async def list_courses(
    store: Annotated[DocumentStore, Depends(get_document_store)],
    page: PageNumber = 1,
    per_page: PerPage = 20,
    search: NamePrefix = None,
) -> Page[CourseResponse]:
    """과정 목록을 이름순으로 조회합니다 (Paginated course list)."""
    return await catalog_service.list_courses(store, page, per_page, search)


@courses_router.post("", response_model=CourseResponse, status_code=201)
async def create_course(
    data: CourseCreate,
    store: Annotated[DocumentStore, Depends(get_document_store)],
) -> CourseResponse:
    """새 과정을 생성합니다 (409 when the name is taken)."""
    return await catalog_service.create_course(store, data)


@courses_router.get("/{course_id}", response_model=CourseResponse)
async def get_course(
    course_id: str,
    store: Annotated[DocumentStore, Depends(get_document_store)],
) -> CourseResponse:
    """과정을 조회합니다 (Retrieve a course)."""
    return await catalog_service.get_course(store, course_id)


@courses_router.put("/{course_id}", response_model=CourseResponse)
async def update_course(
    course_id: str,
    data: CourseUpdate,
    store: Annotated[DocumentStore, Depends(get_document_store)],
) -> CourseResponse:
    """과정을 수정합니다 (409 when the new name is taken)."""
    return await catalog_service.update_course(store, course_id, data)


@courses_router.delete("/{course_id}", status_code=204)
async def delete_course(
    course_id: str,
    store: Annotated[DocumentStore, Depends(get_document_store)],
) -> None:
    """과정을 삭제합니다 (Delete a course)."""
    await catalog_service.delete_course(store, course_id)


@courses_router.get("/{course_id}/members", response_model=list[Member])
async def list_course_members(
    course_id: str,
    store: Annotated[DocumentStore, Depends(get_document_store)],
) -> list[Member]:
    """과정에 등록한 회원 목록을 조회합니다 (Members enrolled in a course)."""
    return await enrollment_service.list_members_of_course(store, course_id)


# === 행사 (Event) ===

@events_router.get("", response_model=Page[EventResponse])
async def list_events(
    store: Annotated[DocumentStore, Depends(get_document_store)],
    page: PageNumber = 1,
    per_page: PerPage = 20,
    search: NamePrefix = None,
) -> Page[EventResponse]:
    """행사 목록을 이름순으로 조회합니다 (Paginated event list)."""
    return await catalog_service.list_events(store, page, per_page, search)


@events_router.post("", response_model=EventResponse, status_code=201)
async def create_event(
    data: EventCreate,
    store: Annotated[DocumentStore, Depends(get_document_store)],
) -> EventResponse:
    """새 행사를 생성합니다 (400 when the date is missing)."""
    return await catalog_service.create_event(store, data)


@events_router.get("/{event_id}", response_model=EventResponse)
async def get_event(
    event_id: str,
    store: Annotated[DocumentStore, Depends(get_document_store)],
) -> EventResponse:
    """행사를 조회합니다 (Retrieve an event)."""
    return await catalog_service.get_event(store, event_id)


@events_router.put("/{event_id}", response_model=EventResponse)
async def update_event(
    event_id: str,
    data: EventUpdate,
    store: Annotated[DocumentStore, Depends(get_document_store)],
) -> EventResponse:
    """행사를 수정합니다 (400 when the date is blanked)."""
    return await catalog_service.update_event(store, event_id, data)


@events_router.delete("/{event_id}", status_code=204)
async def delete_event(
    event_id: str,
    store: Annotated[DocumentStore, Depends(get_document_store)],
) -> None:
    """행사를 삭제합니다 (Delete an event)."""
    await catalog_service.delete_event(store, event_id)


@events_router.get("/{event_id}/members", response_model=list[Member])
async def list_event_members(
    event_id: str,
    store: Annotated[DocumentStore, Depends(get_document_store)],
) -> list[Member]:
    """행사에 등록한 회원 목록을 조회합니다 (Members registered for an event)."""
    return await enrollment_service.list_members_of_event(store, event_id)


# === 그룹 (Group) ===

@groups_router.get("", response_model=Page[GroupResponse])
async def list_groups(
    store: Annotated[DocumentStore, Depends(get_document_store)],
    page: PageNumber = 1,
    per_page: PerPage = 20,
    search: NamePrefix = None,
) -> Page[GroupResponse]:
    """그룹 목록을 이름순으로 조회합니다 (Paginated group list)."""
    return await group_service.list_groups(store, page, per_page, search)


@groups_router.post("", response_model=GroupResponse, status_code=201)
async def create_group(
    data: GroupCreate,
    store: Annotated[DocumentStore, Depends(get_document_store)],
) -> GroupResponse:
    """새 그룹을 생성합니다 (400 on field rules, 409 when the id is taken)."""
    return await group_service.create_group(store, data)


@groups_router.get("/{group_id}", response_model=GroupResponse)
async def get_group(
    group_id: str,
    store: Annotated[DocumentStore, Depends(get_document_store)],
) -> GroupResponse:
    """그룹을 조회합니다 (Retrieve a group)."""
    return await group_service.get_group(store, group_id)


@groups_router.put("/{group_id}", response_model=GroupResponse)
async def update_group(
    group_id: str,
    data: GroupUpdate,
    store: Annotated[DocumentStore, Depends(get_document_store)],
) -> GroupResponse:
    """그룹을 수정합니다 (Update a group)."""
    return await group_service.update_group(store, group_id, data)


@groups_router.delete("/{group_id}", status_code=204)
async def delete_group(
    group_id: str,
    store: Annotated[DocumentStore, Depends(get_document_store)],
) -> None:
    """그룹을 삭제합니다 (Delete a group)."""
    await group_service.delete_group(store, group_id)


@groups_router.get("/{group_id}/members", response_model=list[Member])
async def list_group_members(
    group_id: str,
    store: Annotated[DocumentStore, Depends(get_document_store)],
) -> list[Member]:
    """그룹에 속한 회원 목록을 조회합니다 (Members of a group)."""
    return await enrollment_service.list_members_of_group(store, group_id)
