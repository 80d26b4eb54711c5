"""과정 및 행사 서비스 — 과정/행사 생성, 조회, 수정, 삭제 비즈니스 로직.

Catalog Service — Business logic for courses and events.
Course names must be unique; events require a date.
"""

import uuid

from membership.models.document import Document
from membership.repositories.document_store import DocumentStore
from membership.schemas.catalog import (
    CourseCreate,
    CourseResponse,
    CourseUpdate,
    EventCreate,
    EventResponse,
    EventUpdate,
)
from membership.services.validation_service import (
    COURSE_COLLECTION,
    EVENT_COLLECTION,
    ValidationService,
)
from membership.utils.exceptions import DuplicateError, MissingFieldError, NotFoundError
from membership.utils.pagination import Page, build_page


class CatalogService:
    """과정 및 행사 관련 비즈니스 로직을 처리하는 서비스.

    Service handling course and event business logic.
    """

    async def create_course(
        self,
        store: DocumentStore,
        data: CourseCreate,
    ) -> CourseResponse:
        """새 과정을 생성합니다.

        Create a new course.

        Raises:
            MissingFieldError: 이름이 없을 때 (Name missing)
            DuplicateError: 같은 이름의 과정이 이미 존재할 때
                            (When a course with the same name already exists)
        """
        if not data.name or not data.name.strip():
            raise MissingFieldError("name")

        validations = ValidationService(store)
        if not await validations.is_unique(COURSE_COLLECTION, "name", data.name):
            raise DuplicateError("A course with this name already exists")

        course_id: str = uuid.uuid4().hex
        document: Document = await store.put(
            COURSE_COLLECTION, course_id, data.model_dump(exclude_none=True)
        )
        return CourseResponse.model_validate(document.to_dict())

    async def get_course(self, store: DocumentStore, course_id: str) -> CourseResponse:
        """과정을 조회합니다 (NotFoundError if absent)."""
        document: Document | None = await store.get_by_id(COURSE_COLLECTION, course_id)
        if document is None:
            raise NotFoundError("Course not found")
        return CourseResponse.model_validate(document.to_dict())

    async def update_course(
        self,
        store: DocumentStore,
        course_id: str,
        data: CourseUpdate,
    ) -> CourseResponse:
        """과정을 수정합니다.

        Update a course with the fields present in ``data``.

        Raises:
            NotFoundError: 과정이 없을 때 (Course not found)
            MissingFieldError: 이름을 공백으로 바꾸려 할 때 (Blank name)
            DuplicateError: 다른 과정이 같은 이름을 사용 중일 때
                            (Another course already has the name)
        """
        document: Document | None = await store.get_by_id(COURSE_COLLECTION, course_id)
        if document is None:
            raise NotFoundError("Course not found")

        changes: dict = data.model_dump(exclude_unset=True)
        if "name" in changes:
            if not changes["name"] or not changes["name"].strip():
                raise MissingFieldError("name")
            validations = ValidationService(store)
            if not await validations.is_unique(
                COURSE_COLLECTION, "name", changes["name"], exclude_id=course_id
            ):
                raise DuplicateError("A course with this name already exists")

        document = await store.put(COURSE_COLLECTION, course_id, {**document.data, **changes})
        return CourseResponse.model_validate(document.to_dict())

    async def delete_course(self, store: DocumentStore, course_id: str) -> None:
        """과정을 삭제합니다 (NotFoundError if absent)."""
        if not await store.delete(COURSE_COLLECTION, course_id):
            raise NotFoundError("Course not found")

    async def list_courses(
        self,
        store: DocumentStore,
        page: int = 1,
        per_page: int = 20,
        search: str | None = None,
    ) -> Page[CourseResponse]:
        """과정 목록을 이름순으로 조회합니다 (name prefix search optional)."""
        documents, total = await store.list_page(
            COURSE_COLLECTION, page, per_page, order_field="name", prefix=search
        )
        courses = [CourseResponse.model_validate(d.to_dict()) for d in documents]
        return build_page(courses, total, page, per_page)

    async def create_event(
        self,
        store: DocumentStore,
        data: EventCreate,
    ) -> EventResponse:
        """새 행사를 생성합니다.

        Create a new event.

        Raises:
            MissingFieldError: 일자 또는 이름이 없을 때 (Date or name missing)
        """
        ValidationService.validate_event_date(data.date)
        if not data.name or not data.name.strip():
            raise MissingFieldError("name")

        event_id: str = uuid.uuid4().hex
        document: Document = await store.put(
            EVENT_COLLECTION, event_id, data.model_dump(exclude_none=True)
        )
        return EventResponse.model_validate(document.to_dict())

    async def get_event(self, store: DocumentStore, event_id: str) -> EventResponse:
        """행사를 조회합니다 (NotFoundError if absent)."""
        document: Document | None = await store.get_by_id(EVENT_COLLECTION, event_id)
        if document is None:
            raise NotFoundError("Event not found")
        return EventResponse.model_validate(document.to_dict())

    async def update_event(
        self,
        store: DocumentStore,
        event_id: str,
        data: EventUpdate,
    ) -> EventResponse:
        """행사를 수정합니다.

        Update an event with the fields present in ``data``.

        Raises:
            NotFoundError: 행사가 없을 때 (Event not found)
            MissingFieldError: 일자 또는 이름을 공백으로 바꾸려 할 때
                               (Date or name set to blank)
        """
        document: Document | None = await store.get_by_id(EVENT_COLLECTION, event_id)
        if document is None:
            raise NotFoundError("Event not found")

        changes: dict = data.model_dump(exclude_unset=True)
        if "date" in changes:
            ValidationService.validate_event_date(changes["date"])
        if "name" in changes and (not changes["name"] or not changes["name"].strip()):
            raise MissingFieldError("name")

        document = await store.put(EVENT_COLLECTION, event_id, {**document.data, **changes})
        return EventResponse.model_validate(document.to_dict())

    async def delete_event(self, store: DocumentStore, event_id: str) -> None:
        """행사를 삭제합니다 (NotFoundError if absent)."""
        if not await store.delete(EVENT_COLLECTION, event_id):
            raise NotFoundError("Event not found")

    async def list_events(
        self,
        store: DocumentStore,
        page: int = 1,
        per_page: int = 20,
        search: str | None = None,
    ) -> Page[EventResponse]:
        """행사 목록을 이름순으로 조회합니다 (name prefix search optional)."""
        documents, total = await store.list_page(
            EVENT_COLLECTION, page, per_page, order_field="name", prefix=search
        )
        events = [EventResponse.model_validate(d.to_dict()) for d in documents]
        return build_page(events, total, page, per_page)


# 싱글턴 인스턴스 — Singleton instance
catalog_service: CatalogService = CatalogService()
