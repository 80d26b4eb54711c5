"""과정, 행사, 그룹 및 등록 관련 Pydantic 요청/응답 스키마 정의.

Course, Event, Group and Enrollment Pydantic request/response schema definitions.
Update schemas are partial: only fields present in the body are applied.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


# === 과정 (Course) 스키마 ===

class CourseCreate(BaseModel):
    """과정 생성 요청 스키마.

    Course creation request schema. ``name`` must be unique among courses.
    """

    name: str | None = None  # 과정 이름, 고유 (Course name, unique)
    description: str | None = None
    level: str | None = None  # 예: Basic, Intermediate, Advanced


class CourseUpdate(BaseModel):
    """과정 수정 요청 스키마 (부분 업데이트)."""

    name: str | None = None
    description: str | None = None
    level: str | None = None


class CourseResponse(BaseModel):
    """과정 응답 스키마."""

    id: str
    name: str
    description: str | None = None
    level: str | None = None


# === 행사 (Event) 스키마 ===

class EventCreate(BaseModel):
    """행사 생성 요청 스키마.

    Event creation request schema. ``date`` is required.
    """

    name: str | None = None  # 행사 이름 (Event name)
    date: str | None = None  # 행사 일자 (Event date, e.g. "2024-01-01")
    location: str | None = None


class EventUpdate(BaseModel):
    """행사 수정 요청 스키마 (부분 업데이트).

    Event update request schema. A ``date`` sent in the body may not be blank.
    """

    name: str | None = None
    date: str | None = None
    location: str | None = None


class EventResponse(BaseModel):
    """행사 응답 스키마."""

    id: str
    name: str
    date: str
    location: str | None = None


# === 그룹 (Group) 스키마 ===

class GroupCreate(BaseModel):
    """그룹 생성 요청 스키마.

    Group creation request schema. ``name`` is required (3-50 characters);
    ``description`` is capped at 500 characters and ``note`` at 1000.
    An id is generated when none is supplied.
    """

    id: str | None = None
    name: str | None = None
    description: str | None = None
    note: str | None = None


class GroupUpdate(BaseModel):
    """그룹 수정 요청 스키마 (부분 업데이트)."""

    name: str | None = None
    description: str | None = None
    note: str | None = None


class GroupResponse(BaseModel):
    """그룹 응답 스키마."""

    id: str
    name: str
    description: str | None = None
    note: str | None = None


# === 등록 (Enrollment) 스키마 ===

class EnrollmentCreate(BaseModel):
    """과정 등록 요청 스키마 (선택 항목)."""

    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    role: str | None = None  # 기본값 "student"
    enrollment_date: str | None = None  # 기본값: 오늘 (Defaults to today, ISO date)


class GroupMembershipCreate(BaseModel):
    """그룹 가입 요청 스키마.

    Group membership request schema. ``memberRoll`` (the member's role in
    the group) is required; ``date`` defaults to today.
    """

    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    member_roll: str | None = None
    date: str | None = None


class EnrollmentResponse(BaseModel):
    """회원-과정/행사 관계 응답 스키마.

    Member relation response schema, shared by course enrollments, event
    registrations and group memberships.

    Attributes:
        id: 관계 문서 ID "{memberId}_{targetId}" (Relation document id)
        member_id: 회원 ID (Member id)
        target_id: 과정, 행사 또는 그룹 ID (Course, event or group id)
        role: 과정 또는 그룹 내 역할 (Course role or group memberRoll; None for events)
        date: 등록 일자 (Enrollment or registration date)
    """

    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    id: str
    member_id: str
    target_id: str
    role: str | None = None
    date: str
