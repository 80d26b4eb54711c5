"""회원 관련 Pydantic 스키마 정의.

Member Pydantic schema definitions.
Member is the immutable entity produced by the member factory; MemberCreate
is the loosely-typed request body handed to that factory. Wire keys are
camelCase (memberType, maritalStatus); snake_case keys are accepted on input.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class MemberType(str, Enum):
    """회원 구분 (Member type)."""

    BAPTIZED = "Baptized"
    VISITOR = "Visitor"


class Member(BaseModel):
    """회원 엔티티 — 생성 시 검증을 통과한 불변 값.

    Member entity — Immutable value that passed construction-time validation.
    Relationship collections hold foreign-key ids and default to empty.

    Attributes:
        id: 회원 ID (Member id, non-empty)
        name: 이름 (Display name, non-empty)
        member_type: 회원 구분 (Baptized | Visitor)
        marital_status: 혼인 상태 (Marital status, optional)
        email: 이메일 (Syntactically valid address, optional)
        phone: 전화번호 (Phone, optional)
        occupation: 직업 (Occupation, optional)
        notes: 메모 (Free-form notes, optional)
        courses: 수강 과정 ID 목록 (Course ids)
        groups: 소속 그룹 ID 목록 (Group ids)
        events: 참가 행사 ID 목록 (Event ids)
    """

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )

    id: str
    name: str
    member_type: MemberType
    marital_status: str | None = None
    email: str | None = None
    phone: str | None = None
    occupation: str | None = None
    notes: str | None = None
    courses: tuple[str, ...] = ()
    groups: tuple[str, ...] = ()
    events: tuple[str, ...] = ()

    def to_document(self) -> dict:
        """저장용 본문으로 변환합니다 (camelCase body for the document store)."""
        return self.model_dump(mode="json", by_alias=True)


class MemberCreate(BaseModel):
    """회원 생성 요청 스키마.

    Member creation request schema. Every field is optional here: required
    fields and formats are enforced by the member factory, in a fixed order.
    """

    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    id: str | None = None  # 없으면 서버에서 생성 (Generated server-side when omitted)
    name: str | None = None
    member_type: str | None = None
    marital_status: str | None = None
    email: str | None = None
    phone: str | None = None
    occupation: str | None = None
    notes: str | None = None
    courses: list[str] | None = None
    groups: list[str] | None = None
    events: list[str] | None = None


class MemberUpdate(BaseModel):
    """회원 수정 요청 스키마 (부분 업데이트).

    Member update request schema (partial). Only fields present in the body
    are changed; the merged record is validated again by the member factory.
    The id is taken from the path and cannot be changed.
    """

    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    name: str | None = None
    member_type: str | None = None
    marital_status: str | None = None
    email: str | None = None
    phone: str | None = None
    occupation: str | None = None
    notes: str | None = None
    courses: list[str] | None = None
    groups: list[str] | None = None
    events: list[str] | None = None
