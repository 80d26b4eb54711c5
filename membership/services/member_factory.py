"""회원 팩토리 — 회원 엔티티 생성 전 구조 검증.

Member Factory — Structural validation before a Member entity is built.

Emails are stored in their normalized form (domain lowercased), so the
uniqueness check compares like with like.

Validation order (첫 번째 위반이 결과가 됨 / first violation wins):
    1. id, name, memberType 누락 또는 공백 → MissingFieldError
    2. memberType이 Baptized/Visitor가 아님 → InvalidEnumError
    3. email이 주어졌으나 형식이 잘못됨 → InvalidFormatError
    4. courses/groups/events가 문자열 ID 목록이 아님 → InvalidFormatError

No I/O happens here: whether referenced ids exist or an email is unique is
checked by ValidationService from the persistence services.
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from email_validator import EmailNotValidError, validate_email
from pydantic import ValidationError

from membership.schemas.member import Member, MemberType
from membership.utils.exceptions import (
    FieldValidationError,
    InvalidEnumError,
    InvalidFormatError,
    MissingFieldError,
)

# 필수 필드 검사 순서 — (field, camelCase alias)
_REQUIRED_FIELDS: tuple[tuple[str, str], ...] = (
    ("id", "id"),
    ("name", "name"),
    ("member_type", "memberType"),
)

_OPTIONAL_FIELDS: tuple[tuple[str, str], ...] = (
    ("marital_status", "maritalStatus"),
    ("email", "email"),
    ("phone", "phone"),
    ("occupation", "occupation"),
    ("notes", "notes"),
)

_RELATION_FIELDS: tuple[str, ...] = ("courses", "groups", "events")

_MEMBER_TYPES: tuple[str, ...] = tuple(t.value for t in MemberType)


@dataclass(frozen=True)
class MemberResult:
    """회원 생성 결과 — 성공 값 또는 검증 오류 중 하나.

    Tagged construction result: exactly one of ``member`` / ``error`` is set.
    """

    member: Member | None = None
    error: FieldValidationError | None = None

    def __post_init__(self) -> None:
        if (self.member is None) == (self.error is None):
            raise ValueError("MemberResult needs exactly one of member or error")

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> Member:
        """성공 값을 반환하거나 오류를 발생시킵니다 (Return the member or raise the error)."""
        if self.member is None:
            raise self.error
        return self.member


def _lookup(fields: Mapping[str, Any], name: str, alias: str) -> Any:
    if alias in fields:
        return fields[alias]
    return fields.get(name)


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _check_required(fields: Mapping[str, Any]) -> FieldValidationError | None:
    for name, alias in _REQUIRED_FIELDS:
        if _is_blank(_lookup(fields, name, alias)):
            return MissingFieldError(alias)
    return None


def _check_member_type(fields: Mapping[str, Any]) -> FieldValidationError | None:
    value = _lookup(fields, "member_type", "memberType")
    if isinstance(value, MemberType):
        return None
    if value not in _MEMBER_TYPES:
        return InvalidEnumError("memberType", value, _MEMBER_TYPES)
    return None


def _normalize_email(value: str) -> str:
    # 표시 이름 형식("Ana <ana@x.org>")은 거부 — Display-name forms are rejected
    return validate_email(value, check_deliverability=False).normalized


def _check_email(fields: Mapping[str, Any]) -> FieldValidationError | None:
    value = _lookup(fields, "email", "email")
    if _is_blank(value):
        return None
    if not isinstance(value, str):
        return InvalidFormatError("email", value)
    try:
        _normalize_email(value)
    except EmailNotValidError:
        return InvalidFormatError("email", value)
    return None


def _check_relations(fields: Mapping[str, Any]) -> FieldValidationError | None:
    for name in _RELATION_FIELDS:
        value = fields.get(name)
        if value is None:
            continue
        # 문자열 자체는 ID 목록이 아님 — A bare string is not a list of ids
        if not isinstance(value, (list, tuple)) or not all(isinstance(v, str) for v in value):
            return InvalidFormatError(name, value)
    return None


_CHECKS: tuple[Callable[[Mapping[str, Any]], FieldValidationError | None], ...] = (
    _check_required,
    _check_member_type,
    _check_email,
    _check_relations,
)


def validate_member(fields: Mapping[str, Any]) -> MemberResult:
    """입력 필드를 순서대로 검증하고 회원을 생성합니다.

    Run the ordered checks over ``fields`` and build the Member.
    Absent relationship collections become empty tuples; blank optional
    strings are stored as None.

    Args:
        fields: 회원 입력 레코드 (camelCase or snake_case keys)

    Returns:
        MemberResult: 회원 또는 첫 번째 검증 오류 (Member or the first violation)
    """
    for check in _CHECKS:
        error = check(fields)
        if error is not None:
            return MemberResult(error=error)

    values: dict[str, Any] = {
        name: _lookup(fields, name, alias) for name, alias in _REQUIRED_FIELDS
    }
    for name, alias in _OPTIONAL_FIELDS:
        value = _lookup(fields, name, alias)
        values[name] = None if _is_blank(value) else value
    if values["email"] is not None:
        values["email"] = _normalize_email(values["email"])
    for name in _RELATION_FIELDS:
        values[name] = tuple(fields.get(name) or ())

    try:
        member = Member.model_validate(values)
    except ValidationError as exc:
        # 타입이 맞지 않는 필드 (예: name=5) — Wrongly typed field
        location = exc.errors()[0]["loc"]
        field = str(location[0]) if location else "member"
        return MemberResult(error=InvalidFormatError(field, values.get(field)))
    return MemberResult(member=member)


def construct_member(fields: Mapping[str, Any]) -> Member:
    """회원을 생성하거나 첫 번째 검증 오류를 발생시킵니다.

    Build a Member or raise the first validation error.

    Raises:
        MissingFieldError: 필수 필드 누락 (Required field missing)
        InvalidEnumError: memberType 값이 허용되지 않음 (memberType not allowed)
        InvalidFormatError: email 형식 또는 관계 목록 오류 (Malformed email or relation list)
    """
    return validate_member(fields).unwrap()
