"""도메인 예외 클래스 모듈.

Domain exception classes module.
Every error raised by the validation layer and the services derives from
MembershipError. Each class carries the HTTP status the API layer maps it to,
so call sites never specify status codes themselves.

Usage:
    from membership.utils.exceptions import MissingFieldError, StoreAccessError
    raise MissingFieldError("name")
    raise StoreAccessError("exists", "Member", member_id)
"""

from typing import Any, Iterable

from fastapi import status


class MembershipError(Exception):
    """모든 도메인 예외의 베이스 클래스.

    Base class for all domain errors.

    Attributes:
        status_code: API 계층이 사용할 HTTP 상태 코드 (HTTP status used by the API layer)
        detail: 오류 메시지 (Error message)
    """

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail: str = detail


class FieldValidationError(MembershipError):
    """400 Bad Request 계열 — 필드 단위 검증 실패.

    Field-level validation failure. Never retried; surfaced to the caller as-is.

    Attributes:
        field: 실패한 필드 이름 (Name of the offending field)
    """

    def __init__(self, field: str, detail: str) -> None:
        super().__init__(detail)
        self.field: str = field


class MissingFieldError(FieldValidationError):
    """필수 필드가 없거나 비어 있을 때 사용.

    Raised when a required field is absent or empty.
    """

    def __init__(self, field: str) -> None:
        super().__init__(field, f"Field '{field}' is required")


class InvalidEnumError(FieldValidationError):
    """필드 값이 허용된 집합에 속하지 않을 때 사용.

    Raised when a field's value is outside its allowed set.
    """

    def __init__(self, field: str, value: Any, allowed: Iterable[str]) -> None:
        self.value: Any = value
        self.allowed: tuple[str, ...] = tuple(allowed)
        super().__init__(
            field,
            f"Field '{field}' must be one of {', '.join(self.allowed)} (got {value!r})",
        )


class InvalidFormatError(FieldValidationError):
    """필드 형식 검사 실패 시 사용 (예: 이메일).

    Raised when a field fails a format check (e.g. email).
    """

    def __init__(self, field: str, value: Any) -> None:
        self.value: Any = value
        super().__init__(field, f"Field '{field}' has an invalid format")


class StoreAccessError(MembershipError):
    """503 Service Unavailable 예외 — 문서 저장소 호출 실패.

    Raised when the underlying document store call fails (network, permission,
    serialization). The original exception is chained as ``__cause__``; this is
    never interpreted as "document does not exist".

    Attributes:
        operation: 시도한 작업 (Attempted operation, e.g. "exists")
        collection: 대상 컬렉션 (Target collection)
        target: 대상 문서 ID 또는 필드 (Target document id or field)
    """

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    def __init__(self, operation: str, collection: str, target: str) -> None:
        self.operation: str = operation
        self.collection: str = collection
        self.target: str = target
        super().__init__(
            f"Document store failure during {operation} on {collection}/{target}"
        )


class NotFoundError(MembershipError):
    """404 Not Found 예외 — 요청한 문서를 찾을 수 없을 때 사용.

    Raised when a referenced document (member, course, event, enrollment) does not exist.
    """

    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, detail: str = "Resource not found") -> None:
        super().__init__(detail)


class DuplicateError(MembershipError):
    """409 Conflict 예외 — 고유 필드 중복 시 사용.

    Raised when a write would violate a uniqueness rule
    (e.g. duplicate member email, duplicate course name, repeated enrollment).
    """

    status_code = status.HTTP_409_CONFLICT

    def __init__(self, detail: str = "Resource already exists") -> None:
        super().__init__(detail)
