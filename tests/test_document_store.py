"""문서 저장소 테스트.

Document store tests — By-id reads, type-exact field-equality queries,
paginated listing, transaction commit/rollback, closed-handle behaviour and
database errors surfacing as StoreAccessError against a temporary SQLite database,
plus the validation service running on top of the real store.
"""

import logging

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from membership.repositories.document_repository import document_repository
from membership.repositories.document_store import TransactionClosedError
from membership.services.validation_service import ValidationService
from membership.utils.exceptions import StoreAccessError


class TestReads:
    """조회 테스트."""

    async def test_put_then_get(self, store):
        """저장한 문서를 ID로 조회."""
        await store.put("Member", "m1", {"name": "Ana", "memberType": "Visitor"})
        document = await store.get_by_id("Member", "m1")
        assert document is not None
        assert document.data == {"name": "Ana", "memberType": "Visitor"}
        assert document.to_dict()["id"] == "m1"

    async def test_id_key_is_not_stored_in_body(self, store):
        """본문의 id 키는 저장되지 않음."""
        await store.put("Course", "c1", {"id": "c1", "name": "Bible 101"})
        document = await store.get_by_id("Course", "c1")
        assert document.data == {"name": "Bible 101"}

    async def test_get_missing_returns_none(self, store):
        """없는 문서는 None."""
        assert await store.get_by_id("Member", "nobody") is None

    async def test_put_replaces_existing_body(self, store):
        """같은 ID로 다시 저장하면 본문 교체."""
        await store.put("Course", "c1", {"name": "Old", "level": "1"})
        await store.put("Course", "c1", {"name": "New"})
        document = await store.get_by_id("Course", "c1")
        assert document.data == {"name": "New"}

    async def test_delete(self, store):
        """삭제 후 조회 불가, 두 번째 삭제는 False."""
        await store.put("Event", "e1", {"name": "Retreat", "date": "2024-05-01"})
        assert await store.delete("Event", "e1") is True
        assert await store.get_by_id("Event", "e1") is None
        assert await store.delete("Event", "e1") is False


class TestQueryEquals:
    """필드 동등 조회 테스트."""

    async def test_string_equality(self, store):
        """문자열 필드 정확히 일치."""
        await store.put("Member", "m1", {"email": "ana@iglesia.org"})
        await store.put("Member", "m2", {"email": "rui@iglesia.org"})
        await store.put("Course", "c1", {"email": "ana@iglesia.org"})

        matches = await store.query_equals("Member", "email", "ana@iglesia.org")
        assert [doc.id for doc in matches] == ["m1"]

    async def test_integer_equality(self, store):
        """정수 필드 일치."""
        await store.put("Course", "c1", {"capacity": 30})
        await store.put("Course", "c2", {"capacity": 12})
        matches = await store.query_equals("Course", "capacity", 30)
        assert [doc.id for doc in matches] == ["c1"]

    async def test_boolean_equality(self, store):
        """불리언 필드 일치."""
        await store.put("Event", "e1", {"open": True})
        await store.put("Event", "e2", {"open": False})
        matches = await store.query_equals("Event", "open", False)
        assert [doc.id for doc in matches] == ["e2"]

    async def test_boolean_and_integer_never_match_each_other(self, store):
        """1과 True는 서로 일치하지 않음."""
        await store.put("Event", "e1", {"flag": 1})
        await store.put("Event", "e2", {"flag": True})
        assert [d.id for d in await store.query_equals("Event", "flag", True)] == ["e2"]
        assert [d.id for d in await store.query_equals("Event", "flag", 1)] == ["e1"]

    async def test_numeric_string_never_matches_number(self, store):
        """숫자 문자열은 숫자와 일치하지 않고, 반대도 마찬가지."""
        await store.put("Course", "c1", {"capacity": "5"})
        await store.put("Course", "c2", {"capacity": 5})
        assert [d.id for d in await store.query_equals("Course", "capacity", 5)] == ["c2"]
        assert [d.id for d in await store.query_equals("Course", "capacity", "5")] == ["c1"]

    async def test_results_ordered_by_id(self, store):
        """결과는 ID 순서."""
        for document_id in ("b", "c", "a"):
            await store.put("MemberCourse", document_id, {"memberId": "m1"})
        matches = await store.query_equals("MemberCourse", "memberId", "m1")
        assert [doc.id for doc in matches] == ["a", "b", "c"]

    async def test_documents_without_field_never_match(self, store):
        """필드가 없는 문서는 일치하지 않음."""
        await store.put("Member", "m1", {"name": "Ana"})
        assert await store.query_equals("Member", "email", "ana@iglesia.org") == []


class TestTransactions:
    """트랜잭션 테스트."""

    async def test_commit_on_clean_exit(self, store):
        """정상 종료 시 커밋."""
        async with store.begin_transaction() as tx:
            await tx.put("MemberCourse", "m1_c1", {"memberId": "m1", "courseId": "c1"})
            assert (await store.get_by_id("MemberCourse", "m1_c1", tx)) is not None

        assert await store.get_by_id("MemberCourse", "m1_c1") is not None

    async def test_rollback_on_exception(self, store):
        """예외 발생 시 롤백 후 예외 재발생."""
        with pytest.raises(ValueError):
            async with store.begin_transaction() as tx:
                await tx.put("MemberCourse", "m1_c1", {"memberId": "m1"})
                raise ValueError("abort")

        assert await store.get_by_id("MemberCourse", "m1_c1") is None

    async def test_handle_unusable_after_block(self, store):
        """블록 종료 후 핸들 사용 시 TransactionClosedError."""
        async with store.begin_transaction() as tx:
            assert tx.is_open is True

        assert tx.is_open is False
        with pytest.raises(TransactionClosedError):
            await store.get_by_id("Member", "m1", tx)
        with pytest.raises(TransactionClosedError):
            await tx.put("Member", "m1", {"name": "Ana"})

    async def test_handle_closed_after_rollback(self, store):
        """롤백 후에도 핸들은 닫힘."""
        with pytest.raises(RuntimeError):
            async with store.begin_transaction() as tx:
                raise RuntimeError("boom")
        assert tx.is_open is False


class TestValidationOverStore:
    """실제 저장소 위의 검증 서비스 테스트."""

    async def test_checks_inside_one_transaction(self, store):
        """하나의 트랜잭션에서 회원/과정 검사."""
        await store.put("Member", "m1", {"name": "Ana", "memberType": "Visitor"})
        await store.put("Course", "c1", {"name": "Bible 101"})
        validations = ValidationService(store)

        async with store.begin_transaction() as tx:
            assert await validations.member_exists("m1", tx) is True
            assert await validations.course_exists("c1", tx) is True
            assert await validations.event_exists("c1", tx) is False

    async def test_is_unique(self, store):
        """고유성 검사."""
        await store.put("Member", "m1", {"email": "ana@iglesia.org"})
        validations = ValidationService(store)
        assert await validations.is_unique("Member", "email", "ana@iglesia.org") is False
        assert await validations.is_unique("Member", "email", "rui@iglesia.org") is True

    async def test_closed_transaction_surfaces_as_store_access_error(self, store):
        """종료된 트랜잭션은 '없음'이 아니라 StoreAccessError."""
        validations = ValidationService(store)
        async with store.begin_transaction() as tx:
            pass

        with pytest.raises(StoreAccessError) as exc_info:
            await validations.member_exists("m1", tx)
        assert isinstance(exc_info.value.__cause__, TransactionClosedError)


class TestListPage:
    """페이지 조회 테스트."""

    async def test_pages_ordered_by_name(self, store):
        """이름순 정렬, 전체 개수는 페이지와 무관."""
        for document_id, name in (("c1", "Cell"), ("c2", "Alpha"), ("c3", "Bible")):
            await store.put("Course", document_id, {"name": name})
        await store.put("Event", "e1", {"name": "Aardvark"})

        items, total = await store.list_page("Course", page=1, per_page=2)
        assert [d.data["name"] for d in items] == ["Alpha", "Bible"]
        assert total == 3

        items, total = await store.list_page("Course", page=2, per_page=2)
        assert [d.data["name"] for d in items] == ["Cell"]
        assert total == 3

    async def test_prefix_search(self, store):
        """접두사 검색은 대소문자를 구분."""
        for document_id, name in (("m1", "Ana"), ("m2", "Andre"), ("m3", "Bruno"), ("m4", "ana")):
            await store.put("Member", document_id, {"name": name})

        items, total = await store.list_page("Member", prefix="An")
        assert [d.data["name"] for d in items] == ["Ana", "Andre"]
        assert total == 2

    async def test_page_past_end_is_empty(self, store):
        """마지막 페이지 이후는 빈 목록."""
        await store.put("Group", "g1", {"name": "Youth"})
        items, total = await store.list_page("Group", page=3, per_page=10)
        assert list(items) == []
        assert total == 1


def _disk_error(*args, **kwargs):
    raise OperationalError("INSERT INTO documents", {}, Exception("disk I/O error"))


class TestStoreErrors:
    """데이터베이스 오류 변환 테스트."""

    async def test_failed_write_is_store_access_error(self, store, monkeypatch, caplog):
        """쓰기 실패는 원인을 보존한 StoreAccessError로 로깅 후 전파."""
        monkeypatch.setattr(document_repository, "upsert", _disk_error)
        with caplog.at_level(logging.ERROR):
            with pytest.raises(StoreAccessError) as exc_info:
                await store.put("Course", "c1", {"name": "Bible 101"})

        assert isinstance(exc_info.value.__cause__, OperationalError)
        assert exc_info.value.operation == "put"
        assert exc_info.value.status_code == 503
        assert "Course/c1" in caplog.text

    async def test_failed_read_is_store_access_error(self, store, monkeypatch):
        """조회 실패도 StoreAccessError."""
        monkeypatch.setattr(document_repository, "get", _disk_error)
        with pytest.raises(StoreAccessError) as exc_info:
            await store.get_by_id("Member", "m1")
        assert exc_info.value.operation == "get"

    async def test_failed_commit_is_store_access_error(self, store, monkeypatch):
        """트랜잭션 커밋 실패는 StoreAccessError, 데이터는 남지 않음."""
        monkeypatch.setattr(AsyncSession, "commit", _async_disk_error)
        with pytest.raises(StoreAccessError) as exc_info:
            async with store.begin_transaction() as tx:
                await tx.put("MemberCourse", "m1_c1", {"memberId": "m1"})
        assert exc_info.value.operation == "commit"
        assert tx.is_open is False

        monkeypatch.undo()
        assert await store.get_by_id("MemberCourse", "m1_c1") is None


async def _async_disk_error(*args, **kwargs):
    _disk_error()
