"""회원 및 과정·행사 API 테스트.

Member, course and event API tests — Create, update, delete and paginated
listing, field validation errors (400), duplicates (409), lookups (404) and
store failures (503).
"""

from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import OperationalError

from membership.api.deps import get_document_store
from membership.main import app
from membership.repositories.document_repository import document_repository


async def _create_member(client: AsyncClient, **overrides) -> dict:
    payload = {"id": "m1", "name": "Ana", "memberType": "Baptized", **overrides}
    resp = await client.post("/api/v1/members", json=payload)
    assert resp.status_code == 201, resp.text
    return resp.json()


class TestCreateMember:
    """회원 생성 테스트."""

    async def test_create_member(self, client):
        """회원 생성: camelCase 응답, 관계 목록은 빈 배열."""
        data = await _create_member(client, email="ana@iglesia.org", maritalStatus="Single")
        assert data["id"] == "m1"
        assert data["memberType"] == "Baptized"
        assert data["maritalStatus"] == "Single"
        assert data["courses"] == []
        assert data["groups"] == []
        assert data["events"] == []

    async def test_create_member_generates_id(self, client):
        """ID 미입력 시 서버에서 생성."""
        resp = await client.post(
            "/api/v1/members", json={"name": "Rui", "memberType": "Visitor"}
        )
        assert resp.status_code == 201
        assert resp.json()["id"]

    async def test_get_member(self, client):
        """생성한 회원 조회."""
        await _create_member(client, phone="555-0101")
        resp = await client.get("/api/v1/members/m1")
        assert resp.status_code == 200
        assert resp.json()["name"] == "Ana"
        assert resp.json()["phone"] == "555-0101"

    async def test_get_member_not_found(self, client):
        """없는 회원은 404."""
        resp = await client.get("/api/v1/members/nobody")
        assert resp.status_code == 404
        assert resp.json()["detail"] == "Member not found"

    async def test_missing_name(self, client):
        """이름 누락은 400."""
        resp = await client.post(
            "/api/v1/members", json={"id": "m1", "memberType": "Visitor"}
        )
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Field 'name' is required"

    async def test_invalid_member_type(self, client):
        """허용되지 않은 memberType은 400."""
        resp = await client.post(
            "/api/v1/members", json={"id": "m1", "name": "Ana", "memberType": "Member"}
        )
        assert resp.status_code == 400
        assert "memberType" in resp.json()["detail"]

    async def test_invalid_email(self, client):
        """잘못된 이메일은 400, 저장되지 않음."""
        resp = await client.post(
            "/api/v1/members",
            json={"id": "m1", "name": "Ana", "memberType": "Visitor", "email": "not-an-email"},
        )
        assert resp.status_code == 400
        assert "email" in resp.json()["detail"]
        assert (await client.get("/api/v1/members/m1")).status_code == 404

    async def test_duplicate_email(self, client):
        """같은 이메일의 회원은 409."""
        await _create_member(client, email="ana@iglesia.org")
        resp = await client.post(
            "/api/v1/members",
            json={"id": "m2", "name": "Ana B", "memberType": "Visitor", "email": "ana@iglesia.org"},
        )
        assert resp.status_code == 409

    async def test_display_name_email_does_not_bypass_uniqueness(self, client):
        """표시 이름을 붙인 같은 이메일은 생성되지 않음."""
        await _create_member(client, email="ana@x.org")
        resp = await client.post(
            "/api/v1/members",
            json={"id": "m2", "name": "Ana B", "memberType": "Visitor", "email": "Ana <ana@x.org>"},
        )
        assert resp.status_code in (400, 409)
        assert (await client.get("/api/v1/members/m2")).status_code == 404

    async def test_email_case_in_domain_is_duplicate(self, client):
        """도메인 대소문자만 다른 이메일도 중복."""
        await _create_member(client, email="ana@x.org")
        resp = await client.post(
            "/api/v1/members",
            json={"id": "m2", "name": "Ana B", "memberType": "Visitor", "email": "ana@X.ORG"},
        )
        assert resp.status_code == 409

    async def test_duplicate_id(self, client):
        """같은 ID의 회원은 409, 기존 회원 유지."""
        await _create_member(client)
        resp = await client.post(
            "/api/v1/members", json={"id": "m1", "name": "Other", "memberType": "Visitor"}
        )
        assert resp.status_code == 409
        assert (await client.get("/api/v1/members/m1")).json()["name"] == "Ana"


class TestUpdateDeleteMember:
    """회원 수정/삭제 테스트."""

    async def test_update_member(self, client):
        """일부 필드만 수정, 나머지는 유지."""
        await _create_member(client, email="ana@iglesia.org", phone="555-0101")
        resp = await client.put(
            "/api/v1/members/m1", json={"memberType": "Visitor", "occupation": "Nurse"}
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["memberType"] == "Visitor"
        assert data["occupation"] == "Nurse"
        assert data["phone"] == "555-0101"
        assert (await client.get("/api/v1/members/m1")).json()["occupation"] == "Nurse"

    async def test_update_runs_member_checks(self, client):
        """수정 결과도 회원 검증을 통과해야 함."""
        await _create_member(client)
        resp = await client.put("/api/v1/members/m1", json={"memberType": "Member"})
        assert resp.status_code == 400
        resp = await client.put("/api/v1/members/m1", json={"name": ""})
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Field 'name' is required"

    async def test_update_keeps_own_email(self, client):
        """자기 이메일을 다시 보내도 중복 아님."""
        await _create_member(client, email="ana@iglesia.org")
        resp = await client.put("/api/v1/members/m1", json={"email": "ana@iglesia.org"})
        assert resp.status_code == 200

    async def test_update_to_taken_email(self, client):
        """다른 회원의 이메일로 수정하면 409."""
        await _create_member(client, email="ana@iglesia.org")
        await _create_member(client, id="m2", name="Rui", email="rui@iglesia.org")
        resp = await client.put("/api/v1/members/m2", json={"email": "ana@iglesia.org"})
        assert resp.status_code == 409

    async def test_update_unknown_member(self, client):
        """없는 회원 수정은 404."""
        resp = await client.put("/api/v1/members/ghost", json={"name": "Ana"})
        assert resp.status_code == 404

    async def test_delete_member(self, client):
        """삭제 후 조회 404, 재삭제 404."""
        await _create_member(client)
        assert (await client.delete("/api/v1/members/m1")).status_code == 204
        assert (await client.get("/api/v1/members/m1")).status_code == 404
        assert (await client.delete("/api/v1/members/m1")).status_code == 404


class TestListMembers:
    """회원 목록 테스트."""

    async def test_paginated_by_name(self, client):
        """이름순 페이지 조회."""
        for member_id, name in (("m1", "Carla"), ("m2", "Ana"), ("m3", "Bruno")):
            await _create_member(client, id=member_id, name=name)

        resp = await client.get("/api/v1/members", params={"page": 1, "per_page": 2})
        assert resp.status_code == 200
        data = resp.json()
        assert [m["name"] for m in data["items"]] == ["Ana", "Bruno"]
        assert data["items"][0]["memberType"] == "Baptized"
        assert data["total"] == 3
        assert data["pages"] == 2

        resp = await client.get("/api/v1/members", params={"page": 2, "per_page": 2})
        assert [m["name"] for m in resp.json()["items"]] == ["Carla"]

    async def test_search_by_name_prefix(self, client):
        """이름 접두사 검색."""
        for member_id, name in (("m1", "Ana"), ("m2", "Andre"), ("m3", "Bruno")):
            await _create_member(client, id=member_id, name=name)

        resp = await client.get("/api/v1/members", params={"search": "An"})
        assert [m["name"] for m in resp.json()["items"]] == ["Ana", "Andre"]
        assert resp.json()["total"] == 2

    async def test_invalid_page_rejected(self, client):
        """0 페이지는 422."""
        resp = await client.get("/api/v1/members", params={"page": 0})
        assert resp.status_code == 422


class TestCatalog:
    """과정/행사 테스트."""

    async def test_create_and_get_course(self, client):
        """과정 생성 및 조회."""
        resp = await client.post(
            "/api/v1/courses", json={"name": "Bible 101", "level": "Basic"}
        )
        assert resp.status_code == 201
        course = resp.json()

        resp = await client.get(f"/api/v1/courses/{course['id']}")
        assert resp.status_code == 200
        assert resp.json() == course

    async def test_duplicate_course_name(self, client):
        """같은 이름의 과정은 409."""
        await client.post("/api/v1/courses", json={"name": "Bible 101"})
        resp = await client.post("/api/v1/courses", json={"name": "Bible 101"})
        assert resp.status_code == 409

    async def test_course_requires_name(self, client):
        """이름 없는 과정은 400."""
        resp = await client.post("/api/v1/courses", json={"description": "x"})
        assert resp.status_code == 400

    async def test_create_and_get_event(self, client):
        """행사 생성 및 조회."""
        resp = await client.post(
            "/api/v1/events",
            json={"name": "Retreat", "date": "2024-01-01", "location": "Campinas"},
        )
        assert resp.status_code == 201
        event = resp.json()
        assert event["date"] == "2024-01-01"

        resp = await client.get(f"/api/v1/events/{event['id']}")
        assert resp.status_code == 200
        assert resp.json()["location"] == "Campinas"

    async def test_event_requires_date(self, client):
        """일자 없는 행사는 400."""
        resp = await client.post("/api/v1/events", json={"name": "Retreat", "date": ""})
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Field 'date' is required"

    async def test_unknown_course_and_event(self, client):
        """없는 과정/행사는 404."""
        assert (await client.get("/api/v1/courses/nope")).status_code == 404
        assert (await client.get("/api/v1/events/nope")).status_code == 404

    async def test_update_course(self, client):
        """과정 수정, 같은 이름 유지는 허용, 다른 과정 이름은 409."""
        course = (await client.post("/api/v1/courses", json={"name": "Bible 101"})).json()
        await client.post("/api/v1/courses", json={"name": "Bible 201"})

        resp = await client.put(
            f"/api/v1/courses/{course['id']}", json={"name": "Bible 101", "level": "Basic"}
        )
        assert resp.status_code == 200
        assert resp.json()["level"] == "Basic"

        resp = await client.put(f"/api/v1/courses/{course['id']}", json={"name": "Bible 201"})
        assert resp.status_code == 409

    async def test_delete_course(self, client):
        """과정 삭제 후 404."""
        course = (await client.post("/api/v1/courses", json={"name": "Bible 101"})).json()
        assert (await client.delete(f"/api/v1/courses/{course['id']}")).status_code == 204
        assert (await client.get(f"/api/v1/courses/{course['id']}")).status_code == 404
        assert (await client.delete(f"/api/v1/courses/{course['id']}")).status_code == 404

    async def test_list_courses(self, client):
        """과정 목록 이름순."""
        for name in ("Theology", "Bible 101", "Music"):
            await client.post("/api/v1/courses", json={"name": name})
        resp = await client.get("/api/v1/courses")
        assert resp.status_code == 200
        assert [c["name"] for c in resp.json()["items"]] == ["Bible 101", "Music", "Theology"]
        assert resp.json()["pages"] == 1

    async def test_update_event_date_cannot_be_blank(self, client):
        """행사 일자를 비우면 400, 다른 필드 수정은 허용."""
        event = (
            await client.post("/api/v1/events", json={"name": "Retreat", "date": "2024-01-01"})
        ).json()
        resp = await client.put(f"/api/v1/events/{event['id']}", json={"date": ""})
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Field 'date' is required"

        resp = await client.put(f"/api/v1/events/{event['id']}", json={"location": "Campinas"})
        assert resp.status_code == 200
        assert resp.json()["date"] == "2024-01-01"
        assert resp.json()["location"] == "Campinas"

    async def test_delete_and_list_events(self, client):
        """행사 목록 및 삭제."""
        event = (
            await client.post("/api/v1/events", json={"name": "Retreat", "date": "2024-01-01"})
        ).json()
        resp = await client.get("/api/v1/events", params={"search": "Ret"})
        assert [e["id"] for e in resp.json()["items"]] == [event["id"]]

        assert (await client.delete(f"/api/v1/events/{event['id']}")).status_code == 204
        assert (await client.get("/api/v1/events")).json()["total"] == 0


async def test_store_failure_returns_503(fake_store):
    """저장소 장애는 404가 아니라 503."""
    fake_store.fail_with = ConnectionError("network down")
    app.dependency_overrides[get_document_store] = lambda: fake_store
    try:
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            resp = await ac.get("/api/v1/members/m1/courses")
    finally:
        app.dependency_overrides.clear()

    assert resp.status_code == 503
    assert "Member/m1" in resp.json()["detail"]


async def test_failed_write_returns_503(client, monkeypatch):
    """쓰기 실패는 500이 아니라 503."""
    monkeypatch.setattr(document_repository, "upsert", _disk_error)
    resp = await client.post("/api/v1/courses", json={"name": "Bible 101"})
    assert resp.status_code == 503
    assert "put" in resp.json()["detail"]


async def test_failed_read_returns_503(client, monkeypatch):
    """조회 실패도 503."""
    monkeypatch.setattr(document_repository, "get", _disk_error)
    resp = await client.get("/api/v1/members/m1")
    assert resp.status_code == 503


def _disk_error(*args, **kwargs):
    raise OperationalError("SELECT", {}, Exception("disk I/O error"))
