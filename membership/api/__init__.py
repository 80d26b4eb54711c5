"""API 라우터 패키지 — 모든 엔드포인트 통합.

API Router package — Aggregates all endpoints into a single router for
inclusion in the FastAPI application.

Included routers:
    - members: 회원 및 과정/행사/그룹 관계 (Members and their relations)
    - courses: 과정 관리 (Course management)
    - events: 행사 관리 (Event management)
    - groups: 그룹 관리 (Group management)
"""

from fastapi import APIRouter

from membership.api.catalog import courses_router, events_router, groups_router
from membership.api.members import router as members_router

api_router: APIRouter = APIRouter()

api_router.include_router(members_router, prefix="/members", tags=["Members"])
api_router.include_router(courses_router, prefix="/courses", tags=["Courses"])
api_router.include_router(events_router, prefix="/events", tags=["Events"])
api_router.include_router(groups_router, prefix="/groups", tags=["Groups"])
