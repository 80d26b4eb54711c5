"""서비스 패키지 — 검증 및 비즈니스 로직 계층.

Service package — Validation and business logic layer.
validation_service and member_factory form the consistency-validation core;
member, catalog and enrollment services call into it before writing documents.
"""
