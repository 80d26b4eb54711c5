"""레포지토리 패키지 — 문서 저장소 계층.

Repository package — Document store layer.
document_repository runs session-level queries on the documents table;
document_store wraps it into the client the validation layer calls
(independent reads plus transaction contexts).
"""
