"""레포지토리 패키지 — 데이터베이스 쿼리 계층.

Repository package — Database query layer.
Repositories take an AsyncSession per call and wrap driver failures in
StorageError subclasses; they never commit.
"""
