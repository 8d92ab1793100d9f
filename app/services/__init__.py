"""서비스 패키지 — 비즈니스 로직 계층.

Service package — Business logic layer.
Services enforce role checks and lifecycle rules, and run every repository
call as a unit of work on a ConnectionProvider.
"""
