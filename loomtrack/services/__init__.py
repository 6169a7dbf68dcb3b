"""서비스 패키지 — 비즈니스 로직 계층.

Service package — Business logic layer.
Shift registry, loom sessions, expiry sweeping and sensor reporting.
Services call repositories for DB operations, translate lost state
transitions into HTTP errors, and only flush. Routers and the background
sweep loop commit.
"""
