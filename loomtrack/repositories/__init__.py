"""레포지토리 패키지 — 데이터베이스 쿼리 계층.

Repository package — Database query layer.
Every loom/shift state transition lives here as a conditional UPDATE whose
rowcount tells the caller whether it won. Services decide what to do with
the outcome.
"""
