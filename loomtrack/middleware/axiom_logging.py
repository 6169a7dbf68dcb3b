"""Axiom API 로깅 미들웨어.

Axiom API logging middleware.
Sends one structured event per API call to Axiom: surface (admin / app /
sensor / auth), method, path, loom and shift ids taken from the path, the
caller's user id and role from the bearer token, status code, duration and
the error detail of 4xx/5xx responses. Sensitive fields are masked.
Sensor ingestion bodies are not logged; only their loom id is kept.
"""

import json
import logging
import re
import time
from typing import Any

import jwt
from axiom_py import Client as AxiomClient
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from loomtrack.config import settings
from loomtrack.utils.jwt import decode_token

logger = logging.getLogger(__name__)

# 마스킹 대상 필드 패턴 — Fields to mask in request bodies
_SENSITIVE_KEYS = re.compile(
    r"(password|secret|token|authorization|api_key|credential)",
    re.IGNORECASE,
)

# 로깅 제외 경로 — Paths excluded from logging
_SKIP_PATHS = {"/health", "/docs", "/redoc", "/openapi.json"}

# 경로에서 식별자 추출 — Ids pulled out of /looms/{id}/... and /shifts/{id}/...
_PATH_IDS = re.compile(r"/(looms|shifts)/([0-9a-fA-F-]{36})")

_API_PREFIX = "/api/v1/"


def _mask(data: Any, depth: int = 0) -> Any:
    """민감 필드 마스킹 — Recursively mask sensitive fields in dicts/lists."""
    if depth > 4:
        return "..."
    if isinstance(data, dict):
        return {k: "***" if _SENSITIVE_KEYS.search(k) else _mask(v, depth + 1) for k, v in data.items()}
    if isinstance(data, list):
        return [_mask(item, depth + 1) for item in data[:20]]
    return data


def _surface(path: str) -> str:
    # /api/v1/admin/... → "admin"
    if not path.startswith(_API_PREFIX):
        return "other"
    return path[len(_API_PREFIX):].split("/", 1)[0] or "other"


def _caller(request: Request) -> dict[str, str]:
    header: str = request.headers.get("authorization", "")
    if not header.lower().startswith("bearer "):
        return {}
    try:
        payload: dict = decode_token(header[7:])
    except jwt.InvalidTokenError:
        return {"auth": "invalid"}
    return {"user_id": str(payload.get("sub")), "role": str(payload.get("role"))}


class AxiomLoggingMiddleware(BaseHTTPMiddleware):
    """모든 API 요청/응답을 Axiom에 로깅하는 미들웨어.

    Middleware that logs API requests and responses to Axiom. Passes
    requests through untouched when Axiom is not configured.
    """

    def __init__(self, app: Any) -> None:
        super().__init__(app)
        self._client: AxiomClient | None = None
        self._dataset: str = settings.AXIOM_DATASET

        if settings.AXIOM_API_TOKEN and settings.AXIOM_DATASET:
            self._client = AxiomClient(token=settings.AXIOM_API_TOKEN)

    async def _read_body(self, request: Request, surface: str) -> Any:
        body_bytes: bytes = await request.body()
        if not body_bytes:
            return None
        try:
            body: Any = json.loads(body_bytes)
        except (json.JSONDecodeError, UnicodeDecodeError):
            return "(non-json body)"
        if surface == "sensor" and isinstance(body, dict):
            return {"loom_id": body.get("loom_id")}
        return _mask(body)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        path: str = request.url.path
        if not self._client or path in _SKIP_PATHS:
            return await call_next(request)

        start_time: float = time.time()
        surface: str = _surface(path)
        event: dict[str, Any] = {
            "surface": surface,
            "method": request.method,
            "path": path,
            **_caller(request),
        }
        for kind, value in _PATH_IDS.findall(path):
            event["loom_id" if kind == "looms" else "shift_id"] = value
        if request.query_params:
            event["query_params"] = _mask(dict(request.query_params))
        if request.method in ("POST", "PUT", "PATCH"):
            body = await self._read_body(request, surface)
            if body is not None:
                event["request_body"] = body

        status_code: int = 500
        try:
            response: Response = await call_next(request)
            status_code = response.status_code

            # 에러 응답 사유 추출 — Extract the detail of error responses
            if status_code >= 400:
                resp_body: bytes = b""
                async for chunk in response.body_iterator:
                    resp_body += chunk if isinstance(chunk, bytes) else chunk.encode("utf-8")
                try:
                    detail: Any = json.loads(resp_body).get("detail")
                except (json.JSONDecodeError, UnicodeDecodeError, AttributeError):
                    detail = resp_body.decode("utf-8", errors="replace")
                event["error"] = str(detail)[:500]

                # 소비한 body를 다시 응답으로 반환 — Re-wrap consumed body
                response = Response(
                    content=resp_body,
                    status_code=status_code,
                    headers=dict(response.headers),
                    media_type=response.media_type,
                )
        except Exception as exc:
            event["error"] = f"{type(exc).__name__}: {str(exc)[:300]}"
            raise
        finally:
            event["status_code"] = status_code
            event["duration_ms"] = round((time.time() - start_time) * 1000, 2)
            try:
                self._client.ingest_events(self._dataset, [event])
            except Exception as exc:
                logger.warning("axiom ingest failed: %s", exc)

        return response
