"""
Async HTTP client for the screening API.

Every failure is translated into the shared error taxonomy so callers can
tell "could not reach the server" (NetworkError) apart from "the server said
no" (ValidationError / AuthError / NotFoundError / ServerError).
"""
from __future__ import annotations

import logging
from typing import Any, List, Optional

import httpx
from pydantic import BaseModel, TypeAdapter

from ..core.errors import (
    AuthError,
    NetworkError,
    NotFoundError,
    ServerError,
    ValidationError,
    WellnessError,
)
from ..models.assessment import AssessmentRecord, AssessmentStats, AssessmentSubmission
from .credentials import CredentialProvider

log = logging.getLogger(__name__)

DEFAULT_WRITE_TIMEOUT = 10.0
DEFAULT_READ_TIMEOUT = 5.0
GATEWAY_STATUSES = (502, 503, 504)

_records_adapter = TypeAdapter(List[AssessmentRecord])


class AuthSession(BaseModel):
    token: str
    user: dict


def _error_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(data, dict):
        for key in ("error", "message", "detail"):
            if data.get(key):
                return str(data[key])
    return response.reason_phrase


def error_for_response(response: httpx.Response) -> Optional[WellnessError]:
    """Maps a non-2xx response to the matching domain error (None when ok)."""
    code = response.status_code
    if code < 400:
        return None
    message = _error_message(response)
    if code in GATEWAY_STATUSES:
        return NetworkError(f"server unreachable ({code}): {message}")
    if code in (401, 403):
        return AuthError(message)
    if code == 404:
        return NotFoundError(message)
    if 400 <= code < 500:
        missing: list = []
        try:
            body = response.json()
            if isinstance(body, dict):
                missing = body.get("missing") or []
        except ValueError:
            pass
        return ValidationError(message, missing=missing)
    return ServerError(f"{code}: {message}")


class WellnessApiClient:
    def __init__(
        self,
        base_url: str,
        credentials: CredentialProvider,
        *,
        write_timeout: float = DEFAULT_WRITE_TIMEOUT,
        read_timeout: float = DEFAULT_READ_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.credentials = credentials
        self.write_timeout = write_timeout
        self.read_timeout = read_timeout
        self._http = httpx.AsyncClient(
            base_url=base_url.rstrip("/") + "/",
            transport=transport,
            headers={"Content-Type": "application/json"},
        )

    async def __aenter__(self) -> "WellnessApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    # ---------- transport ----------
    def _auth_headers(self) -> dict[str, str]:
        token = self.credentials.token()
        if not token:
            raise AuthError("Not signed in")
        return {"Authorization": f"Bearer {token}"}

    async def _request(
        self,
        method: str,
        path: str,
        *,
        timeout: float,
        authenticated: bool = True,
        json: Any = None,
    ) -> httpx.Response:
        headers = self._auth_headers() if authenticated else {}
        try:
            response = await self._http.request(method, path, json=json, headers=headers, timeout=timeout)
        except httpx.TimeoutException as exc:
            raise NetworkError(f"{method} {path} timed out after {timeout}s") from exc
        except httpx.TransportError as exc:
            raise NetworkError(f"cannot reach server: {exc}") from exc
        error = error_for_response(response)
        if error is not None:
            log.debug("%s %s failed: %s %s", method, path, response.status_code, error.kind)
            raise error
        return response

    # ---------- questionnaire ----------
    async def submit(self, submission: AssessmentSubmission) -> AssessmentRecord:
        response = await self._request("POST", "questionnaire", json=submission.to_wire(), timeout=self.write_timeout)
        return AssessmentRecord.model_validate(response.json())

    async def list_active(self) -> List[AssessmentRecord]:
        response = await self._request("GET", "questionnaire", timeout=self.read_timeout)
        return _records_adapter.validate_python(response.json())

    async def get(self, assessment_id: str) -> AssessmentRecord:
        response = await self._request("GET", f"questionnaire/{assessment_id}", timeout=self.read_timeout)
        return AssessmentRecord.model_validate(response.json())

    async def delete(self, assessment_id: str) -> None:
        await self._request("DELETE", f"questionnaire/{assessment_id}", timeout=self.read_timeout)

    async def stats(self) -> AssessmentStats:
        response = await self._request("GET", "questionnaire/stats", timeout=self.read_timeout)
        return AssessmentStats.model_validate(response.json())

    # ---------- auth / misc ----------
    async def register(self, email: str, password: str) -> AuthSession:
        response = await self._request(
            "POST", "auth/register", json={"email": email, "password": password},
            timeout=self.write_timeout, authenticated=False,
        )
        return AuthSession.model_validate(response.json())

    async def login(self, email: str, password: str) -> AuthSession:
        response = await self._request(
            "POST", "auth/login", json={"email": email, "password": password},
            timeout=self.write_timeout, authenticated=False,
        )
        return AuthSession.model_validate(response.json())

    async def health(self) -> bool:
        try:
            response = await self._request("GET", "health", timeout=self.read_timeout, authenticated=False)
            return response.json().get("ok") is True
        except (WellnessError, ValueError) as exc:
            log.info("health check failed: %s", exc)
            return False
