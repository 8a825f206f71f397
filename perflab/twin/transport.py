"""HTTP transport to the digital-twin service.

Performs the call, decodes JSON, and maps every failure (missing base URL,
network error, non-2xx, malformed body) into a TwinError subclass. No raw
httpx exception leaves this module, and nothing here touches session state.
"""

from __future__ import annotations

from typing import Any, TypeVar

import httpx
from loguru import logger
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from perflab.twin.errors import ConfigurationError, RequestError, TransportError
from perflab.twin.models import (
    MetricsRequest,
    MetricsResponse,
    PingResponse,
    StressDose,
    UnifiedStateVector,
    WorkoutLog,
    WorkoutPrescription,
)

ModelT = TypeVar("ModelT", bound=BaseModel)

V1_PREFIX = "/v1"
DEFAULT_TIMEOUT_S = 10.0


def resolve_base_url(raw: str | None) -> str | ConfigurationError:
    """Validate a configured base URL once.

    Returns the normalized root (no trailing slash) or a ConfigurationError
    value. Nothing is logged or raised here; callers decide what to do.
    """
    root = (raw or "").strip().rstrip("/")
    if not root:
        return ConfigurationError("API base URL is not configured (set API_BASE_URL)")
    if not root.startswith(("http://", "https://")):
        return ConfigurationError(f"API base URL must be http(s): {root}")
    return root


def _is_json(response: httpx.Response) -> bool:
    return "application/json" in response.headers.get("content-type", "")


def _request_error(response: httpx.Response) -> RequestError:
    """Build a RequestError with the best detail the body offers."""
    detail: Any = None
    parsed = False
    if _is_json(response):
        try:
            detail = response.json()
            parsed = True
        except ValueError:
            pass
    if not parsed:
        text = response.text
        detail = text if text else None

    message: str | None = None
    if isinstance(detail, dict) and isinstance(detail.get("detail"), str) and detail["detail"]:
        message = detail["detail"]
    elif isinstance(detail, str) and detail.strip():
        message = detail.strip()
    if not message:
        message = response.reason_phrase or "API request failed"

    return RequestError(message, status=response.status_code, details=detail)


class TwinTransport:
    """Async client for the twin service. One instance per configured base URL."""

    def __init__(
        self,
        base_url: str | None,
        *,
        timeout: float = DEFAULT_TIMEOUT_S,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._root = resolve_base_url(base_url)
        self._timeout = timeout
        self._client = client
        self._owns_client = client is None

    @property
    def configured(self) -> bool:
        return not isinstance(self._root, ConfigurationError)

    def _require_root(self) -> str:
        if isinstance(self._root, ConfigurationError):
            raise ConfigurationError(self._root.message)
        return self._root

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> TwinTransport:
        return self

    async def __aexit__(self, *args) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # Raw request
    # ------------------------------------------------------------------

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
    ) -> Any | None:
        """Perform one call. Returns parsed JSON, or None for an empty/non-JSON 2xx body."""
        root = self._require_root()
        url = f"{root}{path}"
        logger.debug(f"{method} {url} params={params}")

        try:
            response = await self._get_client().request(method, url, json=json, params=params)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.warning(f"{method} {path} failed before a response: {exc!r}")
            raise TransportError(f"Request to {path} failed: {exc}" if str(exc) else f"Request to {path} failed") from exc

        if not response.is_success:
            err = _request_error(response)
            logger.warning(f"{method} {path} -> {err.status}: {err.message}")
            raise err

        if not response.content or not _is_json(response):
            return None

        try:
            return response.json()
        except ValueError as exc:
            logger.warning(f"{method} {path} returned malformed JSON")
            raise TransportError(f"Malformed JSON response from {path}", details=response.text) from exc

    @staticmethod
    def _parse(model: type[ModelT], payload: Any, path: str) -> ModelT:
        if payload is None:
            raise TransportError(f"Empty response from {path}")
        try:
            return model.model_validate(payload)
        except PydanticValidationError as exc:
            raise TransportError(
                f"Malformed response from {path}",
                details=exc.errors(include_url=False, include_context=False),
            ) from exc

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def ping(self) -> PingResponse:
        payload = await self.request("GET", "/ping")
        return self._parse(PingResponse, payload, "/ping")

    async def get_next_session(self, goal: str = "Strength") -> WorkoutPrescription:
        """Controller: recommended next session u(t) for a goal."""
        path = f"{V1_PREFIX}/next-session"
        payload = await self.request("GET", path, params={"goal": goal})
        return self._parse(WorkoutPrescription, payload, path)

    async def log_workout(self, log: WorkoutLog) -> UnifiedStateVector:
        """Commit a workout: S(t) -> S(t+1). Returns the new state."""
        path = f"{V1_PREFIX}/log-workout"
        payload = await self.request("POST", path, json=log.to_payload())
        return self._parse(UnifiedStateVector, payload, path)

    async def simulate_dose(self, log: WorkoutLog) -> StressDose:
        """Sensor map only: D(t) for a log, state untouched."""
        path = f"{V1_PREFIX}/simulate-dose"
        payload = await self.request("POST", path, json=log.to_payload())
        return self._parse(StressDose, payload, path)

    async def compute_metrics(self, req: MetricsRequest) -> MetricsResponse:
        payload = await self.request("POST", "/compute-metrics", json=req.model_dump(mode="json"))
        return self._parse(MetricsResponse, payload, "/compute-metrics")
