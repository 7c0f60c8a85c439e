"""Network trace for the REST and OAuth exchanges, with credentials masked."""

import json
import logging
import os
from collections.abc import Iterable, Mapping
from typing import Any
from urllib.parse import parse_qsl, urlencode

logger = logging.getLogger(__name__)

ENV_SWITCH = "FILA_LOG_REQUESTS"
MASK = "***REDACTED***"

SECRET_HEADERS = frozenset({"authorization", "cookie", "x-api-key"})
SECRET_FIELDS = frozenset({"password", "access_token", "code", "code_verifier", "client_secret"})


def should_log_requests(enabled: bool = False) -> bool:
    """True when network logs are on in config or FILA_LOG_REQUESTS=true."""
    return enabled or os.getenv(ENV_SWITCH, "").lower() == "true"


def mask(values: Mapping[str, Any], secrets: Iterable[str]) -> dict[str, Any]:
    """Copy ``values`` with every key named in ``secrets`` (any case) masked."""
    hidden = {s.lower() for s in secrets}
    return {k: MASK if k.lower() in hidden else v for k, v in values.items()}


class RequestLogger:
    """Writes one INFO entry per request and one per response.

    Bodies may be JSON mappings or form-encoded strings; both are masked
    field by field before they are written.
    """

    def __init__(self, enabled: bool = False) -> None:
        self._enabled = enabled

    @property
    def active(self) -> bool:
        return should_log_requests(self._enabled)

    def request(
        self,
        method: str,
        url: str,
        *,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
        body: Any = None,
    ) -> None:
        if not self.active:
            return

        target = url
        if params:
            target += ("&" if "?" in url else "?") + "&".join(
                f"{k}={v}" for k, v in sorted(params.items())
            )
        lines = [f"{method} {target}"]
        if headers:
            lines.append(f"Headers: {json.dumps(mask(headers, SECRET_HEADERS), indent=2)}")
        if body is not None:
            lines.append(f"Payload: {self._describe_body(body)}")
        logger.info("API Request:\n" + "\n".join(lines))

    def response(self, method: str, url: str, status: int, elapsed_ms: float) -> None:
        if self.active:
            logger.info(f"API Response: {method} {url} -> {status} in {elapsed_ms:.0f} ms")

    @staticmethod
    def _describe_body(body: Any) -> str:
        if isinstance(body, str):
            fields = parse_qsl(body, keep_blank_values=True)
            if not fields:
                return body
            return urlencode(mask(dict(fields), SECRET_FIELDS), safe="*")
        if isinstance(body, Mapping):
            try:
                return json.dumps(mask(body, SECRET_FIELDS), indent=2)
            except (TypeError, ValueError):
                return str(mask(body, SECRET_FIELDS))
        return str(body)
