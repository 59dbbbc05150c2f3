"""Generator settings.

Defaults can be overridden through the environment:
  SWAGGERGEN_RUNTIME_MODULE  module the emitted code imports its runtime from
  SWAGGERGEN_CLIENT_TIMEOUT  default request timeout of the emitted client config
  SWAGGERGEN_LOAD_TIMEOUT    timeout for fetching a document over HTTP
  SWAGGERGEN_LOG_LEVEL       generator log level
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

DEFAULT_CLIENT_TIMEOUT = 10.0
DEFAULT_LOAD_TIMEOUT = 30.0
DEFAULT_LOG_LEVEL = "INFO"


def _float_env(env: Mapping[str, str], key: str, default: float) -> float:
    raw = env.get(key)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"{key} must be a number of seconds, got {raw!r}") from exc


@dataclass(frozen=True)
class GeneratorConfig:
    runtime_module: str | None = None
    client_timeout: float = DEFAULT_CLIENT_TIMEOUT
    load_timeout: float = DEFAULT_LOAD_TIMEOUT
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> GeneratorConfig:
        env = os.environ if env is None else env
        return cls(
            runtime_module=env.get("SWAGGERGEN_RUNTIME_MODULE") or None,
            client_timeout=_float_env(env, "SWAGGERGEN_CLIENT_TIMEOUT", DEFAULT_CLIENT_TIMEOUT),
            load_timeout=_float_env(env, "SWAGGERGEN_LOAD_TIMEOUT", DEFAULT_LOAD_TIMEOUT),
            log_level=env.get("SWAGGERGEN_LOG_LEVEL") or DEFAULT_LOG_LEVEL,
        )

    def runtime_for(self, package: str) -> str:
        """Module path the generated code imports HttpClient & co. from."""
        return self.runtime_module or f"{package}.runtime"
