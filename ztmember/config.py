"""Application configuration loading."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal, cast

import yaml

ProviderMode = Literal[
    "central",
    "self_hosted_controller",
]
PROVIDER_CENTRAL: ProviderMode = "central"
PROVIDER_SELF_HOSTED_CONTROLLER: ProviderMode = "self_hosted_controller"
DEFAULT_RUNTIME_CONFIG_PATH = "runtime-config.yaml"
DEFAULT_MEMBER_DESCRIPTION = "Managed by ztmember"
_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


@dataclass(frozen=True, slots=True)
class AppSettings:
    runtime_config_path: str = DEFAULT_RUNTIME_CONFIG_PATH
    log_level: str = "INFO"
    member_default_description: str = DEFAULT_MEMBER_DESCRIPTION
    zt_provider: ProviderMode = PROVIDER_CENTRAL
    zt_http_timeout_seconds: float = 10.0
    zt_central_base_url: str = "https://api.zerotier.com/api/v1"
    zt_central_api_token: str = ""
    zt_controller_base_url: str = "http://127.0.0.1:9993/controller"
    zt_controller_auth_token: str = ""
    zt_controller_auth_token_file: str = ""

    @classmethod
    def from_yaml(
        cls, runtime_config_path: str = DEFAULT_RUNTIME_CONFIG_PATH
    ) -> AppSettings:
        normalized_path = runtime_config_path.strip() or DEFAULT_RUNTIME_CONFIG_PATH
        config = _load_runtime_config(normalized_path)

        app_cfg = cast(dict[str, Any], config.get("app", {}))
        member_cfg = cast(dict[str, Any], config.get("member", {}))
        zerotier_cfg = cast(dict[str, Any], config.get("zerotier", {}))
        central_cfg = cast(dict[str, Any], zerotier_cfg.get("central", {}))
        controller_cfg = cast(
            dict[str, Any], zerotier_cfg.get("self_hosted_controller", {})
        )

        return cls(
            runtime_config_path=normalized_path,
            log_level=_resolve_log_level(app_cfg),
            member_default_description=str(
                member_cfg.get("default_description", DEFAULT_MEMBER_DESCRIPTION)
            ),
            zt_provider=_resolve_provider_mode(zerotier_cfg),
            zt_http_timeout_seconds=max(
                1.0,
                float(zerotier_cfg.get("http_timeout_seconds", 10.0)),
            ),
            zt_central_base_url=str(
                central_cfg.get("base_url", "https://api.zerotier.com/api/v1")
            ),
            zt_central_api_token=str(central_cfg.get("api_token", "")),
            zt_controller_base_url=str(
                controller_cfg.get("base_url", "http://127.0.0.1:9993/controller")
            ),
            zt_controller_auth_token=str(controller_cfg.get("auth_token", "")),
            zt_controller_auth_token_file=str(
                controller_cfg.get("auth_token_file", "")
            ),
        )

    @classmethod
    def from_env(
        cls, runtime_config_path: str | None = None
    ) -> AppSettings:
        """Load the YAML runtime config, then apply environment overrides."""
        path = runtime_config_path or os.environ.get(
            "ZTMEMBER_RUNTIME_CONFIG_PATH", DEFAULT_RUNTIME_CONFIG_PATH
        )
        settings = cls.from_yaml(runtime_config_path=path)

        overrides: dict[str, Any] = {}
        for env_name, field_name in _ENV_OVERRIDES:
            value = os.environ.get(env_name, "").strip()
            if value:
                overrides[field_name] = value
        if not overrides:
            return settings
        return replace(settings, **overrides)


_ENV_OVERRIDES = (
    ("ZT_CENTRAL_API_TOKEN", "zt_central_api_token"),
    ("ZT_CONTROLLER_AUTH_TOKEN", "zt_controller_auth_token"),
    ("ZT_CONTROLLER_BASE_URL", "zt_controller_base_url"),
)


def _load_runtime_config(runtime_config_path: str) -> dict[str, Any]:
    path = Path(runtime_config_path)
    if not path.exists() or not path.is_file():
        return {}

    parsed = yaml.safe_load(path.read_text(encoding="utf-8"))
    if isinstance(parsed, dict):
        return parsed
    return {}


def _resolve_provider_mode(zerotier_cfg: dict[str, Any]) -> ProviderMode:
    normalized_mode = str(zerotier_cfg.get("provider", PROVIDER_CENTRAL)).strip().lower()

    if normalized_mode == PROVIDER_CENTRAL:
        return PROVIDER_CENTRAL
    if normalized_mode == PROVIDER_SELF_HOSTED_CONTROLLER:
        return PROVIDER_SELF_HOSTED_CONTROLLER

    raise ValueError(
        "unsupported zerotier.provider in runtime config: "
        f"{normalized_mode!r}; expected one of "
        f"{PROVIDER_CENTRAL!r}, {PROVIDER_SELF_HOSTED_CONTROLLER!r}"
    )


def _resolve_log_level(app_cfg: dict[str, Any]) -> str:
    level = str(app_cfg.get("log_level", "INFO")).strip().upper()
    if level not in _LOG_LEVELS:
        raise ValueError(f"unsupported app.log_level in runtime config: {level!r}")
    return level


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    return AppSettings.from_env()
