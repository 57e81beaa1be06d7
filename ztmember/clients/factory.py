"""Member client selection based on runtime settings."""

from __future__ import annotations

from pathlib import Path

from ztmember.clients.base import ZeroTierMemberClient
from ztmember.clients.central import ZeroTierCentralClient
from ztmember.clients.self_hosted_controller import ZeroTierSelfHostedControllerClient
from ztmember.config import (
    PROVIDER_CENTRAL,
    PROVIDER_SELF_HOSTED_CONTROLLER,
    AppSettings,
)


class ClientConfigurationError(ValueError):
    """Raised when the runtime config cannot produce a controller client."""

    error_code = "client_configuration_error"


def create_member_client(settings: AppSettings) -> ZeroTierMemberClient:
    provider_mode = settings.zt_provider.strip().lower()
    if provider_mode == PROVIDER_CENTRAL:
        return ZeroTierCentralClient(
            base_url=_require_setting(
                settings.zt_central_base_url,
                "zerotier.central.base_url (ZT_CENTRAL_BASE_URL)",
                provider_mode,
            ),
            api_token=_require_setting(
                settings.zt_central_api_token,
                "zerotier.central.api_token (ZT_CENTRAL_API_TOKEN)",
                provider_mode,
            ),
            timeout_seconds=settings.zt_http_timeout_seconds,
        )

    if provider_mode == PROVIDER_SELF_HOSTED_CONTROLLER:
        return ZeroTierSelfHostedControllerClient(
            base_url=_require_setting(
                settings.zt_controller_base_url,
                "zerotier.self_hosted_controller.base_url (ZT_CONTROLLER_BASE_URL)",
                provider_mode,
            ),
            auth_token=_controller_auth_token(settings),
            timeout_seconds=settings.zt_http_timeout_seconds,
        )

    raise ClientConfigurationError(
        f"provider must be either {PROVIDER_CENTRAL!r} or "
        f"{PROVIDER_SELF_HOSTED_CONTROLLER!r} (received {settings.zt_provider!r})"
    )


def _controller_auth_token(settings: AppSettings) -> str:
    """Use the controller's authtoken.secret when configured, else the inline token."""
    token_file = settings.zt_controller_auth_token_file.strip()
    if not token_file:
        return _require_setting(
            settings.zt_controller_auth_token,
            "zerotier.self_hosted_controller.auth_token (ZT_CONTROLLER_AUTH_TOKEN)",
            PROVIDER_SELF_HOSTED_CONTROLLER,
        )

    path = Path(token_file).expanduser()
    try:
        token = path.read_text(encoding="utf-8").strip()
    except OSError as exc:
        raise ClientConfigurationError(
            f"cannot read controller authtoken.secret at {path}: {exc}"
        ) from exc
    if not token:
        raise ClientConfigurationError(f"controller authtoken.secret at {path} is empty")
    return token


def _require_setting(value: str, name: str, provider_mode: str) -> str:
    cleaned = value.strip()
    if not cleaned:
        raise ClientConfigurationError(f"{name} is required when provider={provider_mode}")
    return cleaned
