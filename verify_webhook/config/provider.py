"""Configuration provider following Black Box Design principles."""
import os
from dataclasses import dataclass
from typing import Optional, Protocol

# Written into every pod by the kubelet
SERVICE_ACCOUNT_NAMESPACE_FILE = "/var/run/secrets/kubernetes.io/serviceaccount/namespace"


@dataclass
class WebhookConfig:
    """Settings consumed by the registration and mutation engine."""
    operator_namespace: str
    oidc_service_name: str = "ibm-security-verify-operator-oidc-server"
    oidc_port: int = 7443
    ingress_class: str = "nginx"
    default_consent_action: str = "always_prompt"
    request_timeout: float = 10.0
    require_explicit_tenant: bool = False

    @property
    def oidc_root(self) -> str:
        """Base URL of the in-cluster OIDC handler."""
        return (
            f"https://{self.oidc_service_name}.{self.operator_namespace}"
            f".svc.cluster.local:{self.oidc_port}"
        )


@dataclass
class APIConfig:
    """HTTP server configuration."""
    host: str
    port: int
    log_level: str
    debug: bool
    tls_cert_file: Optional[str]
    tls_key_file: Optional[str]

    @property
    def tls_enabled(self) -> bool:
        return bool(self.tls_cert_file and self.tls_key_file)


class ConfigProvider(Protocol):
    """Protocol for configuration providers."""

    def get_webhook_config(self) -> WebhookConfig:
        """Get webhook configuration."""
        ...

    def get_api_config(self) -> APIConfig:
        """Get API configuration."""
        ...


def _read_operator_namespace() -> str:
    namespace = os.getenv("OPERATOR_NAMESPACE")
    if namespace:
        return namespace
    try:
        with open(SERVICE_ACCOUNT_NAMESPACE_FILE) as f:
            return f.read().strip() or "default"
    except OSError:
        return "default"


def _parse_positive_float(name: str, default: str) -> float:
    raw = os.getenv(name, default)
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")
    if value <= 0:
        raise ValueError(f"{name} must be greater than zero, got {raw!r}")
    return value


class EnvConfigProvider:
    """Environment-based configuration provider."""

    def get_webhook_config(self) -> WebhookConfig:
        """Get webhook configuration from environment variables."""
        return WebhookConfig(
            operator_namespace=_read_operator_namespace(),
            oidc_service_name=os.getenv(
                "OIDC_SERVICE_NAME", "ibm-security-verify-operator-oidc-server"
            ),
            oidc_port=int(os.getenv("OIDC_PORT", "7443")),
            ingress_class=os.getenv("INGRESS_CLASS", "nginx"),
            default_consent_action=os.getenv("DEFAULT_CONSENT_ACTION", "always_prompt"),
            request_timeout=_parse_positive_float("REGISTRATION_TIMEOUT_SECONDS", "10"),
            require_explicit_tenant=os.getenv("REQUIRE_EXPLICIT_TENANT", "false").lower() == "true",
        )

    def get_api_config(self) -> APIConfig:
        """Get API configuration from environment variables."""
        return APIConfig(
            host=os.getenv("API_HOST", "0.0.0.0"),
            port=int(os.getenv("API_PORT", "9443")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            debug=os.getenv("API_DEBUG", "false").lower() == "true",
            tls_cert_file=os.getenv("TLS_CERT_FILE"),
            tls_key_file=os.getenv("TLS_KEY_FILE"),
        )
