"""
Shared pytest fixtures for Verify webhook tests.

This module provides common fixtures including:
- InMemoryObjectStore: ObjectStore fake with call recording
- AuthServerMock: httpx transport simulating a Verify tenant
- Builders for Ingress objects and admission requests
"""

import json
import os
import sys
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple
from urllib.parse import parse_qs

import httpx
import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from verify_webhook.config.provider import WebhookConfig
from verify_webhook.constants import (
    APP_NAME_ANNOTATION,
    APP_URL_ANNOTATION,
    CLIENT_ID_KEY,
    CLIENT_NAME_KEY,
    CLIENT_SECRET_KEY,
    DISCOVERY_ENDPOINT_KEY,
    PRODUCT_LABEL_KEY,
    PRODUCT_LABEL_VALUE,
)
from verify_webhook.errors import ConflictError, NotFoundError
from verify_webhook.modules.api.models import AdmissionRequest, SecretRecord, TenantConfig
from verify_webhook.modules.registration import RegistrationClient

NAMESPACE = "apps"
DISCOVERY_URL = "https://tenant.verify.ibm.com/oidc/endpoint/default/.well-known/openid-configuration"
TOKEN_URL = "https://tenant.verify.ibm.com/oidc/endpoint/default/token"
REGISTRATION_URL = "https://tenant.verify.ibm.com/oidc/endpoint/default/registration"


# =============================================================================
# Object Store Fake
# =============================================================================


class InMemoryObjectStore:
    """
    ObjectStore fake that keeps objects in insertion order.

    Every call is recorded in ``calls`` as (method, args) so tests can
    assert on which store operations happened and in what order.
    """

    def __init__(self):
        self.secrets: Dict[Tuple[str, str], SecretRecord] = {}
        self.tenants: Dict[Tuple[str, str], TenantConfig] = {}
        self.calls: List[Tuple[str, tuple]] = []
        self.conflict_hook: Optional[Callable[[SecretRecord], None]] = None

    def add_secret(self, record: SecretRecord) -> SecretRecord:
        self.secrets[(record.namespace, record.name)] = record
        return record

    def add_tenant(self, tenant: TenantConfig) -> TenantConfig:
        self.tenants[(tenant.namespace, tenant.name)] = tenant
        return tenant

    async def list_secrets(self, namespace: str, labels: Dict[str, str]) -> List[SecretRecord]:
        self.calls.append(("list_secrets", (namespace, labels)))
        return [
            s for (ns, _), s in self.secrets.items()
            if ns == namespace and all(s.labels.get(k) == v for k, v in labels.items())
        ]

    async def get_secret(self, namespace: str, name: str) -> SecretRecord:
        self.calls.append(("get_secret", (namespace, name)))
        try:
            return self.secrets[(namespace, name)]
        except KeyError:
            raise NotFoundError(f"The secret, {name}, does not exist.")

    async def create_secret(self, record: SecretRecord) -> SecretRecord:
        self.calls.append(("create_secret", (record.namespace, record.name)))
        if self.conflict_hook:
            self.conflict_hook(record)
        if (record.namespace, record.name) in self.secrets:
            raise ConflictError(f"The secret, {record.name}, already exists.")
        return self.add_secret(record)

    async def list_tenant_configs(self, namespace: str) -> List[TenantConfig]:
        self.calls.append(("list_tenant_configs", (namespace,)))
        return [t for (ns, _), t in self.tenants.items() if ns == namespace]

    async def get_tenant_config(self, namespace: str, name: str) -> TenantConfig:
        self.calls.append(("get_tenant_config", (namespace, name)))
        try:
            return self.tenants[(namespace, name)]
        except KeyError:
            raise NotFoundError(f"The custom resource, {name}, does not exist.")

    def created(self) -> List[str]:
        return [args[1] for method, args in self.calls if method == "create_secret"]


# =============================================================================
# Authorization Server Mock
# =============================================================================


@dataclass
class AuthServerMock:
    """Simulated Verify tenant for httpx.MockTransport."""

    discovery_status: int = 200
    token_status: int = 200
    registration_status: int = 200
    discovery_body: Any = None
    token_body: Any = None
    registration_body: Any = None
    issued_client_id: str = "a1b2c3d4"
    issued_client_secret: str = "s3cr3t"
    requests: List[httpx.Request] = field(default_factory=list)

    def _reply(self, status: int, body: Any, default: Any) -> httpx.Response:
        body = default if body is None else body
        if isinstance(body, (dict, list)):
            return httpx.Response(status, json=body)
        return httpx.Response(status, text=body)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = str(request.url)

        if url == DISCOVERY_URL:
            return self._reply(
                self.discovery_status,
                self.discovery_body,
                {"registration_endpoint": REGISTRATION_URL, "token_endpoint": TOKEN_URL},
            )
        if url == TOKEN_URL:
            return self._reply(self.token_status, self.token_body, {"access_token": "admin-token"})
        if url == REGISTRATION_URL:
            return self._reply(
                self.registration_status,
                self.registration_body,
                {"client_id": self.issued_client_id, "client_secret": self.issued_client_secret},
            )
        return httpx.Response(404)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def paths(self) -> List[str]:
        return [str(r.url) for r in self.requests]

    def form(self, index: int) -> Dict[str, str]:
        return {k: v[0] for k, v in parse_qs(self.requests[index].content.decode()).items()}

    def json_body(self, index: int) -> Dict[str, Any]:
        return json.loads(self.requests[index].content)


# =============================================================================
# Builders
# =============================================================================


def admin_secret(name: str = "verify-admin", namespace: str = NAMESPACE, **overrides: str) -> SecretRecord:
    data = {
        CLIENT_ID_KEY: "admin-client\n",
        CLIENT_SECRET_KEY: "admin-secret\n",
        DISCOVERY_ENDPOINT_KEY: DISCOVERY_URL + "\n",
    }
    data.update(overrides)
    return SecretRecord(name=name, namespace=namespace, data=data)


def app_secret(app_name: str, client_id: str = "existing-id", namespace: str = NAMESPACE, **overrides: str) -> SecretRecord:
    data = {
        CLIENT_NAME_KEY: app_name + "\n",
        CLIENT_ID_KEY: client_id,
        CLIENT_SECRET_KEY: "existing-secret",
        DISCOVERY_ENDPOINT_KEY: DISCOVERY_URL,
    }
    data.update(overrides)
    return SecretRecord(
        name=f"ibm-security-verify-client-{client_id}",
        namespace=namespace,
        labels={PRODUCT_LABEL_KEY: PRODUCT_LABEL_VALUE},
        data=data,
    )


def tenant(name: str = "verify-tenant", namespace: str = NAMESPACE) -> TenantConfig:
    return TenantConfig(
        name=name,
        namespace=namespace,
        credential_secret_reference="verify-admin",
        ingress_root="https://apps.example.com",
    )


def ingress_object(annotations: Optional[Dict[str, str]] = None, namespace: Optional[str] = NAMESPACE) -> Dict[str, Any]:
    metadata: Dict[str, Any] = {"name": "web"}
    if namespace:
        metadata["namespace"] = namespace
    if annotations is not None:
        metadata["annotations"] = annotations
    return {
        "apiVersion": "networking.k8s.io/v1",
        "kind": "Ingress",
        "metadata": metadata,
        "spec": {"rules": [{"host": "web.example.com"}]},
    }


def protected_annotations(**extra: str) -> Dict[str, str]:
    annotations = {
        APP_NAME_ANNOTATION: "web-app",
        APP_URL_ANNOTATION: "https://web.example.com/",
        "team": "payments",
    }
    annotations.update(extra)
    return annotations


def admission_request(obj: Optional[Dict[str, Any]], uid: str = "uid-1") -> AdmissionRequest:
    return AdmissionRequest.model_validate(
        {
            "uid": uid,
            "kind": {"group": "networking.k8s.io", "version": "v1", "kind": "Ingress"},
            "operation": "CREATE",
            "namespace": NAMESPACE,
            "object": obj,
        }
    )


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def store():
    """Create an empty in-memory object store."""
    return InMemoryObjectStore()


@pytest.fixture
def auth_server():
    """Create a Verify tenant mock answering 200 everywhere."""
    return AuthServerMock()


@pytest.fixture
def registration_client(auth_server):
    """Create a RegistrationClient talking to the tenant mock."""
    return RegistrationClient(timeout=5.0, transport=auth_server.transport())


@pytest.fixture
def webhook_config():
    """Create a test webhook configuration."""
    return WebhookConfig(operator_namespace="verify-operator")
