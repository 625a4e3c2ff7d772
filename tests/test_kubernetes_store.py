"""
Tests for the Kubernetes-backed object store with mocked API clients.
"""

import base64
from unittest.mock import MagicMock

import pytest
from kubernetes import client
from kubernetes.client.rest import ApiException

from verify_webhook.errors import ConflictError, NotFoundError, StoreError
from verify_webhook.modules.api.models import SecretRecord
from verify_webhook.modules.store import KubernetesObjectStore


def b64(value: str) -> str:
    return base64.b64encode(value.encode()).decode()


@pytest.fixture
def core_api():
    return MagicMock()


@pytest.fixture
def custom_api():
    return MagicMock()


@pytest.fixture
def k8s_store(core_api, custom_api):
    return KubernetesObjectStore(core_api=core_api, custom_api=custom_api)


@pytest.mark.asyncio
async def test_list_secrets_decodes_and_selects(k8s_store, core_api):
    """Secrets are listed by label selector and their data decoded."""
    core_api.list_namespaced_secret.return_value = client.V1SecretList(
        items=[
            client.V1Secret(
                metadata=client.V1ObjectMeta(
                    name="ibm-security-verify-client-abc",
                    namespace="apps",
                    labels={"product": "ibm-security-verify"},
                ),
                data={"client_name": b64("web-app\n"), "client_id": b64("abc")},
            )
        ]
    )

    records = await k8s_store.list_secrets("apps", {"product": "ibm-security-verify"})

    core_api.list_namespaced_secret.assert_called_once_with(
        "apps", label_selector="product=ibm-security-verify"
    )
    assert records == [
        SecretRecord(
            name="ibm-security-verify-client-abc",
            namespace="apps",
            labels={"product": "ibm-security-verify"},
            data={"client_name": "web-app\n", "client_id": "abc"},
        )
    ]


@pytest.mark.asyncio
async def test_get_secret_not_found(k8s_store, core_api):
    """A 404 becomes NotFoundError."""
    core_api.read_namespaced_secret.side_effect = ApiException(status=404, reason="Not Found")

    with pytest.raises(NotFoundError, match="verify-admin"):
        await k8s_store.get_secret("apps", "verify-admin")


@pytest.mark.asyncio
async def test_create_secret_sends_opaque_string_data(k8s_store, core_api):
    """Records are created as labelled Opaque secrets."""
    record = SecretRecord(
        name="ibm-security-verify-client-abc",
        namespace="apps",
        labels={"product": "ibm-security-verify"},
        data={"client_id": "abc"},
    )

    assert await k8s_store.create_secret(record) == record

    namespace, body = core_api.create_namespaced_secret.call_args[0]
    assert namespace == "apps"
    assert body.type == "Opaque"
    assert body.metadata.name == "ibm-security-verify-client-abc"
    assert body.metadata.labels == {"product": "ibm-security-verify"}
    assert body.string_data == {"client_id": "abc"}


@pytest.mark.asyncio
async def test_create_secret_conflict(k8s_store, core_api):
    """A 409 becomes ConflictError."""
    core_api.create_namespaced_secret.side_effect = ApiException(status=409, reason="Conflict")

    with pytest.raises(ConflictError):
        await k8s_store.create_secret(SecretRecord(name="s", namespace="apps"))


@pytest.mark.asyncio
async def test_list_secrets_forbidden(k8s_store, core_api):
    """Other API failures are StoreErrors carrying the status."""
    core_api.list_namespaced_secret.side_effect = ApiException(status=403, reason="Forbidden")

    with pytest.raises(StoreError, match="403"):
        await k8s_store.list_secrets("apps", {"product": "ibm-security-verify"})


@pytest.mark.asyncio
async def test_list_tenant_configs(k8s_store, custom_api):
    """Custom resources are mapped to TenantConfig in store order."""
    custom_api.list_namespaced_custom_object.return_value = {
        "items": [
            {
                "metadata": {"name": "b-tenant", "namespace": "apps"},
                "spec": {"clientSecret": "admin", "ingressRoot": "https://b"},
            },
            {
                "metadata": {"name": "a-tenant", "namespace": "apps"},
                "spec": {"clientSecret": "admin", "ingressRoot": "https://a"},
            },
        ]
    }

    tenants = await k8s_store.list_tenant_configs("apps")

    assert [t.name for t in tenants] == ["b-tenant", "a-tenant"]
    assert tenants[0].credential_secret_reference == "admin"
    assert tenants[0].ingress_root == "https://b"
    kwargs = custom_api.list_namespaced_custom_object.call_args.kwargs
    assert kwargs["group"] == "ibm.com"
    assert kwargs["plural"] == "ibmsecurityverifies"


@pytest.mark.asyncio
async def test_get_tenant_config_not_found(k8s_store, custom_api):
    """A missing custom resource becomes NotFoundError."""
    custom_api.get_namespaced_custom_object.side_effect = ApiException(status=404, reason="Not Found")

    with pytest.raises(NotFoundError):
        await k8s_store.get_tenant_config("apps", "nope")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "raw",
    [
        "not base64!",
        base64.b64encode(b"\xff\xfe").decode(),
    ],
)
async def test_undecodable_value_is_store_error(k8s_store, core_api, raw):
    """A value that is not base64 UTF-8 fails loudly instead of reading as empty."""
    core_api.list_namespaced_secret.return_value = client.V1SecretList(
        items=[
            client.V1Secret(
                metadata=client.V1ObjectMeta(
                    name="ibm-security-verify-client-abc",
                    namespace="apps",
                    labels={"product": "ibm-security-verify"},
                ),
                data={"client_name": raw, "client_id": b64("abc")},
            )
        ]
    )

    with pytest.raises(StoreError, match="ibm-security-verify-client-abc.*client_name"):
        await k8s_store.list_secrets("apps", {"product": "ibm-security-verify"})
