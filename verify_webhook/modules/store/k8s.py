"""
Kubernetes-backed object store.

The kubernetes client is synchronous, so every call is dispatched to a
worker thread to keep the event loop free while the API server answers.
"""

import asyncio
import base64
import binascii
import logging
from typing import Any, Dict, List, Optional

from kubernetes import client, config
from kubernetes.client.rest import ApiException
from kubernetes.config.config_exception import ConfigException

from ...constants import TENANT_CONFIG_GROUP, TENANT_CONFIG_PLURAL, TENANT_CONFIG_VERSION
from ...errors import ConflictError, NotFoundError, StoreError
from ..api.models import SecretRecord, TenantConfig

logger = logging.getLogger(__name__)


def load_kubernetes_config() -> None:
    """Load in-cluster configuration, falling back to the local kubeconfig."""
    try:
        config.load_incluster_config()
        logger.info("Loaded in-cluster Kubernetes configuration")
    except ConfigException:
        config.load_kube_config()
        logger.info("Loaded local Kubernetes configuration")


def _decode(secret_name: str, key: str, value: str) -> str:
    try:
        return base64.b64decode(value, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError, ValueError) as e:
        raise StoreError(
            f"The secret, {secret_name}, has an undecodable value for {key}."
        ) from e


def _to_store_error(exc: ApiException, what: str) -> StoreError:
    if exc.status == 404:
        return NotFoundError(f"{what} does not exist.")
    if exc.status == 409:
        return ConflictError(f"{what} already exists.")
    return StoreError(f"Request for {what} failed: {exc.status} {exc.reason}")


class KubernetesObjectStore:
    """ObjectStore implementation on top of the Kubernetes API."""

    def __init__(
        self,
        core_api: Optional[client.CoreV1Api] = None,
        custom_api: Optional[client.CustomObjectsApi] = None,
    ):
        self.core_api = core_api or client.CoreV1Api()
        self.custom_api = custom_api or client.CustomObjectsApi()

    @staticmethod
    def _to_record(secret: client.V1Secret) -> SecretRecord:
        metadata = secret.metadata
        return SecretRecord(
            name=metadata.name,
            namespace=metadata.namespace,
            labels=dict(metadata.labels or {}),
            data={
                key: _decode(metadata.name, key, value)
                for key, value in (secret.data or {}).items()
            },
        )

    async def list_secrets(self, namespace: str, labels: Dict[str, str]) -> List[SecretRecord]:
        selector = ",".join(f"{key}={value}" for key, value in labels.items())
        try:
            result = await asyncio.to_thread(
                self.core_api.list_namespaced_secret, namespace, label_selector=selector
            )
        except ApiException as e:
            raise _to_store_error(e, f"The secret list in namespace {namespace}") from e
        return [self._to_record(secret) for secret in result.items]

    async def get_secret(self, namespace: str, name: str) -> SecretRecord:
        try:
            secret = await asyncio.to_thread(self.core_api.read_namespaced_secret, name, namespace)
        except ApiException as e:
            raise _to_store_error(e, f"The secret, {name},") from e
        return self._to_record(secret)

    async def create_secret(self, record: SecretRecord) -> SecretRecord:
        body = client.V1Secret(
            type="Opaque",
            metadata=client.V1ObjectMeta(
                name=record.name,
                namespace=record.namespace,
                labels=record.labels,
            ),
            string_data=record.data,
        )
        try:
            await asyncio.to_thread(self.core_api.create_namespaced_secret, record.namespace, body)
        except ApiException as e:
            raise _to_store_error(e, f"The secret, {record.name},") from e
        logger.info(f"Created secret {record.namespace}/{record.name}")
        return record

    async def list_tenant_configs(self, namespace: str) -> List[TenantConfig]:
        try:
            result: Dict[str, Any] = await asyncio.to_thread(
                self.custom_api.list_namespaced_custom_object,
                group=TENANT_CONFIG_GROUP,
                version=TENANT_CONFIG_VERSION,
                namespace=namespace,
                plural=TENANT_CONFIG_PLURAL,
            )
        except ApiException as e:
            raise _to_store_error(e, f"The {TENANT_CONFIG_PLURAL} list in namespace {namespace}") from e
        return [TenantConfig.from_custom_object(item) for item in result.get("items", [])]

    async def get_tenant_config(self, namespace: str, name: str) -> TenantConfig:
        try:
            obj = await asyncio.to_thread(
                self.custom_api.get_namespaced_custom_object,
                group=TENANT_CONFIG_GROUP,
                version=TENANT_CONFIG_VERSION,
                namespace=namespace,
                plural=TENANT_CONFIG_PLURAL,
                name=name,
            )
        except ApiException as e:
            raise _to_store_error(e, f"The custom resource, {name},") from e
        return TenantConfig.from_custom_object(obj)
