"""
Verify Webhook shared data models.

These models define the structure of all data passed between
components: credential records, tenant configurations, the Ingress
being mutated and the AdmissionReview envelopes exchanged with the
API server.
"""

import base64
import json
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ...constants import (
    CLIENT_ID_KEY,
    CLIENT_NAME_KEY,
    CLIENT_SECRET_KEY,
    DISCOVERY_ENDPOINT_KEY,
    PRODUCT_LABEL_KEY,
    PRODUCT_LABEL_VALUE,
    SECRET_NAME_PREFIX,
)

# Object store records


class SecretRecord(BaseModel):
    """A keyed secret as held by the object store, values already decoded."""

    name: str
    namespace: str
    labels: Dict[str, str] = Field(default_factory=dict)
    data: Dict[str, str] = Field(default_factory=dict)

    def get(self, key: str) -> Optional[str]:
        """Return a field with one trailing newline trimmed, or None if absent."""
        value = self.data.get(key)
        if value is None:
            return None
        return value[:-1] if value.endswith("\n") else value


class ApplicationCredential(BaseModel):
    """The OAuth2 client issued for one application."""

    application_name: str
    client_id: str
    client_secret: str
    discovery_endpoint: str
    namespace: str

    @property
    def secret_name(self) -> str:
        return SECRET_NAME_PREFIX + self.client_id

    def to_secret_record(self) -> SecretRecord:
        return SecretRecord(
            name=self.secret_name,
            namespace=self.namespace,
            labels={PRODUCT_LABEL_KEY: PRODUCT_LABEL_VALUE},
            data={
                CLIENT_NAME_KEY: self.application_name,
                CLIENT_ID_KEY: self.client_id,
                CLIENT_SECRET_KEY: self.client_secret,
                DISCOVERY_ENDPOINT_KEY: self.discovery_endpoint,
            },
        )


class TenantConfig(BaseModel):
    """Administrator-provisioned IBMSecurityVerify custom resource."""

    name: str
    namespace: str
    credential_secret_reference: str
    ingress_root: str

    @classmethod
    def from_custom_object(cls, obj: Dict[str, Any]) -> "TenantConfig":
        metadata = obj.get("metadata") or {}
        spec = obj.get("spec") or {}
        return cls(
            name=metadata.get("name", ""),
            namespace=metadata.get("namespace", ""),
            credential_secret_reference=spec.get("clientSecret", ""),
            ingress_root=spec.get("ingressRoot", ""),
        )


class RouteResource(BaseModel):
    """The parts of an Ingress this webhook reads and rewrites."""

    name: str = ""
    namespace: str
    annotations: Optional[Dict[str, str]] = None

    @classmethod
    def from_object(cls, obj: Dict[str, Any], default_namespace: Optional[str] = None) -> "RouteResource":
        metadata = obj.get("metadata")
        if not isinstance(metadata, dict):
            raise ValueError("object has no metadata")
        return cls(
            name=metadata.get("name") or metadata.get("generateName") or "",
            namespace=metadata.get("namespace") or default_namespace or "default",
            annotations=metadata.get("annotations"),
        )


class Endpoints(BaseModel):
    """Endpoints advertised by the tenant's discovery document."""

    model_config = ConfigDict(extra="ignore")

    registration_endpoint: str
    token_endpoint: str


# Admission envelopes


class AdmissionStatus(BaseModel):
    """Result attached to an admission response."""

    code: int
    message: str


class AdmissionRequest(BaseModel):
    """The request half of an AdmissionReview."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    uid: str
    kind: Optional[Dict[str, str]] = None
    operation: Optional[str] = None
    name: Optional[str] = None
    namespace: Optional[str] = None
    obj: Optional[Dict[str, Any]] = Field(None, alias="object")


class AdmissionResponse(BaseModel):
    """The response half of an AdmissionReview."""

    model_config = ConfigDict(populate_by_name=True)

    uid: str
    allowed: bool
    status: Optional[AdmissionStatus] = None
    patch: Optional[str] = None
    patch_type: Optional[str] = Field(None, alias="patchType")

    @classmethod
    def allow(cls, uid: str, message: str) -> "AdmissionResponse":
        return cls(uid=uid, allowed=True, status=AdmissionStatus(code=200, message=message))

    @classmethod
    def errored(cls, uid: str, code: int, message: str) -> "AdmissionResponse":
        return cls(uid=uid, allowed=False, status=AdmissionStatus(code=code, message=message))

    @classmethod
    def with_patch(cls, uid: str, operations: List[Dict[str, Any]]) -> "AdmissionResponse":
        """Allow the request, attaching a base64 encoded JSON Patch when non-empty."""
        if not operations:
            return cls.allow(uid, "No changes required.")
        patch = base64.b64encode(json.dumps(operations).encode("utf-8")).decode("utf-8")
        return cls(uid=uid, allowed=True, patch=patch, patch_type="JSONPatch")

    def decoded_patch(self) -> List[Dict[str, Any]]:
        if not self.patch:
            return []
        return json.loads(base64.b64decode(self.patch))


class AdmissionReview(BaseModel):
    """admission.k8s.io AdmissionReview envelope."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    api_version: str = Field("admission.k8s.io/v1", alias="apiVersion")
    kind: str = "AdmissionReview"
    request: Optional[AdmissionRequest] = None
    response: Optional[AdmissionResponse] = None

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)
