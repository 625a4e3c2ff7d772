"""
API Module - Black Box Interface

Purpose: Shared data models for records, tenants, routes and admission envelopes
Interface: pydantic models
Hidden: Wire field aliases, patch encoding
"""

from .models import (
    AdmissionRequest,
    AdmissionResponse,
    AdmissionReview,
    AdmissionStatus,
    ApplicationCredential,
    Endpoints,
    RouteResource,
    SecretRecord,
    TenantConfig,
)

__all__ = [
    "AdmissionRequest",
    "AdmissionResponse",
    "AdmissionReview",
    "AdmissionStatus",
    "ApplicationCredential",
    "Endpoints",
    "RouteResource",
    "SecretRecord",
    "TenantConfig",
]
