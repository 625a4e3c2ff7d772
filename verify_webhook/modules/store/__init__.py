"""
Store Module - Black Box Interface

Purpose: Keyed object access for credential records and tenant configurations
Interface: ObjectStore protocol (list_secrets, get_secret, create_secret,
           list_tenant_configs, get_tenant_config)
Hidden: Kubernetes API groups, base64 encoding, worker-thread dispatch

Any implementation of ObjectStore can be injected in place of the
Kubernetes one.
"""

from .interfaces import ObjectStore
from .k8s import KubernetesObjectStore, load_kubernetes_config

__all__ = ["ObjectStore", "KubernetesObjectStore", "load_kubernetes_config"]
