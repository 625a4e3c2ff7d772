"""Object store interfaces following Black Box Design principles."""
from typing import Dict, List, Protocol

from ..api.models import SecretRecord, TenantConfig


class ObjectStore(Protocol):
    """
    Protocol for the store holding credential records and tenant configs.

    get_* methods raise NotFoundError for a missing object, create_secret
    raises ConflictError when the name is taken, and every other failure
    is a StoreError.
    """

    async def list_secrets(self, namespace: str, labels: Dict[str, str]) -> List[SecretRecord]:
        """List secrets in a namespace carrying all of the given labels."""
        ...

    async def get_secret(self, namespace: str, name: str) -> SecretRecord:
        """Fetch one secret by name."""
        ...

    async def create_secret(self, record: SecretRecord) -> SecretRecord:
        """Create a secret, failing if the name already exists."""
        ...

    async def list_tenant_configs(self, namespace: str) -> List[TenantConfig]:
        """List tenant configurations in store order."""
        ...

    async def get_tenant_config(self, namespace: str, name: str) -> TenantConfig:
        """Fetch one tenant configuration by name."""
        ...
