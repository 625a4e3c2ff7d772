"""
Credential records: validation, lookup by application name and creation.
"""

import logging
from typing import Optional

from ...constants import (
    CLIENT_ID_KEY,
    CLIENT_NAME_KEY,
    CLIENT_SECRET_KEY,
    DISCOVERY_ENDPOINT_KEY,
    PRODUCT_LABEL_KEY,
    PRODUCT_LABEL_VALUE,
)
from ...errors import ConflictError, MissingFieldError, NotFoundError, StoreError
from ..api.models import ApplicationCredential, SecretRecord, TenantConfig
from ..store.interfaces import ObjectStore

logger = logging.getLogger(__name__)

# Checked in this order so the reported field is stable
REQUIRED_FIELDS = (CLIENT_ID_KEY, CLIENT_SECRET_KEY, DISCOVERY_ENDPOINT_KEY)


def validate_secret(secret: SecretRecord) -> None:
    """
    Ensure a credential record carries every required field.

    Raises:
        MissingFieldError: naming the first absent or empty field
    """
    for field in REQUIRED_FIELDS:
        if not secret.get(field):
            raise MissingFieldError(field, secret.name)


class CredentialModule:
    """Finds, loads and creates credential records in the object store."""

    def __init__(self, store: ObjectStore):
        """
        Initialize credential module.

        Args:
            store: Object store holding the credential records
        """
        self.store = store

    async def locate(self, app_name: str, namespace: str) -> Optional[SecretRecord]:
        """
        Search for the credential record of an application.

        Every product-labelled secret in the namespace is scanned in store
        order and the first whose client name matches is returned. A match
        that fails validation is an error, never treated as absent.

        Args:
            app_name: Application name from the Ingress
            namespace: Namespace of the Ingress

        Returns:
            The matching record, or None when no record exists yet
        """
        secrets = await self.store.list_secrets(
            namespace, {PRODUCT_LABEL_KEY: PRODUCT_LABEL_VALUE}
        )

        for secret in secrets:
            if secret.get(CLIENT_NAME_KEY) == app_name:
                validate_secret(secret)
                return secret

        return None

    async def load_admin_secret(self, tenant: TenantConfig, namespace: str) -> SecretRecord:
        """Fetch and validate the administrator credential a tenant points at."""
        try:
            secret = await self.store.get_secret(namespace, tenant.credential_secret_reference)
        except NotFoundError as e:
            raise StoreError(
                f"The specified secret for the custom resource, "
                f"{tenant.credential_secret_reference}, does not exist."
            ) from e

        validate_secret(secret)
        return secret

    async def persist(self, credential: ApplicationCredential) -> SecretRecord:
        """
        Store a newly issued credential.

        When the create loses a race against a concurrent registration for
        the same application, the winner's record is returned instead.

        Args:
            credential: Issued client credential

        Returns:
            The record now identifying the application
        """
        record = credential.to_secret_record()

        try:
            return await self.store.create_secret(record)
        except ConflictError:
            logger.warning(
                f"Secret {record.name} already exists, re-reading the record "
                f"for application {credential.application_name}"
            )
            existing = await self.locate(credential.application_name, credential.namespace)
            if existing is None:
                raise
            return existing
