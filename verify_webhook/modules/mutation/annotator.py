import logging
from typing import Dict, Optional

from ...config.provider import WebhookConfig
from ...constants import (
    INGRESS_CLASS_ANNOTATION,
    LOCATION_SNIPPETS_ANNOTATION,
    SERVER_SNIPPETS_ANNOTATION,
    TRANSIENT_ANNOTATIONS,
)
from ..api.models import TenantConfig
from .template import ServerSnippet, location_snippet

logger = logging.getLogger(__name__)


class AnnotationMutator:
    """Rewrites Ingress annotations so NGINX enforces authentication."""

    def __init__(self, webhook_config: WebhookConfig):
        self.config = webhook_config

    def mutate(
        self,
        tenant: TenantConfig,
        annotations: Optional[Dict[str, str]],
        secret_namespace: str,
        secret_name: str,
    ) -> Dict[str, str]:
        """
        Return a new annotation map for the Ingress.

        Adds the ingress class, location snippet and server snippet, then
        drops every transient request annotation whether or not it was used.
        The input map is left untouched.

        Args:
            tenant: Tenant configuration supplying the ingress root
            annotations: Current annotations of the Ingress
            secret_namespace: Namespace of the application's credential record
            secret_name: Name of the application's credential record

        Returns:
            The mutated annotation map
        """
        mutated = dict(annotations or {})

        snippet = ServerSnippet(
            oidc_root=self.config.oidc_root,
            namespace=secret_namespace,
            secret_name=secret_name,
            ingress_root=tenant.ingress_root,
        )

        mutated[INGRESS_CLASS_ANNOTATION] = self.config.ingress_class
        mutated[LOCATION_SNIPPETS_ANNOTATION] = location_snippet(snippet.check_path)
        mutated[SERVER_SNIPPETS_ANNOTATION] = snippet.render()

        for key in TRANSIENT_ANNOTATIONS:
            mutated.pop(key, None)

        logger.debug(f"Annotations rewritten for secret {secret_namespace}/{secret_name}")
        return mutated
