import logging

from ...constants import CR_NAME_ANNOTATION
from ...errors import NotFoundError, StoreError
from ..api.models import RouteResource, TenantConfig
from ..store.interfaces import ObjectStore

logger = logging.getLogger(__name__)


class TenantResolver:
    def __init__(self, store: ObjectStore, require_explicit: bool = False):
        """
        Initialize tenant resolver.

        Args:
            store: Object store holding the tenant configurations
            require_explicit: Reject instead of picking the first config when
                several exist and the Ingress names none
        """
        self.store = store
        self.require_explicit = require_explicit

    async def resolve(self, route: RouteResource) -> TenantConfig:
        """
        Resolve the tenant configuration for an Ingress.

        An explicit cr.name annotation selects the named object. Otherwise the
        first configuration returned by the store is used.
        """
        annotations = route.annotations or {}
        cr_name = annotations.get(CR_NAME_ANNOTATION)

        if cr_name is not None:
            try:
                return await self.store.get_tenant_config(route.namespace, cr_name)
            except NotFoundError as e:
                raise StoreError(
                    f"The {CR_NAME_ANNOTATION} annotation, {cr_name}, does not "
                    f"correspond to an existing custom resource."
                ) from e

        configs = await self.store.list_tenant_configs(route.namespace)

        if not configs:
            raise StoreError("No IBMSecurityVerify custom resource has been created.")

        if len(configs) > 1:
            names = ", ".join(c.name for c in configs)
            if self.require_explicit:
                raise StoreError(
                    f"Multiple IBMSecurityVerify custom resources exist ({names}); "
                    f"select one with the {CR_NAME_ANNOTATION} annotation."
                )
            logger.warning(
                f"Multiple IBMSecurityVerify custom resources in {route.namespace} "
                f"({names}), using {configs[0].name}"
            )

        return configs[0]
