"""
Ingress admission handler.

Decides, for one admission event, whether the Ingress is left alone,
rejected, or patched with the annotations that protect it.
"""

import logging
from typing import Optional

from pydantic import ValidationError

from ...config.provider import WebhookConfig
from ...constants import (
    APP_NAME_ANNOTATION,
    APP_URL_ANNOTATION,
    CONSENT_ACTION_ANNOTATION,
    DISCOVERY_ENDPOINT_KEY,
    OIDC_AUTH_URI,
)
from ...errors import DecodeError, EncodeError, MissingAnnotationError, WebhookError
from ..api.models import (
    AdmissionRequest,
    AdmissionResponse,
    ApplicationCredential,
    RouteResource,
    SecretRecord,
    TenantConfig,
)
from ..credentials import CredentialModule
from ..mutation import AnnotationMutator, build_annotation_patch
from ..registration import RegistrationClient, RegistrationRequest
from ..store.interfaces import ObjectStore
from ..tenant import TenantResolver

logger = logging.getLogger(__name__)


class IngressAnnotator:
    """
    Orchestrates locate, resolve, register and mutate for one Ingress.

    This is the only component that turns errors into admission
    rejections; everything it calls raises and lets the error propagate.
    """

    def __init__(
        self,
        store: ObjectStore,
        registration_client: RegistrationClient,
        webhook_config: WebhookConfig,
    ):
        """
        Initialize the annotator.

        Args:
            store: Object store for credential records and tenant configs
            registration_client: Client for the tenant's authorization server
            webhook_config: Webhook settings
        """
        self.config = webhook_config
        self.credentials = CredentialModule(store)
        self.tenants = TenantResolver(store, require_explicit=webhook_config.require_explicit_tenant)
        self.registration = registration_client
        self.mutator = AnnotationMutator(webhook_config)

    @staticmethod
    def decode(request: AdmissionRequest) -> RouteResource:
        if not request.obj:
            raise DecodeError("The admission request does not contain an object.")
        try:
            return RouteResource.from_object(request.obj, default_namespace=request.namespace)
        except (ValidationError, ValueError, AttributeError) as e:
            raise DecodeError(f"Unable to decode the Ingress: {e}") from e

    async def handle(self, request: AdmissionRequest) -> AdmissionResponse:
        """
        Handle one admission event for an Ingress.

        Args:
            request: Request half of the AdmissionReview

        Returns:
            Allowed unchanged, allowed with a JSON patch, or rejected
        """
        try:
            route = self.decode(request)
        except DecodeError as e:
            logger.warning(f"Rejecting undecodable admission request {request.uid}: {e}")
            return AdmissionResponse.errored(request.uid, e.code, str(e))

        logger.info(f"Handle ingress {route.namespace}/{route.name}")

        if route.annotations is None:
            return AdmissionResponse.allow(request.uid, "No annotations present.")

        app_name = route.annotations.get(APP_NAME_ANNOTATION)
        if app_name is None:
            return AdmissionResponse.allow(
                request.uid, f"No {APP_NAME_ANNOTATION} annotation present."
            )

        try:
            return await self._protect(request.uid, route, app_name)
        except WebhookError as e:
            logger.error(
                f"Failed to protect ingress {route.namespace}/{route.name} "
                f"for application {app_name}: {e}"
            )
            return AdmissionResponse.errored(request.uid, e.code, str(e))
        except Exception as e:
            logger.exception(
                f"Unexpected failure for ingress {route.namespace}/{route.name} "
                f"application {app_name}"
            )
            return AdmissionResponse.errored(request.uid, 400, str(e))

    async def _protect(self, uid: str, route: RouteResource, app_name: str) -> AdmissionResponse:
        secret = await self.credentials.locate(app_name, route.namespace)
        tenant = await self.tenants.resolve(route)

        if secret is None:
            secret = await self.register_application(app_name, tenant, route)
        else:
            logger.info(f"Using existing secret {secret.name} for application {app_name}")

        mutated = self.mutator.mutate(tenant, route.annotations, secret.namespace, secret.name)

        try:
            operations = build_annotation_patch(route.annotations or {}, mutated)
            return AdmissionResponse.with_patch(uid, operations)
        except (TypeError, ValueError) as e:
            raise EncodeError(f"Failed to encode the Ingress definition: {e}") from e

    async def register_application(
        self, app_name: str, tenant: TenantConfig, route: RouteResource
    ) -> SecretRecord:
        """
        Register the application with the tenant and store its credential.

        Raises:
            MissingAnnotationError: if the app.url annotation is absent
            StoreError: if the tenant's administrator secret is missing
            UpstreamProtocolError: if any registration round trip fails
        """
        annotations = route.annotations or {}
        logger.info(f"RegisterApplication {app_name} annotations={annotations}")

        app_url = annotations.get(APP_URL_ANNOTATION)
        if app_url is None:
            raise MissingAnnotationError(APP_URL_ANNOTATION)

        admin_secret = await self.credentials.load_admin_secret(tenant, route.namespace)

        request = RegistrationRequest(
            client_name=app_name,
            redirect_uris=[tenant.ingress_root + OIDC_AUTH_URI],
            consent_action=self._consent_action(annotations.get(CONSENT_ACTION_ANNOTATION)),
            initiate_login_uri=app_url,
        )
        issued = await self.registration.register(admin_secret, request)

        credential = ApplicationCredential(
            application_name=app_name,
            client_id=issued.client_id,
            client_secret=issued.client_secret,
            discovery_endpoint=admin_secret.get(DISCOVERY_ENDPOINT_KEY),
            namespace=route.namespace,
        )
        return await self.credentials.persist(credential)

    def _consent_action(self, annotation: Optional[str]) -> str:
        if annotation is None:
            return self.config.default_consent_action
        return annotation
