#!/usr/bin/env python3
"""
Verify Webhook - Main Entry Point

This is the thin orchestration layer that:
1. Loads configuration
2. Initializes modules
3. Serves the admission endpoint

All business logic is in the modules, following black box principles.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

import uvicorn
from fastapi import FastAPI, Request
from pydantic import ValidationError

from verify_webhook.config.provider import ConfigProvider, EnvConfigProvider
from verify_webhook.logging_config import configure_logging, get_logging_config
from verify_webhook.modules.admission import IngressAnnotator
from verify_webhook.modules.api import AdmissionResponse, AdmissionReview
from verify_webhook.modules.registration import RegistrationClient
from verify_webhook.modules.store import KubernetesObjectStore, load_kubernetes_config

logger = logging.getLogger(__name__)


def build_annotator(config_provider: ConfigProvider) -> IngressAnnotator:
    """Wire the production annotator against the Kubernetes API."""
    webhook_config = config_provider.get_webhook_config()

    load_kubernetes_config()
    store = KubernetesObjectStore()
    registration_client = RegistrationClient(timeout=webhook_config.request_timeout)

    logger.info(
        f"Annotator initialized: operator namespace {webhook_config.operator_namespace}, "
        f"OIDC root {webhook_config.oidc_root}, timeout {webhook_config.request_timeout}s"
    )
    return IngressAnnotator(store, registration_client, webhook_config)


def create_app(
    config_provider: Optional[ConfigProvider] = None,
    annotator: Optional[IngressAnnotator] = None,
) -> FastAPI:
    """
    Create the webhook application.

    Args:
        config_provider: Configuration source (environment by default)
        annotator: Pre-built annotator; built at startup when omitted

    Returns:
        FastAPI application
    """
    config_provider = config_provider or EnvConfigProvider()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting Verify webhook...")
        if app.state.annotator is None:
            app.state.annotator = build_annotator(config_provider)
        yield
        logger.info("Verify webhook shutdown complete")

    app = FastAPI(
        title="Verify Webhook",
        description="Protects Ingress resources with IBM Security Verify",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.annotator = annotator

    @app.post("/mutate-v1-ingress")
    async def mutate_ingress(request: Request) -> Dict[str, Any]:
        """
        Mutating admission endpoint for networking.k8s.io/v1 Ingress.

        Malformed reviews are answered with a rejection rather than an
        HTTP error so the API server always receives a review back.
        """
        try:
            review = AdmissionReview.model_validate(await request.json())
        except (ValueError, ValidationError) as e:
            logger.warning(f"Malformed AdmissionReview: {e}")
            return AdmissionReview(
                response=AdmissionResponse.errored("", 400, "Malformed AdmissionReview.")
            ).to_wire()

        if review.request is None:
            return AdmissionReview(
                api_version=review.api_version,
                response=AdmissionResponse.errored("", 400, "AdmissionReview has no request."),
            ).to_wire()

        response = await app.state.annotator.handle(review.request)
        return AdmissionReview(api_version=review.api_version, response=response).to_wire()

    @app.get("/healthz")
    async def healthz() -> Dict[str, str]:
        """Liveness probe."""
        return {"status": "healthy" if app.state.annotator else "starting"}

    return app


app = create_app()


def main() -> None:
    api_config = EnvConfigProvider().get_api_config()
    configure_logging(api_config.log_level)

    if not api_config.tls_enabled:
        logger.warning("Running without TLS; the API server only calls HTTPS webhooks")

    uvicorn.run(
        app,
        host=api_config.host,
        port=api_config.port,
        log_level=api_config.log_level.lower(),
        log_config=get_logging_config(api_config.log_level),
        ssl_certfile=api_config.tls_cert_file,
        ssl_keyfile=api_config.tls_key_file,
    )


if __name__ == "__main__":
    main()
