"""
Verify Webhook - Ingress protection for IBM Security Verify

A mutating admission webhook that registers an OAuth2 client for an
application the first time its Ingress opts in, and rewrites the Ingress
annotations so the NGINX ingress controller enforces authentication.

Architecture:
- Each module is self-contained with clear interfaces
- Collaborators (object store, HTTP transport) are injected
- Only the admission module translates errors into responses

Modules:
- api: Shared data models and admission envelopes
- store: Object store interface and Kubernetes implementation
- credentials: Credential record validation, lookup and persistence
- tenant: Tenant configuration resolution
- registration: OAuth2 dynamic client registration
- mutation: Annotation rewriting and patch generation
- admission: Request orchestration
"""

__version__ = "1.0.0"
