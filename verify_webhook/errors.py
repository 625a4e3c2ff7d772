"""
Error taxonomy for the webhook.

Every component raises one of these and lets it propagate. The admission
module is the only place that turns them into rejections, using ``code``
as the HTTP classification.
"""

from typing import Optional


class WebhookError(Exception):
    """Base class for all webhook failures."""

    code: int = 400


class DecodeError(WebhookError):
    """The incoming object could not be decoded."""


class MissingAnnotationError(WebhookError):
    """A required request annotation is absent."""

    def __init__(self, annotation: str):
        self.annotation = annotation
        super().__init__(f"A required annotation, {annotation}, is missing.")


class StoreError(WebhookError):
    """A list/get/create against the object store failed."""


class NotFoundError(StoreError):
    """The requested object does not exist."""


class ConflictError(StoreError):
    """An object with the same name already exists."""


class CredentialValidationError(WebhookError):
    """A credential record is structurally invalid."""


class MissingFieldError(CredentialValidationError):
    """A credential record lacks a required field."""

    def __init__(self, field: str, secret_name: str):
        self.field = field
        self.secret_name = secret_name
        super().__init__(
            f"The secret, {secret_name}, is missing at least one required field: {field}"
        )


class UpstreamProtocolError(WebhookError):
    """The authorization server answered unexpectedly or not at all."""

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        url: Optional[str] = None,
        step: Optional[str] = None,
    ):
        self.status = status
        self.url = url
        self.step = step
        super().__init__(message)


class EncodeError(WebhookError):
    """The mutated object could not be serialized."""

    code = 500
