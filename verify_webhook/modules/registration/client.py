"""
OAuth2 Dynamic Client Registration against an IBM Security Verify tenant

A registration is three sequential round trips:
1. GET the discovery document for the registration and token endpoints
2. POST a client_credentials grant with the administrator credential
3. POST the new client to the registration endpoint with that token

Nothing is cached between registrations; each one re-discovers the
endpoints because registrations are rare, administrator-triggered events.
"""

import asyncio
import logging
from enum import Enum
from typing import Any, Dict, List, Optional

import httpx
from pydantic import BaseModel, ValidationError

from ...constants import CLIENT_ID_KEY, CLIENT_SECRET_KEY, DISCOVERY_ENDPOINT_KEY
from ...errors import UpstreamProtocolError
from ..api.models import Endpoints, SecretRecord

logger = logging.getLogger(__name__)


class RegistrationState(str, Enum):
    """Progress of one registration attempt."""

    IDLE = "idle"
    DISCOVERY = "discovery"
    TOKEN = "token"
    REGISTRATION = "registration"
    ISSUED = "issued"


class RegistrationRequest(BaseModel):
    """Body sent to the registration endpoint."""

    client_name: str
    redirect_uris: List[str]
    consent_action: str
    all_users_entitled: bool = True
    initiate_login_uri: str
    enforce_pkce: bool = False


class IssuedClient(BaseModel):
    """Client credential returned by the registration endpoint."""

    client_id: str
    client_secret: str


class RegistrationClient:
    """
    Stateless client for the discovery, token and registration endpoints.

    Each of the three round trips is bounded by ``timeout`` as a total
    deadline, so a full registration can take up to three times that long.
    A timeout, transport failure, non-200 status or unparseable body is
    raised as UpstreamProtocolError.
    """

    def __init__(self, timeout: float = 10.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        Initialize registration client.

        Args:
            timeout: Seconds allowed for each round trip, covering connect,
                upload and the complete response body
            transport: Optional httpx transport (used by tests)
        """
        self.timeout = timeout
        self.transport = transport

    def _http_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self.transport)

    async def _send(
        self,
        http: httpx.AsyncClient,
        step: RegistrationState,
        method: str,
        url: str,
        **kwargs: Any,
    ) -> Dict[str, Any]:
        """Perform one round trip and return the decoded JSON object."""
        try:
            response = await asyncio.wait_for(
                http.request(method, url, **kwargs), self.timeout
            )
        except (httpx.TimeoutException, asyncio.TimeoutError) as e:
            raise UpstreamProtocolError(
                f"The {step.value} request to {url} timed out after {self.timeout}s.",
                url=url,
                step=step.value,
            ) from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise UpstreamProtocolError(
                f"The {step.value} request to {url} failed: {e}",
                url=url,
                step=step.value,
            ) from e

        if response.status_code != httpx.codes.OK:
            logger.info(
                f"Unexpected {step.value} response: URL={url} "
                f"status={response.status_code} body={response.text}"
            )
            raise UpstreamProtocolError(
                f"An unexpected response was received: {response.status_code}",
                status=response.status_code,
                url=url,
                step=step.value,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamProtocolError(
                f"The {step.value} response from {url} is not valid JSON.",
                status=response.status_code,
                url=url,
                step=step.value,
            ) from e

        if not isinstance(data, dict):
            raise UpstreamProtocolError(
                f"The {step.value} response from {url} is not a JSON object.",
                status=response.status_code,
                url=url,
                step=step.value,
            )
        return data

    async def get_endpoints(self, http: httpx.AsyncClient, discovery_url: str) -> Endpoints:
        """Retrieve the registration and token endpoints from discovery."""
        data = await self._send(
            http,
            RegistrationState.DISCOVERY,
            "GET",
            discovery_url,
            headers={"Accept": "application/json"},
        )
        try:
            return Endpoints.model_validate(data)
        except ValidationError as e:
            raise UpstreamProtocolError(
                f"The discovery document at {discovery_url} does not advertise "
                f"registration_endpoint and token_endpoint.",
                url=discovery_url,
                step=RegistrationState.DISCOVERY.value,
            ) from e

    async def get_access_token(
        self, http: httpx.AsyncClient, token_url: str, admin_secret: SecretRecord
    ) -> str:
        """Obtain an access token with the administrator client credential."""
        data = await self._send(
            http,
            RegistrationState.TOKEN,
            "POST",
            token_url,
            data={
                "grant_type": "client_credentials",
                "client_id": admin_secret.get(CLIENT_ID_KEY),
                "client_secret": admin_secret.get(CLIENT_SECRET_KEY),
                "scope": "openid",
            },
        )
        access_token = data.get("access_token")
        if not access_token or not isinstance(access_token, str):
            raise UpstreamProtocolError(
                f"The token response from {token_url} did not contain an access_token.",
                url=token_url,
                step=RegistrationState.TOKEN.value,
            )
        return access_token

    async def register_client(
        self,
        http: httpx.AsyncClient,
        registration_url: str,
        access_token: str,
        request: RegistrationRequest,
    ) -> IssuedClient:
        """Register the application and return its issued credential."""
        data = await self._send(
            http,
            RegistrationState.REGISTRATION,
            "POST",
            registration_url,
            json=request.model_dump(),
            headers={
                "Accept": "application/json",
                "Authorization": f"Bearer {access_token}",
            },
        )
        client_id = data.get(CLIENT_ID_KEY)
        client_secret = data.get(CLIENT_SECRET_KEY)
        if not client_id or not client_secret:
            raise UpstreamProtocolError(
                f"The registration response from {registration_url} did not "
                f"contain a client_id and client_secret.",
                url=registration_url,
                step=RegistrationState.REGISTRATION.value,
            )
        return IssuedClient(client_id=str(client_id), client_secret=str(client_secret))

    async def register(
        self,
        admin_secret: SecretRecord,
        request: RegistrationRequest,
    ) -> IssuedClient:
        """
        Run discovery, token acquisition and registration in order.

        Args:
            admin_secret: Validated administrator credential of the tenant
            request: Registration body for the new application

        Returns:
            The issued client credential
        """
        discovery_url = admin_secret.get(DISCOVERY_ENDPOINT_KEY)
        state = RegistrationState.IDLE

        try:
            async with self._http_client() as http:
                state = RegistrationState.DISCOVERY
                endpoints = await self.get_endpoints(http, discovery_url)

                state = RegistrationState.TOKEN
                access_token = await self.get_access_token(
                    http, endpoints.token_endpoint, admin_secret
                )

                state = RegistrationState.REGISTRATION
                issued = await self.register_client(
                    http, endpoints.registration_endpoint, access_token, request
                )
        except UpstreamProtocolError:
            logger.error(
                f"Registration of {request.client_name} failed during {state.value}"
            )
            raise

        state = RegistrationState.ISSUED
        logger.info(
            f"Registration of {request.client_name} {state.value} client {issued.client_id}"
        )
        return issued
