"""
Registration Module - Black Box Interface

Purpose: Obtain a new OAuth2 client from the tenant's authorization server
Interface: RegistrationClient.register()
Hidden: Discovery, client_credentials grant, dynamic registration, timeouts

Can be replaced by any client that turns an administrator credential and
a RegistrationRequest into an IssuedClient.
"""

from .client import IssuedClient, RegistrationClient, RegistrationRequest, RegistrationState

__all__ = ["IssuedClient", "RegistrationClient", "RegistrationRequest", "RegistrationState"]
