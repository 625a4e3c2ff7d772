"""
Credentials Module - Black Box Interface

Purpose: Keep at most one OAuth2 client record per application
Interface: validate_secret(), CredentialModule.locate(), load_admin_secret(), persist()
Hidden: Labels, record field names, naming scheme, conflict convergence
"""

from .credentials import REQUIRED_FIELDS, CredentialModule, validate_secret

__all__ = ["CredentialModule", "REQUIRED_FIELDS", "validate_secret"]
