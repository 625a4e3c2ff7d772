"""
Tenant Module - Black Box Interface

Purpose: Decide which IBMSecurityVerify configuration serves an Ingress
Interface: TenantResolver.resolve()
Hidden: Override annotation handling, selection rule
"""

from .resolver import TenantResolver

__all__ = ["TenantResolver"]
