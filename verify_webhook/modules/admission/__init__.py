"""
Admission Module - Black Box Interface

Purpose: Handle Ingress admission events end to end
Interface: IngressAnnotator.handle()
Hidden: Decision flow, error classification, patch construction
"""

from .handler import IngressAnnotator

__all__ = ["IngressAnnotator"]
