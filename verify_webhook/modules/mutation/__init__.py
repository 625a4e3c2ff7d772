"""
Mutation Module - Black Box Interface

Purpose: Rewrite Ingress annotations for NGINX + OIDC protection
Interface: AnnotationMutator.mutate(), ServerSnippet.render(), build_annotation_patch()
Hidden: Snippet literal text, header names, patch encoding
"""

from .annotator import AnnotationMutator
from .patch import build_annotation_patch, escape_pointer
from .template import SERVER_SNIPPET_TEMPLATE, ServerSnippet, location_snippet

__all__ = [
    "AnnotationMutator",
    "SERVER_SNIPPET_TEMPLATE",
    "ServerSnippet",
    "build_annotation_patch",
    "escape_pointer",
    "location_snippet",
]
