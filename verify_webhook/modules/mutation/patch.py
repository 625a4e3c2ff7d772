"""RFC 6902 JSON Patch operations for Ingress annotation changes."""

from typing import Any, Dict, List

ANNOTATIONS_PATH = "/metadata/annotations"


def escape_pointer(token: str) -> str:
    """Escape a key for use as a JSON Pointer reference token (RFC 6901)."""
    return token.replace("~", "~0").replace("/", "~1")


def build_annotation_patch(
    original: Dict[str, str], mutated: Dict[str, str]
) -> List[Dict[str, Any]]:
    """
    Build the patch turning one annotation map into another.

    New or changed keys become "add" operations (which replace existing
    members), keys missing from the mutated map become "remove" operations.
    """
    operations: List[Dict[str, Any]] = []

    for key, value in mutated.items():
        if original.get(key) != value:
            operations.append(
                {"op": "add", "path": f"{ANNOTATIONS_PATH}/{escape_pointer(key)}", "value": value}
            )

    for key in original:
        if key not in mutated:
            operations.append({"op": "remove", "path": f"{ANNOTATIONS_PATH}/{escape_pointer(key)}"})

    return operations
