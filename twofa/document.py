import copy
import json
from typing import Any

from .errors import ParseError

EMPTY_DOCUMENT = "{}"


def parse_document(text: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise ParseError(f"Could not parse storage from file: {e}") from e


def dump_document(document: Any) -> str:
    return json.dumps(document, separators=(",", ":"), ensure_ascii=False)


def merge(base: Any, patch: Any) -> Any:
    """
    Deep-merge PATCH into BASE and return the result.

    - a null value in the patch removes the key from base
    - two objects under the same key are merged recursively
    - anything else replaces the base value

    BASE is mutated in place when both sides are objects; otherwise the patch
    (copied) becomes the result.
    """
    if not isinstance(base, dict) or not isinstance(patch, dict):
        return copy.deepcopy(patch)

    for key, value in patch.items():
        if value is None:
            base.pop(key, None)
        else:
            base[key] = merge(base.get(key), value)
    return base
