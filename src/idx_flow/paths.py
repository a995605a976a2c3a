# paths.py
# Restricted path-query evaluator for in-document cross-references.
#
# The server only ever emits simple absolute paths such as
#   $.authenticatorEnrollments.value[0]
#   $.currentAuthenticator.value
# so this supports `$`, dotted keys, and integer `[n]` indexes, nothing else.
# Callers can inject any evaluator matching `PathResolver` instead.

import re
from collections.abc import Callable
from typing import Any

PathResolver = Callable[[str, Any], Any]

_TOKEN = re.compile(r"\.([A-Za-z_$][\w$-]*)|\[(\d+)\]|\['([^']+)'\]")


class PathSyntaxError(ValueError):
    """Raised when a path uses syntax outside the supported subset."""


def _tokenize(path: str) -> list[str | int]:
    if not path.startswith("$"):
        raise PathSyntaxError(f"Path must be absolute (start with '$'): {path!r}")

    tokens: list[str | int] = []
    pos = 1
    while pos < len(path):
        match = _TOKEN.match(path, pos)
        if not match:
            raise PathSyntaxError(f"Unsupported path syntax at offset {pos}: {path!r}")
        key, index, quoted = match.groups()
        if index is not None:
            tokens.append(int(index))
        else:
            tokens.append(key if key is not None else quoted)
        pos = match.end()
    return tokens


def resolve_path(path: str, document: Any) -> Any:
    """
    Evaluate `path` against `document`.

    Returns None when any segment is missing. A malformed path raises
    PathSyntaxError; that is a server defect, not a missing value.
    """
    current = document
    for token in _tokenize(path):
        if isinstance(token, int):
            if not isinstance(current, list) or token >= len(current):
                return None
            current = current[token]
        else:
            if not isinstance(current, dict) or token not in current:
                return None
            current = current[token]
    return current
