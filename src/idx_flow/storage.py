# storage.py
# Persisted-transaction storage. Holds at most one raw document: the latest
# response of the exchange in progress. Loaded by introspect, overwritten
# after every successful proceed, cleared once the flow reaches an end state.

import json
import os
from typing import Protocol


class TransactionStorage(Protocol):
    def load(self) -> dict | None: ...

    def save(self, document: dict) -> None: ...

    def clear(self) -> None: ...


class MemoryStorage:
    """Process-local storage. The default when no file is configured."""

    def __init__(self, document: dict | None = None) -> None:
        self._document = document

    def load(self) -> dict | None:
        return self._document

    def save(self, document: dict) -> None:
        self._document = document

    def clear(self) -> None:
        self._document = None


class FileStorage:
    """JSON file storage, so a CLI can resume an exchange across invocations."""

    def __init__(self, path: str) -> None:
        self._path = path

    @property
    def path(self) -> str:
        return self._path

    def load(self) -> dict | None:
        if not os.path.exists(self._path):
            return None
        with open(self._path, encoding="utf-8") as fh:
            content = fh.read().strip()
        if not content:
            return None
        return json.loads(content)

    def save(self, document: dict) -> None:
        os.makedirs(os.path.dirname(os.path.abspath(self._path)), exist_ok=True)
        with open(self._path, "w", encoding="utf-8") as fh:
            json.dump(document, fh, sort_keys=True)

    def clear(self) -> None:
        if os.path.exists(self._path):
            os.remove(self._path)
