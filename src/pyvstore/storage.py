"""Durable storage for the session token.

The gateway is the only writer.  Stores hold exactly one named slot so
the in-memory token and its durable mirror cannot diverge.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Protocol

from pyvstore.config import VStoreConfig
from pyvstore.exceptions import VStoreStorageError

_logger = logging.getLogger(__name__)


class TokenStore(Protocol):
    """Key-value capability for one string slot."""

    def get(self) -> str | None:
        ...

    def set(self, value: str) -> None:
        ...

    def clear(self) -> None:
        ...


class MemoryTokenStore:
    """Process-local store.  Nothing survives a restart."""

    def __init__(self, initial: str | None = None) -> None:
        self._value = initial

    def get(self) -> str | None:
        return self._value

    def set(self, value: str) -> None:
        self._value = value

    def clear(self) -> None:
        self._value = None


class FileTokenStore:
    """Store the token in a small JSON document under *key*.

    Other keys in the document are preserved.  Writes go through a temp
    file and ``os.replace`` so a crash never leaves a half-written slot.
    """

    def __init__(self, path: str | os.PathLike[str], key: str) -> None:
        self._path = Path(path)
        self._key = key

    @property
    def path(self) -> Path:
        return self._path

    def _read_document(self) -> dict[str, str]:
        try:
            text = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as exc:
            raise VStoreStorageError(f"Cannot read token file {self._path}: {exc}") from exc

        try:
            document = json.loads(text)
        except json.JSONDecodeError:
            _logger.warning("Token file %s is not valid JSON; treating as empty", self._path)
            return {}
        if not isinstance(document, dict):
            _logger.warning("Token file %s does not hold an object; treating as empty", self._path)
            return {}
        return {str(k): v for k, v in document.items() if isinstance(v, str)}

    def _write_document(self, document: dict[str, str]) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self._path.parent, prefix=f".{self._path.name}.")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    json.dump(document, handle)
                os.replace(tmp_name, self._path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise VStoreStorageError(f"Cannot write token file {self._path}: {exc}") from exc

    def get(self) -> str | None:
        value = self._read_document().get(self._key)
        return value or None

    def set(self, value: str) -> None:
        document = self._read_document()
        document[self._key] = value
        self._write_document(document)

    def clear(self) -> None:
        document = self._read_document()
        if self._key not in document:
            return
        del document[self._key]
        self._write_document(document)


def token_store_from_config(config: VStoreConfig) -> TokenStore:
    """File-backed store when ``config.token_file`` is set, memory otherwise."""
    if config.token_file:
        return FileTokenStore(config.token_file, config.token_key)
    return MemoryTokenStore()
