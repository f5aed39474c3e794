"""Key-value storage for the session's single access credential.

The request pipeline and the session controller never touch a persistence
backend directly; they receive a :class:`CredentialStore` and call
:meth:`~CredentialStore.get`, :meth:`~CredentialStore.set`, and
:meth:`~CredentialStore.remove` on it. Three implementations are provided:

- :class:`NullCredentialStore` -- for contexts without persistence. Reads
  return ``None`` and writes do nothing, so the pipeline keeps working
  (anonymously) instead of failing.
- :class:`MemoryCredentialStore` -- lives as long as the object; each
  instance is isolated, which makes independent sessions in one process
  trivial.
- :class:`FileCredentialStore` -- survives across CLI invocations. Stored
  as ``<data_dir>/credentials/<profile>.json`` with ``0o600`` permissions
  and written atomically.

Every store keeps the credential under the slot named :data:`TOKEN_KEY`.
The value is opaque: it is stored and returned verbatim, never decoded.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from plantstore.config import atomic_write, get_data_dir
from plantstore.models import Profile, StorageBackend

TOKEN_KEY = "authToken"


class CredentialStore(ABC):
    """Capability to read, replace, and forget the access credential."""

    @abstractmethod
    def get(self) -> Optional[str]:
        """Return the stored credential, or ``None`` when there is none."""
        ...

    @abstractmethod
    def set(self, credential: str) -> None:
        """Replace the stored credential with *credential*."""
        ...

    @abstractmethod
    def remove(self) -> None:
        """Forget the stored credential. A no-op when nothing is stored."""
        ...


class NullCredentialStore(CredentialStore):
    """Store for execution contexts that have no persistence backend."""

    def get(self) -> Optional[str]:
        return None

    def set(self, credential: str) -> None:
        pass

    def remove(self) -> None:
        pass


class MemoryCredentialStore(CredentialStore):
    """In-process store; the credential is lost when the object is."""

    def __init__(self, credential: Optional[str] = None) -> None:
        self._slots: dict[str, str] = {}
        if credential is not None:
            self._slots[TOKEN_KEY] = credential

    def get(self) -> Optional[str]:
        return self._slots.get(TOKEN_KEY)

    def set(self, credential: str) -> None:
        self._slots[TOKEN_KEY] = credential

    def remove(self) -> None:
        self._slots.pop(TOKEN_KEY, None)


def _credentials_dir() -> Path:
    """Return the credentials directory, creating it if needed."""
    path = get_data_dir() / "credentials"
    path.mkdir(parents=True, exist_ok=True)
    return path


class FileCredentialStore(CredentialStore):
    """Per-profile JSON key-value file.

    The file holds a flat JSON object; the credential lives under
    :data:`TOKEN_KEY` and any other keys are preserved on write. A missing,
    unreadable, or corrupt file reads as "no credential".

    Args:
        profile_name: The profile identifier used to derive the file name.

    Example::

        store = FileCredentialStore("default")
        store.set("tok123")
        assert store.get() == "tok123"
    """

    def __init__(self, profile_name: str) -> None:
        self._profile_name = profile_name
        self._path = _credentials_dir() / f"{profile_name}.json"

    @property
    def path(self) -> Path:
        """The filesystem path to this profile's credential file."""
        return self._path

    def get(self) -> Optional[str]:
        value = self._read().get(TOKEN_KEY)
        return value if isinstance(value, str) and value else None

    def set(self, credential: str) -> None:
        """Persist *credential* atomically with ``0o600`` permissions.

        Raises:
            OSError: If the file cannot be written (permissions, disk full, etc.).
        """
        slots = self._read()
        slots[TOKEN_KEY] = credential
        self._write(slots)

    def remove(self) -> None:
        slots = self._read()
        if TOKEN_KEY not in slots:
            return
        del slots[TOKEN_KEY]
        if slots:
            self._write(slots)
        elif self._path.is_file():
            self._path.unlink()

    def _read(self) -> dict:
        if not self._path.is_file():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, ValueError, OSError):
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, slots: dict) -> None:
        atomic_write(self._path, json.dumps(slots, indent=2) + "\n", mode=0o600)


def create_store(profile: Profile) -> CredentialStore:
    """Return the store selected by ``profile.storage``."""
    if profile.storage == StorageBackend.FILE:
        return FileCredentialStore(profile.name)
    if profile.storage == StorageBackend.MEMORY:
        return MemoryCredentialStore()
    return NullCredentialStore()
