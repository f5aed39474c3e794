"""Credential storage for plantstore sessions.

The access credential is kept behind the small :class:`CredentialStore`
capability (``get`` / ``set`` / ``remove``) so that the request pipeline
works the same whether the token lives in a file, in memory, or nowhere.

- :class:`FileCredentialStore` -- per-profile file, survives restarts.
- :class:`MemoryCredentialStore` -- per-object, for embedding and tests.
- :class:`NullCredentialStore` -- for contexts without persistence.
- :func:`create_store` -- picks one from a profile's ``storage`` setting.
"""

from plantstore.auth.credential_store import (
    TOKEN_KEY,
    CredentialStore,
    FileCredentialStore,
    MemoryCredentialStore,
    NullCredentialStore,
    create_store,
)

__all__ = [
    "TOKEN_KEY",
    "CredentialStore",
    "FileCredentialStore",
    "MemoryCredentialStore",
    "NullCredentialStore",
    "create_store",
]
