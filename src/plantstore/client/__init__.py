"""HTTP request pipelines for plantstore.

Both pipelines wrap :mod:`httpx`, attach the session's bearer credential to
every request, and recover from an expired credential by refreshing once
and replaying the original request once.

Classes:
    :class:`RequestPipeline` -- blocking, backed by :class:`httpx.Client`.
    :class:`AsyncRequestPipeline` -- non-blocking, backed by :class:`httpx.AsyncClient`.

Pipelines are normally created by a :class:`~plantstore.session.Session`
rather than directly, so that the session's ``refresh`` is wired in.
"""

from plantstore.client.async_client import AsyncRequestPipeline
from plantstore.client.sync_client import RequestPipeline

__all__ = ["RequestPipeline", "AsyncRequestPipeline"]
