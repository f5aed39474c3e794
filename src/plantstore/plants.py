"""Plant record operations built on a request pipeline.

:class:`PlantClient` and :class:`AsyncPlantClient` are thin: each method
is a single ``send`` on the pipeline, which handles authentication and
token refresh. Records come back as decoded JSON, unchanged.

The only local logic is input checking that must happen before anything
is sent: :func:`parse_watering_frequency` for new plants, and non-empty
ids for item endpoints.
"""

from __future__ import annotations

import math
from typing import Any, Union
from urllib.parse import quote

from plantstore.client.async_client import AsyncRequestPipeline
from plantstore.client.response import extract_response_data
from plantstore.client.sync_client import RequestPipeline
from plantstore.exceptions import ValidationError
from plantstore.models import EndpointsConfig, PlantDraft

Number = Union[int, float]


def parse_watering_frequency(value: Any) -> Number:
    """Coerce *value* to a finite number of days.

    Numbers pass through; strings are stripped and parsed. Integral values
    come back as ``int`` (``"3"`` -> ``3``), the rest as ``float``.

    Raises:
        ValidationError: For booleans, blank strings, non-numeric text,
            NaN, infinities, and any other type.
    """
    if isinstance(value, bool):
        raise ValidationError("Watering frequency must be a valid number")
    if isinstance(value, (int, float)):
        number: Number = value
    elif isinstance(value, str) and value.strip():
        try:
            number = float(value.strip())
        except ValueError:
            raise ValidationError(
                f"Watering frequency must be a valid number, got {value!r}"
            ) from None
    else:
        raise ValidationError("Watering frequency must be a valid number")

    if not math.isfinite(number):
        raise ValidationError(f"Watering frequency must be finite, got {value!r}")
    if isinstance(number, float) and number.is_integer():
        return int(number)
    return number


def _item_path(collection: str, plant_id: Any) -> str:
    text = "" if plant_id is None else str(plant_id).strip()
    if not text:
        raise ValidationError("Plant id is required")
    return f"{collection.rstrip('/')}/{quote(text, safe='')}"


def _draft_body(title: str, description: str, frequency: Any) -> dict[str, Any]:
    draft = PlantDraft(
        title=title,
        description=description,
        watering_frequency=parse_watering_frequency(frequency),
    )
    return draft.model_dump(by_alias=True)


def _update_body(title: str, description: str, frequency: Any) -> dict[str, Any]:
    # Updates send the frequency as given; the server owns its validation.
    return {"title": title, "description": description, "wateringFrequency": frequency}


class PlantClient:
    """Blocking CRUD facade for plant records.

    Args:
        pipeline: The session's request pipeline.
        endpoints: Endpoint layout; defaults to ``EndpointsConfig()``.
    """

    def __init__(self, pipeline: RequestPipeline, endpoints: EndpointsConfig | None = None) -> None:
        self._pipeline = pipeline
        self._endpoints = endpoints or EndpointsConfig()

    def list_plants(self) -> Any:
        return extract_response_data(self._pipeline.get(self._endpoints.plants))

    def add_plant(self, title: str, description: str, frequency: Any) -> Any:
        """Create a plant. Fails with ``ValidationError`` before sending if
        *frequency* is not numeric."""
        body = _draft_body(title, description, frequency)
        return extract_response_data(self._pipeline.post(self._endpoints.plants, body))

    def update_plant(self, plant_id: Any, title: str, description: str, frequency: Any) -> Any:
        path = _item_path(self._endpoints.plants, plant_id)
        body = _update_body(title, description, frequency)
        return extract_response_data(self._pipeline.put(path, body))

    def remove_plant(self, plant_id: Any) -> Any:
        path = _item_path(self._endpoints.plants, plant_id)
        return extract_response_data(self._pipeline.delete(path))


class AsyncPlantClient:
    """Non-blocking twin of :class:`PlantClient`."""

    def __init__(
        self, pipeline: AsyncRequestPipeline, endpoints: EndpointsConfig | None = None
    ) -> None:
        self._pipeline = pipeline
        self._endpoints = endpoints or EndpointsConfig()

    async def list_plants(self) -> Any:
        return extract_response_data(await self._pipeline.get(self._endpoints.plants))

    async def add_plant(self, title: str, description: str, frequency: Any) -> Any:
        body = _draft_body(title, description, frequency)
        return extract_response_data(await self._pipeline.post(self._endpoints.plants, body))

    async def update_plant(
        self, plant_id: Any, title: str, description: str, frequency: Any
    ) -> Any:
        path = _item_path(self._endpoints.plants, plant_id)
        body = _update_body(title, description, frequency)
        return extract_response_data(await self._pipeline.put(path, body))

    async def remove_plant(self, plant_id: Any) -> Any:
        path = _item_path(self._endpoints.plants, plant_id)
        return extract_response_data(await self._pipeline.delete(path))
