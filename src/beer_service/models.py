"""Beer record and its JSON wire form."""

from dataclasses import dataclass, asdict
from typing import Any, Optional


class BeerDecodeError(ValueError):
    """Payload does not have the shape of a beer."""
    pass


@dataclass(frozen=True, order=True)
class Beer:
    """A beer as listed in the catalog. Identifiers are supplied by the caller."""
    id: Optional[int]
    name: str
    brewery: str

    @classmethod
    def from_dict(cls, data: Any) -> "Beer":
        if not isinstance(data, dict):
            raise BeerDecodeError(f"Expected a JSON object, got {type(data).__name__}")

        beer_id = data.get("id")
        if beer_id is not None and (isinstance(beer_id, bool) or not isinstance(beer_id, int)):
            raise BeerDecodeError(f"Field 'id' must be an integer or null, got {beer_id!r}")

        for field in ("name", "brewery"):
            if not isinstance(data.get(field), str):
                raise BeerDecodeError(f"Field '{field}' must be a string")

        return cls(id=beer_id, name=data["name"], brewery=data["brewery"])

    def to_dict(self) -> dict:
        return asdict(self)


def decode_beers(payload: Any) -> tuple[Beer, ...]:
    """Decode a JSON array of beers."""
    if not isinstance(payload, list):
        raise BeerDecodeError(f"Expected a JSON array, got {type(payload).__name__}")
    return tuple(Beer.from_dict(item) for item in payload)
