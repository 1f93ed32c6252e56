"""Building adapters and the kind -> adapter registry."""

from __future__ import annotations

from typing import Dict, Type

from ..adapter import BuildingAdapter
from .hearth import HearthAdapter
from .house import HouseAdapter
from .port import PortAdapter
from .production import ProductionAdapter
from .relic import RelicAdapter
from .simple import SimpleAdapter

ADAPTERS: Dict[str, Type[BuildingAdapter]] = {
    "simple": SimpleAdapter,
    "house": HouseAdapter,
    "production": ProductionAdapter,
    "hearth": HearthAdapter,
    "port": PortAdapter,
    "relic": RelicAdapter,
}


def adapter_for(kind: str) -> Type[BuildingAdapter]:
    """Adapter class for a building kind; unknown kinds get the simple panel."""
    return ADAPTERS.get((kind or "").strip().lower(), SimpleAdapter)


__all__ = [
    "ADAPTERS",
    "adapter_for",
    "HearthAdapter",
    "HouseAdapter",
    "PortAdapter",
    "ProductionAdapter",
    "RelicAdapter",
    "SimpleAdapter",
]
