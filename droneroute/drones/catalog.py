"""Mini README: Drone specification catalog.

Structure:
    * DroneProfile - performance envelope of one airframe with derived
      effective flight time and range.
    * DroneCatalog - registry mapping identifiers to profiles.
    * BUILTIN_PROFILES / default_catalog - the shipped airframes.

Speeds are metres per second, flight times minutes, payload grams. The
catalog is owned by a ``PlanningContext``; additional airframes are added
with ``register``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List

from ..logging_utils import get_logger

LOGGER = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class DroneProfile:
    """Flight envelope used for range and battery estimates."""

    id: str
    name: str
    max_flight_time_min: float
    cruise_speed_mps: float
    max_speed_mps: float
    wind_resistance_mps: float
    safety_margin_ratio: float = 0.2
    max_payload_g: float = 0.0

    def __post_init__(self) -> None:
        if self.max_flight_time_min <= 0 or self.cruise_speed_mps <= 0:
            raise ValueError(f"Drone '{self.id}' needs positive flight time and cruise speed")
        if not 0.0 <= self.safety_margin_ratio < 1.0:
            raise ValueError(f"Drone '{self.id}' safety margin must be within [0, 1)")

    @property
    def effective_flight_time_min(self) -> float:
        return self.max_flight_time_min * (1 - self.safety_margin_ratio)

    @property
    def max_range_m(self) -> float:
        return self.effective_flight_time_min * 60 * self.cruise_speed_mps

    def as_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "max_flight_time": self.max_flight_time_min,
            "cruise_speed": self.cruise_speed_mps,
            "max_speed": self.max_speed_mps,
            "wind_resistance": self.wind_resistance_mps,
            "safety_margin": self.safety_margin_ratio,
            "max_payload": self.max_payload_g,
            "effective_flight_time": self.effective_flight_time_min,
            "max_range": self.max_range_m,
        }


BUILTIN_PROFILES: List[DroneProfile] = [
    DroneProfile("matrice-300-rtk", "DJI Matrice 300 RTK", 55, 15, 23, 15, max_payload_g=2700),
    DroneProfile("mavic-3-enterprise", "DJI Mavic 3 Enterprise", 45, 15, 21, 12),
    DroneProfile("phantom-4-rtk", "DJI Phantom 4 RTK", 30, 12, 16, 10),
    DroneProfile("matrice-30t", "DJI Matrice 30T", 41, 15, 23, 15),
    DroneProfile("mavic-3t", "DJI Mavic 3T", 45, 15, 21, 12),
]

DEFAULT_DRONE_ID = "mavic-3-enterprise"


class DroneCatalog:
    """Registry mapping drone identifiers to ``DroneProfile`` instances."""

    def __init__(self, profiles: Iterable[DroneProfile] = ()) -> None:
        self._profiles: Dict[str, DroneProfile] = {}
        for profile in profiles:
            self.register(profile)

    def register(self, profile: DroneProfile) -> None:
        """Register a profile; identifiers are case-insensitive and unique."""

        identifier = profile.id.lower()
        if identifier in self._profiles:
            raise ValueError(f"Drone '{identifier}' is already registered")
        LOGGER.debug("Registering drone profile '%s'", identifier)
        self._profiles[identifier] = profile

    def available_drones(self) -> List[str]:
        return sorted(self._profiles)

    def profiles(self) -> List[DroneProfile]:
        return [self._profiles[key] for key in self.available_drones()]

    def __contains__(self, identifier: object) -> bool:
        return isinstance(identifier, str) and identifier.lower() in self._profiles

    def get(self, identifier: str) -> DroneProfile:
        """Return the profile for ``identifier`` or raise ``KeyError``."""

        profile = self._profiles.get(identifier.lower())
        if profile is None:
            raise KeyError(f"Unknown drone '{identifier}'")
        return profile


def default_catalog() -> DroneCatalog:
    return DroneCatalog(BUILTIN_PROFILES)
