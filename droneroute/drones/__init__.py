"""Mini README: Drone profiles and the catalog registry."""

from .catalog import BUILTIN_PROFILES, DEFAULT_DRONE_ID, DroneCatalog, DroneProfile, default_catalog

__all__ = ["BUILTIN_PROFILES", "DEFAULT_DRONE_ID", "DroneCatalog", "DroneProfile", "default_catalog"]
