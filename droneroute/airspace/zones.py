"""Mini README: Static restricted-airspace reference data.

Structure:
    * RestrictedZone - immutable circular zone (airport, military base,
      prohibited facility or heliport).
    * AIRPORT_ZONES / MILITARY_ZONES / PROHIBITED_ZONES / HELIPORT_ZONES -
      built-in records (civil aviation bureau / small unmanned aircraft act).
    * zones_from_records - validate raw ``{name, lat, lng, radius, type}``
      records into zones, skipping malformed entries.
    * default_zones - the dataset indexed by a ``PlanningContext``.

Radii follow the airport class: international airports 9 km,
regional airports 6 km, small airports 3 km, airfields 1.5-2 km. Prohibited
facilities use a 300 m red/yellow zone around the site.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping

from ..logging_utils import get_logger
from ..models import LatLng, Severity, ZoneKind

LOGGER = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class RestrictedZone:
    """Circular restricted zone; immutable reference data."""

    name: str
    lat: float
    lng: float
    radius: float
    kind: ZoneKind
    severity: Severity
    category: str = ""

    @property
    def center(self) -> LatLng:
        return LatLng(self.lat, self.lng)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "lat": self.lat,
            "lng": self.lng,
            "radius": self.radius,
            "kind": self.kind.value,
            "severity": self.severity.value,
            "category": self.category,
        }


_KIND_ALIASES = {
    "airport": ZoneKind.AIRPORT,
    "airfield": ZoneKind.AIRPORT,
    "military": ZoneKind.MILITARY,
    "prohibited": ZoneKind.PROHIBITED,
    "red": ZoneKind.PROHIBITED,
    "yellow": ZoneKind.PROHIBITED,
    "heliport": ZoneKind.HELIPORT,
    "hospital_heliport": ZoneKind.HELIPORT,
}

_DEFAULT_SEVERITY = {
    ZoneKind.AIRPORT: Severity.HIGH,
    ZoneKind.MILITARY: Severity.HIGH,
    ZoneKind.PROHIBITED: Severity.CRITICAL,
    ZoneKind.HELIPORT: Severity.MEDIUM,
}


def zones_from_records(records: Iterable[Mapping[str, Any]]) -> List[RestrictedZone]:
    """Convert raw records into zones; malformed records are logged and ignored."""

    zones: List[RestrictedZone] = []
    for record in records:
        try:
            raw_type = str(record.get("kind") or record.get("type") or "").lower()
            kind = _KIND_ALIASES[raw_type]
            lat = float(record["lat"])
            lng = float(record["lng"])
            radius = float(record["radius"])
            if radius <= 0 or not (-90.0 <= lat <= 90.0) or not (-180.0 <= lng <= 180.0):
                raise ValueError("coordinates or radius out of range")
            severity = record.get("severity")
            zones.append(
                RestrictedZone(
                    name=str(record["name"]),
                    lat=lat,
                    lng=lng,
                    radius=radius,
                    kind=kind,
                    severity=Severity(severity) if severity else _DEFAULT_SEVERITY[kind],
                    category=str(record.get("category") or raw_type),
                )
            )
        except (KeyError, TypeError, ValueError) as error:
            LOGGER.warning("Ignoring malformed restricted zone %r: %s", record.get("name"), error)
    return zones


_AIRPORT_RECORDS: List[Dict[str, Any]] = [
    # Hokkaido
    {"name": "New Chitose Airport", "lat": 42.7752, "lng": 141.6924, "radius": 9000, "type": "airport"},
    {"name": "Okadama Airport", "lat": 43.1176, "lng": 141.3816, "radius": 3000, "type": "airfield"},
    {"name": "Asahikawa Airport", "lat": 43.6708, "lng": 142.4475, "radius": 6000, "type": "airport"},
    {"name": "Hakodate Airport", "lat": 41.7700, "lng": 140.8219, "radius": 6000, "type": "airport"},
    {"name": "Obihiro Airport", "lat": 42.7333, "lng": 143.2172, "radius": 6000, "type": "airport"},
    {"name": "Kushiro Airport", "lat": 43.0411, "lng": 144.1928, "radius": 6000, "type": "airport"},
    {"name": "Memanbetsu Airport", "lat": 43.8806, "lng": 144.1644, "radius": 6000, "type": "airport"},
    {"name": "Nakashibetsu Airport", "lat": 43.5775, "lng": 144.9600, "radius": 3000, "type": "airport"},
    {"name": "Wakkanai Airport", "lat": 45.4042, "lng": 141.8008, "radius": 6000, "type": "airport"},
    # Tohoku
    {"name": "Aomori Airport", "lat": 40.7347, "lng": 140.6908, "radius": 6000, "type": "airport"},
    {"name": "Hanamaki Airport", "lat": 39.4286, "lng": 141.1353, "radius": 6000, "type": "airport"},
    {"name": "Sendai Airport", "lat": 38.1397, "lng": 140.9170, "radius": 6000, "type": "airport"},
    {"name": "Akita Airport", "lat": 39.6156, "lng": 140.2186, "radius": 6000, "type": "airport"},
    {"name": "Yamagata Airport", "lat": 38.4119, "lng": 140.3714, "radius": 6000, "type": "airport"},
    {"name": "Shonai Airport", "lat": 38.8122, "lng": 139.7878, "radius": 3000, "type": "airport"},
    {"name": "Fukushima Airport", "lat": 37.2275, "lng": 140.4311, "radius": 6000, "type": "airport"},
    # Kanto
    {"name": "Narita International Airport", "lat": 35.7647, "lng": 140.3864, "radius": 9000, "type": "airport"},
    {"name": "Tokyo International Airport (Haneda)", "lat": 35.5494, "lng": 139.7798, "radius": 9000, "type": "airport"},
    {"name": "Chofu Airfield", "lat": 35.6717, "lng": 139.5281, "radius": 3000, "type": "airfield"},
    {"name": "Ibaraki Airport", "lat": 36.1811, "lng": 140.4156, "radius": 6000, "type": "airport"},
    {"name": "Honda Airport", "lat": 35.9992, "lng": 139.5347, "radius": 2000, "type": "airfield"},
    {"name": "Oshima Airport", "lat": 34.7822, "lng": 139.3603, "radius": 3000, "type": "airport"},
    {"name": "Hachijojima Airport", "lat": 33.1153, "lng": 139.7858, "radius": 3000, "type": "airport"},
    # Chubu and Hokuriku
    {"name": "Chubu Centrair International Airport", "lat": 34.8584, "lng": 136.8124, "radius": 9000, "type": "airport"},
    {"name": "Nagoya Airfield (Komaki)", "lat": 35.2551, "lng": 136.9244, "radius": 6000, "type": "airport"},
    {"name": "Niigata Airport", "lat": 37.9559, "lng": 139.1068, "radius": 6000, "type": "airport"},
    {"name": "Toyama Airport", "lat": 36.6483, "lng": 137.1875, "radius": 6000, "type": "airport"},
    {"name": "Komatsu Airport", "lat": 36.3946, "lng": 136.4065, "radius": 6000, "type": "airport"},
    {"name": "Noto Airport", "lat": 37.2931, "lng": 136.9619, "radius": 3000, "type": "airport"},
    {"name": "Shizuoka Airport", "lat": 34.7961, "lng": 138.1894, "radius": 6000, "type": "airport"},
    {"name": "Matsumoto Airport", "lat": 36.1669, "lng": 137.9228, "radius": 3000, "type": "airport"},
    # Kinki
    {"name": "Kansai International Airport", "lat": 34.4347, "lng": 135.2441, "radius": 9000, "type": "airport"},
    {"name": "Osaka International Airport (Itami)", "lat": 34.7855, "lng": 135.4380, "radius": 9000, "type": "airport"},
    {"name": "Kobe Airport", "lat": 34.6328, "lng": 135.2239, "radius": 6000, "type": "airport"},
    {"name": "Nanki-Shirahama Airport", "lat": 33.6622, "lng": 135.3644, "radius": 3000, "type": "airport"},
    {"name": "Yao Airport", "lat": 34.5967, "lng": 135.6019, "radius": 3000, "type": "airfield"},
    # Chugoku and Shikoku
    {"name": "Hiroshima Airport", "lat": 34.4361, "lng": 132.9194, "radius": 6000, "type": "airport"},
    {"name": "Okayama Airport", "lat": 34.7569, "lng": 133.8553, "radius": 6000, "type": "airport"},
    {"name": "Yamaguchi Ube Airport", "lat": 33.9300, "lng": 131.2789, "radius": 6000, "type": "airport"},
    {"name": "Izumo Airport", "lat": 35.4136, "lng": 132.8897, "radius": 6000, "type": "airport"},
    {"name": "Yonago Airport", "lat": 35.4922, "lng": 133.2364, "radius": 6000, "type": "airport"},
    {"name": "Tottori Airport", "lat": 35.5303, "lng": 134.1667, "radius": 6000, "type": "airport"},
    {"name": "Takamatsu Airport", "lat": 34.2142, "lng": 134.0156, "radius": 6000, "type": "airport"},
    {"name": "Matsuyama Airport", "lat": 33.8272, "lng": 132.6997, "radius": 6000, "type": "airport"},
    {"name": "Kochi Airport", "lat": 33.5461, "lng": 133.6694, "radius": 6000, "type": "airport"},
    {"name": "Tokushima Airport", "lat": 34.1328, "lng": 134.6067, "radius": 6000, "type": "airport"},
    # Kyushu and Okinawa
    {"name": "Fukuoka Airport", "lat": 33.5859, "lng": 130.4510, "radius": 9000, "type": "airport"},
    {"name": "Kitakyushu Airport", "lat": 33.8459, "lng": 131.0349, "radius": 6000, "type": "airport"},
    {"name": "Saga Airport", "lat": 33.1497, "lng": 130.3022, "radius": 3000, "type": "airport"},
    {"name": "Nagasaki Airport", "lat": 32.9169, "lng": 129.9136, "radius": 6000, "type": "airport"},
    {"name": "Kumamoto Airport", "lat": 32.8373, "lng": 130.8551, "radius": 6000, "type": "airport"},
    {"name": "Oita Airport", "lat": 33.4794, "lng": 131.7372, "radius": 6000, "type": "airport"},
    {"name": "Miyazaki Airport", "lat": 31.8772, "lng": 131.4486, "radius": 6000, "type": "airport"},
    {"name": "Kagoshima Airport", "lat": 31.8034, "lng": 130.7195, "radius": 6000, "type": "airport"},
    {"name": "Amami Airport", "lat": 28.4306, "lng": 129.7125, "radius": 6000, "type": "airport"},
    {"name": "Naha Airport", "lat": 26.1958, "lng": 127.6459, "radius": 9000, "type": "airport"},
    {"name": "New Ishigaki Airport", "lat": 24.3964, "lng": 124.2450, "radius": 6000, "type": "airport"},
    {"name": "Miyako Airport", "lat": 24.7828, "lng": 125.2950, "radius": 6000, "type": "airport"},
]

_MILITARY_RECORDS: List[Dict[str, Any]] = [
    {"name": "Kadena Air Base", "lat": 26.3516, "lng": 127.7675, "radius": 6000, "type": "military"},
    {"name": "MCAS Futenma", "lat": 26.2742, "lng": 127.7558, "radius": 4000, "type": "military"},
    {"name": "Yokota Air Base", "lat": 35.7486, "lng": 139.3486, "radius": 6000, "type": "military"},
    {"name": "NAF Atsugi", "lat": 35.4547, "lng": 139.4500, "radius": 6000, "type": "military"},
    {"name": "MCAS Iwakuni", "lat": 34.1456, "lng": 132.2361, "radius": 6000, "type": "military"},
    {"name": "Misawa Air Base", "lat": 40.7033, "lng": 141.3686, "radius": 6000, "type": "military"},
    {"name": "Tsuiki Air Base", "lat": 33.6850, "lng": 131.0400, "radius": 4000, "type": "military"},
    {"name": "Nyutabaru Air Base", "lat": 32.0833, "lng": 131.4500, "radius": 4000, "type": "military"},
    {"name": "Iruma Air Base", "lat": 35.8419, "lng": 139.4108, "radius": 4000, "type": "military"},
    {"name": "Hamamatsu Air Base", "lat": 34.7503, "lng": 137.7033, "radius": 4000, "type": "military"},
    {"name": "Chitose Air Base", "lat": 42.7944, "lng": 141.6667, "radius": 6000, "type": "military"},
]

_PROHIBITED_RECORDS: List[Dict[str, Any]] = [
    # National facilities (Tokyo)
    {"name": "Imperial Palace", "lat": 35.6852, "lng": 139.7528, "radius": 300, "type": "red", "category": "imperial"},
    {"name": "National Diet Building", "lat": 35.6760, "lng": 139.7450, "radius": 300, "type": "red", "category": "government"},
    {"name": "Prime Minister's Office", "lat": 35.6736, "lng": 139.7500, "radius": 300, "type": "red", "category": "government"},
    {"name": "Supreme Court", "lat": 35.6797, "lng": 139.7414, "radius": 300, "type": "red", "category": "government"},
    {"name": "State Guest House", "lat": 35.6803, "lng": 139.7267, "radius": 300, "type": "red", "category": "government"},
    {"name": "Ministry of Defense", "lat": 35.6936, "lng": 139.7294, "radius": 300, "type": "red", "category": "defense"},
    # US forces facilities
    {"name": "Yokosuka Naval Base", "lat": 35.2833, "lng": 139.6667, "radius": 300, "type": "red", "category": "us_military"},
    {"name": "Camp Zama", "lat": 35.4833, "lng": 139.4000, "radius": 300, "type": "red", "category": "us_military"},
    {"name": "Sasebo Naval Base", "lat": 33.1500, "lng": 129.7167, "radius": 300, "type": "red", "category": "us_military"},
    # Nuclear power plants
    {"name": "Tomari Nuclear Power Plant", "lat": 43.0339, "lng": 140.5136, "radius": 300, "type": "red", "category": "nuclear"},
    {"name": "Higashidori Nuclear Power Plant", "lat": 41.1861, "lng": 141.3861, "radius": 300, "type": "red", "category": "nuclear"},
    {"name": "Onagawa Nuclear Power Plant", "lat": 38.4019, "lng": 141.5003, "radius": 300, "type": "red", "category": "nuclear"},
    {"name": "Fukushima Daiichi Nuclear Power Plant", "lat": 37.4211, "lng": 141.0328, "radius": 300, "type": "red", "category": "nuclear"},
    {"name": "Fukushima Daini Nuclear Power Plant", "lat": 37.3167, "lng": 141.0250, "radius": 300, "type": "red", "category": "nuclear"},
    {"name": "Tokai Daini Nuclear Power Plant", "lat": 36.4664, "lng": 140.6072, "radius": 300, "type": "red", "category": "nuclear"},
    {"name": "Kashiwazaki-Kariwa Nuclear Power Plant", "lat": 37.4286, "lng": 138.5978, "radius": 300, "type": "red", "category": "nuclear"},
    {"name": "Hamaoka Nuclear Power Plant", "lat": 34.6219, "lng": 138.1428, "radius": 300, "type": "red", "category": "nuclear"},
    {"name": "Shika Nuclear Power Plant", "lat": 37.0600, "lng": 136.7289, "radius": 300, "type": "red", "category": "nuclear"},
    {"name": "Tsuruga Nuclear Power Plant", "lat": 35.7514, "lng": 136.0186, "radius": 300, "type": "red", "category": "nuclear"},
    {"name": "Mihama Nuclear Power Plant", "lat": 35.7017, "lng": 135.9581, "radius": 300, "type": "red", "category": "nuclear"},
    {"name": "Ohi Nuclear Power Plant", "lat": 35.5422, "lng": 135.6561, "radius": 300, "type": "red", "category": "nuclear"},
    {"name": "Takahama Nuclear Power Plant", "lat": 35.5203, "lng": 135.5050, "radius": 300, "type": "red", "category": "nuclear"},
    {"name": "Shimane Nuclear Power Plant", "lat": 35.5386, "lng": 132.9992, "radius": 300, "type": "red", "category": "nuclear"},
    {"name": "Ikata Nuclear Power Plant", "lat": 33.4903, "lng": 132.3094, "radius": 300, "type": "red", "category": "nuclear"},
    {"name": "Genkai Nuclear Power Plant", "lat": 33.5153, "lng": 129.8369, "radius": 300, "type": "red", "category": "nuclear"},
    {"name": "Sendai Nuclear Power Plant", "lat": 31.8339, "lng": 130.1894, "radius": 300, "type": "red", "category": "nuclear"},
    # Political party headquarters and foreign missions
    {"name": "LDP Headquarters", "lat": 35.6781, "lng": 139.7394, "radius": 300, "type": "yellow", "category": "political"},
    {"name": "Embassy of the United States", "lat": 35.6669, "lng": 139.7483, "radius": 300, "type": "yellow", "category": "embassy"},
    {"name": "Embassy of China", "lat": 35.6644, "lng": 139.7297, "radius": 300, "type": "yellow", "category": "embassy"},
    {"name": "Embassy of the Republic of Korea", "lat": 35.6606, "lng": 139.7386, "radius": 300, "type": "yellow", "category": "embassy"},
    {"name": "Embassy of Russia", "lat": 35.6672, "lng": 139.7361, "radius": 300, "type": "yellow", "category": "embassy"},
]

_HELIPORT_RECORDS: List[Dict[str, Any]] = [
    {"name": "Tokyo Heliport", "lat": 35.6403, "lng": 139.8372, "radius": 500, "type": "heliport"},
    {"name": "Toranomon Hills Heliport", "lat": 35.6667, "lng": 139.7500, "radius": 200, "type": "heliport"},
    {"name": "Roppongi Hills Heliport", "lat": 35.6603, "lng": 139.7292, "radius": 200, "type": "heliport"},
    {"name": "Maishima Heliport", "lat": 34.6592, "lng": 135.3931, "radius": 500, "type": "heliport"},
    {"name": "Yokohama Heliport", "lat": 35.4667, "lng": 139.6333, "radius": 500, "type": "heliport"},
    {"name": "Nagoya Heliport", "lat": 35.1833, "lng": 136.9000, "radius": 500, "type": "heliport"},
    {"name": "Fukuoka Heliport", "lat": 33.5903, "lng": 130.4017, "radius": 500, "type": "heliport"},
    {"name": "St. Luke's International Hospital", "lat": 35.6714, "lng": 139.7731, "radius": 200, "type": "hospital_heliport"},
]

AIRPORT_ZONES: List[RestrictedZone] = zones_from_records(_AIRPORT_RECORDS)
MILITARY_ZONES: List[RestrictedZone] = zones_from_records(_MILITARY_RECORDS)
PROHIBITED_ZONES: List[RestrictedZone] = zones_from_records(_PROHIBITED_RECORDS)
HELIPORT_ZONES: List[RestrictedZone] = zones_from_records(_HELIPORT_RECORDS)


def default_zones(*, include_heliports: bool = False) -> List[RestrictedZone]:
    """Return the built-in zone dataset."""

    zones = [*AIRPORT_ZONES, *MILITARY_ZONES, *PROHIBITED_ZONES]
    if include_heliports:
        zones.extend(HELIPORT_ZONES)
    return zones
