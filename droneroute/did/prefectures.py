"""Mini README: Prefecture lookup used to scope DID datasets.

Structure:
    * Prefecture - code, romanised name and axis-aligned bounding box.
    * PREFECTURES - the 47 prefectures in JIS code order.
    * PrefectureLocator - protocol for anything mapping a coordinate to a
      prefecture.
    * BoundingBoxLocator - default locator; linear scan, first match wins.

Boxes overlap along borders, so a coordinate near a boundary resolves to the
lowest-coded matching prefecture. A polygon-based locator can be injected
into ``DIDResolver`` where that matters.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Protocol, Sequence


@dataclass(frozen=True, slots=True)
class Prefecture:
    code: str
    name: str
    min_lat: float
    max_lat: float
    min_lng: float
    max_lng: float

    def contains(self, lat: float, lng: float) -> bool:
        return self.min_lat <= lat <= self.max_lat and self.min_lng <= lng <= self.max_lng

    @property
    def dataset_name(self) -> str:
        """File name of the 2020 census DID dataset for this prefecture."""

        return f"r02_did_{self.code}_{self.name}.geojson"


PREFECTURES: List[Prefecture] = [
    # Hokkaido and Tohoku
    Prefecture("01", "hokkaido", 41.3, 45.6, 139.3, 145.9),
    Prefecture("02", "aomori", 40.2, 41.6, 139.5, 141.7),
    Prefecture("03", "iwate", 38.7, 40.5, 140.7, 142.1),
    Prefecture("04", "miyagi", 37.8, 39.0, 140.3, 141.7),
    Prefecture("05", "akita", 39.0, 40.5, 139.7, 140.6),
    Prefecture("06", "yamagata", 37.7, 39.2, 139.5, 140.7),
    Prefecture("07", "fukushima", 36.8, 37.9, 139.2, 141.1),
    # Kanto
    Prefecture("08", "ibaraki", 35.7, 36.9, 139.85, 140.9),
    Prefecture("09", "tochigi", 36.2, 37.2, 139.3, 140.3),
    Prefecture("10", "gunma", 36.0, 37.1, 138.4, 139.7),
    Prefecture("11", "saitama", 35.75, 36.3, 138.9, 139.95),
    Prefecture("12", "chiba", 34.9, 36.0, 139.85, 140.9),
    Prefecture("13", "tokyo", 35.5, 35.95, 138.9, 139.95),
    Prefecture("14", "kanagawa", 35.1, 35.68, 138.9, 139.85),
    # Chubu
    Prefecture("15", "niigata", 37.0, 38.6, 137.8, 140.0),
    Prefecture("16", "toyama", 36.3, 36.9, 136.7, 137.8),
    Prefecture("17", "ishikawa", 36.0, 37.9, 136.2, 137.4),
    Prefecture("18", "fukui", 35.4, 36.3, 135.5, 136.8),
    Prefecture("19", "yamanashi", 35.2, 35.9, 138.2, 139.2),
    Prefecture("20", "nagano", 35.2, 37.0, 137.3, 138.8),
    Prefecture("21", "gifu", 35.1, 36.5, 136.3, 137.7),
    Prefecture("22", "shizuoka", 34.6, 35.6, 137.5, 139.2),
    Prefecture("23", "aichi", 34.6, 35.4, 136.7, 137.8),
    # Kinki
    Prefecture("24", "mie", 33.7, 35.3, 135.8, 136.9),
    Prefecture("25", "shiga", 34.8, 35.7, 135.8, 136.5),
    Prefecture("26", "kyoto", 34.7, 35.8, 134.8, 136.1),
    Prefecture("27", "osaka", 34.3, 35.0, 135.1, 135.7),
    Prefecture("28", "hyogo", 34.2, 35.7, 134.2, 135.5),
    Prefecture("29", "nara", 33.9, 34.8, 135.6, 136.2),
    Prefecture("30", "wakayama", 33.4, 34.4, 135.0, 136.0),
    # Chugoku
    Prefecture("31", "tottori", 35.0, 35.6, 133.2, 134.5),
    Prefecture("32", "shimane", 34.3, 37.3, 131.7, 133.4),
    Prefecture("33", "okayama", 34.4, 35.3, 133.4, 134.4),
    Prefecture("34", "hiroshima", 34.0, 35.0, 132.0, 133.5),
    Prefecture("35", "yamaguchi", 33.7, 34.8, 130.8, 132.4),
    # Shikoku
    Prefecture("36", "tokushima", 33.5, 34.3, 133.6, 134.8),
    Prefecture("37", "kagawa", 34.1, 34.6, 133.6, 134.5),
    Prefecture("38", "ehime", 32.9, 34.1, 132.0, 133.7),
    Prefecture("39", "kochi", 32.7, 33.9, 132.5, 134.3),
    # Kyushu and Okinawa
    Prefecture("40", "fukuoka", 33.0, 34.0, 130.0, 131.2),
    Prefecture("41", "saga", 33.0, 33.6, 129.7, 130.5),
    Prefecture("42", "nagasaki", 32.5, 34.8, 128.6, 130.5),
    Prefecture("43", "kumamoto", 32.1, 33.2, 130.1, 131.3),
    Prefecture("44", "oita", 32.7, 33.8, 130.8, 132.1),
    Prefecture("45", "miyazaki", 31.4, 32.8, 130.7, 131.9),
    Prefecture("46", "kagoshima", 27.0, 32.4, 128.4, 131.2),
    Prefecture("47", "okinawa", 24.0, 27.9, 122.9, 131.3),
]


class PrefectureLocator(Protocol):
    def locate(self, lat: float, lng: float) -> Optional[Prefecture]:
        ...


class BoundingBoxLocator:
    """Linear scan over prefecture bounding boxes; first match wins."""

    def __init__(self, prefectures: Sequence[Prefecture] = PREFECTURES) -> None:
        self._prefectures = list(prefectures)

    def locate(self, lat: float, lng: float) -> Optional[Prefecture]:
        for prefecture in self._prefectures:
            if prefecture.contains(lat, lng):
                return prefecture
        return None

    def by_code(self, code: str) -> Optional[Prefecture]:
        return next((pref for pref in self._prefectures if pref.code == code), None)
