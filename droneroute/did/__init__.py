"""Mini README: Densely inhabited district lookups scoped by prefecture."""

from .prefectures import PREFECTURES, BoundingBoxLocator, Prefecture, PrefectureLocator
from .resolver import DIDDataset, DIDReport, DIDResolver, DIDResult
from .sources import DIDDatasetSource, FileDatasetSource, HttpDatasetSource

__all__ = [
    "BoundingBoxLocator",
    "DIDDataset",
    "DIDDatasetSource",
    "DIDReport",
    "DIDResolver",
    "DIDResult",
    "FileDatasetSource",
    "HttpDatasetSource",
    "PREFECTURES",
    "Prefecture",
    "PrefectureLocator",
]
