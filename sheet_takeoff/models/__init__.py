"""데이터 모델 패키지"""

from .envelopes import (
    ClassifyEnvelope,
    DetectedColumns,
    OracleResponseItem,
    PendingExtraction,
    SizeResult,
    TakeoffResult,
    TakeoffRow,
)
from .grid import Grid

__all__ = [
    "ClassifyEnvelope",
    "DetectedColumns",
    "Grid",
    "OracleResponseItem",
    "PendingExtraction",
    "SizeResult",
    "TakeoffResult",
    "TakeoffRow",
]
