"""열 판정 패키지

주요 모듈:
- feature_extractor: 그리드 → 열별 통계 요약 (ColumnFeatures)
- column_classifier: 통계 기반 item/desc/qty/unit/amount 판정 (ColumnClassifier)
"""

from .column_classifier import (
    ColumnClassifier,
    ColumnDetectorSettings,
    DetectionResult,
    detect_columns,
)
from .feature_extractor import ColumnFeatures, FeatureSet, extract_features

__all__ = [
    # 특징 추출
    "ColumnFeatures",
    "FeatureSet",
    "extract_features",
    # 판정
    "ColumnClassifier",
    "ColumnDetectorSettings",
    "DetectionResult",
    "detect_columns",
]
