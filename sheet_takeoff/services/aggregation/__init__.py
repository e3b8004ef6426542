"""단위 정규화 및 집계 패키지"""

from .aggregator import RowAggregate, UnitAggregator, compute_calc_m2
from .unit_normalizer import normalize_unit

__all__ = ["RowAggregate", "UnitAggregator", "compute_calc_m2", "normalize_unit"]
