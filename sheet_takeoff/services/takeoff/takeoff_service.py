"""
수량 집계 작업 서비스 (takeoff/takeoff_service)
-----------------------------------------------------
디코딩된 그리드 하나를 받아 열 판정 → 행 선별 → 치수 추출/보강 → 단위별 집계까지
한 번에 수행하고 TakeoffResult(Envelope) 로 돌려줍니다.

입력 검증 실패(잘못된 수동 열 번호, 금액 열 없이 hide_zero_amount 등)만
ValueError 로 호출자에게 드러나며, 열 판정/추출 단계는 예외를 올리지 않습니다.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence
import logging
import math

from sheet_takeoff.models.envelopes import (
    AggregateData,
    AggregateMeta,
    ClassifyEnvelope,
    DetectedColumns,
    TakeoffResult,
    TakeoffRow,
)
from sheet_takeoff.models.grid import Grid
from sheet_takeoff.services.aggregation.aggregator import RowAggregate, UnitAggregator
from sheet_takeoff.services.aggregation.unit_normalizer import normalize_unit
from sheet_takeoff.services.column_detection.column_classifier import (
    ColumnClassifier,
    ColumnDetectorSettings,
)
from sheet_takeoff.services.size_extraction.merge_policy import OracleMergePolicy, SizeRow
from sheet_takeoff.services.size_extraction.oracle import SizeOracle, get_size_oracle
from sheet_takeoff.services.size_extraction.text_normalizer import (
    normalize_for_search,
    normalize_text,
    split_tokens,
)
from sheet_takeoff.settings import settings

logger = logging.getLogger(__name__)


def parse_number(text: str) -> Optional[float]:
    """수량/금액 셀 → float (천 단위 콤마 허용, 실패 시 None)"""
    t = (text or "").replace(",", "").strip()
    if not t:
        return None
    try:
        v = float(t)
    except ValueError:
        return None
    return v if math.isfinite(v) else None


@dataclass
class ManualColumns:
    """수동 열 지정 (1-based). amount 만 선택"""

    item: int
    desc: int
    qty: int
    unit: int
    size: int
    amount: Optional[int] = None

    def validate(self) -> None:
        for name in ("item", "desc", "qty", "unit", "size", "amount"):
            v = getattr(self, name)
            if v is None and name == "amount":
                continue
            if not isinstance(v, int) or isinstance(v, bool) or v < 1:
                raise ValueError(f"manual column '{name}' must be a 1-based integer, got {v!r}")


@dataclass
class TakeoffOptions:
    """집계 작업 옵션"""

    query: str = ""
    exclude_keywords: str = ""
    manual_columns: Optional[ManualColumns] = None
    header_row_index: Optional[int] = None  # 1-based, 이 행까지 건너뜀
    hide_zero_amount: bool = False
    per_unit_overrides: Dict[int, float] = field(default_factory=dict)  # 1-based 행 번호 → 값
    preview_all: bool = False


@dataclass
class _Columns:
    """작업용 0-based 열 번호"""

    item: int
    desc: int
    qty: int
    unit: int
    size: int
    amount: Optional[int]


@dataclass
class _Selected:
    row_index: int  # 0-based
    item: str
    desc: str
    qty: float
    unit: str
    amount: Optional[float]
    size_text: str


def _clamp_col(i: int, width: int) -> int:
    if width <= 0:
        return 0
    return max(0, min(i, width - 1))


class TakeoffService:
    """견적서 그리드 수량 집계 서비스"""

    def __init__(
        self,
        oracle: Optional[SizeOracle] = None,
        detector_settings: Optional[ColumnDetectorSettings] = None,
        merge_policy: Optional[OracleMergePolicy] = None,
    ):
        self.classifier = ColumnClassifier(detector_settings)
        lexicon = self.classifier.settings.lexicon
        self.merge_policy = merge_policy or OracleMergePolicy(
            oracle=oracle if oracle is not None else get_size_oracle(),
            lexicon=lexicon,
        )
        self.lexicon = lexicon

    # ------------------------------------------------------------------
    # 열 판정만
    # ------------------------------------------------------------------
    def detect_columns(self, grid: Grid) -> ClassifyEnvelope:
        return self.classifier.detect(grid).to_envelope()

    # ------------------------------------------------------------------
    # 전체 작업
    # ------------------------------------------------------------------
    def run(self, grid: Grid, options: Optional[TakeoffOptions] = None) -> TakeoffResult:
        opts = options or TakeoffOptions()
        self._validate(opts)

        notes: List[str] = []
        cols, detected = self._resolve_columns(grid, opts, notes)
        if opts.hide_zero_amount and cols.amount is None:
            raise ValueError("hide_zero_amount requires an amount column")

        selected = self._select_rows(grid, opts, cols)

        rows = [
            SizeRow(
                id=i,
                text=s.size_text,
                unit=s.unit,
                qty=s.qty,
                override=opts.per_unit_overrides.get(s.row_index + 1),
            )
            for i, s in enumerate(selected)
        ]
        enrichment = self.merge_policy.enrich(rows)

        aggregator = UnitAggregator()
        out_rows: List[TakeoffRow] = []
        for i, s in enumerate(selected):
            size = enrichment.sizes[i]
            aggregator.add(RowAggregate(qty=s.qty, unit=s.unit, size=size, calc_m2=size.calc_m2))
            out_rows.append(
                TakeoffRow(
                    row_index=s.row_index + 1,
                    item=s.item or None,
                    desc=s.desc or None,
                    qty=s.qty,
                    unit=s.unit or None,
                    amount=s.amount,
                    size_text=s.size_text or None,
                    height_mm=size.height_mm,
                    wide_mm=size.wide_mm,
                    length_mm=size.length_mm,
                    overlap_mm=size.overlap_mm,
                    suggested_input=size.suggested_input,
                    calc_m2=size.calc_m2,
                )
            )

        if not opts.preview_all:
            out_rows = out_rows[: settings.preview_limit]

        logger.info(
            "takeoff: matched=%d units=%s sum_m2=%.3f oracle=%d/%d",
            aggregator.count,
            sorted(aggregator.sums_by_unit),
            aggregator.sum_m2,
            enrichment.returned,
            enrichment.requested,
        )
        return TakeoffResult(
            stage='aggregate',
            data=AggregateData(
                sums_by_unit=dict(aggregator.sums_by_unit),
                sum_m2=aggregator.sum_m2,
                rows=out_rows,
            ),
            meta=AggregateMeta(
                query=normalize_text(opts.query),
                matched_count=aggregator.count,
                oracle_requested=enrichment.requested,
                oracle_returned=enrichment.returned,
                detected_columns=detected,
                notes=notes,
            ),
        )

    # ------------------------------------------------------------------
    # 내부 단계
    # ------------------------------------------------------------------
    @staticmethod
    def _validate(opts: TakeoffOptions) -> None:
        if opts.manual_columns is not None:
            opts.manual_columns.validate()
        if opts.header_row_index is not None and opts.header_row_index < 1:
            raise ValueError(f"header_row_index must be >= 1, got {opts.header_row_index}")
        for row_no, value in opts.per_unit_overrides.items():
            if value is None or value < 0 or not math.isfinite(value):
                raise ValueError(f"per-unit override for row {row_no} must be a non-negative number")

    def _resolve_columns(
        self, grid: Grid, opts: TakeoffOptions, notes: List[str]
    ) -> tuple[_Columns, DetectedColumns]:
        manual = opts.manual_columns
        if manual is not None:
            width = grid.width
            cols = _Columns(
                item=_clamp_col(manual.item - 1, width),
                desc=_clamp_col(manual.desc - 1, width),
                qty=_clamp_col(manual.qty - 1, width),
                unit=_clamp_col(manual.unit - 1, width),
                size=_clamp_col(manual.size - 1, width),
                amount=_clamp_col(manual.amount - 1, width) if manual.amount is not None else None,
            )
            notes.append("manual columns")
        else:
            result = self.classifier.detect(grid)
            notes.extend(result.notes)
            cols = _Columns(
                item=result.item,
                desc=result.desc,
                qty=result.qty,
                unit=result.unit,
                size=result.desc,
                amount=result.amount,
            )

        detected = DetectedColumns(
            item=cols.item + 1,
            desc=cols.desc + 1,
            qty=cols.qty + 1,
            unit=cols.unit + 1,
            amount=cols.amount + 1 if cols.amount is not None else None,
            size=cols.size + 1,
            header_row_index=opts.header_row_index,
            used_manual_columns=manual is not None,
        )
        return cols, detected

    def _select_rows(self, grid: Grid, opts: TakeoffOptions, cols: _Columns) -> List[_Selected]:
        tokens = split_tokens(opts.query)
        excludes = split_tokens(opts.exclude_keywords)
        skip_until = opts.header_row_index or 0

        selected: List[_Selected] = []
        for i, row in enumerate(grid):
            if i + 1 <= skip_until:
                continue

            haystack = normalize_for_search(" ".join(c for c in row if c))
            if tokens and not all(t in haystack for t in tokens):
                continue
            if excludes and any(t in haystack for t in excludes):
                continue

            qty = parse_number(grid.cell(i, cols.qty))
            if qty is None or qty == 0:
                continue

            amount = parse_number(grid.cell(i, cols.amount)) if cols.amount is not None else None
            if opts.hide_zero_amount and not amount:
                continue

            selected.append(
                _Selected(
                    row_index=i,
                    item=normalize_text(grid.cell(i, cols.item)),
                    desc=normalize_text(grid.cell(i, cols.desc)),
                    qty=qty,
                    unit=normalize_unit(grid.cell(i, cols.unit), self.lexicon),
                    amount=amount,
                    size_text=normalize_text(grid.cell(i, cols.size)),
                )
            )
        return selected


def run_takeoff(grid: Sequence[Sequence[object]] | Grid, options: Optional[TakeoffOptions] = None) -> TakeoffResult:
    """편의 함수: 기본 설정(설정 기반 오라클)으로 집계 작업 실행"""
    g = grid if isinstance(grid, Grid) else Grid.from_rows(grid)
    return TakeoffService().run(g, options)
