"""헤더 없는 표 데이터(Grid) 모델

파일 디코딩 단계에서 이미 문자열로 평탄화된 셀 배열을 감쌉니다.
생성 후에는 변경되지 않으며, 짧은 행은 뒤쪽이 빈 셀로 채워진 것으로 취급합니다.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Iterator, Sequence, Tuple

Row = Tuple[str, ...]


def cell_to_str(value: Any) -> str:
    """셀 값을 문자열로 변환 (None → "", 숫자는 그대로 문자열화, 앞뒤 공백 제거)"""
    if value is None:
        return ""
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, float) and value.is_integer():
        # 스프레드시트 디코더가 정수를 float 로 넘기는 경우 "12.0" 대신 "12"
        return str(int(value))
    return str(value).strip()


@dataclass(frozen=True)
class Grid:
    """불변 2차원 셀 배열 (0-based)"""

    rows: Tuple[Row, ...] = ()

    @classmethod
    def from_rows(cls, rows: Iterable[Sequence[Any]]) -> "Grid":
        """임의 값의 2차원 배열로부터 Grid 생성"""
        return cls(tuple(tuple(cell_to_str(v) for v in (r or ())) for r in rows))

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self) -> Iterator[Row]:
        return iter(self.rows)

    @property
    def width(self) -> int:
        """가장 긴 행의 길이"""
        return max((len(r) for r in self.rows), default=0)

    def cell(self, row: int, col: int) -> str:
        """(row, col) 셀 문자열. 범위 밖이면 빈 문자열"""
        if row < 0 or row >= len(self.rows) or col < 0:
            return ""
        r = self.rows[row]
        return r[col] if col < len(r) else ""


def non_blank_count(row: Sequence[str]) -> int:
    return sum(1 for v in row if v.strip())
