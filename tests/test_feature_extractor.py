"""열 특징 추출기 테스트"""

import pytest

from sheet_takeoff.models.grid import Grid
from sheet_takeoff.services.column_detection.feature_extractor import (
    digit_length,
    extract_features,
    parse_plain_number,
    select_scan_rows,
)


class TestParsePlainNumber:
    """parse_plain_number() 테스트"""

    def test_plain_decimals(self):
        """부호/소수/선행 소수점 허용"""
        assert parse_plain_number("12") == 12.0
        assert parse_plain_number("12.5") == 12.5
        assert parse_plain_number("-5") == -5.0
        assert parse_plain_number("+3") == 3.0
        assert parse_plain_number(".5") == 0.5

    def test_thousands_separator_and_whitespace(self):
        """콤마와 앞뒤 공백 제거 후 판정"""
        assert parse_plain_number("1,234") == 1234.0
        assert parse_plain_number("  457,900 ") == 457900.0

    def test_rejects_suffixes(self):
        """%, 단위 접미사, 지수 표기는 숫자가 아님"""
        assert parse_plain_number("12%") is None
        assert parse_plain_number("3m") is None
        assert parse_plain_number("1e3") is None
        assert parse_plain_number("") is None
        assert parse_plain_number("abc") is None


class TestDigitLength:
    """digit_length() 테스트"""

    @pytest.mark.parametrize(
        "value,expected",
        [(0, 1), (0.5, 1), (1, 1), (9.99, 1), (10, 2), (58800, 5), (-123, 3)],
    )
    def test_digit_length(self, value, expected):
        assert digit_length(value) == expected


class TestSelectScanRows:
    """스캔 대상 행 선택 테스트"""

    def test_single_cell_rows_excluded(self):
        """1셀 행(제목/구분)은 제외"""
        grid = Grid.from_rows([["タイトル"], ["a", "1"], ["", ""], ["b", "2"]])
        rows = select_scan_rows(grid)
        assert rows == [("a", "1"), ("b", "2")]

    def test_fallback_when_no_content_rows(self):
        """조건을 만족하는 행이 없으면 비어 있지 않은 행을 사용"""
        grid = Grid.from_rows([["a"], [""], ["b"]])
        assert select_scan_rows(grid) == [("a",), ("b",)]

    def test_cap_at_140(self):
        """최대 140행"""
        grid = Grid.from_rows([["x", str(i)] for i in range(300)])
        assert len(select_scan_rows(grid)) == 140


class TestExtractFeatures:
    """extract_features() 테스트"""

    def test_text_plus_numeric_is_one(self, estimate_grid):
        """모든 열에서 text_ratio + numeric_ratio == 1"""
        fs = extract_features(estimate_grid)
        assert fs.features
        for f in fs.features.values():
            assert f.text_ratio + f.numeric_ratio == pytest.approx(1.0)

    def test_scanned_rows_and_width(self, estimate_grid):
        """備考 열은 헤더 셀 하나만 샘플로 가짐"""
        fs = extract_features(estimate_grid)
        assert fs.features[7].count == 1
        assert fs.max_cols == 8
        # 제목 1셀 행은 제외, 헤더/소계 행은 포함
        assert fs.scanned_rows == 7

    def test_sample_cap(self):
        """열당 샘플 최대 200개"""
        grid = Grid.from_rows([["x", str(i)] for i in range(250)])
        fs = extract_features(grid, max_scan_rows=300)
        assert fs.features[1].count == 200

    def test_unit_ratio_ignores_inner_whitespace(self):
        """단위 비교는 내부 공백 제거 후"""
        grid = Grid.from_rows([["a", "ヶ 所"], ["b", "m"], ["c", "ｍ"], ["d", "個"]])
        f = extract_features(grid).features[1]
        assert f.unit_ratio == pytest.approx(0.75)

    def test_long_text_counts_only_non_numeric(self):
        """10자 이상 비숫자만 long text"""
        grid = Grid.from_rows(
            [["1234567890123", "x"], ["屋上防水改修工事一式です", "x"], ["短い", "x"]]
        )
        f = extract_features(grid).features[0]
        assert f.long_text_ratio == pytest.approx(1 / 3)

    def test_numeric_statistics(self):
        """평균/중앙값/큰 수 비율"""
        grid = Grid.from_rows([["a", "10"], ["b", "20,000"], ["c", "30"], ["d", "-"]])
        f = extract_features(grid).features[1]
        assert f.numeric_ratio == pytest.approx(0.75)
        assert f.mean_abs_number == pytest.approx((10 + 20000 + 30) / 3)
        assert f.median_abs_number == 30
        assert f.median_digits == 2
        assert f.big_number_ratio == pytest.approx(1 / 3)
        assert f.comma_ratio == pytest.approx(0.25)

    def test_fill_statistics_use_row_count(self):
        """채움 통계는 스캔 행 수 기준, 비숫자는 빈 셀 취급"""
        grid = Grid.from_rows(
            [["a", "0"], ["b", "", "x"], ["c", "abc"], ["d", "1,500"]]
        )
        f = extract_features(grid).features[1]
        assert f.filled_count == 2
        assert f.non_zero_count == 1
        assert f.filled_ratio == pytest.approx(0.5)
        assert f.non_zero_ratio == pytest.approx(0.25)
        assert f.max_abs_non_zero == 1500
        assert f.max_digits_non_zero == 4

    def test_pattern_hits(self, estimate_grid):
        """摘要 열은 치수 패턴 적중률이 높음"""
        fs = extract_features(estimate_grid)
        desc = fs.features[2]
        assert desc.size_hit_ratio == pytest.approx(5 / 6)
        assert desc.spec_hit_ratio == pytest.approx(2 / 6)
        item = fs.features[1]
        assert item.work_word_ratio > 0.5
