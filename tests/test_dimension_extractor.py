"""규칙 기반 치수 추출기 테스트"""

import pytest

from sheet_takeoff.models.envelopes import SizeResult
from sheet_takeoff.services.size_extraction.dimension_extractor import (
    extract_dimensions,
    fill_missing,
    has_label_evidence,
    has_pair_evidence,
    should_skip_row,
)


class TestExtractDimensions:
    """extract_dimensions() 테스트"""

    def test_height_and_overlap(self):
        """立上り + H 라벨 + 重ね"""
        s = extract_dimensions("立上り H=300 重ね100")
        assert s.height_mm == 300
        assert s.overlap_mm == 100
        assert s.wide_mm is None
        assert s.length_mm is None

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("H=300", 300),
            ("H-250", 250),
            ("H300", 300),
            ("高さ=450", 450),
            ("立上り200", 200),
            ("糸尺150", 150),
            ("縦 200", 200),
            ("mm H=120", 120),
            ("ｈ＝１５０", 150),
        ],
    )
    def test_height_labels(self, text, expected):
        assert extract_dimensions(text).height_mm == expected

    def test_latin_label_needs_word_boundary(self):
        """앞 글자가 라틴 문자이면 라벨 아님"""
        assert extract_dimensions("PH=300").height_mm is None
        assert extract_dimensions("SW=50").wide_mm is None

    @pytest.mark.parametrize(
        "text,expected",
        [("W=150", 150), ("W：150", 150), ("幅 600", 600), ("巾300", 300), ("横≒900", 900)],
    )
    def test_width_labels(self, text, expected):
        assert extract_dimensions(text).wide_mm == expected

    def test_pair_sets_width_and_length(self):
        """300×300 → 폭/길이 모두"""
        s = extract_dimensions("300×300 改修用ドレン")
        assert (s.wide_mm, s.length_mm) == (300, 300)
        s = extract_dimensions("450x600")
        assert (s.wide_mm, s.length_mm) == (450, 600)
        s = extract_dimensions("１００＊２００")
        assert (s.wide_mm, s.length_mm) == (100, 200)

    def test_pair_wins_over_labels(self):
        """쌍 표기가 있으면 W/L 라벨보다 우선"""
        s = extract_dimensions("W=150 L=200 300×400")
        assert (s.wide_mm, s.length_mm) == (300, 400)

    def test_length_in_meters(self):
        """L=1.2m → 1200mm, mm/무표기는 그대로"""
        assert extract_dimensions("L=1.2m").length_mm == 1200
        assert extract_dimensions("L=1200mm").length_mm == 1200
        assert extract_dimensions("W=1000 L=300").length_mm == 300
        assert extract_dimensions("長さ 2.5m").length_mm == 2500

    def test_overlap_labels(self):
        assert extract_dimensions("ラップ 100").overlap_mm == 100
        assert extract_dimensions("overlap 50").overlap_mm == 50

    def test_zero_is_unknown(self):
        """0 은 값으로 채우지 않음"""
        s = extract_dimensions("H=0 重ね0")
        assert s.height_mm is None
        assert s.overlap_mm is None

    def test_rounding_and_clamp(self):
        assert extract_dimensions("H=120.6").height_mm == 121
        assert extract_dimensions("W=12345678").wide_mm == 999999

    def test_huge_digit_run_saturates(self):
        """float 로 무한대가 되는 숫자열도 예외 없이 상한으로"""
        huge = "9" * 400
        assert extract_dimensions("H=" + huge).height_mm == 999999
        assert extract_dimensions("L=" + huge + "m").length_mm == 999999
        s = extract_dimensions(huge + "×" + huge)
        assert (s.wide_mm, s.length_mm) == (999999, 999999)

    def test_empty(self):
        assert extract_dimensions("") == SizeResult()
        assert not extract_dimensions("シーリング").has_any_size()


class TestEvidence:
    """라벨/쌍 증거 판정 테스트"""

    def test_pair_evidence(self):
        assert has_pair_evidence("300×300")
        assert not has_pair_evidence("W=300")

    def test_label_evidence(self):
        assert has_label_evidence("H=300", "height_mm")
        assert not has_label_evidence("300", "height_mm")
        assert has_label_evidence("300×600", "wide_mm")
        assert has_label_evidence("300×600", "length_mm")
        assert not has_label_evidence("300×600", "height_mm")


class TestFillMissing:
    """fill_missing() 테스트"""

    def test_base_wins(self):
        """base 값은 유지, 빈 필드만 채움"""
        base = SizeResult(height_mm=410)
        fallback = SizeResult(height_mm=300, overlap_mm=100)
        merged = fill_missing(base, fallback)
        assert merged.height_mm == 410
        assert merged.overlap_mm == 100
        # 원본은 변경하지 않음
        assert base.overlap_mm is None


class TestShouldSkipRow:
    """오라클 제외 행 판정 테스트"""

    @pytest.mark.parametrize(
        "text",
        ["", "   ", "小計", "合計 742,900", "合 計", "計", "防水仕様-1 ウレタン", "防水仕様ー2"],
    )
    def test_skipped(self, text):
        assert should_skip_row(text)

    @pytest.mark.parametrize("text", ["立上り H=300", "計画 H=300", "設計図 W=150"])
    def test_not_skipped(self, text):
        assert not should_skip_row(text)
