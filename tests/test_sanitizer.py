"""치수 보정기 테스트"""

from sheet_takeoff.models.envelopes import SizeResult
from sheet_takeoff.services.size_extraction.sanitizer import (
    SanitizerSettings,
    SizeSanitizer,
    sanitize_size,
)


class TestUnsupportedLength:
    """근거 없는 길이 제거 테스트"""

    def test_duplicated_width_dropped(self):
        """W 한 축만 있는데 length 가 복제된 경우"""
        out = sanitize_size(SizeResult(wide_mm=300, length_mm=300), "W=300", "箇所", 4)
        assert out.wide_mm == 300
        assert out.length_mm is None

    def test_pair_keeps_length(self):
        out = sanitize_size(SizeResult(wide_mm=300, length_mm=300), "300×300", "箇所", 4)
        assert out.length_mm == 300

    def test_length_label_keeps_length(self):
        out = sanitize_size(SizeResult(wide_mm=300, length_mm=300), "W=300 L=300", "段", 4)
        assert out.length_mm == 300

    def test_different_values_untouched(self):
        out = sanitize_size(SizeResult(wide_mm=300, length_mm=600), "", "箇所", 4)
        assert out.length_mm == 600


class TestQuantityEcho:
    """수량 반향 제거 테스트 (단위 m)"""

    def test_over_ceiling_dropped(self):
        """수량 58.8m 가 높이 58800mm 로 읽힌 경우"""
        out = sanitize_size(SizeResult(height_mm=58800), "立上り H=58800", "m", 58.8)
        assert out.height_mm is None

    def test_echo_without_label_dropped(self):
        """라벨 없이 qty×1000 과 허용오차 이내"""
        out = sanitize_size(SizeResult(height_mm=2530), "立上り", "m", 2.5)
        assert out.height_mm is None

    def test_58800_without_label_is_echo(self):
        """58.8m 행의 높이 58800 은 라벨이 없으면 반향으로 제거

        기본 상한(5000)에 먼저 걸리지 않도록 상한을 올려 반향 규칙만 확인
        """
        sanitizer = SizeSanitizer(SanitizerSettings(max_height_mm=100_000))
        out = sanitizer.sanitize(SizeResult(height_mm=58800), "立上り", "m", 58.8)
        assert out.height_mm is None
        # 같은 값이라도 높이 라벨이 있으면 유지
        out = sanitizer.sanitize(SizeResult(height_mm=58800), "立上り H=58800", "m", 58.8)
        assert out.height_mm == 58800
        # 기본 설정에서도 결과는 같다
        assert sanitize_size(SizeResult(height_mm=58800), "立上り", "m", 58.8).height_mm is None

    def test_echo_with_label_kept(self):
        out = sanitize_size(SizeResult(height_mm=2500), "H=2500", "m", 2.5)
        assert out.height_mm == 2500

    def test_outside_tolerance_kept(self):
        """tol = max(30, 2500×0.02=50)"""
        out = sanitize_size(SizeResult(height_mm=2600), "", "m", 2.5)
        assert out.height_mm == 2600

    def test_pair_is_evidence_for_width(self):
        out = sanitize_size(SizeResult(wide_mm=30000), "30000×200", "m", 30)
        assert out.wide_mm == 30000
        out = sanitize_size(SizeResult(wide_mm=30000), "", "m", 30)
        assert out.wide_mm is None

    def test_other_units_unchanged(self):
        """m 이외 단위는 반향/상한 검사 없음"""
        out = sanitize_size(SizeResult(height_mm=9000, wide_mm=2500), "", "㎡", 2.5)
        assert out.height_mm == 9000
        assert out.wide_mm == 2500

    def test_custom_ceiling(self):
        sanitizer = SizeSanitizer(SanitizerSettings(max_height_mm=1000))
        out = sanitizer.sanitize(SizeResult(height_mm=1200), "H=1200", "m", 30)
        assert out.height_mm is None


class TestOverlapAndIdempotence:
    """겹침 보정 및 반복 적용 테스트"""

    def test_non_positive_overlap_dropped(self):
        assert sanitize_size(SizeResult(overlap_mm=0), "", "m", 10).overlap_mm is None
        assert sanitize_size(SizeResult(overlap_mm=-5), "", "m", 10).overlap_mm is None

    def test_input_not_mutated(self):
        size = SizeResult(wide_mm=300, length_mm=300)
        sanitize_size(size, "W=300", "箇所", 4)
        assert size.length_mm == 300

    def test_idempotent(self):
        size = SizeResult(height_mm=2510, wide_mm=300, length_mm=300, overlap_mm=100)
        once = sanitize_size(size, "W=300 重ね100", "m", 2.5)
        twice = sanitize_size(once, "W=300 重ね100", "m", 2.5)
        assert once == twice
        assert once.height_mm is None
        assert once.length_mm is None
        assert once.overlap_mm == 100
