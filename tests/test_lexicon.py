"""견적서 어휘 사전 테스트"""
import pytest
from sheet_takeoff.services.reference import Lexicon, build_lexicon, get_default_lexicon
from sheet_takeoff.services.reference.lexicon import UNIT_M, UNIT_M2, UNIT_PLACE, UNIT_STEP
class TestDefaultLexicon:
    """get_default_lexicon() 테스트"""
    def test_cached(self):
        """두 번 호출해도 같은 객체"""
        assert get_default_lexicon() is get_default_lexicon()
    def test_alias_index(self):
        """표기 변형 → canonical"""
        lex = get_default_lexicon()
        assert lex.alias_index["ｍ"] == UNIT_M
        assert lex.alias_index["m2"] == UNIT_M2
        assert lex.alias_index["ヶ所"] == UNIT_PLACE
        assert lex.alias_index["段"] == UNIT_STEP
    @pytest.mark.parametrize("token", ["㎡", "m", "ヶ 所", "式", "kg"])
    def test_unit_tokens(self, token):
        """단위 토큰 판정 (내부 공백 무시)"""
        assert get_default_lexicon().is_unit_token(token)
    def test_not_unit_token(self):
        assert not get_default_lexicon().is_unit_token("防水")
    def test_patterns(self):
        lex = get_default_lexicon()
        assert lex.size_pattern.search("H=300")
        assert lex.spec_pattern.search("ウレタン塗膜防水")
        assert lex.currency_pattern.search("3,800円")
        assert lex.work_name_pattern.search("改修工事")
        assert lex.subtotal_pattern.search("小計")
        assert lex.heading_pattern.search("防水仕様-3")
        assert lex.tread_keywords == ("踏面",)
class TestBuildLexicon:
    """build_lexicon() 테스트"""
    def test_returns_new_instance(self):
        lex = build_lexicon(unit_tokens={"式"})
        assert isinstance(lex, Lexicon)
        assert lex is not get_default_lexicon()
        assert lex.unit_tokens == frozenset({"式"})
        assert not lex.is_unit_token("m")
        # 기본 사전은 그대로
        assert get_default_lexicon().is_unit_token("m")
    def test_string_pattern_compiled(self):
        lex = build_lexicon(work_name_pattern=r"塗替")
        assert lex.work_name_pattern.search("外壁塗替")
        assert not lex.work_name_pattern.search("改修工事")
    def test_tread_keywords(self):
        lex = build_lexicon(tread_keywords=["踏面", "踏み面"])
        assert lex.tread_keywords == ("踏面", "踏み面")
