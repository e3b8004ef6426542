"""셀 텍스트 정규화 유틸

- normalize_text: 치수 추출/표시용 (NFKC, 하이픈류 → "-", 공백 1칸으로 축약)
- normalize_for_search: 검색 비교용 (위 처리 + 공백 전부 제거 + 소문자)

NFKC 는 ㎡ 를 "m2" 로 바꾸므로 단위 정규화에는 사용하지 않습니다.
"""
from __future__ import annotations

import re
import unicodedata

# 전각/장음/대시 계열을 ASCII 하이픈으로
_HYPHENS_RE = re.compile(r"[－―ー−‐‑‒–—]")
_WS_RE = re.compile(r"\s+")


def normalize_text(text: str) -> str:
    if not text:
        return ""
    t = unicodedata.normalize("NFKC", text)
    t = _HYPHENS_RE.sub("-", t)
    return _WS_RE.sub(" ", t).strip()


def normalize_for_search(text: str) -> str:
    if not text:
        return ""
    t = unicodedata.normalize("NFKC", text)
    t = _HYPHENS_RE.sub("-", t)
    return _WS_RE.sub("", t).lower()


def split_tokens(query: str) -> list[str]:
    """공백 구분 검색어 → 검색용 정규화 토큰 목록 (빈 토큰 제외)"""
    return [tok for tok in (normalize_for_search(p) for p in normalize_text(query).split(" ")) if tok]
