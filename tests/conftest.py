"""테스트 픽스처 및 설정"""

from pathlib import Path
from typing import Dict, List, Optional, Sequence

import pytest
from dotenv import load_dotenv

from sheet_takeoff.models.envelopes import PendingExtraction, SizeResult
from sheet_takeoff.models.grid import Grid
from sheet_takeoff.services.llm.dummy_llm import DummyLLM
from sheet_takeoff.services.size_extraction.merge_policy import OracleMergePolicy
from sheet_takeoff.services.size_extraction.oracle import NullSizeOracle, SizeOracle
from sheet_takeoff.services.takeoff.takeoff_service import TakeoffService

# 프로젝트 루트의 .env 파일 로드
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(env_path)


class FakeSizeOracle(SizeOracle):
    """미리 정한 결과를 돌려주는 오라클 (호출 기록 보관)"""

    def __init__(
        self,
        responses: Optional[Dict[int, SizeResult]] = None,
        error: Optional[Exception] = None,
    ):
        self.responses = responses or {}
        self.error = error
        self.calls: List[List[PendingExtraction]] = []

    def extract_sizes(self, batch: Sequence[PendingExtraction]) -> Dict[int, SizeResult]:
        self.calls.append(list(batch))
        if self.error is not None:
            raise self.error
        return {k: v.model_copy() for k, v in self.responses.items()}


# 견적서 내역 시트 (No / 名称 / 摘要 / 数量 / 単位 / 単価 / 金額 / 備考)
ESTIMATE_ROWS = [
    ["御見積内訳書"],
    ["No", "名称", "摘要", "数量", "単位", "単価", "金額", "備考"],
    ["1", "屋上 平場 改修工事", "ウレタン塗膜防水 X-2 W=900", "120.5", "㎡", "3,800", "457,900", ""],
    ["2", "屋上 パラペット 改修工事", "立上り H=300 重ね100", "58.8", "m", "2,500", "147,000", ""],
    ["3", "庇 天端 補修", "300×300 改修用ドレン", "4", "箇所", "12,000", "48,000", ""],
    ["4", "階段 踏面 改修", "W=1000 L=300", "12", "段", "4,500", "54,000", ""],
    ["5", "笠木 取付 工事", "W=150 シーリング", "30", "m", "1,200", "36,000", ""],
    ["", "小計", "", "", "", "", "742,900", ""],
]


@pytest.fixture
def estimate_rows():
    """견적서 원본 행 픽스처"""
    return [list(r) for r in ESTIMATE_ROWS]


@pytest.fixture
def estimate_grid(estimate_rows):
    """견적서 그리드 픽스처"""
    return Grid.from_rows(estimate_rows)


@pytest.fixture
def dummy_llm_service():
    """더미 LLM 서비스 픽스처"""
    return DummyLLM()


@pytest.fixture
def fake_oracle():
    """빈 응답 가짜 오라클 픽스처"""
    return FakeSizeOracle()


@pytest.fixture
def make_oracle():
    """응답/예외를 지정해 가짜 오라클을 만드는 팩토리 픽스처"""
    return FakeSizeOracle


@pytest.fixture
def takeoff_service():
    """오라클 없는(규칙 기반) 집계 서비스 픽스처"""
    return TakeoffService(
        merge_policy=OracleMergePolicy(oracle=NullSizeOracle(), enabled=False)
    )
