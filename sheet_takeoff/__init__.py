"""sheet-takeoff: 헤더 없는 견적서 그리드의 열 판정과 치수 기반 수량 집계"""

__version__ = "0.1.0"
