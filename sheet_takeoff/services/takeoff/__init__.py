"""수량 집계 작업 패키지"""

from .spec_codes import extract_spec_codes
from .takeoff_service import ManualColumns, TakeoffOptions, TakeoffService, run_takeoff

__all__ = [
    "ManualColumns",
    "TakeoffOptions",
    "TakeoffService",
    "extract_spec_codes",
    "run_takeoff",
]
