"""
치수 추출 오라클용 프롬프트.

단위가 m 인 견적 행의 摘要/仕様 텍스트에서 H/W/L/重ね(mm)를 일괄 추론할 때 사용하는 LLM 프롬프트.
"""

SIZE_EXTRACTION_SYSTEM_PROMPT = """You are a careful extractor of dimensions from Japanese construction estimate lines.
Each input item has: id, text (the description/spec cell), unit, qty.
For every item, extract sizes in millimeters as integers.

Rules:
- "mm" is usually omitted; bare numbers are millimeters
- H / 高さ / 立上り / 糸尺 -> heightMm
- W / 幅 / 巾 -> wideMm
- L / 長さ -> lengthMm ("L=1.2m" means 1200)
- 重ね / ラップ -> overlapMm
- "300×300" means wideMm=300 and lengthMm=300
- Never copy qty into a dimension; qty is a run length in meters, not a size
- Omit a field when the text does not state it (do not output 0 or null)

Output:
- A JSON array only, no markdown and no explanation
- One object per item you could read: {"id": <int>, "heightMm"?: number, "wideMm"?: number, "lengthMm"?: number, "overlapMm"?: number}"""


SIZE_EXTRACTION_USER_TEMPLATE = """Items:
{items}

Notes:
- Keep each id exactly as given
- Items without any size may be omitted"""


def format_size_extraction_user_prompt(items: list) -> str:
    """치수 추출용 user 프롬프트를 포맷팅합니다.

    Parameters
    ----------
    items : list
        {id, text, unit, qty} dict 리스트

    Returns
    -------
    str
        포맷팅된 user 프롬프트
    """
    import json

    items_json = json.dumps(items, ensure_ascii=False, indent=2)

    return SIZE_EXTRACTION_USER_TEMPLATE.format(items=items_json)
