import json
import logging
import math
import re

import anthropic

from errors import EmptyModelResponse, InvalidInput, MalformedModelResponse
from prompt import USER_PROMPT, get_system_prompt

MODEL = "claude-sonnet-4-5-20250929"
MAX_TOKENS = 4000

MAX_TOP_FIXES = 3
MAX_NARRATIVE_CHARS = 1500
NARRATIVE_KEY = "narrative"

_DATA_URL_RE = re.compile(r"^data:(image/[\w.+-]+);base64,(.*)$", re.DOTALL)

logger = logging.getLogger(__name__)


def split_data_url(image_data_url: str) -> tuple[str, str]:
    """data URL → (media_type, base64 데이터)."""
    match = _DATA_URL_RE.match(image_data_url)
    if not match:
        raise InvalidInput("imageDataUrl must be a base64 image data URL")
    return match.group(1), match.group(2)


def request_critique(image_data_url: str, api_key: str) -> str:
    """스크린샷 1장을 모델에 보내고 원본 응답 텍스트를 반환. 재시도 없음."""
    media_type, b64 = split_data_url(image_data_url)
    client = anthropic.Anthropic(api_key=api_key)

    response = client.messages.create(
        model=MODEL,
        max_tokens=MAX_TOKENS,
        system=get_system_prompt(),
        messages=[
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": USER_PROMPT},
                    {
                        "type": "image",
                        "source": {"type": "base64", "media_type": media_type, "data": b64},
                    },
                ],
            }
        ],
    )
    logger.info(
        f"모델 응답 수신: stop_reason={getattr(response, 'stop_reason', None)}"
    )
    return "".join(
        block.text for block in response.content if getattr(block, "type", "text") == "text"
    )


def parse_critique(raw_text: str) -> dict:
    raw = (raw_text or "").strip()
    if not raw:
        raise EmptyModelResponse()

    candidates = [raw]
    match = re.search(r"```(?:json)?\s*(.*?)\s*```", raw, re.DOTALL)
    if match:
        candidates.append(match.group(1))

    for candidate in candidates:
        try:
            parsed = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(parsed, dict):
            return parsed

    logger.warning(f"JSON 파싱 실패. 원본 응답 앞부분: {raw[:200]}")
    raise MalformedModelResponse(raw)


def clamp_score(value) -> int:
    if isinstance(value, bool):
        return 0
    try:
        n = float(value if value is not None else 0)
    except (TypeError, ValueError):
        return 0
    except OverflowError:
        # float 범위를 넘는 정수
        return 100 if value > 0 else 0
    if math.isnan(n):
        return 0
    return int(round(max(0.0, min(100.0, n))))


def sanitize_critique(parsed: dict) -> dict:
    """모델 출력 형태를 신뢰하지 않고 저장 가능한 값으로 정리."""
    top_fixes = parsed.get("topFixes")
    top_fixes = list(top_fixes[:MAX_TOP_FIXES]) if isinstance(top_fixes, list) else []

    narrative = parsed.get(NARRATIVE_KEY)
    narrative = narrative[:MAX_NARRATIVE_CHARS] if isinstance(narrative, str) else ""

    laws = parsed.get("laws")
    laws = dict(laws) if isinstance(laws, dict) else {}
    laws[NARRATIVE_KEY] = narrative

    return {
        "score": clamp_score(parsed.get("score")),
        "top_fixes": top_fixes,
        "narrative": narrative,
        "laws": laws,
    }


def analyze_screenshot(image_data_url: str, api_key: str) -> dict:
    raw_text = request_critique(image_data_url, api_key)
    return sanitize_critique(parse_critique(raw_text))
