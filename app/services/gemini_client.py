"""Gemini client used to write business summaries out of band.

A 429 RESOURCE_EXHAUSTED puts the module into a cooldown during which every
call returns None without touching the API.
"""

import logging
import re
from datetime import datetime, timedelta, timezone
from typing import Optional

from google import genai
from google.genai import errors as genai_errors

from app.core.config import settings

logger = logging.getLogger(__name__)

# Skip all Gemini calls until this time (set after a 429)
_quota_cooldown_until: Optional[datetime] = None

RETRY_INFO_TYPE = "type.googleapis.com/google.rpc.RetryInfo"


def _is_quota_error(exc: BaseException) -> bool:
    if not isinstance(exc, genai_errors.ClientError):
        return False
    if getattr(exc, "code", None) == 429:
        return True
    return "RESOURCE_EXHAUSTED" in str(getattr(exc, "status", "") or "").upper()


def _retry_delay_seconds(exc: BaseException) -> Optional[int]:
    """retryDelay from a RetryInfo error detail ("34s", "60.5s"), if the API sent one."""
    details = getattr(exc, "details", None)
    if not isinstance(details, dict):
        return None
    err = details.get("error", details)
    items = err.get("details") if isinstance(err, dict) else None
    if not isinstance(items, list):
        return None
    for item in items:
        if isinstance(item, dict) and item.get("@type") == RETRY_INFO_TYPE:
            match = re.match(r"^(\d+(?:\.\d+)?)\s*s", str(item.get("retryDelay", "")).strip())
            if match:
                return int(float(match.group(1)))
    return None


def _in_cooldown() -> bool:
    global _quota_cooldown_until
    if _quota_cooldown_until is None:
        return False
    if datetime.now(timezone.utc) >= _quota_cooldown_until:
        _quota_cooldown_until = None
        return False
    return True


def _get_client() -> genai.Client:
    if not settings.gemini_api_key:
        raise ValueError("GEMINI_API_KEY missing")
    return genai.Client(api_key=settings.gemini_api_key)


def generate_text_with_system(prompt: str, system_instruction: str) -> Optional[str]:
    """
    Generate text with a system instruction.

    Returns None during the quota cooldown, right after a 429 (starting the
    cooldown) or when the model returns no text. Other API errors propagate.
    """
    global _quota_cooldown_until

    if _in_cooldown():
        logger.debug("Skipping Gemini call; quota cooldown active")
        return None

    try:
        client = _get_client()
        logger.info("Calling Gemini model=%s, prompt_length=%s", settings.gemini_model, len(prompt))
        response = client.models.generate_content(
            model=settings.gemini_model,
            contents=prompt,
            config=genai.types.GenerateContentConfig(system_instruction=system_instruction),
        )
    except genai_errors.ClientError as e:
        if not _is_quota_error(e):
            raise
        retry_sec = _retry_delay_seconds(e)
        cooldown_sec = retry_sec if retry_sec is not None else settings.gemini_quota_cooldown_seconds
        _quota_cooldown_until = datetime.now(timezone.utc) + timedelta(seconds=cooldown_sec)
        logger.warning("Gemini quota exceeded; cooldown %s s (retryDelay=%s)", cooldown_sec, retry_sec)
        return None

    result = response.text
    logger.info("Gemini response_length=%s", len(result) if result else 0)
    return result or None
