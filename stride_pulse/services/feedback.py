import logging

import httpx

from stride_pulse.core.config import settings
from stride_pulse.core.constants import FEEDBACK_EMPTY, FEEDBACK_FALLBACK, KM_M

logger = logging.getLogger(__name__)


def _build_prompt(distance_m: float, duration_s: int, steps: int) -> str:
    if distance_m > 0:
        pace = f"{(duration_s / 60) / (distance_m / KM_M):.2f} min/km"
    else:
        pace = "n/a"
    return (
        f"Analyze this run: Distance: {distance_m:.0f}m, Duration: {duration_s}s, "
        f"Steps: {steps}, Pace: {pace}.\n"
        "Provide a brief, motivating analysis (max 3 sentences).\n"
        "Format: One sentence of praise, one insight about pace/cadence, "
        "and one tip for next time."
    )


def _extract_text(body: dict) -> str:
    parts = body["candidates"][0]["content"]["parts"]
    return "".join(p.get("text", "") for p in parts).strip()


def get_run_feedback(
    distance_m: float,
    duration_s: int,
    steps: int,
    client: httpx.Client | None = None,
) -> str:
    """Short coaching summary for a run. Never raises; falls back to a fixed line."""
    if not settings.gemini_api_key:
        return FEEDBACK_FALLBACK

    url = f"{settings.gemini_base_url}/models/{settings.gemini_model}:generateContent"
    payload = {
        "contents": [{"parts": [{"text": _build_prompt(distance_m, duration_s, steps)}]}],
        "generationConfig": {"temperature": 0.7},
    }
    headers = {"x-goog-api-key": settings.gemini_api_key}

    owns_client = client is None
    if owns_client:
        client = httpx.Client(timeout=settings.feedback_timeout_s)
    try:
        r = client.post(url, json=payload, headers=headers)
        r.raise_for_status()
        text = _extract_text(r.json())
    except (httpx.HTTPError, KeyError, IndexError, TypeError, ValueError) as e:
        logger.error("Feedback request failed: %s", e)
        return FEEDBACK_FALLBACK
    finally:
        if owns_client:
            client.close()

    return text or FEEDBACK_EMPTY
