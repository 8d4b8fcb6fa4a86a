"""
Vision council members.

`ask_gemini` goes through the google-genai SDK with a structured response
schema (blocking; call it via asyncio.to_thread). `ask_openai` posts to the
chat completions API over the shared aiohttp session and pulls the JSON
object out of the reply text.

A member that is unconfigured or fails returns None; the council decides
what that means.
"""

import re
import base64
import asyncio
import logging
from typing import Optional

import aiohttp
from google import genai
from google.genai import types
from pydantic import ValidationError

from app.config import settings
from app.integrations import http_client as http_module
from app.integrations.vision.prompts import VISION_PROMPT
from app.schemas.vision import CouncilVote, VisionAssessment

logger = logging.getLogger(__name__)

JSON_BLOCK = re.compile(r"\{[\s\S]*\}")

_gemini_client: Optional[genai.Client] = None


def get_gemini_client() -> Optional[genai.Client]:
    """Created on first use so the service starts without a Gemini key."""
    global _gemini_client
    if _gemini_client is None and settings.gemini_api_key:
        _gemini_client = genai.Client(
            api_key=settings.gemini_api_key,
            http_options=types.HttpOptions(timeout=int(settings.detector_timeout_sec * 1000)),
        )
    return _gemini_client


def parse_assessment_text(text: str) -> Optional[VisionAssessment]:
    match = JSON_BLOCK.search(text or "")
    if not match:
        return None
    try:
        return VisionAssessment.model_validate_json(match.group(0))
    except ValidationError as e:
        logger.warning(f"[VISION] Could not parse member JSON: {e}")
        return None


def reply_text(data) -> str:
    """Message content of the first choice; empty for any other payload shape."""
    if not isinstance(data, dict):
        return ""
    choices = data.get("choices")
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        return ""
    message = choices[0].get("message")
    if not isinstance(message, dict):
        return ""
    content = message.get("content")
    return content if isinstance(content, str) else ""


def ask_gemini(image_bytes: bytes, mime_type: str) -> Optional[CouncilVote]:
    client = get_gemini_client()
    if client is None:
        return None

    try:
        response = client.models.generate_content(
            model=settings.gemini_model,
            contents=[
                types.Part.from_bytes(data=image_bytes, mime_type=mime_type),
                VISION_PROMPT,
            ],
            config=types.GenerateContentConfig(
                temperature=settings.vision_temperature,
                max_output_tokens=settings.vision_max_output_tokens,
                response_mime_type="application/json",
                response_schema=VisionAssessment,
            ),
        )
    except Exception as e:
        logger.error(f"[VISION] Gemini error: {e}")
        return None

    assessment = response.parsed
    if not isinstance(assessment, VisionAssessment):
        assessment = parse_assessment_text(response.text)
    if assessment is None:
        return None

    return CouncilVote.from_assessment(settings.gemini_model, assessment)


async def ask_openai(image_bytes: bytes, mime_type: str) -> Optional[CouncilVote]:
    if not settings.openai_api_key:
        return None

    encoded = base64.b64encode(image_bytes).decode("utf-8")
    payload = {
        "model": settings.openai_model,
        "messages": [{
            "role": "user",
            "content": [
                {"type": "text", "text": VISION_PROMPT},
                {
                    "type": "image_url",
                    "image_url": {"url": f"data:{mime_type};base64,{encoded}", "detail": "high"},
                },
            ],
        }],
        "temperature": settings.vision_temperature,
        "max_tokens": settings.vision_max_output_tokens,
    }

    try:
        async with http_module.request_session() as session:
            async with session.post(
                settings.openai_endpoint,
                headers={"Authorization": f"Bearer {settings.openai_api_key}"},
                json=payload,
            ) as response:
                if response.status != 200:
                    logger.warning(f"[VISION] OpenAI API error: {response.status}")
                    return None
                data = await response.json(content_type=None)
    except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
        logger.error(f"[VISION] OpenAI error: {e!r}")
        return None

    assessment = parse_assessment_text(reply_text(data))
    if assessment is None:
        return None

    return CouncilVote.from_assessment(settings.openai_model, assessment)
