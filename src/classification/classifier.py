"""Gemini-powered classification of timestamped transcripts."""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from src.classification.models import RawClassification, TokenUsage
from src.classification.prompts import build_classification_prompt
from src.errors import ClassificationError

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"^```[a-zA-Z0-9_-]*\s*\n?(.*?)\n?\s*```$", re.DOTALL)


def strip_code_fences(text: str) -> str:
    """Remove markdown code fences wrapped around a model response."""
    stripped = text.strip()
    match = _FENCE_RE.match(stripped)
    if match:
        return match.group(1).strip()
    if stripped.startswith("```"):
        # Unterminated or oddly split fence: drop every fence line.
        lines = [line for line in stripped.splitlines() if not line.strip().startswith("```")]
        return "\n".join(lines).strip()
    return stripped


def parse_classification_json(text: str) -> dict[str, Any]:
    """Strip fences and parse the response into a JSON object.

    Raises:
        ClassificationError: Content is not a JSON object.
    """
    content = strip_code_fences(text)
    if not content:
        raise ClassificationError("LLM returned an empty response")
    try:
        data = json.loads(content)
    except json.JSONDecodeError as exc:
        raise ClassificationError(f"LLM returned invalid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ClassificationError(
            f"LLM returned JSON {type(data).__name__}, expected an object"
        )
    return data


def extract_usage(response: Any) -> TokenUsage | None:
    """Read token counts from ``response.usage_metadata`` when present."""
    metadata = getattr(response, "usage_metadata", None)
    if metadata is None:
        return None
    try:
        return TokenUsage(
            promptTokens=int(getattr(metadata, "prompt_token_count", 0) or 0),
            candidatesTokens=int(getattr(metadata, "candidates_token_count", 0) or 0),
            totalTokens=int(getattr(metadata, "total_token_count", 0) or 0),
        )
    except (TypeError, ValueError):
        logger.debug("Ignoring unreadable usage metadata: %r", metadata)
        return None


class ClassificationClient:
    """Classify a timestamped transcript with a Gemini ``GenerativeModel``.

    The model is configured once at process start and injected here, so the
    client itself never touches global SDK state.
    """

    def __init__(self, model: Any) -> None:
        self._model = model

    def classify(self, timestamped_text: str) -> RawClassification:
        """Send the prompt for *timestamped_text* and parse the reply.

        Raises:
            ClassificationError: Service error, blocked response, or non-JSON output.
        """
        prompt = build_classification_prompt(timestamped_text)
        try:
            response = self._model.generate_content(prompt)
            # .text raises ValueError when the response was blocked or has no parts
            raw_text = response.text
        except Exception as exc:
            raise ClassificationError(f"Gemini classification failed: {exc}") from exc

        usage = extract_usage(response)
        payload = parse_classification_json(raw_text or "")
        if usage is not None:
            logger.info(
                "Classification used %d prompt / %d candidate tokens",
                usage.promptTokens,
                usage.candidatesTokens,
            )
        return RawClassification(payload=payload, raw_text=raw_text, usage=usage)
