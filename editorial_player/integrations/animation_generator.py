"""Algorithm-animation generation via an OpenAI-compatible Chat Completions API."""
from __future__ import annotations

import json
import urllib.error
import urllib.request
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from ..utils import coerce_float

DIFFICULTY_LEVELS = ("beginner", "intermediate", "advanced")
DEFAULT_DIFFICULTY = "beginner"
DEFAULT_LENGTH_SECONDS = 60
DEFAULT_EXAMPLE_INPUT = "[5, 2, 8, 1, 9]"
REQUIRED_FIELDS = ("objective", "script", "pseudocode", "example_trace", "timeline", "quiz")
RATE_LIMIT_RETRY_AFTER_SECONDS = 60

SYSTEM_PROMPT_TEMPLATE = """
You host an algorithm visualizer game. Explain algorithms through games, stories and metaphors.

Return one JSON object with these keys:
- objective: a short learning objective phrased as a mission
- theme: the metaphor in use
- script: list of {{"time", "text"}} narration lines, written like game commentary with emojis
- pseudocode: list of strings with canonical pseudocode
- example_trace: list of step-by-step state snapshots
- timeline: list of visual actions, each with "action" and "time":
  show_array {{data}}, highlight_index {{index, color: yellow|green|red}},
  compare_indices {{indices: [i, j]}}, swap_indices {{indices: [i, j]}},
  show_text {{text, position: top|bottom}}, caption {{text}}, pause {{duration}}
- ssml: narration as SSML
- quiz: 3 multiple-choice questions {{"question", "options": [4 strings], "correct": <0-based index>}}

Rules:
1. Keep the tone playful; use emojis in script and captions.
2. The animation must follow the pseudocode exactly.
3. Total duration: 30-{duration} seconds.
4. Difficulty: {difficulty}. beginner = cartoon game, intermediate = strategy game,
   advanced = speedrun with high-tech visuals.
5. Output only valid JSON.
""".strip()


class GenerationError(RuntimeError):
    """Raised when animation generation fails; carries the HTTP-style status."""

    def __init__(self, message: str, *, status: int = 500, details: Optional[str] = None) -> None:
        super().__init__(message)
        self.status = int(status)
        self.details = details


class AnimationPayloadError(GenerationError):
    """Raised when the model reply is not a usable animation payload."""


@dataclass(frozen=True)
class AnimationRequest:
    question: str
    problem_title: str = ""
    problem_description: str = ""
    has_problem_context: bool = False
    example_input: str = DEFAULT_EXAMPLE_INPUT
    difficulty_level: str = DEFAULT_DIFFICULTY
    desired_length_seconds: int = DEFAULT_LENGTH_SECONDS

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any] | None) -> "AnimationRequest":
        body = payload if isinstance(payload, Mapping) else {}
        question = str(body.get("question") or "").strip()
        if not question:
            raise GenerationError("Question is required", status=400)
        context = body.get("problemContext")
        has_context = isinstance(context, Mapping) and bool(context)
        context = context if isinstance(context, Mapping) else {}
        difficulty = str(body.get("difficultyLevel") or DEFAULT_DIFFICULTY).strip().lower()
        if difficulty not in DIFFICULTY_LEVELS:
            difficulty = DEFAULT_DIFFICULTY
        length = int(
            coerce_float(
                body.get("desiredLengthSeconds") or DEFAULT_LENGTH_SECONDS,
                default=DEFAULT_LENGTH_SECONDS,
                min_value=1.0,
            )
        )
        return cls(
            question=question,
            problem_title=str(context.get("title") or "").strip(),
            problem_description=str(context.get("description") or "").strip(),
            has_problem_context=has_context,
            example_input=str(body.get("exampleInput") or DEFAULT_EXAMPLE_INPUT),
            difficulty_level=difficulty,
            desired_length_seconds=length,
        )


@dataclass(frozen=True)
class GeneratorSettings:
    base_url: str
    api_key: str
    model: str
    timeout_seconds: int
    temperature: float = 0.7
    include_details: bool = False

    @classmethod
    def from_config(cls, config) -> "GeneratorSettings":
        return cls(
            base_url=config.generator_base_url,
            api_key=config.generator_api_key,
            model=config.generator_model,
            timeout_seconds=config.generator_timeout_seconds,
            include_details=config.is_development,
        )


def _normalize_base_url(base_url: str) -> str:
    normalized = (base_url or "").strip().rstrip("/")
    if not normalized:
        raise GenerationError("Generator base URL is empty.")
    if not normalized.endswith("/v1"):
        normalized = f"{normalized}/v1"
    return normalized


def build_system_prompt(request: AnimationRequest) -> str:
    return SYSTEM_PROMPT_TEMPLATE.format(
        duration=request.desired_length_seconds,
        difficulty=request.difficulty_level,
    )


def build_user_prompt(request: AnimationRequest) -> str:
    lines = [
        "Create a game-like visualization for this algorithm quest:",
        "",
        f"QUEST: {request.question}",
        "",
    ]
    if request.has_problem_context:
        lines.extend(
            [
                "CONTEXT:",
                f"Title: {request.problem_title or 'Unknown Mission'}",
                f"Description: {request.problem_description}",
                "",
            ]
        )
    lines.extend(
        [
            f"INPUT: {request.example_input}",
            f"DIFFICULTY: {request.difficulty_level}",
            f"DURATION: {request.desired_length_seconds}s",
            "",
            "Respond with ONLY the JSON object.",
        ]
    )
    return "\n".join(lines)


def _post_chat_completion(
    *,
    base_url: str,
    api_key: str,
    timeout_seconds: int,
    payload: dict[str, object],
) -> dict[str, Any]:
    endpoint = f"{_normalize_base_url(base_url)}/chat/completions"
    body = json.dumps(payload).encode("utf-8")
    headers = {"Content-Type": "application/json"}
    if (api_key or "").strip():
        headers["Authorization"] = f"Bearer {api_key.strip()}"
    http_request = urllib.request.Request(endpoint, data=body, headers=headers, method="POST")
    request_timeout: float | None
    try:
        request_timeout = float(timeout_seconds)
    except (TypeError, ValueError):
        request_timeout = None
    if request_timeout is not None and request_timeout <= 0:
        request_timeout = None
    try:
        if request_timeout is None:
            response_ctx = urllib.request.urlopen(http_request)
        else:
            response_ctx = urllib.request.urlopen(http_request, timeout=request_timeout)
        with response_ctx as response:
            raw_response = response.read().decode("utf-8")
    except urllib.error.HTTPError as exc:
        error_payload = exc.read().decode("utf-8", errors="replace").strip()
        snippet = error_payload[:500] if error_payload else "No body"
        raise GenerationError(f"Generator HTTP {exc.code}: {snippet}", status=exc.code) from exc
    except urllib.error.URLError as exc:
        raise GenerationError(f"Failed to reach generator endpoint: {endpoint}") from exc
    except TimeoutError as exc:
        raise GenerationError("Generator request timed out.") from exc
    except OSError as exc:
        raise GenerationError(f"Generator connection error: {exc}") from exc

    try:
        return json.loads(raw_response)
    except json.JSONDecodeError as exc:
        raise GenerationError("Generator returned invalid JSON.") from exc


def _parse_chat_response(data: dict[str, Any]) -> str:
    choices = data.get("choices")
    if not isinstance(choices, list) or not choices:
        raise GenerationError("Empty response from generator.")
    first_choice = choices[0]
    message = first_choice.get("message") if isinstance(first_choice, dict) else None
    content = message.get("content") if isinstance(message, dict) else None
    if not isinstance(content, str) or not content.strip():
        raise GenerationError("Empty response from generator.")
    return content


def strip_code_fences(text: str) -> str:
    cleaned = (text or "").strip()
    if cleaned.startswith("```json"):
        cleaned = cleaned[7:]
    if cleaned.startswith("```"):
        cleaned = cleaned[3:]
    if cleaned.endswith("```"):
        cleaned = cleaned[:-3]
    return cleaned.strip()


def parse_animation_payload(text: str) -> dict[str, Any]:
    try:
        data = json.loads(strip_code_fences(text))
    except json.JSONDecodeError as exc:
        raise AnimationPayloadError(
            "Failed to parse animation data from AI response", details=text
        ) from exc
    if not isinstance(data, dict):
        raise AnimationPayloadError(
            "Failed to parse animation data from AI response", details=text
        )
    missing = [field for field in REQUIRED_FIELDS if not data.get(field)]
    if missing:
        raise AnimationPayloadError(
            f"Animation data missing required fields: {', '.join(missing)}"
        )
    return data


def generate_animation(request: AnimationRequest, settings: GeneratorSettings) -> dict[str, Any]:
    model = (settings.model or "").strip()
    if not model:
        raise GenerationError("Generator model name is empty. Set GENERATOR_MODEL.")
    payload = {
        "model": model,
        "messages": [
            {"role": "system", "content": build_system_prompt(request)},
            {"role": "user", "content": build_user_prompt(request)},
        ],
        "temperature": float(settings.temperature),
        "response_format": {"type": "json_object"},
    }
    response = _post_chat_completion(
        base_url=settings.base_url,
        api_key=settings.api_key,
        timeout_seconds=settings.timeout_seconds,
        payload=payload,
    )
    return parse_animation_payload(_parse_chat_response(response))


def _failure(error: str, details: Optional[str], include_details: bool) -> dict[str, Any]:
    body: dict[str, Any] = {"success": False, "error": error}
    if include_details and details:
        body["details"] = details
    return body


def handle_animation_request(
    payload: Mapping[str, Any] | None,
    settings: GeneratorSettings,
    logger,
) -> tuple[int, dict[str, Any]]:
    """Run one generation and map the outcome to ``(status, body)``."""
    try:
        request = AnimationRequest.from_payload(payload)
    except GenerationError as exc:
        return exc.status, _failure(str(exc), None, False)
    try:
        data = generate_animation(request, settings)
    except GenerationError as exc:
        logger.exception("Algorithm animation generation failed")
        if exc.status == 429:
            body = _failure("API rate limit exceeded. Please try again later.", None, False)
            body["retryAfter"] = RATE_LIMIT_RETRY_AFTER_SECONDS
            return 429, body
        if exc.status in (401, 403):
            return 403, _failure("API key is invalid or quota exceeded", None, False)
        if isinstance(exc, AnimationPayloadError):
            return 500, _failure(str(exc), exc.details, settings.include_details)
        return 500, _failure(
            "Failed to generate algorithm animation",
            str(exc),
            settings.include_details,
        )
    return 200, {"success": True, "data": data}
