import json

import pytest

from editorial_player.integrations import animation_generator as gen


def _settings(**overrides):
    values = dict(
        base_url="http://127.0.0.1:1234",
        api_key="key",
        model="test-model",
        timeout_seconds=30,
    )
    values.update(overrides)
    return gen.GeneratorSettings(**values)


def _valid_animation():
    return {
        "objective": "Sort the treasure chests",
        "script": [{"time": 0, "text": "Let's go"}],
        "pseudocode": ["for i in range(n)"],
        "example_trace": [{"step": 0, "array": [5, 2]}],
        "timeline": [{"time": 0, "action": "show_array", "data": [5, 2]}],
        "quiz": [{"question": "?", "options": ["a", "b", "c", "d"], "correct": 0}],
    }


def _reply(content):
    return {"choices": [{"message": {"content": content}}]}


def test_request_defaults_are_applied():
    request = gen.AnimationRequest.from_payload(
        {"question": "  Bubble sort  ", "difficultyLevel": "legendary"}
    )

    assert request.question == "Bubble sort"
    assert request.difficulty_level == "beginner"
    assert request.desired_length_seconds == 60
    assert request.example_input == "[5, 2, 8, 1, 9]"
    assert request.has_problem_context is False


def test_user_prompt_includes_problem_context():
    request = gen.AnimationRequest.from_payload(
        {
            "question": "Two pointers",
            "problemContext": {"title": "Two Sum", "description": "Find a pair"},
            "difficultyLevel": "advanced",
            "desiredLengthSeconds": 90,
        }
    )

    prompt = gen.build_user_prompt(request)

    assert "QUEST: Two pointers" in prompt
    assert "Title: Two Sum" in prompt
    assert "DIFFICULTY: advanced" in prompt
    assert "DURATION: 90s" in prompt
    assert "Total duration: 30-90 seconds." in gen.build_system_prompt(request)


def test_missing_question_maps_to_400(logger):
    status, body = gen.handle_animation_request({"question": "   "}, _settings(), logger)

    assert status == 400
    assert body == {"success": False, "error": "Question is required"}


def test_successful_generation_unwraps_code_fences(monkeypatch, logger):
    sent = {}

    def fake_post(**kwargs):
        sent.update(kwargs)
        return _reply("```json\n" + json.dumps(_valid_animation()) + "\n```")

    monkeypatch.setattr(gen, "_post_chat_completion", fake_post)

    status, body = gen.handle_animation_request({"question": "Bubble sort"}, _settings(), logger)

    assert status == 200
    assert body["success"] is True
    assert body["data"]["objective"] == "Sort the treasure chests"
    assert sent["payload"]["model"] == "test-model"
    assert sent["payload"]["response_format"] == {"type": "json_object"}
    assert [message["role"] for message in sent["payload"]["messages"]] == ["system", "user"]


def test_missing_fields_are_named(monkeypatch, logger):
    partial = _valid_animation()
    del partial["quiz"]
    partial["timeline"] = []
    monkeypatch.setattr(gen, "_post_chat_completion", lambda **_: _reply(json.dumps(partial)))

    status, body = gen.handle_animation_request({"question": "Q"}, _settings(), logger)

    assert status == 500
    assert body["error"] == "Animation data missing required fields: timeline, quiz"


def test_unparseable_reply_hides_details_outside_development(monkeypatch, logger):
    monkeypatch.setattr(gen, "_post_chat_completion", lambda **_: _reply("not json at all"))

    status, body = gen.handle_animation_request({"question": "Q"}, _settings(), logger)
    assert status == 500
    assert body == {"success": False, "error": "Failed to parse animation data from AI response"}

    status, body = gen.handle_animation_request(
        {"question": "Q"}, _settings(include_details=True), logger
    )
    assert body["details"] == "not json at all"


@pytest.mark.parametrize(
    ("upstream", "expected_status", "expected_error"),
    [
        (429, 429, "API rate limit exceeded. Please try again later."),
        (401, 403, "API key is invalid or quota exceeded"),
        (403, 403, "API key is invalid or quota exceeded"),
        (502, 500, "Failed to generate algorithm animation"),
    ],
)
def test_upstream_errors_are_classified(monkeypatch, logger, upstream, expected_status, expected_error):
    def fake_post(**_kwargs):
        raise gen.GenerationError(f"Generator HTTP {upstream}", status=upstream)

    monkeypatch.setattr(gen, "_post_chat_completion", fake_post)

    status, body = gen.handle_animation_request({"question": "Q"}, _settings(), logger)

    assert status == expected_status
    assert body["error"] == expected_error
    assert "details" not in body
    if upstream == 429:
        assert body["retryAfter"] == 60
    assert logger.exceptions == ["Algorithm animation generation failed"]


def test_empty_model_is_rejected_before_any_request(monkeypatch):
    def fail_post(**_kwargs):
        raise AssertionError("request must not be sent")

    monkeypatch.setattr(gen, "_post_chat_completion", fail_post)
    request = gen.AnimationRequest.from_payload({"question": "Q"})

    with pytest.raises(gen.GenerationError, match="GENERATOR_MODEL"):
        gen.generate_animation(request, _settings(model=" "))


def test_post_chat_completion_builds_endpoint_without_timeout(monkeypatch):
    captured = {}

    class _Response:
        def __enter__(self):
            return self

        def __exit__(self, *_exc):
            return False

        def read(self):
            return b'{"choices": []}'

    def fake_urlopen(request, **kwargs):
        captured["url"] = request.full_url
        captured["headers"] = dict(request.header_items())
        captured["kwargs"] = kwargs
        return _Response()

    monkeypatch.setattr(gen.urllib.request, "urlopen", fake_urlopen)

    data = gen._post_chat_completion(
        base_url="http://localhost:1234/",
        api_key="secret",
        timeout_seconds=0,
        payload={"model": "m"},
    )

    assert data == {"choices": []}
    assert captured["url"] == "http://localhost:1234/v1/chat/completions"
    assert captured["headers"]["Authorization"] == "Bearer secret"
    assert captured["kwargs"] == {}


def test_settings_from_config_follow_environment_mode():
    class _Config:
        generator_base_url = "http://llm.local/v1"
        generator_api_key = ""
        generator_model = "m"
        generator_timeout_seconds = 15
        is_development = True

    settings = gen.GeneratorSettings.from_config(_Config())

    assert settings.include_details is True
    assert settings.timeout_seconds == 15
