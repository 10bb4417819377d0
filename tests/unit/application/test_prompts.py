from sitegen.application.prompts import SYSTEM_PROMPT, build_messages, build_user_message
from sitegen.domain.models.generation import GenerationRequest


def test_fresh_request_sends_prompt_verbatim() -> None:
    request = GenerationRequest(project_id="p1", prompt="A bakery homepage")

    messages = build_messages(request)

    assert messages == [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": "A bakery homepage"},
    ]


def test_continuation_is_embedded_in_user_message() -> None:
    request = GenerationRequest(
        project_id="p1", prompt="A bakery homepage", continuation="FILE: index.html\n```html\n<ht"
    )

    content = build_user_message(request)

    assert content.startswith("A bakery homepage\n\n")
    assert "<<<PARTIAL OUTPUT>>>\nFILE: index.html\n```html\n<ht\n<<<END PARTIAL OUTPUT>>>" in content
    assert "Do not repeat" in content


def test_system_prompt_requires_three_files() -> None:
    for name in ("index.html", "styles.css", "script.js"):
        assert f"FILE: {name}" in SYSTEM_PROMPT
