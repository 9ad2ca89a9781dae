from plumberinstaller.services import prompts as prompts_module
from plumberinstaller.services.prompts import PromptService


class DummyConsole:
    def __init__(self):
        self.lines = []

    def print(self, *args, **kwargs):
        self.lines.append(" ".join(str(arg) for arg in args))


def _scripted_prompt(monkeypatch, replies):
    calls = []
    replies = list(replies)

    def fake_prompt(message, **kwargs):
        calls.append((message, kwargs))
        return replies.pop(0)

    monkeypatch.setattr(prompts_module.click, "prompt", fake_prompt)
    return calls


def test_text_reprompts_until_value_given(monkeypatch):
    console = DummyConsole()
    calls = _scripted_prompt(monkeypatch, ["   ", "  plumber.example.com "])

    value = PromptService(console).text("Plumber domain name")

    assert value == "plumber.example.com"
    assert len(calls) == 2
    assert any("This field is required." in line for line in console.lines)


def test_optional_adds_skip_hint_without_default(monkeypatch):
    calls = _scripted_prompt(monkeypatch, [""])

    assert PromptService(DummyConsole()).optional("GitLab group path") == ""
    assert calls[0][0] == "GitLab group path (leave empty to skip)"


def test_optional_keeps_default(monkeypatch):
    calls = _scripted_prompt(monkeypatch, ["5432"])

    assert PromptService(DummyConsole()).optional("Database port", default="5432") == "5432"
    assert calls[0][0] == "Database port"
    assert calls[0][1]["default"] == "5432"


def test_secret_hides_input_and_requires_value(monkeypatch):
    calls = _scripted_prompt(monkeypatch, ["", "s3cr3t"])

    assert PromptService(DummyConsole()).secret("Secret") == "s3cr3t"
    assert all(kwargs["hide_input"] is True for _, kwargs in calls)


def test_choice_lists_numbered_options(monkeypatch):
    console = DummyConsole()
    _scripted_prompt(monkeypatch, [2])

    index = PromptService(console).choice("Database:", ["Internal", "External"])

    assert index == 2
    assert console.lines[1:] == ["  1. Internal", "  2. External"]


def test_confirm_delegates_to_click(monkeypatch):
    seen = {}

    def fake_confirm(message, default):
        seen["args"] = (message, default)
        return False

    monkeypatch.setattr(prompts_module.click, "confirm", fake_confirm)

    assert PromptService(DummyConsole()).confirm("Start Plumber now?") is False
    assert seen["args"] == ("Start Plumber now?", True)
