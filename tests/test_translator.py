"""Tests for the translation service, using a fake OpenAI-style client."""

import asyncio
import json
import pytest
from types import SimpleNamespace

from mmsub_translator.glossary import Glossary
from mmsub_translator.models import SrtBlock, StyleExample, TrainingDiff
from mmsub_translator.translator import (
    ALL_FROM_REFERENCE_MESSAGE,
    FEEDBACK_FALLBACK,
    build_system_prompt,
    generate_training_feedback,
    parse_translation_response,
    translate_batch,
)


class FakeCompletions:

    def __init__(self, responder):
        self.responder = responder
        self.calls = []

    async def create(self, **params):
        self.calls.append(params)
        content = self.responder(params)
        message = SimpleNamespace(content=content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class FakeClient:

    def __init__(self, responder):
        self.completions = FakeCompletions(responder)
        self.chat = SimpleNamespace(completions=self.completions)


def mm(text):
    return f"MM[{text}]"


def translate_all(params, skip_ids=()):
    """Answer batch requests by prefixing each line, single requests likewise."""
    user = params["messages"][1]["content"]
    if params.get("response_format"):
        items = json.loads(user)
        return json.dumps({"translations": [
            {"id": item["id"], "translatedText": mm(item["text"])}
            for item in items if item["id"] not in skip_ids
        ]}, ensure_ascii=False)
    return mm(user.split("Translate:\n", 1)[1])


def make_blocks(*texts):
    return [SrtBlock(i, f"00:00:{i:02d},000", f"00:00:{i:02d},900", t) for i, t in enumerate(texts, 1)]


def run_translate(client, blocks, reference_map=None, glossary=None, **kwargs):
    progress = []
    result = asyncio.run(translate_batch(
        client,
        blocks,
        reference_map,
        [],
        [],
        glossary or Glossary(),
        lambda done, message: progress.append((done, message)),
        **kwargs,
    ))
    return result, progress


class TestTranslateBatch:

    def test_translates_all_blocks(self):
        client = FakeClient(translate_all)
        blocks = make_blocks("Hello there", "How are you")

        result, progress = run_translate(client, blocks)

        assert [b.translated for b in result] == ["MM[Hello there]", "MM[How are you]"]
        assert not any(b.from_reference for b in result)
        assert len(client.completions.calls) == 1
        assert progress[-1][0] == 2

    def test_input_not_modified(self):
        blocks = make_blocks("Hello there")
        run_translate(FakeClient(translate_all), blocks)
        assert blocks[0].translated is None

    def test_reference_lines_not_sent(self):
        client = FakeClient(translate_all)
        blocks = make_blocks("Previously on the show", "Brand new line")

        result, _ = run_translate(client, blocks, reference_map={"Previously on the show": "ပြီးခဲ့တဲ့အပိုင်းမှာ"})

        assert result[0].translated == "ပြီးခဲ့တဲ့အပိုင်းမှာ"
        assert result[0].from_reference
        assert result[1].translated == "MM[Brand new line]"
        sent = json.loads(client.completions.calls[0]["messages"][1]["content"])
        assert [item["text"] for item in sent] == ["Brand new line"]

    def test_all_from_reference(self):
        client = FakeClient(translate_all)
        blocks = make_blocks("Intro", "Outro")

        result, progress = run_translate(client, blocks, reference_map={"Intro": "a", "Outro": "b"})

        assert [b.translated for b in result] == ["a", "b"]
        assert progress == [(2, ALL_FROM_REFERENCE_MESSAGE)]
        assert client.completions.calls == []

    def test_already_translated_blocks_kept(self):
        client = FakeClient(translate_all)
        blocks = make_blocks("Hello there", "Bye for now")
        blocks[0] = blocks[0].copy(translated="ဟယ်လို")

        result, _ = run_translate(client, blocks)
        assert result[0].translated == "ဟယ်လို"
        assert result[1].translated == "MM[Bye for now]"

    def test_progress_is_monotonic_and_complete(self):
        client = FakeClient(translate_all)
        blocks = make_blocks("Intro", "one line", "two line", "three line", "four line")

        _, progress = run_translate(client, blocks, reference_map={"Intro": "x"}, batch_size=2)

        counts = [done for done, _ in progress]
        assert counts == sorted(counts)
        assert counts[0] == 1
        assert counts[-1] == 5
        assert len(client.completions.calls) == 2

    def test_duplicate_ids_translated_by_position(self):
        client = FakeClient(translate_all)
        blocks = [
            SrtBlock(1, "00:00:01,000", "00:00:02,000", "First line"),
            SrtBlock(1, "00:00:03,000", "00:00:04,000", "Second line"),
        ]

        result, _ = run_translate(client, blocks)
        assert [b.translated for b in result] == ["MM[First line]", "MM[Second line]"]

    def test_missing_items_retried_one_by_one(self):
        client = FakeClient(lambda p: translate_all(p, skip_ids={1}))
        blocks = make_blocks("Hello there", "Talk to Walter")
        glossary = Glossary()
        glossary.add("Walter", "ဝေါ်လ်တာ")

        result, _ = run_translate(client, blocks, glossary=glossary)

        assert [b.translated for b in result] == ["MM[Hello there]", "MM[Talk to Walter]"]
        assert len(client.completions.calls) == 2
        retry_prompt = client.completions.calls[1]["messages"][1]["content"]
        assert "Walter -> ဝေါ်လ်တာ" in retry_prompt
        assert "response_format" not in client.completions.calls[1]

    def test_no_retry_leaves_line_untranslated(self):
        client = FakeClient(lambda p: translate_all(p, skip_ids={0}))
        blocks = make_blocks("Hello there", "Bye for now")

        result, _ = run_translate(client, blocks, retry_failed=False)
        assert result[0].translated is None
        assert result[1].translated == "MM[Bye for now]"

    def test_failed_requests_do_not_stop_translation(self):
        def broken(params):
            raise RuntimeError("boom")

        client = FakeClient(broken)
        blocks = make_blocks("one line", "two line", "three line")

        result, progress = run_translate(client, blocks, batch_size=2)

        assert all(b.translated is None for b in result)
        assert progress[-1][0] == 3

    def test_answer_is_cleaned(self):
        def answer(params):
            return json.dumps({"translations": [{"id": 0, "translatedText": "**လုပ်လိုက်မယ်။**\\nနော်"}]})

        result, _ = run_translate(FakeClient(answer), make_blocks("I will do it"))
        assert result[0].translated == "လုပ်လိုက်မယ်\nနော်"


class TestBuildSystemPrompt:

    def test_sections_included(self):
        glossary = Glossary()
        glossary.add("Walter", "ဝေါ်လ်တာ")
        prompt = build_system_prompt(
            glossary,
            [StyleExample("we met in Yangon", "ရန်ကုန်မှာတွေ့ခဲ့တယ်")],
            [StyleExample("I will do it", "လုပ်လိုက်မယ်")],
        )

        assert '"Walter" -> "ဝေါ်လ်တာ"' in prompt
        assert 'Original: "we met in Yangon"' in prompt
        assert 'My Correction: "လုပ်လိုက်မယ်"' in prompt
        assert "translatedText" in prompt

    def test_empty_sections_omitted(self):
        prompt = build_system_prompt(Glossary(), [], [])
        assert "Glossary" not in prompt
        assert "previous episode" not in prompt
        assert "style guide" not in prompt


class TestParseTranslationResponse:

    def test_object_format(self):
        raw = '{"translations": [{"id": 0, "translatedText": "a"}, {"id": 1, "translatedText": "b"}]}'
        assert parse_translation_response(raw, 2) == {0: "a", 1: "b"}

    def test_code_fence_and_bare_list(self):
        raw = '```json\n[{"id": 0, "translatedText": "a"}]\n```'
        assert parse_translation_response(raw, 1) == {0: "a"}

    def test_invalid_items_ignored(self):
        raw = json.dumps({"translations": [
            {"id": 5, "translatedText": "out of range"},
            {"id": "0", "translatedText": "string id"},
            {"id": 0, "translatedText": None},
            "junk",
            {"id": 1, "text": "legacy key"},
        ]})
        assert parse_translation_response(raw, 2) == {1: "legacy key"}

    def test_invalid_json(self):
        assert parse_translation_response("not json", 3) == {}
        assert parse_translation_response("", 3) == {}


class TestGenerateTrainingFeedback:

    def test_returns_model_answer(self):
        client = FakeClient(lambda p: "  ## What I Learned\n...  ")
        diffs = [TrainingDiff("I will do it", "ကျွန်ုပ် ပြုလုပ်မည်", "လုပ်လိုက်မယ်")]

        feedback = asyncio.run(generate_training_feedback(client, diffs, "Be casual"))

        assert feedback == "## What I Learned\n..."
        user_prompt = client.completions.calls[0]["messages"][1]["content"]
        assert "Be casual" in user_prompt
        assert "လုပ်လိုက်မယ်" in user_prompt

    def test_fallback_on_empty_answer(self):
        client = FakeClient(lambda p: "")
        feedback = asyncio.run(generate_training_feedback(client, []))
        assert feedback == FEEDBACK_FALLBACK
