"""Tests for the two-tier instruction decomposer."""

import asyncio
import json
from types import SimpleNamespace

import pytest

from cookstep.models.recipe import Ingredient
from cookstep.services.gemini_service import GeminiService
from cookstep.services.instruction_service import InstructionDecomposer, parse_llm_steps
from cookstep.utils.exceptions import InstructionParsingError

INSTRUCTIONS = ["Chop 1 onion finely", "Simmer for 20 minutes at 180 F, stirring 2 cups of sauce"]
INGREDIENTS = [Ingredient(name="onion", quantity=1.0), Ingredient(name="sauce", quantity=2.0, unit="cups")]

LLM_STEPS = [
    {
        "stepNumber": 7,
        "action": "Finely chop the onion",
        "ingredients": [{"name": "onion", "quantity": "1", "preparation": "finely chopped"}],
        "animationType": "Cutting",
        "notes": "Keep the pieces even",
    },
    {
        "action": "Simmer the sauce",
        "duration": "20",
        "durationUnit": "min",
        "temperature": 180,
        "temperatureUnit": "°F",
        "ingredients": [{"name": "sauce", "quantity": "1 1/2", "unit": "cups"}, "bay leaf"],
        "animationType": "dancing",
    },
]


def _decompose(llm, instructions=INSTRUCTIONS, ingredients=INGREDIENTS, timeout=1.0):
    decomposer = InstructionDecomposer(llm=llm, timeout=timeout)
    return asyncio.run(decomposer.decompose(instructions, ingredients))


def _is_rule_based(steps, instructions=INSTRUCTIONS):
    return [s.action for s in steps] == instructions and all(s.notes is None for s in steps)


def test_llm_tier_used_when_response_is_valid(fake_llm):
    llm = fake_llm(response=json.dumps(LLM_STEPS))
    steps = _decompose(llm)

    assert [s.stepNumber for s in steps] == [1, 2]
    assert all(s.totalSteps == 2 for s in steps)
    assert steps[0].action == "Finely chop the onion"
    assert steps[0].animationType == "cutting"
    assert steps[0].notes == "Keep the pieces even"
    assert steps[0].ingredients[0].preparation == "finely chopped"
    assert steps[1].duration == 20
    assert steps[1].durationUnit == "minutes"
    assert steps[1].temperatureUnit == "F"
    assert steps[1].animationType is None
    assert steps[1].ingredients[0].quantity == 1.5
    assert steps[1].ingredients[1] == Ingredient(name="bay leaf")


def test_prompt_lists_instructions_ingredients_and_taxonomy(fake_llm):
    llm = fake_llm(response=json.dumps(LLM_STEPS))
    _decompose(llm)

    prompt = llm.prompts[0]
    assert "1. Chop 1 onion finely" in prompt
    assert "- 2 cups sauce" in prompt
    assert "- juicing:" in prompt
    assert "exactly 2 objects" in prompt


def test_fenced_json_is_accepted(fake_llm):
    llm = fake_llm(response="```json\n" + json.dumps(LLM_STEPS) + "\n```")
    assert _decompose(llm)[0].action == "Finely chop the onion"


@pytest.mark.parametrize(
    "response",
    [
        "not json at all",
        json.dumps({"action": "one object"}),
        json.dumps(LLM_STEPS[:1]),
        json.dumps([{"action": "Chop"}, {"duration": 5}]),
        json.dumps([{"action": "Chop"}, {"action": "   "}]),
        json.dumps([{"action": "Chop"}, "Simmer"]),
    ],
)
def test_invalid_responses_fall_back_to_rules(fake_llm, response):
    steps = _decompose(fake_llm(response=response))

    assert _is_rule_based(steps)
    assert [s.stepNumber for s in steps] == [1, 2]


def test_llm_exception_falls_back_to_rules(fake_llm):
    steps = _decompose(fake_llm(error=RuntimeError("quota exceeded")))

    assert _is_rule_based(steps)
    assert steps[1].duration == 20
    assert steps[1].temperature == 180


def test_llm_timeout_falls_back_to_rules():
    class SlowLLM:
        async def generate_structured_completion(self, prompt):
            await asyncio.sleep(5)
            return "[]"

    steps = _decompose(SlowLLM(), timeout=0.01)
    assert _is_rule_based(steps)


def test_missing_api_key_falls_back_to_rules():
    steps = _decompose(GeminiService(api_key=""))
    assert _is_rule_based(steps)


def test_empty_instructions_skip_the_llm(fake_llm):
    llm = fake_llm(response="[]")
    assert _decompose(llm, instructions=[]) == []
    assert llm.prompts == []


def test_parse_llm_steps_unwraps_single_key_object():
    steps = parse_llm_steps(json.dumps({"steps": [{"action": "Stir"}]}), expected=1)
    assert steps[0].action == "Stir"
    assert steps[0].stepNumber == 1


def test_parse_llm_steps_rejects_wrong_length():
    with pytest.raises(InstructionParsingError):
        parse_llm_steps(json.dumps([{"action": "Stir"}]), expected=2)


def test_oversized_numbers_from_llm_are_dropped(fake_llm):
    """A duration too large for a float is ignored; the LLM answer is still used."""
    response = '[{"action": "Chop", "duration": 1' + "0" * 400 + '}, {"action": "Stir"}]'
    steps = _decompose(fake_llm(response=response))

    assert [s.action for s in steps] == ["Chop", "Stir"]
    assert steps[0].duration is None


@pytest.mark.parametrize(
    "response",
    [
        '[{"action": "Chop", "duration": 1' + "0" * 5000 + '}, {"action": "Stir"}]',
        "[" * 100000 + "]" * 100000,
    ],
)
def test_any_parsing_failure_falls_back_to_rules(fake_llm, response):
    steps = _decompose(fake_llm(response=response))

    assert _is_rule_based(steps)
    assert [s.stepNumber for s in steps] == [1, 2]


def test_decompose_with_llm_wraps_unexpected_errors(fake_llm, monkeypatch):
    from cookstep.services import instruction_service

    def explode(text, expected):
        raise OverflowError("int too large to convert to float")

    monkeypatch.setattr(instruction_service, "parse_llm_steps", explode)
    decomposer = InstructionDecomposer(llm=fake_llm(response="[]"), timeout=1.0)

    with pytest.raises(InstructionParsingError):
        asyncio.run(decomposer.decompose_with_llm(INSTRUCTIONS, INGREDIENTS))


class _FakeAsyncModels:
    def __init__(self, text=None, delay=0.0):
        self.text = text
        self.delay = delay
        self.cancelled = False

    async def generate_content(self, model, contents, config):
        try:
            await asyncio.sleep(self.delay)
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        if self.text is None:
            raise RuntimeError("quota exceeded")

        return SimpleNamespace(text=self.text)


def _service_with(models):
    service = GeminiService(api_key="test-key")
    service._client = SimpleNamespace(aio=SimpleNamespace(models=models))
    return service


def test_gemini_service_uses_async_client():
    service = _service_with(_FakeAsyncModels(text=' [{"action": "Stir"}] '))
    assert asyncio.run(service.generate_structured_completion("prompt")) == '[{"action": "Stir"}]'


def test_gemini_service_wraps_sdk_errors():
    from cookstep.utils.exceptions import GeminiError

    with pytest.raises(GeminiError):
        asyncio.run(_service_with(_FakeAsyncModels()).generate_structured_completion("prompt"))


def test_llm_timeout_cancels_the_gemini_call():
    models = _FakeAsyncModels(text="[]", delay=5)
    steps = _decompose(_service_with(models), timeout=0.05)

    assert _is_rule_based(steps)
    assert models.cancelled
