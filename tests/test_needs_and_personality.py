"""Tests for need dynamics, personality generation, and skills."""

from __future__ import annotations

import random

import pytest

from simulations.dwarf_colony.needs import (
    Fulfillment,
    NeedAxis,
    adjust_mood,
    apply_hunger,
    decay,
    is_critical,
    is_hungry,
    is_starving,
    most_pressing_need,
    satisfy,
)
from simulations.dwarf_colony.personality import (
    TRAIT_NAMES,
    Aspiration,
    Personality,
    choose_aspiration,
    describe_mood,
    dominant_traits,
    generate_personality,
    initial_fulfillment,
)
from simulations.dwarf_colony.rules import ColonyRules
from simulations.dwarf_colony.skills import Skill, Skills, initial_skills


class _Agent:
    def __init__(self, personality: Personality, fulfillment: Fulfillment | None = None) -> None:
        self.personality = personality
        self.fulfillment = fulfillment or Fulfillment()
        self.mood = 50.0
        self.hunger = 0.0

    def __setattr__(self, name: str, value: object) -> None:
        if name == "mood":
            value = max(0.0, min(100.0, float(value)))  # type: ignore[arg-type]
        object.__setattr__(self, name, value)


def _personality(**overrides: float) -> Personality:
    values = {name: 0.5 for name in TRAIT_NAMES}
    values.update(overrides)
    return Personality(**values)


def test_fulfillment_clamps_on_assignment() -> None:
    fulfillment = Fulfillment(social=150.0, exploration=-5.0)

    assert fulfillment.social == 100.0
    assert fulfillment.exploration == 0.0
    fulfillment.set(NeedAxis.CREATIVITY, 250.0)
    assert fulfillment.get(NeedAxis.CREATIVITY) == 100.0


def test_decay_never_drops_below_zero() -> None:
    agent = _Agent(_personality(friendliness=0.9), Fulfillment(0.1, 0.0, 0.0, 0.0))

    for _ in range(20):
        decay(agent)

    assert agent.fulfillment.to_dict() == {
        "social": 0.0,
        "exploration": 0.0,
        "creativity": 0.0,
        "tranquility": 0.0,
    }


def test_trait_aligned_axis_decays_faster() -> None:
    plain = _Agent(_personality(friendliness=0.5), Fulfillment(50.0, 50.0, 50.0, 50.0))
    social = _Agent(_personality(friendliness=0.9), Fulfillment(50.0, 50.0, 50.0, 50.0))

    decay(plain)
    decay(social)

    assert plain.fulfillment.social == pytest.approx(49.7)
    assert social.fulfillment.social == pytest.approx(49.55)


def test_satisfy_is_capped_and_lifts_mood_by_share_of_gain() -> None:
    agent = _Agent(_personality(), Fulfillment(social=95.0))

    amount = satisfy(agent, NeedAxis.SOCIAL)

    assert amount == pytest.approx(25.0)
    assert agent.fulfillment.social == 100.0
    assert agent.mood == pytest.approx(57.5)


def test_satisfy_accepts_axis_name() -> None:
    agent = _Agent(_personality(), Fulfillment(social=10.0))

    amount = satisfy(agent, "social", 0.5)

    assert amount == pytest.approx(12.5)
    assert agent.fulfillment.social == pytest.approx(22.5)
    with pytest.raises(ValueError):
        satisfy(agent, "gossip")


@pytest.mark.parametrize("axis", list(NeedAxis))
def test_satisfy_gain_grows_with_multiplier(axis: NeedAxis) -> None:
    previous_level = -1.0
    previous_mood = -1.0
    for multiplier in (0.0, 0.1, 0.5, 1.0, 1.5, 3.0, 10.0):
        agent = _Agent(_personality(), Fulfillment(20.0, 20.0, 20.0, 20.0))
        satisfy(agent, axis, multiplier)
        level = agent.fulfillment.get(axis)
        assert level >= previous_level
        assert agent.mood >= previous_mood
        previous_level, previous_mood = level, agent.mood
    assert previous_level == 100.0


def test_satisfy_rejects_negative_multiplier() -> None:
    agent = _Agent(_personality())
    with pytest.raises(ValueError, match="non-negative"):
        satisfy(agent, NeedAxis.SOCIAL, -1.0)


def test_most_pressing_need_prefers_emptiest_axis_and_skips_content_dwarves() -> None:
    content = _Agent(_personality(), Fulfillment(100.0, 100.0, 100.0, 100.0))
    assert most_pressing_need(content) is None

    lonely = _Agent(_personality(), Fulfillment(80.0, 10.0, 90.0, 90.0))
    need = most_pressing_need(lonely)
    assert need is not None
    assert need.axis == NeedAxis.EXPLORATION
    assert need.urgency == pytest.approx(90.0)


def test_most_pressing_need_breaks_ties_in_axis_order() -> None:
    agent = _Agent(_personality(), Fulfillment(20.0, 20.0, 20.0, 20.0))
    need = most_pressing_need(agent)
    assert need is not None
    assert need.axis == NeedAxis.SOCIAL


def test_adjust_mood_applies_resilience() -> None:
    optimist = _Agent(_personality(optimism=0.8))
    adjust_mood(optimist, -10.0)
    assert optimist.mood == pytest.approx(42.0)

    brooder = _Agent(_personality(melancholy=0.8))
    adjust_mood(brooder, 10.0)
    assert brooder.mood == pytest.approx(58.0)


def test_hunger_thresholds() -> None:
    rules = ColonyRules(lethal_starvation=True)
    agent = _Agent(_personality())
    agent.hunger = 54.9
    apply_hunger(agent, rules)

    assert is_hungry(agent, rules)
    assert not is_critical(agent, rules)
    agent.hunger = 95.0
    assert is_critical(agent, rules)
    assert is_starving(agent, rules)
    assert not is_starving(agent, ColonyRules())


def test_generate_personality_is_seeded_and_bounded() -> None:
    first = generate_personality(random.Random(4))
    second = generate_personality(random.Random(4))

    assert first == second
    for value in first.to_dict().values():
        assert 0.3 <= value <= 1.0


def test_personality_rejects_out_of_range_trait() -> None:
    with pytest.raises(ValueError, match="curiosity"):
        _personality(curiosity=1.5)
    with pytest.raises(ValueError, match="missing"):
        Personality.from_mapping({"curiosity": 0.5})


def test_aspiration_and_starting_fulfillment() -> None:
    personality = _personality(friendliness=0.8)

    aspiration = choose_aspiration(personality, random.Random(1))
    fulfillment = initial_fulfillment(personality)

    assert isinstance(aspiration, Aspiration)
    assert fulfillment.social == 70.0
    assert fulfillment.exploration == 50.0


def test_dominant_traits_and_mood_words() -> None:
    assert dominant_traits(_personality()) == ["balanced"]
    assert dominant_traits(_personality(humor=0.9, bravery=0.7, loyalty=0.8, curiosity=0.65)) == [
        "humor",
        "loyalty",
        "bravery",
    ]
    assert describe_mood(90.0) == "happy and content"
    assert describe_mood(10.0) == "miserable"


def test_skills_clamp_and_reject_unknown() -> None:
    skills = Skills(mining=0.95)
    skills.improve(Skill.MINING, 0.2)

    assert skills.level(Skill.MINING) == 1.0
    assert skills.level(Skill.COOKING) == 0.3
    with pytest.raises(ValueError):
        Skills(juggling=0.5)

    seeded = initial_skills(_personality(), random.Random(2))
    assert all(0.0 <= value <= 1.0 for value in seeded.to_dict().values())
