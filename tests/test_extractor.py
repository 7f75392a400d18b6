from __future__ import annotations

import pytest

from core.classifier import match_broadcast
from core.extractor import MalformedBroadcast, extract, extract_event, parse_duration, parse_integer
from core.models import (
    ClueScrollCompleted,
    CollectionLogSlot,
    Death,
    DropSource,
    EventKind,
    ItemDrop,
    LevelUp,
    PersonalBest,
    PetReceived,
    RawChatMessage,
)
from core.templates import TEMPLATES


def _raw(message: str, sender: str = "Insomniacs") -> RawChatMessage:
    return RawChatMessage(
        author="Insomniacs",
        message=message,
        clan_name="Insomniacs",
        sender=sender,
        rank="Owner",
    )


def _extract(message: str, sender: str = "Insomniacs"):
    result = match_broadcast(_raw(message, sender))
    assert result is not None, message
    return extract_event(result)


def test_every_sample_extracts_a_complete_event() -> None:
    for template in TEMPLATES:
        for sample in template.samples:
            event = _extract(sample, sender="Zezima")
            assert event.kind is template.kind
            assert event.player


def test_drop_with_quantity_in_parentheses() -> None:
    event = _extract("Zezima has received a drop: Dragon claws (1)")
    assert event == ItemDrop(player="Zezima", item_name="Dragon claws", quantity=1)


def test_drop_with_coin_value_and_quantity_prefix() -> None:
    event = _extract("Zezima received a drop: 250 x Rune arrow (18,500 coins).")
    assert isinstance(event, ItemDrop)
    assert event.quantity == 250
    assert event.item_name == "Rune arrow"
    assert event.message_value == 18500
    assert event.item_value is None


def test_item_names_keep_case_and_punctuation() -> None:
    event = _extract("Zezima received a drop: Ava's accumulator (t4) (2).")
    assert isinstance(event, ItemDrop)
    assert event.item_name == "Ava's accumulator (t4)"
    assert event.quantity == 2


def test_raid_and_clue_items_are_drops_with_a_source() -> None:
    raid = _extract("Zezima received special loot from a raid: Twisted bow.")
    clue = _extract("Zezima received a clue item: Ranger boots (36,000 coins).")
    assert isinstance(raid, ItemDrop) and raid.source is DropSource.RAID
    assert raid.item_name == "Twisted bow"
    assert raid.quantity == 1
    assert isinstance(clue, ItemDrop) and clue.source is DropSource.CLUE
    assert clue.message_value == 36000


def test_level_up_both_wordings() -> None:
    assert _extract("Zezima has reached level 99 in Woodcutting") == LevelUp(
        player="Zezima", skill="Woodcutting", level=99
    )
    assert _extract("Zezima has reached Slayer level 85.") == LevelUp(player="Zezima", skill="Slayer", level=85)
    assert _extract("Zezima has reached a total level of 2,277.") == LevelUp(
        player="Zezima", skill="Total", level=2277
    )


def test_own_pet_takes_player_from_sender() -> None:
    event = _extract("You feel something weird sneaking into your backpack.", sender="Zezima")
    assert event == PetReceived(player="Zezima")


def test_pet_with_milestone_and_duplicate() -> None:
    pet = _extract("Zezima has a funny feeling like he's being followed: Vorki at 1,234 kills.")
    assert pet == PetReceived(player="Zezima", pet_name="Vorki", milestone="1,234 kills")
    duplicate = _extract("Zezima has a funny feeling like she would have been followed: Olmlet at 90 kills.")
    assert isinstance(duplicate, PetReceived)
    assert duplicate.duplicate is True
    assert duplicate.pet_name == "Olmlet"


def test_clue_count_and_collection_log_slots() -> None:
    clue = _extract("Zezima has completed a master Treasure Trail. They have completed 1,024 master treasure trails.")
    assert clue == ClueScrollCompleted(player="Zezima", tier="master", count=1024)
    slot = _extract("Zezima received a new collection log item: Abyssal whip (512/1,477)")
    assert slot == CollectionLogSlot(player="Zezima", item_name="Abyssal whip", slot=512, total_slots=1477)


def test_personal_best_duration() -> None:
    event = _extract("Zezima has achieved a new Chambers of Xeric (Team size: 3 players) personal best: 18:21.40")
    assert isinstance(event, PersonalBest)
    assert event.activity == "Chambers of Xeric"
    assert event.team_size == "3 players"
    assert event.time == "18:21.40"
    assert event.seconds == pytest.approx(1101.4)


def test_death_with_location_and_lost_value() -> None:
    event = _extract(
        "Zezima has been defeated by Durial321 in The Wilderness and lost (1,520,000 coins) worth of loot."
    )
    assert event == Death(player="Zezima", killer="Durial321", location="The Wilderness", lost_value=1520000)


def test_non_numeric_quantity_is_malformed() -> None:
    with pytest.raises(MalformedBroadcast) as excinfo:
        _extract("Zezima has received a drop: Dragon claws (1a)")
    assert excinfo.value.field_name == "quantity"
    assert excinfo.value.value == "1a"
    assert excinfo.value.message == "Zezima has received a drop: Dragon claws (1a)"


def test_bad_level_and_bad_duration_are_malformed() -> None:
    with pytest.raises(MalformedBroadcast):
        _extract("Zezima has reached level 9x9 in Woodcutting")
    with pytest.raises(MalformedBroadcast):
        _extract("Zezima has achieved a new Vorkath personal best: 1:2:3:4")


def test_extract_by_kind() -> None:
    event = extract(EventKind.ITEM_DROP, _raw("Zezima has received a drop: Dragon claws (1)"))
    assert isinstance(event, ItemDrop)
    with pytest.raises(ValueError):
        extract(EventKind.LEVEL_UP, _raw("Zezima has received a drop: Dragon claws (1)"))


@pytest.mark.parametrize("value", ["1", "99", "1,000", "12,345,678", "1000000"])
def test_parse_integer_accepts(value: str) -> None:
    assert parse_integer(value) == int(value.replace(",", ""))


@pytest.mark.parametrize("value", ["", "1,00", "1.5", "-3", "1a", ",100", "1,000,"])
def test_parse_integer_rejects(value: str) -> None:
    with pytest.raises(ValueError):
        parse_integer(value)


def test_parse_duration() -> None:
    assert parse_duration("1:02") == 62.0
    assert parse_duration("1:02:03") == 3723.0
    assert parse_duration("0:59.6") == pytest.approx(59.6)
    with pytest.raises(ValueError):
        parse_duration("1:75")


def test_trailing_parenthesised_number_is_the_stack_size() -> None:
    split = _extract("Zezima has received a drop: Ring of wealth (5)")
    assert split == ItemDrop(player="Zezima", item_name="Ring of wealth", quantity=5)
    charged = _extract("Zezima has received a drop: Ring of wealth (5) (1)")
    assert charged == ItemDrop(player="Zezima", item_name="Ring of wealth (5)", quantity=1)
