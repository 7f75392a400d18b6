from __future__ import annotations

import pytest

from core.formatter import FORMATTERS, format_chat_relay, format_notice, item_detail_image, wiki_image
from core.models import (
    EVENT_TYPES,
    ClueScrollCompleted,
    Death,
    DropSource,
    EventKind,
    ItemDrop,
    LevelUp,
    PersonalBest,
    PetReceived,
    RawChatMessage,
)
from core.ranks import CLAN_ICON_URL, DEFAULT_RANK_ICON_URL, resolve_rank_icon


def test_every_event_type_has_a_formatter() -> None:
    assert set(FORMATTERS) == set(EVENT_TYPES.values())


def test_unknown_event_type_is_refused() -> None:
    with pytest.raises(TypeError):
        format_notice(object())  # type: ignore[arg-type]


def test_item_drop_with_value_and_quantity() -> None:
    notice = format_notice(
        ItemDrop(player="Zezima", item_name="Rune arrow", quantity=2500, item_value=185_000)
    )
    assert notice.kind is EventKind.ITEM_DROP
    assert notice.title == "Zezima received a drop!"
    assert notice.body == "Zezima received 2,500 x Rune arrow worth 185,000 gp."
    assert notice.item_value == 185_000
    assert notice.icon_url == item_detail_image("Rune arrow")


def test_item_drop_falls_back_to_message_value() -> None:
    notice = format_notice(ItemDrop(player="Zezima", item_name="Ranger boots", message_value=36_000))
    assert notice.body == "Zezima received Ranger boots (36,000 coins)."
    assert notice.item_value is None


def test_item_drop_prefers_catalog_icon() -> None:
    notice = format_notice(
        ItemDrop(player="Zezima", item_name="Twisted bow", source=DropSource.RAID, icon_url="https://x.test/tbow.png")
    )
    assert notice.title == "Zezima received raid loot!"
    assert notice.icon_url == "https://x.test/tbow.png"


def test_level_up_and_total_level() -> None:
    notice = format_notice(LevelUp(player="Zezima", skill="Woodcutting", level=99))
    assert notice.body == "Zezima has reached level 99 in Woodcutting."
    assert notice.icon_url == wiki_image("Woodcutting icon.png")

    total = format_notice(LevelUp(player="Zezima", skill="Total", level=2277))
    assert total.body == "Zezima has reached a total level of 2,277."


def test_pet_without_name() -> None:
    notice = format_notice(PetReceived(player="Zezima"))
    assert notice.title == "Zezima has a new pet!"
    assert notice.body == "Zezima received a new pet."
    assert notice.icon_url is None


def test_clue_count() -> None:
    notice = format_notice(ClueScrollCompleted(player="Zezima", tier="Master", count=1024))
    assert notice.body == "Zezima has completed a master Treasure Trail. That makes 1,024."


def test_personal_best_and_death_have_no_icon() -> None:
    pb = format_notice(PersonalBest(player="Zezima", activity="Vorkath", time="1:02.40", seconds=62.4))
    death = format_notice(Death(player="Zezima", killer="Durial321", location="The Wilderness"))
    assert pb.icon_url is None
    assert death.icon_url is None
    assert death.title == "Zezima has died!"
    assert death.body == "Zezima has been defeated by Durial321 in The Wilderness."


def test_wiki_image_quotes_file_names() -> None:
    assert wiki_image("Ava's accumulator detail.png") == (
        "https://oldschool.runescape.wiki/images/Ava%27s_accumulator_detail.png"
    )


@pytest.mark.parametrize(
    "rank, file_name",
    [
        ("Owner", "Clan_icon_-_Owner.png"),
        ("DEPUTY_OWNER", "Clan_icon_-_Deputy_owner.png"),
        ("deputy  owner", "Clan_icon_-_Deputy_owner.png"),
        ("Gnome child", "Clan_icon_-_Gnome_child.png"),
    ],
)
def test_rank_icons(rank: str, file_name: str) -> None:
    assert resolve_rank_icon(rank).endswith(file_name)


@pytest.mark.parametrize("rank", ["", "Supreme Overlord", None])
def test_unknown_rank_gets_default_icon(rank) -> None:
    assert resolve_rank_icon(rank) == DEFAULT_RANK_ICON_URL


def test_chat_relay_uses_sender_rank_icon() -> None:
    raw = RawChatMessage(author="Zezima", message="gz", clan_name="Insomniacs", sender="Zezima", rank="Captain")
    notice = format_chat_relay(raw)
    assert notice.author == "Zezima"
    assert notice.body == "gz"
    assert notice.icon_url == resolve_rank_icon("Captain")


def test_chat_relay_uses_clan_icon_for_clan_broadcasts() -> None:
    raw = RawChatMessage(
        author="Insomniacs",
        message="Zezima has received a drop: Dragon claws (1)",
        clan_name="Insomniacs",
        sender="Insomniacs",
        rank="",
    )
    assert format_chat_relay(raw).icon_url == CLAN_ICON_URL


@pytest.mark.parametrize(
    "message",
    ["You feel something weird sneaking into your backpack.", "you have a funny feeling like you're being followed"],
)
def test_own_pet_wordings_share_a_neutral_body(message: str) -> None:
    from core.classifier import match_broadcast
    from core.extractor import extract_event

    raw = RawChatMessage(author="Zezima", message=message, clan_name="Insomniacs", sender="Zezima", rank="")
    result = match_broadcast(raw)
    assert result is not None
    assert format_notice(extract_event(result)).body == "Zezima received a new pet."
