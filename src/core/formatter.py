"""Notice formatting for enriched broadcasts (core domain).

Pure string assembly: every policy decision has already been made upstream.
Each event variant has exactly one formatter; ``format_notice`` refuses types
it has no formatter for, so a new variant cannot slip through unformatted.
"""

from __future__ import annotations

from typing import Callable, Optional
from urllib.parse import quote

from core.models import (
    BroadcastNotice,
    ChatRelayNotice,
    ClueScrollCompleted,
    CofferDonation,
    CofferWithdrawal,
    CollectionLogSlot,
    CombatAchievement,
    Death,
    DiaryCompleted,
    DropSource,
    ExtractedEvent,
    ItemDrop,
    LevelUp,
    PersonalBest,
    PetReceived,
    PvpKill,
    QuestComplete,
    RawChatMessage,
    XpMilestone,
)
from core.ranks import CLAN_ICON_URL, WIKI_IMAGE_BASE, resolve_rank_icon


def wiki_image(file_name: str) -> str:
    return f"{WIKI_IMAGE_BASE}{quote(file_name.replace(' ', '_'))}"


def item_detail_image(item_name: str) -> str:
    return wiki_image(f"{item_name} detail.png")


def _skill_icon(skill: str) -> str:
    if skill == "Total":
        return wiki_image("Stats icon.png")
    return wiki_image(f"{skill.capitalize()} icon.png")


def _quantity_text(quantity: int, item_name: str) -> str:
    if quantity == 1:
        return item_name
    return f"{quantity:,} x {item_name}"


_DROP_TITLES = {
    DropSource.DROP: "{player} received a drop!",
    DropSource.RAID: "{player} received raid loot!",
    DropSource.CLUE: "{player} received a clue item!",
}


def _item_drop(event: ItemDrop) -> BroadcastNotice:
    item_text = _quantity_text(event.quantity, event.item_name)
    if event.item_value is not None:
        body = f"{event.player} received {item_text} worth {event.item_value:,} gp."
    elif event.message_value is not None:
        body = f"{event.player} received {item_text} ({event.message_value:,} coins)."
    else:
        body = f"{event.player} received {item_text}."
    return BroadcastNotice(
        kind=event.kind,
        title=_DROP_TITLES[event.source].format(player=event.player),
        body=body,
        icon_url=event.icon_url or item_detail_image(event.item_name),
        item_value=event.item_value,
    )


def _level_up(event: LevelUp) -> BroadcastNotice:
    if event.skill == "Total":
        body = f"{event.player} has reached a total level of {event.level:,}."
    else:
        body = f"{event.player} has reached level {event.level} in {event.skill}."
    return BroadcastNotice(
        kind=event.kind,
        title=f"{event.player} has levelled up!",
        body=body,
        icon_url=_skill_icon(event.skill),
    )


def _xp_milestone(event: XpMilestone) -> BroadcastNotice:
    return BroadcastNotice(
        kind=event.kind,
        title=f"{event.player} reached an XP milestone!",
        body=f"{event.player} has reached {event.xp:,} XP in {event.skill}.",
        icon_url=_skill_icon(event.skill),
    )


def _quest(event: QuestComplete) -> BroadcastNotice:
    return BroadcastNotice(
        kind=event.kind,
        title=f"{event.player} has completed a quest!",
        body=f"{event.player} has completed {event.quest_name}.",
        icon_url=wiki_image("Quest point icon.png"),
    )


def _pet(event: PetReceived) -> BroadcastNotice:
    if event.duplicate:
        title = f"{event.player} would have received a pet!"
    else:
        title = f"{event.player} has a new pet!"
    if event.pet_name:
        body = f"{event.player} received {event.pet_name}"
        if event.milestone:
            body += f" at {event.milestone}"
        body += "."
        icon_url: Optional[str] = item_detail_image(event.pet_name)
    else:
        body = f"{event.player} received a new pet."
        icon_url = None
    return BroadcastNotice(kind=event.kind, title=title, body=body, icon_url=icon_url)


def _clue(event: ClueScrollCompleted) -> BroadcastNotice:
    tier = event.tier.lower()
    body = f"{event.player} has completed a {tier} Treasure Trail."
    if event.count is not None:
        body += f" That makes {event.count:,}."
    return BroadcastNotice(
        kind=event.kind,
        title=f"{event.player} completed a {tier} clue!",
        body=body,
        icon_url=wiki_image(f"Clue scroll ({tier}) detail.png"),
    )


def _collection_log(event: CollectionLogSlot) -> BroadcastNotice:
    body = f"{event.player} received {event.item_name} for their collection log"
    if event.slot is not None and event.total_slots is not None:
        body += f" ({event.slot:,}/{event.total_slots:,})"
    return BroadcastNotice(
        kind=event.kind,
        title=f"{event.player} has a new collection log slot!",
        body=body + ".",
        icon_url=item_detail_image(event.item_name),
    )


def _diary(event: DiaryCompleted) -> BroadcastNotice:
    return BroadcastNotice(
        kind=event.kind,
        title=f"{event.player} completed an achievement diary!",
        body=f"{event.player} has completed the {event.tier.capitalize()} {event.area} diary.",
        icon_url=wiki_image("Achievement Diaries icon.png"),
    )


def _combat_achievement(event: CombatAchievement) -> BroadcastNotice:
    return BroadcastNotice(
        kind=event.kind,
        title=f"{event.player} completed a combat task!",
        body=f"{event.player} has completed a {event.tier.lower()} combat task: {event.task_name}.",
        icon_url=wiki_image("Combat achievements icon.png"),
    )


def _personal_best(event: PersonalBest) -> BroadcastNotice:
    body = f"{event.player} has achieved a new {event.activity} personal best of {event.time}"
    if event.team_size:
        body += f" (team size: {event.team_size})"
    return BroadcastNotice(
        kind=event.kind,
        title=f"{event.player} set a new personal best!",
        body=body + ".",
    )


def _death(event: Death) -> BroadcastNotice:
    if event.killer is None:
        body = f"{event.player} has died"
    else:
        body = f"{event.player} has been defeated by {event.killer}"
        if event.location:
            body += f" in {event.location}"
    if event.lost_value is not None:
        body += f" and lost {event.lost_value:,} gp worth of loot"
    return BroadcastNotice(kind=event.kind, title=f"{event.player} has died!", body=body + ".")


def _pvp_kill(event: PvpKill) -> BroadcastNotice:
    body = f"{event.player} has defeated {event.victim}"
    if event.loot_value is not None:
        body += f" and received {event.loot_value:,} gp worth of loot"
    return BroadcastNotice(
        kind=event.kind,
        title=f"{event.player} has defeated {event.victim}!",
        body=body + ".",
        icon_url=wiki_image("Skull.png"),
    )


def _coffer_donation(event: CofferDonation) -> BroadcastNotice:
    return BroadcastNotice(
        kind=event.kind,
        title=f"{event.player} donated to the coffer!",
        body=f"{event.player} has deposited {event.amount:,} coins into the clan coffer.",
        icon_url=wiki_image("Coins 10000.png"),
    )


def _coffer_withdrawal(event: CofferWithdrawal) -> BroadcastNotice:
    return BroadcastNotice(
        kind=event.kind,
        title=f"{event.player} withdrew from the coffer!",
        body=f"{event.player} has withdrawn {event.amount:,} coins from the clan coffer.",
        icon_url=wiki_image("Coins 10000.png"),
    )


FORMATTERS: dict[type, Callable[..., BroadcastNotice]] = {
    ItemDrop: _item_drop,
    LevelUp: _level_up,
    XpMilestone: _xp_milestone,
    QuestComplete: _quest,
    PetReceived: _pet,
    ClueScrollCompleted: _clue,
    CollectionLogSlot: _collection_log,
    DiaryCompleted: _diary,
    CombatAchievement: _combat_achievement,
    PersonalBest: _personal_best,
    Death: _death,
    PvpKill: _pvp_kill,
    CofferDonation: _coffer_donation,
    CofferWithdrawal: _coffer_withdrawal,
}


def format_notice(event: ExtractedEvent) -> BroadcastNotice:
    """Render an enriched event into a title/body/icon notice."""

    formatter = FORMATTERS.get(type(event))
    if formatter is None:
        raise TypeError(f"No notice format for {type(event).__name__}")
    return formatter(event)


def format_chat_relay(raw: RawChatMessage) -> ChatRelayNotice:
    """Render a plain clan chat line with the sender's rank icon."""

    if raw.sender == raw.clan_name:
        icon_url = CLAN_ICON_URL
    else:
        icon_url = resolve_rank_icon(raw.rank)
    return ChatRelayNotice(author=raw.sender, body=raw.message, icon_url=icon_url)
