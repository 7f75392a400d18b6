"""Ordered catalog of clan broadcast templates (core domain).

Each template is one declarative row: the event kind it produces, the regex
that anchors on the broadcast's fixed literals, the grammar of every named
capture, constant field values, and sample lines. Classification and extraction
both read this table, so adding a broadcast format means adding one row here.

Order matters: the first template whose pattern fully matches wins. Templates
sharing an anchor (the three "received a drop:" forms) are ordered most
specific first, and ``core.classifier.check_catalog`` verifies that no sample
line is claimed by an earlier row.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
import re
from typing import Any, Mapping, Tuple

from core.models import DropSource, EventKind


class FieldGrammar(str, Enum):
    """How a captured field is converted before it reaches the event."""

    TEXT = "text"
    INTEGER = "integer"
    # Fills ``time`` verbatim and ``seconds`` as a float.
    DURATION = "duration"


TEXT = FieldGrammar.TEXT
INTEGER = FieldGrammar.INTEGER
DURATION = FieldGrammar.DURATION


@dataclass(frozen=True)
class BroadcastTemplate:
    """One broadcast format the game client emits."""

    name: str
    kind: EventKind
    pattern: re.Pattern
    fields: Mapping[str, FieldGrammar]
    samples: Tuple[str, ...]
    constants: Mapping[str, Any] = field(default_factory=dict)
    # Personal game messages ("You feel...") name nobody; the player is the sender.
    player_from_sender: bool = False


_PLAYER = r"(?P<player>.+?)"
# Numbers are captured loosely (anything starting with a digit) and parsed
# strictly by the extractor, so "level 9x" fails loudly instead of vanishing.
_NUM = r"\d[^\s()/.!]*"
_END = r"[.!]?"
_PRONOUN = r"(?:he|she|they)"
_POSSESSIVE = r"(?:his|her|their)"


def _template(
    name: str,
    kind: EventKind,
    pattern: str,
    fields: Mapping[str, FieldGrammar],
    samples: Tuple[str, ...],
    constants: Mapping[str, Any] | None = None,
    player_from_sender: bool = False,
) -> BroadcastTemplate:
    return BroadcastTemplate(
        name=name,
        kind=kind,
        pattern=re.compile(pattern),
        fields=dict(fields),
        samples=samples,
        constants=dict(constants or {}),
        player_from_sender=player_from_sender,
    )


TEMPLATES: Tuple[BroadcastTemplate, ...] = (
    _template(
        "drop_with_value",
        EventKind.ITEM_DROP,
        rf"{_PLAYER} (?:has )?received a drop: (?:(?P<quantity>{_NUM}) x )?"
        rf"(?P<item_name>.+?) \((?P<message_value>{_NUM}) coins\){_END}",
        {"player": TEXT, "quantity": INTEGER, "item_name": TEXT, "message_value": INTEGER},
        (
            "Zezima received a drop: Dragon claws (27,412,000 coins).",
            "Zezima received a drop: 250 x Rune arrow (18,500 coins).",
        ),
    ),
    # A trailing "(n)" is read as the stack size. Charged items named like
    # "Ring of wealth (5)" therefore split into the base name and quantity 5
    # unless the game also prints the stack size, as in "Ring of wealth (5) (1)".
    _template(
        "drop_with_quantity",
        EventKind.ITEM_DROP,
        rf"{_PLAYER} (?:has )?received a drop: (?P<item_name>.+?) \((?P<quantity>\d[^()]*)\){_END}",
        {"player": TEXT, "item_name": TEXT, "quantity": INTEGER},
        (
            "Zezima has received a drop: Dragon claws (1)",
            "Lynx Titan received a drop: Amulet of glory (t4) (2).",
        ),
    ),
    _template(
        "drop",
        EventKind.ITEM_DROP,
        rf"{_PLAYER} (?:has )?received a drop: (?:(?P<quantity>{_NUM}) x )?(?P<item_name>.+?){_END}",
        {"player": TEXT, "quantity": INTEGER, "item_name": TEXT},
        (
            "Zezima received a drop: Abyssal whip.",
            "Zezima received a drop: 3 x Dragon bones",
        ),
    ),
    _template(
        "raid_loot",
        EventKind.ITEM_DROP,
        rf"{_PLAYER} received special loot from a raid: (?P<item_name>.+?){_END}",
        {"player": TEXT, "item_name": TEXT},
        ("Zezima received special loot from a raid: Twisted bow.",),
        constants={"source": DropSource.RAID},
    ),
    _template(
        "clue_item",
        EventKind.ITEM_DROP,
        rf"{_PLAYER} received a clue item: (?:(?P<quantity>{_NUM}) x )?(?P<item_name>.+?)"
        rf"(?: \((?P<message_value>{_NUM}) coins\))?{_END}",
        {"player": TEXT, "quantity": INTEGER, "item_name": TEXT, "message_value": INTEGER},
        (
            "Zezima received a clue item: 3rd age platebody (1,210,000,000 coins).",
            "Zezima received a clue item: Ranger boots.",
        ),
        constants={"source": DropSource.CLUE},
    ),
    _template(
        "collection_log",
        EventKind.COLLECTION_LOG_SLOT,
        rf"{_PLAYER} received a new collection log item: (?P<item_name>.+?)"
        rf"(?: \((?P<slot>{_NUM})/(?P<total_slots>{_NUM})\))?{_END}",
        {"player": TEXT, "item_name": TEXT, "slot": INTEGER, "total_slots": INTEGER},
        (
            "Zezima received a new collection log item: Abyssal whip (512/1,477)",
            "Zezima received a new collection log item: Pet rock.",
        ),
    ),
    _template(
        "level_in_skill",
        EventKind.LEVEL_UP,
        rf"{_PLAYER} has reached level (?P<level>{_NUM}) in (?P<skill>[A-Za-z]+){_END}",
        {"player": TEXT, "level": INTEGER, "skill": TEXT},
        ("Zezima has reached level 99 in Woodcutting",),
    ),
    _template(
        "total_level",
        EventKind.LEVEL_UP,
        rf"{_PLAYER} has reached a total level of (?P<level>{_NUM}){_END}",
        {"player": TEXT, "level": INTEGER},
        ("Zezima has reached a total level of 2,000.",),
        constants={"skill": "Total"},
    ),
    _template(
        "xp_milestone",
        EventKind.XP_MILESTONE,
        rf"{_PLAYER} has reached (?P<xp>{_NUM}) XP in (?P<skill>[A-Za-z]+){_END}",
        {"player": TEXT, "xp": INTEGER, "skill": TEXT},
        ("Zezima has reached 50,000,000 XP in Fishing.",),
    ),
    _template(
        "skill_level",
        EventKind.LEVEL_UP,
        rf"{_PLAYER} has reached (?P<skill>[A-Za-z]+) level (?P<level>{_NUM}){_END}",
        {"player": TEXT, "skill": TEXT, "level": INTEGER},
        (
            "Zezima has reached Slayer level 85.",
            "Zezima has reached combat level 126.",
        ),
    ),
    _template(
        "quest",
        EventKind.QUEST_COMPLETE,
        rf"{_PLAYER} has completed a quest: (?P<quest_name>.+?){_END}",
        {"player": TEXT, "quest_name": TEXT},
        ("Zezima has completed a quest: Dragon Slayer II",),
    ),
    _template(
        "achievement_diary",
        EventKind.DIARY_COMPLETED,
        rf"{_PLAYER} has completed the (?P<tier>(?i:easy|medium|hard|elite)) "
        rf"(?P<area>.+?) (?:[Aa]chievement )?[Dd]iary{_END}",
        {"player": TEXT, "tier": TEXT, "area": TEXT},
        (
            "Zezima has completed the Hard Ardougne diary.",
            "Zezima has completed the Elite Western Provinces Achievement Diary.",
        ),
    ),
    _template(
        "combat_task",
        EventKind.COMBAT_ACHIEVEMENT,
        rf"{_PLAYER} has completed an? (?P<tier>(?i:easy|medium|hard|elite|master|grandmaster)) "
        rf"combat task: (?P<task_name>.+?){_END}",
        {"player": TEXT, "tier": TEXT, "task_name": TEXT},
        ("Zezima has completed an elite combat task: Perfect Zulrah.",),
    ),
    _template(
        "treasure_trail",
        EventKind.CLUE_SCROLL_COMPLETED,
        rf"{_PLAYER} has completed an? (?P<tier>(?i:beginner|easy|medium|hard|elite|master)) "
        rf"[Tt]reasure [Tt]rail(?:[.!]? (?:They|He|She) (?:have|has) completed "
        rf"(?P<count>{_NUM}) \S+ [Tt]reasure [Tt]rails?)?{_END}",
        {"player": TEXT, "tier": TEXT, "count": INTEGER},
        (
            "Zezima has completed a hard Treasure Trail.",
            "Zezima has completed a master Treasure Trail. They have completed 1,024 master treasure trails.",
        ),
    ),
    _template(
        "pet",
        EventKind.PET_RECEIVED,
        rf"{_PLAYER} (?:has a funny feeling like {_PRONOUN}(?:'s| is| are|'re) being followed|"
        rf"feels something weird sneaking into {_POSSESSIVE} backpack)"
        rf"(?:: (?P<pet_name>.+?)(?: at (?P<milestone>.+?))?)?{_END}",
        {"player": TEXT, "pet_name": TEXT, "milestone": TEXT},
        (
            "Zezima has a funny feeling like he's being followed: Vorki at 1,234 kills.",
            "Zezima feels something weird sneaking into her backpack: Heron at 13,034,431 XP.",
            "Zezima has a funny feeling like they're being followed.",
        ),
    ),
    _template(
        "duplicate_pet",
        EventKind.PET_RECEIVED,
        rf"{_PLAYER} has a funny feeling like {_PRONOUN} would have been followed"
        rf"(?:: (?P<pet_name>.+?)(?: at (?P<milestone>.+?))?)?{_END}",
        {"player": TEXT, "pet_name": TEXT, "milestone": TEXT},
        ("Zezima has a funny feeling like he would have been followed: Baby mole at 512 kills.",),
        constants={"duplicate": True},
    ),
    _template(
        "own_pet",
        EventKind.PET_RECEIVED,
        r"[Yy]ou (?:feel something weird sneaking into your backpack|"
        rf"have a funny feeling like you(?:'re| are) being followed){_END}",
        {},
        (
            "You feel something weird sneaking into your backpack.",
            "you have a funny feeling like you're being followed",
        ),
        player_from_sender=True,
    ),
    _template(
        "personal_best",
        EventKind.PERSONAL_BEST,
        rf"{_PLAYER} has achieved a new (?P<activity>.+?)"
        rf"(?: \([Tt]eam [Ss]ize: (?P<team_size>[^()]+)\))? personal best: (?P<time>\S+?){_END}",
        {"player": TEXT, "activity": TEXT, "team_size": TEXT, "time": DURATION},
        (
            "Zezima has achieved a new Vorkath personal best: 1:02.40",
            "Zezima has achieved a new Chambers of Xeric (Team size: 3 players) personal best: 18:21.",
        ),
    ),
    _template(
        "defeated_by",
        EventKind.DEATH,
        rf"{_PLAYER} has been defeated by (?P<killer>.+?)(?: in (?P<location>.+?))?"
        rf"(?: and lost \((?P<lost_value>{_NUM}) coins\) worth of loot)?{_END}",
        {"player": TEXT, "killer": TEXT, "location": TEXT, "lost_value": INTEGER},
        (
            "Zezima has been defeated by Durial321 in The Wilderness and lost (1,520,000 coins) worth of loot.",
            "Zezima has been defeated by TzTok-Jad.",
        ),
    ),
    _template(
        "died",
        EventKind.DEATH,
        rf"{_PLAYER} has died(?: and lost {_POSSESSIVE} .+? status)?{_END}",
        {"player": TEXT},
        (
            "Zezima has died.",
            "Zezima has died and lost their Hardcore Ironman status!",
        ),
    ),
    _template(
        "pvp_kill",
        EventKind.PVP_KILL,
        rf"{_PLAYER} has defeated (?P<victim>.+?)"
        rf"(?: and received \((?P<loot_value>{_NUM}) coins\) worth of loot)?{_END}",
        {"player": TEXT, "victim": TEXT, "loot_value": INTEGER},
        ("Durial321 has defeated Zezima and received (1,520,000 coins) worth of loot!",),
    ),
    _template(
        "coffer_deposit",
        EventKind.COFFER_DONATION,
        rf"{_PLAYER} has deposited (?P<amount>{_NUM}) coins into the coffer{_END}",
        {"player": TEXT, "amount": INTEGER},
        ("Zezima has deposited 1,000,000 coins into the coffer.",),
    ),
    _template(
        "coffer_withdrawal",
        EventKind.COFFER_WITHDRAWAL,
        rf"{_PLAYER} has withdrawn (?P<amount>{_NUM}) coins from the coffer{_END}",
        {"player": TEXT, "amount": INTEGER},
        ("Zezima has withdrawn 250,000 coins from the coffer.",),
    ),
)


def templates_for(kind: EventKind) -> Tuple[BroadcastTemplate, ...]:
    """Return the catalog rows producing ``kind``, preserving catalog order."""

    return tuple(template for template in TEMPLATES if template.kind is kind)
