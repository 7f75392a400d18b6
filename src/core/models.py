"""Core domain models.

These dataclasses are shared across the core and adapters to avoid tight
coupling to any integration-specific types. Every broadcast variant is a frozen
dataclass with a class-level ``kind`` so the formatter and the policy filter can
dispatch over a closed set.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, FrozenSet, Optional, Union


@dataclass(frozen=True)
class RawChatMessage:
    """One chat line as emitted by the game client plugin."""

    author: str
    message: str
    clan_name: str
    sender: str
    rank: str


class EventKind(str, Enum):
    """Closed set of broadcast kinds; Unrecognized marks lines no template matches."""

    ITEM_DROP = "ItemDrop"
    LEVEL_UP = "LevelUp"
    XP_MILESTONE = "XpMilestone"
    QUEST_COMPLETE = "QuestComplete"
    PET_RECEIVED = "PetReceived"
    CLUE_SCROLL_COMPLETED = "ClueScrollCompleted"
    COLLECTION_LOG_SLOT = "CollectionLogSlot"
    DIARY_COMPLETED = "DiaryCompleted"
    COMBAT_ACHIEVEMENT = "CombatAchievement"
    PERSONAL_BEST = "PersonalBest"
    DEATH = "Death"
    PVP_KILL = "PvpKill"
    COFFER_DONATION = "CofferDonation"
    COFFER_WITHDRAWAL = "CofferWithdrawal"
    UNRECOGNIZED = "Unrecognized"

    @classmethod
    def parse(cls, value: str) -> "EventKind":
        """Resolve a config value such as ``"ItemDrop"`` or ``"item_drop"``."""

        wanted = value.replace("_", "").replace(" ", "").lower()
        for kind in cls:
            if kind.value.lower() == wanted:
                return kind
        raise ValueError(f"Unknown event kind: {value}")


class DropSource(str, Enum):
    """Where an item drop came from."""

    DROP = "drop"
    RAID = "raid"
    CLUE = "clue"


@dataclass(frozen=True)
class ItemDrop:
    """An item received from a monster, raid chest or clue casket."""

    kind: ClassVar[EventKind] = EventKind.ITEM_DROP

    player: str
    item_name: str
    quantity: int = 1
    source: DropSource = DropSource.DROP
    # Coin value printed by the game itself, when the broadcast carries one.
    message_value: Optional[int] = None
    # Filled in by enrichment only.
    item_value: Optional[int] = None
    icon_url: Optional[str] = None


@dataclass(frozen=True)
class LevelUp:
    """A skill (or total) level reached."""

    kind: ClassVar[EventKind] = EventKind.LEVEL_UP

    player: str
    skill: str
    level: int


@dataclass(frozen=True)
class XpMilestone:
    """An experience milestone reached in a skill."""

    kind: ClassVar[EventKind] = EventKind.XP_MILESTONE

    player: str
    skill: str
    xp: int


@dataclass(frozen=True)
class QuestComplete:
    """A completed quest."""

    kind: ClassVar[EventKind] = EventKind.QUEST_COMPLETE

    player: str
    quest_name: str


@dataclass(frozen=True)
class PetReceived:
    """A pet drop, or a duplicate pet the player would have received."""

    kind: ClassVar[EventKind] = EventKind.PET_RECEIVED

    player: str
    pet_name: Optional[str] = None
    milestone: Optional[str] = None
    duplicate: bool = False


@dataclass(frozen=True)
class ClueScrollCompleted:
    """A completed Treasure Trail with the running count when known."""

    kind: ClassVar[EventKind] = EventKind.CLUE_SCROLL_COMPLETED

    player: str
    tier: str
    count: Optional[int] = None


@dataclass(frozen=True)
class CollectionLogSlot:
    """A new collection log item."""

    kind: ClassVar[EventKind] = EventKind.COLLECTION_LOG_SLOT

    player: str
    item_name: str
    slot: Optional[int] = None
    total_slots: Optional[int] = None


@dataclass(frozen=True)
class DiaryCompleted:
    """A completed achievement diary tier."""

    kind: ClassVar[EventKind] = EventKind.DIARY_COMPLETED

    player: str
    tier: str
    area: str


@dataclass(frozen=True)
class CombatAchievement:
    """A completed combat achievement task."""

    kind: ClassVar[EventKind] = EventKind.COMBAT_ACHIEVEMENT

    player: str
    tier: str
    task_name: str


@dataclass(frozen=True)
class PersonalBest:
    """A new personal best time for a boss or activity."""

    kind: ClassVar[EventKind] = EventKind.PERSONAL_BEST

    player: str
    activity: str
    time: str
    seconds: float
    team_size: Optional[str] = None


@dataclass(frozen=True)
class Death:
    """A player death, optionally with the killer and lost loot."""

    kind: ClassVar[EventKind] = EventKind.DEATH

    player: str
    killer: Optional[str] = None
    location: Optional[str] = None
    lost_value: Optional[int] = None


@dataclass(frozen=True)
class PvpKill:
    """A player-versus-player kill."""

    kind: ClassVar[EventKind] = EventKind.PVP_KILL

    player: str
    victim: str
    loot_value: Optional[int] = None


@dataclass(frozen=True)
class CofferDonation:
    """Coins deposited into the clan coffer."""

    kind: ClassVar[EventKind] = EventKind.COFFER_DONATION

    player: str
    amount: int


@dataclass(frozen=True)
class CofferWithdrawal:
    """Coins withdrawn from the clan coffer."""

    kind: ClassVar[EventKind] = EventKind.COFFER_WITHDRAWAL

    player: str
    amount: int


ExtractedEvent = Union[
    ItemDrop,
    LevelUp,
    XpMilestone,
    QuestComplete,
    PetReceived,
    ClueScrollCompleted,
    CollectionLogSlot,
    DiaryCompleted,
    CombatAchievement,
    PersonalBest,
    Death,
    PvpKill,
    CofferDonation,
    CofferWithdrawal,
]

EVENT_TYPES: dict[EventKind, type] = {
    event_type.kind: event_type
    for event_type in (
        ItemDrop,
        LevelUp,
        XpMilestone,
        QuestComplete,
        PetReceived,
        ClueScrollCompleted,
        CollectionLogSlot,
        DiaryCompleted,
        CombatAchievement,
        PersonalBest,
        Death,
        PvpKill,
        CofferDonation,
        CofferWithdrawal,
    )
}

# Only drops carry a market value today.
VALUE_BEARING_KINDS: FrozenSet[EventKind] = frozenset({EventKind.ITEM_DROP})


@dataclass(frozen=True)
class PolicyContext:
    """Per-destination filtering policy, supplied fresh on each call.

    ``allowed_kinds=None`` allows every kind. ``require_known_value`` switches the
    minimum-value check from fail-open to fail-closed for drops without a price.
    """

    allowed_kinds: Optional[FrozenSet[EventKind]] = None
    min_item_value: Optional[int] = None
    require_known_value: bool = False


@dataclass(frozen=True)
class BroadcastNotice:
    """Formatted broadcast ready for a delivery adapter."""

    kind: EventKind
    title: str
    body: str
    icon_url: Optional[str] = None
    item_value: Optional[int] = None


@dataclass(frozen=True)
class ChatRelayNotice:
    """A plain clan chat line relayed with the sender's rank icon."""

    author: str
    body: str
    icon_url: str


@dataclass(frozen=True)
class Destination:
    """Delivery target for one clan, as supplied by the destination registry."""

    name: str
    clan_name: Optional[str]
    broadcast_chat_id: Optional[str]
    clan_chat_chat_id: Optional[str]
    policy: PolicyContext
