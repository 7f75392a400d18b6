"""Clan rank icon lookup (core domain)."""

from __future__ import annotations

import re

WIKI_IMAGE_BASE = "https://oldschool.runescape.wiki/images/"

# Chat lines sent by the clan itself (broadcasts) carry this icon.
CLAN_ICON_URL = f"{WIKI_IMAGE_BASE}Your_Clan_icon.png"

_KNOWN_RANKS = (
    "Owner",
    "Deputy owner",
    "Administrator",
    "Moderator",
    "Organiser",
    "Coordinator",
    "Overseer",
    "Captain",
    "Lieutenant",
    "Sergeant",
    "Corporal",
    "Recruit",
    "General",
    "Marshal",
    "Admiral",
    "Brigadier",
    "Colonel",
    "Commander",
    "Major",
    "Cadet",
    "Private",
    "Novice",
    "Member",
    "Champion",
    "Legend",
    "Mentor",
    "Veteran",
    "Bronze",
    "Iron",
    "Steel",
    "Mithril",
    "Adamant",
    "Rune",
    "Dragon",
    "Sapphire",
    "Emerald",
    "Ruby",
    "Diamond",
    "Dragonstone",
    "Onyx",
    "Zenyte",
    "Gnome child",
    "Skiller",
    "Ironman",
    "Guest",
)


def _rank_key(rank: str) -> str:
    return re.sub(r"[\s_]+", " ", rank).strip().lower()


def _icon_url(label: str) -> str:
    return f"{WIKI_IMAGE_BASE}Clan_icon_-_{label.replace(' ', '_')}.png"


RANK_ICONS: dict[str, str] = {_rank_key(label): _icon_url(label) for label in _KNOWN_RANKS}

DEFAULT_RANK_ICON_URL = RANK_ICONS["guest"]


def resolve_rank_icon(rank: str) -> str:
    """Return the icon for a clan rank label; unknown labels get the guest icon.

    Labels are matched ignoring case, underscores and repeated spaces, so both
    ``"DEPUTY_OWNER"`` and ``"Deputy Owner"`` resolve.
    """

    return RANK_ICONS.get(_rank_key(rank or ""), DEFAULT_RANK_ICON_URL)
