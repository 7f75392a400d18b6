from __future__ import annotations

import pytest

from core.models import (
    EventKind,
    ItemDrop,
    LevelUp,
    PolicyContext,
    QuestComplete,
    EVENT_TYPES,
)
from core.policy import apply_policy, enrich
from core.price_catalog import EMPTY_SNAPSHOT, build_snapshot

CATALOG = build_snapshot(
    {"Dragon claws": 1_000_000, "Rune arrow": 74},
    {"Dragon claws": "https://example.test/claws.png"},
)


def _drop(item_name: str = "Dragon claws", quantity: int = 1) -> ItemDrop:
    return ItemDrop(player="Zezima", item_name=item_name, quantity=quantity)


def test_enrich_multiplies_price_by_quantity() -> None:
    enriched = enrich(_drop("Rune arrow", quantity=250), CATALOG)
    assert isinstance(enriched, ItemDrop)
    assert enriched.item_value == 74 * 250


def test_enrich_attaches_catalog_icon() -> None:
    enriched = enrich(_drop(), CATALOG)
    assert enriched.icon_url == "https://example.test/claws.png"


def test_enrich_leaves_unknown_price_absent() -> None:
    enriched = enrich(_drop("Mystery box"), CATALOG)
    assert enriched.item_value is None


def test_enrich_ignores_events_without_value() -> None:
    event = LevelUp(player="Zezima", skill="Woodcutting", level=99)
    assert enrich(event, CATALOG) is event


@pytest.mark.parametrize(
    "price, quantity, threshold",
    [
        (1_000_000, 1, 500_000),
        (1_000_000, 1, 1_000_000),
        (1_000_000, 1, 1_000_001),
        (74, 250, 18_500),
        (74, 250, 18_501),
        (0, 5, 1),
        (5, 0, 0),
    ],
)
def test_threshold_law(price: int, quantity: int, threshold: int) -> None:
    snapshot = build_snapshot({"Dragon claws": price})
    policy = PolicyContext(min_item_value=threshold)
    result = apply_policy(_drop(quantity=quantity), snapshot, policy)
    emitted = result is not None
    assert emitted == (price * quantity >= threshold)
    if emitted:
        assert result.item_value == price * quantity


@pytest.mark.parametrize("threshold", [0, 1, 500_000, 10**12])
def test_unknown_price_always_passes_threshold(threshold: int) -> None:
    result = apply_policy(_drop(), EMPTY_SNAPSHOT, PolicyContext(min_item_value=threshold))
    assert result is not None
    assert result.item_value is None


def test_require_known_value_drops_unpriced_drops() -> None:
    policy = PolicyContext(min_item_value=1, require_known_value=True)
    assert apply_policy(_drop(), EMPTY_SNAPSHOT, policy) is None
    assert apply_policy(_drop(), CATALOG, policy) is not None


def test_require_known_value_without_threshold_is_inert() -> None:
    policy = PolicyContext(require_known_value=True)
    assert apply_policy(_drop(), EMPTY_SNAPSHOT, policy) is not None


def test_threshold_does_not_apply_to_other_kinds() -> None:
    event = QuestComplete(player="Zezima", quest_name="Dragon Slayer II")
    assert apply_policy(event, CATALOG, PolicyContext(min_item_value=10**9)) is event


def test_allow_list_law_for_every_kind() -> None:
    for kind in EVENT_TYPES:
        policy = PolicyContext(allowed_kinds=frozenset(EventKind) - {kind, EventKind.UNRECOGNIZED})
        event = _sample_event(kind)
        assert apply_policy(event, CATALOG, policy) is None, kind
        allowed = PolicyContext(allowed_kinds=frozenset({kind}))
        assert apply_policy(event, CATALOG, allowed) is not None, kind


def test_no_allow_list_allows_everything() -> None:
    for kind in EVENT_TYPES:
        assert apply_policy(_sample_event(kind), CATALOG, PolicyContext()) is not None


def test_empty_allow_list_blocks_everything() -> None:
    policy = PolicyContext(allowed_kinds=frozenset())
    for kind in EVENT_TYPES:
        assert apply_policy(_sample_event(kind), CATALOG, policy) is None


def _sample_event(kind: EventKind):
    from core.classifier import match_broadcast
    from core.extractor import extract_event
    from core.models import RawChatMessage
    from core.templates import templates_for

    sample = templates_for(kind)[0].samples[0]
    raw = RawChatMessage(author="", message=sample, clan_name="", sender="Zezima", rank="")
    result = match_broadcast(raw)
    assert result is not None
    return extract_event(result)
