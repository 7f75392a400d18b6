from __future__ import annotations

import pytest

from core.extractor import MalformedBroadcast
from core.models import EventKind, PolicyContext, RawChatMessage
from core.pipeline import BroadcastPipeline
from core.price_catalog import PriceCatalog


def _raw(message: str) -> RawChatMessage:
    return RawChatMessage(
        author="Insomniacs",
        message=message,
        clan_name="Insomniacs",
        sender="Insomniacs",
        rank="Owner",
    )


def _pipeline(prices: dict[str, int] | None = None) -> BroadcastPipeline:
    catalog = PriceCatalog()
    if prices:
        catalog.refresh(prices)
    return BroadcastPipeline(catalog)


def test_priced_drop_over_threshold_is_emitted() -> None:
    pipeline = _pipeline({"Dragon claws": 1_000_000})
    notice = pipeline.process(
        _raw("Zezima has received a drop: Dragon claws (1)"),
        PolicyContext(min_item_value=500_000),
    )

    assert notice is not None
    assert notice.kind is EventKind.ITEM_DROP
    assert notice.item_value == 1_000_000
    assert "Dragon claws" in notice.body
    assert "1,000,000 gp" in notice.body


def test_unpriced_drop_is_emitted_without_value() -> None:
    pipeline = _pipeline()
    notice = pipeline.process(
        _raw("Zezima has received a drop: Dragon claws (1)"),
        PolicyContext(min_item_value=500_000),
    )

    assert notice is not None
    assert notice.item_value is None
    assert notice.body == "Zezima received Dragon claws."


def test_excluded_kind_produces_no_notice() -> None:
    pipeline = _pipeline()
    notice = pipeline.process(
        _raw("Zezima has reached level 99 in Woodcutting"),
        PolicyContext(allowed_kinds=frozenset({EventKind.ITEM_DROP})),
    )
    assert notice is None


def test_unrecognized_line_produces_no_notice() -> None:
    assert _pipeline().process(_raw("foo bar baz qux"), PolicyContext()) is None


def test_cheap_drop_below_threshold_is_dropped() -> None:
    pipeline = _pipeline({"Dragon claws": 1_000_000, "Bones": 100})
    policy = PolicyContext(min_item_value=500_000)
    assert pipeline.process(_raw("Zezima has received a drop: Bones (1)"), policy) is None


def test_processing_is_idempotent() -> None:
    pipeline = _pipeline({"Dragon claws": 1_000_000})
    raw = _raw("Zezima has received a drop: Dragon claws (1)")
    policy = PolicyContext(min_item_value=500_000)
    assert pipeline.process(raw, policy) == pipeline.process(raw, policy)


def test_catalog_refresh_is_seen_by_next_call() -> None:
    catalog = PriceCatalog()
    pipeline = BroadcastPipeline(catalog)
    raw = _raw("Zezima has received a drop: Dragon claws (1)")
    policy = PolicyContext(min_item_value=500_000)

    assert pipeline.process(raw, policy).item_value is None
    catalog.refresh({"Dragon claws": 100})
    assert pipeline.process(raw, policy) is None
    catalog.refresh({"Dragon claws": 2_000_000})
    assert pipeline.process(raw, policy).item_value == 2_000_000


def test_malformed_broadcast_propagates() -> None:
    with pytest.raises(MalformedBroadcast):
        _pipeline().process(_raw("Zezima has received a drop: Dragon claws (1a)"), PolicyContext())
