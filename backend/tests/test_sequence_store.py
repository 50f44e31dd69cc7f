import asyncio

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from epg_inventory.services.sku.exceptions import SequenceNotFoundError
from epg_inventory.services.sku.sequence_store import SequenceStore


async def test_first_reservation_creates_counter(session: AsyncSession) -> None:
    store = SequenceStore(session)

    assert await store.peek_sequence("LGT", "CHV") == 0
    assert await store.next_sequence("LGT", "CHV") == 1
    assert await store.next_sequence("LGT", "CHV") == 2
    assert await store.peek_sequence("LGT", "CHV") == 2


async def test_pairs_are_independent(session: AsyncSession) -> None:
    store = SequenceStore(session)

    await store.next_sequence("LGT", "CHV")
    await store.next_sequence("LGT", "CHV")

    assert await store.next_sequence("LGT", "MRT") == 1
    assert await store.next_sequence("AUD", "CHV") == 1


async def test_peek_does_not_consume(session: AsyncSession) -> None:
    store = SequenceStore(session)
    await store.next_sequence("AUD", "QSC")

    for _ in range(3):
        assert await store.peek_sequence("AUD", "QSC") == 1
    assert await store.next_sequence("AUD", "QSC") == 2


async def test_reservation_is_visible_to_other_sessions(
    session_maker: async_sessionmaker[AsyncSession],
) -> None:
    async with session_maker() as first:
        await SequenceStore(first).next_sequence("LGT", "CHV")

    async with session_maker() as second:
        assert await SequenceStore(second).peek_sequence("LGT", "CHV") == 1


async def test_concurrent_reservations_are_unique(
    session_maker: async_sessionmaker[AsyncSession],
) -> None:
    async def reserve() -> int:
        async with session_maker() as sess:
            return await SequenceStore(sess).next_sequence("LGT", "CHV")

    results = await asyncio.gather(*(reserve() for _ in range(20)))

    assert sorted(results) == list(range(1, 21))


async def test_reset_to_zero(session: AsyncSession) -> None:
    store = SequenceStore(session)
    for _ in range(5):
        await store.next_sequence("LGT", "CHV")

    assert await store.reset_sequence("LGT", "CHV") == (5, 0)
    assert await store.next_sequence("LGT", "CHV") == 1


async def test_reset_to_value(session: AsyncSession) -> None:
    store = SequenceStore(session)
    await store.next_sequence("LGT", "CHV")

    assert await store.reset_sequence("LGT", "CHV", 40) == (1, 40)
    assert await store.next_sequence("LGT", "CHV") == 41


async def test_reset_unknown_pair(session: AsyncSession) -> None:
    with pytest.raises(SequenceNotFoundError):
        await SequenceStore(session).reset_sequence("LGT", "CHV")


async def test_reset_rejects_negative(session: AsyncSession) -> None:
    store = SequenceStore(session)
    await store.next_sequence("LGT", "CHV")

    with pytest.raises(ValueError):
        await store.reset_sequence("LGT", "CHV", -1)


async def test_list_and_touch(session: AsyncSession) -> None:
    store = SequenceStore(session)
    await store.next_sequence("VID", "ARR")
    await store.next_sequence("AUD", "QSC")
    await store.next_sequence("AUD", "QSC")

    await store.touch_last_used("AUD", "QSC")

    sequences = await store.list_sequences()
    assert [(s.category_prefix, s.brand_prefix, s.last_issued) for s in sequences] == [
        ("AUD", "QSC", 2),
        ("VID", "ARR", 1),
    ]
    assert sequences[0].last_used is not None
    assert sequences[1].last_used is None
