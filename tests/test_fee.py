import pytest

from frontier.fee import FeeHistory, FeeHistoryCache, FeeHistoryCacheItem


def test_fee_history_without_reward():
    encoded = FeeHistory(oldest_block=5, base_fee_per_gas=[100, 200], gas_used_ratio=[0.5]).to_json()
    assert int(encoded["oldestBlock"], 16) == 5
    assert [int(fee, 16) for fee in encoded["baseFeePerGas"]] == [100, 200]
    assert encoded["gasUsedRatio"] == [0.5]
    assert encoded["reward"] is None


def test_fee_history_with_reward():
    encoded = FeeHistory(oldest_block=0, reward=[[1, 2], [3]]).to_json()
    assert [[int(v, 16) for v in block] for block in encoded["reward"]] == [[1, 2], [3]]


def test_cache_insert_and_get():
    cache = FeeHistoryCache(3)
    item = FeeHistoryCacheItem(base_fee=10, gas_used_ratio=0.25, rewards=[1])
    cache.insert(7, item)
    assert cache.get(7) == item
    assert cache.get(8) is None
    assert 7 in cache


def test_cache_drops_oldest_blocks():
    cache = FeeHistoryCache(2)
    for number in (1, 2, 3):
        cache.insert(number, FeeHistoryCacheItem(number, 0.0))
    assert cache.block_numbers() == [2, 3]
    assert len(cache) == 2
    assert cache.get(1) is None


def test_cache_overwrites_existing_block():
    cache = FeeHistoryCache(2)
    cache.insert(1, FeeHistoryCacheItem(1, 0.0))
    cache.insert(1, FeeHistoryCacheItem(2, 0.0))
    assert cache.get(1).base_fee == 2
    assert len(cache) == 1


def test_zero_limit_holds_nothing():
    cache = FeeHistoryCache(0)
    cache.insert(1, FeeHistoryCacheItem(1, 0.0))
    assert len(cache) == 0


def test_negative_limit_rejected():
    with pytest.raises(ValueError):
        FeeHistoryCache(-1)