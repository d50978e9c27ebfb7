"""Property-based tests for LatestMap using Hypothesis."""

from typing import Dict, List, Optional, Tuple

from hypothesis import assume, given
from hypothesis import strategies as st

from latestmap.latest import LatestMap
from tests.latestmap.hypo import configure_hypo

configure_hypo()

Pairs = List[Tuple[int, int]]

pairs_strategy = st.lists(
    st.tuples(st.integers(-100, 100), st.integers()), min_size=0, max_size=30
)


def model_of(pairs: Pairs) -> Dict[int, int]:
    model: Dict[int, int] = {}
    for key, value in pairs:
        model[key] = value
    return model


def model_floor(model: Dict[int, int], query: int) -> Optional[int]:
    candidates = [key for key in model if key <= query]
    return max(candidates) if candidates else None


@given(pairs_strategy, st.integers(-150, 150))
def test_get_latest_is_floor_value(pairs: Pairs, query: int):
    """get_latest(q) is the value of the greatest inserted key <= q."""
    latest_map = LatestMap.mk(pairs)
    model = model_of(pairs)
    target = model_floor(model, query)
    if target is None:
        assert latest_map.get_latest(query) is None
        assert latest_map.get_latest_with_key(query) is None
    else:
        assert latest_map.get_latest(query) == model[target]
        assert latest_map.get_latest_with_key(query) == (target, model[target])


@given(pairs_strategy)
def test_exact_match_precedence(pairs: Pairs):
    latest_map = LatestMap.mk(pairs)
    model = model_of(pairs)
    for key, value in model.items():
        assert latest_map.get_latest(key) == value


@given(pairs_strategy, st.integers(-100, 100), st.integers(), st.integers())
def test_overwrite_keeps_cardinality(pairs: Pairs, key: int, first: int, second: int):
    latest_map = LatestMap.mk(pairs)
    latest_map.insert(key, first)
    size = latest_map.size()
    latest_map.insert(key, second)
    assert latest_map.size() == size
    assert latest_map._index.size() == size
    assert latest_map.get_latest(key) == second


@given(pairs_strategy, st.integers(-150, 150))
def test_contains_key_only_for_inserted(pairs: Pairs, query: int):
    latest_map = LatestMap.mk(pairs)
    model = model_of(pairs)
    assert latest_map.contains_key(query) == (query in model)
    assert (latest_map.get_mut(query) is not None) == (query in model)


@given(pairs_strategy, st.integers(-150, 150))
def test_pop_latest_removes_floor_entry(pairs: Pairs, query: int):
    latest_map = LatestMap.mk(pairs)
    model = model_of(pairs)
    target = model_floor(model, query)
    size = latest_map.size()

    popped = latest_map.pop_latest(query)

    if target is None:
        assert popped is None
        assert latest_map.size() == size
    else:
        assert popped == (target, model[target])
        assert latest_map.size() == size - 1
        assert not latest_map.contains_key(target)
        del model[target]
        next_target = model_floor(model, query)
        expected = None if next_target is None else model[next_target]
        assert latest_map.get_latest(query) == expected
    latest_map.check()


@given(pairs_strategy)
def test_get_last_with_key_is_max(pairs: Pairs):
    latest_map = LatestMap.mk(pairs)
    model = model_of(pairs)
    if model:
        top = max(model)
        assert latest_map.get_last_with_key() == (top, model[top])
    else:
        assert latest_map.get_last_with_key() is None


@given(pairs_strategy)
def test_pop_until_empty(pairs: Pairs):
    """Draining with a query above every key removes entries from the top."""
    assume(len(pairs) > 0)
    latest_map = LatestMap.mk(pairs)
    model = model_of(pairs)
    drained = []
    while True:
        popped = latest_map.pop_latest(1000)
        if popped is None:
            break
        drained.append(popped)
    assert drained == sorted(model.items(), reverse=True)
    assert latest_map.null()
    latest_map.check()


@given(
    st.lists(
        st.tuples(st.booleans(), st.integers(-30, 30), st.integers()),
        max_size=60,
    )
)
def test_mixed_operations_keep_invariants(ops):
    latest_map: LatestMap[int, int] = LatestMap()
    model: Dict[int, int] = {}
    for is_insert, key, value in ops:
        if is_insert:
            latest_map.insert(key, value)
            model[key] = value
        else:
            target = model_floor(model, key)
            popped = latest_map.pop_latest(key)
            if target is None:
                assert popped is None
            else:
                assert popped == (target, model.pop(target))
        latest_map.check()
        assert latest_map.size() == len(model)
