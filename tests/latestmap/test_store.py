from latestmap.store import ValueStore


def test_empty_store():
    store: ValueStore[int, str] = ValueStore()
    assert store.null()
    assert store.get(1) is None
    assert store.get_mut(1) is None
    assert store.remove(1) is None
    assert not store.contains(1)


def test_put_and_get():
    store: ValueStore[int, str] = ValueStore()
    store.put(1, "one")
    store.put(2, "two")
    assert store.size() == 2
    assert store.get(1) == "one"
    assert store.get(2) == "two"
    assert store.get(3) is None


def test_put_overwrites_in_place():
    """Test that overwriting reuses the existing box"""
    store: ValueStore[int, str] = ValueStore()
    store.put(1, "first")
    handle = store.get_mut(1)
    store.put(1, "second")
    assert store.size() == 1
    assert handle is not None
    assert handle.value == "second"


def test_get_mut_writes_through():
    store: ValueStore[int, int] = ValueStore()
    store.put(1, 2)
    handle = store.get_mut(1)
    assert handle is not None
    handle.value = 3
    assert store.get(1) == 3
    handle += 10
    assert store.get(1) == 13


def test_remove():
    store: ValueStore[int, str] = ValueStore()
    store.put(1, "one")
    assert store.remove(1) == "one"
    assert store.remove(1) is None
    assert store.null()


def test_keys():
    store: ValueStore[str, int] = ValueStore()
    store.put("b", 2)
    store.put("a", 1)
    assert sorted(store.keys()) == ["a", "b"]


def test_copy_gets_fresh_boxes():
    store: ValueStore[int, int] = ValueStore()
    store.put(1, 1)
    clone = store.copy()

    handle = clone.get_mut(1)
    assert handle is not None
    handle.value = 99
    assert store.get(1) == 1
    assert clone.get(1) == 99
