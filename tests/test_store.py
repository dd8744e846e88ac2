import random
from dataclasses import replace

import pytest

from conftest import make_photo
from photo_develop.adjustments import DEFAULT_ADJUSTMENTS, IDENTITY_TONE_CURVE, AdjustmentSet, CurvePoint
from photo_develop.models import Collection, Preset, StoreState
from photo_develop.store import (
    AUTO_ADJUST_RANGES,
    AddCollection,
    AddPhotos,
    AddPreset,
    AddToCollection,
    ApplyPreset,
    CreateCollection,
    DeleteSelectedPhotos,
    DeselectAllPhotos,
    RemovePhoto,
    SelectAllPhotos,
    SelectPhoto,
    Store,
    UpdateAdjustments,
    auto_adjust_action,
    paste_adjustments_action,
    reduce,
    reset_adjustments_action,
)


def _state_with(*ids: str) -> StoreState:
    return reduce(StoreState(), AddPhotos(tuple(make_photo(i) for i in ids)))


def test_add_photos_appends_in_order_and_keeps_current():
    state = _state_with("a", "b")
    state = reduce(state, SelectPhoto("a"))
    state = reduce(state, AddPhotos((make_photo("c"), make_photo("d"))))
    assert [p.id for p in state.photos] == ["a", "b", "c", "d"]
    assert state.current_photo_id == "a"


def test_select_photo_sets_current_and_exclusive_selection():
    state = reduce(_state_with("a", "b", "c"), SelectAllPhotos())
    state = reduce(state, SelectPhoto("b"))
    assert state.current_photo_id == "b"
    assert state.current_photo.id == "b"
    assert [p.is_selected for p in state.photos] == [False, True, False]


def test_select_unknown_photo_is_noop():
    state = reduce(_state_with("a", "b"), SelectPhoto("a"))
    after = reduce(state, SelectPhoto("missing"))
    assert after is not state
    assert after == state
    assert after.current_photo_id == "a"


def test_update_adjustments_is_partial_merge():
    state = _state_with("a")
    state = reduce(state, UpdateAdjustments("a", {"exposure": 1.5}))
    state = reduce(state, UpdateAdjustments("a", {"contrast": 20}))
    adj = state.find_photo("a").adjustments
    assert adj.exposure == 1.5
    assert adj.contrast == 20
    assert adj.highlights == 0
    assert adj.tone_curve == IDENTITY_TONE_CURVE


def test_update_adjustments_does_not_touch_other_photos():
    state = reduce(_state_with("a", "b"), UpdateAdjustments("a", {"hue": 30}))
    assert state.find_photo("b").adjustments == DEFAULT_ADJUSTMENTS


def test_update_adjustments_unknown_id_is_noop():
    state = _state_with("a")
    after = reduce(state, UpdateAdjustments("zzz", {"exposure": 2}))
    assert after.photos == state.photos


def test_update_adjustments_does_not_validate_ranges():
    state = reduce(_state_with("a"), UpdateAdjustments("a", {"contrast": 500}))
    assert state.find_photo("a").adjustments.contrast == 500


def test_update_adjustments_accepts_tone_curve_alias():
    curve = [{"x": 0, "y": 0.1}, {"x": 1, "y": 0.9}]
    state = reduce(_state_with("a"), UpdateAdjustments("a", {"toneCurve": curve}))
    assert state.find_photo("a").adjustments.tone_curve == (CurvePoint(0.0, 0.1), CurvePoint(1.0, 0.9))


def test_previous_state_is_not_mutated():
    before = _state_with("a")
    reduce(before, UpdateAdjustments("a", {"exposure": 3}))
    reduce(before, SelectPhoto("a"))
    assert before.find_photo("a").adjustments == DEFAULT_ADJUSTMENTS
    assert before.current_photo_id is None
    assert before.find_photo("a").is_selected is False


def test_remove_photo_clears_current_only_when_current():
    state = reduce(_state_with("a", "b"), SelectPhoto("a"))
    other = reduce(state, RemovePhoto("b"))
    assert other.current_photo_id == "a"
    removed = reduce(state, RemovePhoto("a"))
    assert [p.id for p in removed.photos] == ["b"]
    assert removed.current_photo_id is None
    assert removed.current_photo is None


def test_apply_preset_replaces_whole_set():
    state = reduce(_state_with("a"), UpdateAdjustments("a", {"exposure": 2}))
    preset = Preset(id="p", name="Contrast", adjustments=AdjustmentSet(contrast=50))
    state = reduce(state, ApplyPreset("a", preset))
    adj = state.find_photo("a").adjustments
    assert adj.contrast == 50
    assert adj.exposure == 0


def test_apply_preset_unknown_photo_is_noop():
    state = _state_with("a")
    preset = Preset(id="p", name="x", adjustments=AdjustmentSet(contrast=50))
    assert reduce(state, ApplyPreset("nope", preset)).photos == state.photos


def test_add_preset_appends():
    state = reduce(StoreState(), AddPreset(Preset(id="p1", name="One")))
    state = reduce(state, AddPreset(Preset(id="p2", name="Two")))
    assert [p.id for p in state.presets] == ["p1", "p2"]
    assert state.find_preset("p2").name == "Two"


def test_select_all_and_deselect_all():
    state = reduce(_state_with("a", "b"), SelectPhoto("a"))
    state = reduce(state, SelectAllPhotos())
    assert all(p.is_selected for p in state.photos)
    assert state.current_photo_id == "a"
    state = reduce(state, DeselectAllPhotos())
    assert not any(p.is_selected for p in state.photos)
    assert state.current_photo_id is None


def test_delete_selected_with_empty_selection_keeps_photos():
    state = reduce(_state_with("a", "b"), DeselectAllPhotos())
    after = reduce(state, DeleteSelectedPhotos())
    assert after.photos == state.photos


def test_delete_selected_removes_selected_and_clears_deleted_current():
    state = reduce(_state_with("a", "b", "c"), SelectPhoto("b"))
    after = reduce(state, DeleteSelectedPhotos())
    assert [p.id for p in after.photos] == ["a", "c"]
    assert after.current_photo_id is None


def test_delete_selected_keeps_current_when_it_survives():
    state = reduce(_state_with("a", "b"), SelectPhoto("a"))
    # Flag "b" only, leaving "a" current but unselected.
    photos = tuple(replace(p, is_selected=p.id == "b") for p in state.photos)
    state = StoreState(photos=photos, current_photo_id="a")
    after = reduce(state, DeleteSelectedPhotos())
    assert [p.id for p in after.photos] == ["a"]
    assert after.current_photo_id == "a"


def test_collections_add_create_and_membership():
    state = _state_with("a", "b")
    state = reduce(state, AddCollection(Collection(id="c1", name="Trip")))
    state = reduce(state, CreateCollection(Collection(id="c2", name="Family")))
    assert [c.id for c in state.collections] == ["c1", "c2"]

    state = reduce(state, AddToCollection("c1", ("a", "b", "a")))
    state = reduce(state, AddToCollection("c1", ("b",)))
    assert state.find_collection("c1").photo_ids == ("a", "b")

    unchanged = reduce(state, AddToCollection("missing", ("a",)))
    assert unchanged.collections == state.collections


def test_duplicate_collection_ids_last_wins():
    state = reduce(StoreState(), AddCollection(Collection(id="c", name="First")))
    state = reduce(state, AddCollection(Collection(id="c", name="Second")))
    assert len(state.collections) == 2
    assert state.find_collection("c").name == "Second"


def test_unknown_action_raises_type_error():
    with pytest.raises(TypeError):
        reduce(StoreState(), object())  # type: ignore[arg-type]


def test_every_action_returns_new_state_object():
    state = _state_with("a")
    actions = [
        SelectPhoto("missing"),
        UpdateAdjustments("missing", {}),
        RemovePhoto("missing"),
        AddToCollection("missing", ()),
        DeleteSelectedPhotos(),
    ]
    for action in actions:
        assert reduce(state, action) is not state


def test_store_dispatch_notifies_subscribers_and_unsubscribe():
    store = Store()
    seen = []
    unsubscribe = store.subscribe(seen.append)
    store.dispatch(AddPhotos((make_photo("a"),)))
    assert len(seen) == 1
    assert seen[0] is store.state

    unsubscribe()
    store.dispatch(SelectPhoto("a"))
    assert len(seen) == 1
    assert store.state.current_photo_id == "a"


def test_failing_subscriber_does_not_block_others():
    store = Store()
    calls = []

    def boom(_state):
        raise RuntimeError("listener failure")

    store.subscribe(boom)
    store.subscribe(lambda s: calls.append(s))
    store.dispatch(AddPhotos((make_photo("a"),)))
    assert len(calls) == 1


def test_reset_and_paste_helpers():
    store = Store()
    store.dispatch(AddPhotos((make_photo("a"), make_photo("b"))))
    store.dispatch(UpdateAdjustments("a", {"exposure": 1, "saturation": 40}))

    copied = store.state.find_photo("a").adjustments
    store.dispatch(paste_adjustments_action("b", copied))
    assert store.state.find_photo("b").adjustments == copied

    store.dispatch(reset_adjustments_action("a"))
    assert store.state.find_photo("a").adjustments == DEFAULT_ADJUSTMENTS


def test_auto_adjust_stays_in_its_ranges_and_keeps_other_fields():
    store = Store()
    store.dispatch(AddPhotos((make_photo("a"),)))
    store.dispatch(UpdateAdjustments("a", {"saturation": 30}))

    rng = random.Random(7)
    for _ in range(20):
        action = auto_adjust_action("a", rng)
        assert action.photo_id == "a"
        assert set(action.adjustments) == set(AUTO_ADJUST_RANGES)
        for name, value in action.adjustments.items():
            lo, hi = AUTO_ADJUST_RANGES[name]
            assert lo <= value <= hi
        store.dispatch(action)

    adj = store.state.find_photo("a").adjustments
    assert adj.saturation == 30
    assert adj.temperature == 0
    assert 10 <= adj.shadows <= 40


def test_auto_adjust_is_reproducible_with_a_seeded_rng():
    first = auto_adjust_action("a", random.Random(42))
    second = auto_adjust_action("a", random.Random(42))
    assert first == second
