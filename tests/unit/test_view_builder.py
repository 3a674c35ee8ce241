import random

import pytest

from core.models.frames import HiddenFramesPlaceholder, SourcePosition, StackFrame
from core.view_builder import build_filtered_view, count_frames, index_covering


def make(name):
    return StackFrame(name, SourcePosition(path=f"/src/{name}.py", line=1))


def classifier(*visible):
    return lambda frame: frame.function in visible


def assert_no_adjacent_placeholders(view):
    for left, right in zip(view, view[1:]):
        assert not (isinstance(left, HiddenFramesPlaceholder) and isinstance(right, HiddenFramesPlaceholder))


def test_library_run_collapses_into_one_placeholder():
    a, b, c, d = make("a"), make("b"), make("c"), make("d")
    view = build_filtered_view([a, b, c, d], classifier("a", "d"))

    assert view[0] is a
    assert view[1] == HiddenFramesPlaceholder(2)
    assert view[2] is d
    assert len(view) == 3


def test_existing_placeholder_is_kept_not_reclassified():
    e = make("e")
    entries = [HiddenFramesPlaceholder(3), e]
    view = build_filtered_view(entries, classifier("e"))
    assert view == [HiddenFramesPlaceholder(3), e]


def test_trailing_library_frames():
    a, b, c = make("a"), make("b"), make("c")
    view = build_filtered_view([a, b, c], classifier("a"))
    assert view == [a, HiddenFramesPlaceholder(2)]


def test_trailing_frames_merge_into_trailing_placeholder():
    a, x, y = make("a"), make("x"), make("y")
    # Host appended two library frames after an earlier pass
    view = build_filtered_view([a, HiddenFramesPlaceholder(4), x, y], classifier("a"))
    assert view == [a, HiddenFramesPlaceholder(6)]
    assert_no_adjacent_placeholders(view)


def test_all_library_frames():
    view = build_filtered_view([make("x"), make("y")], classifier())
    assert view == [HiddenFramesPlaceholder(2)]


def test_empty_input_gives_empty_view():
    assert build_filtered_view([], classifier()) == []


def test_non_frame_rows_are_skipped():
    a = make("a")
    view = build_filtered_view([None, a, "separator"], classifier("a"))
    assert view == [a]


def test_rebuild_is_idempotent():
    entries = [make("a"), make("lib1"), make("lib2"), make("b"), make("lib3")]
    classify = classifier("a", "b")
    first = build_filtered_view(entries, classify)
    second = build_filtered_view(first, classify)
    assert second == first


def test_frame_count_is_conserved():
    entries = [make("lib0"), make("a"), make("lib1"), make("lib2"), make("b"), make("lib3"), make("c")]
    view = build_filtered_view(entries, classifier("a", "b", "c"))
    assert count_frames(view) == len(entries)
    assert_no_adjacent_placeholders(view)


def test_visible_frames_keep_their_order_and_identity():
    entries = [make(n) for n in "abcdef"]
    view = build_filtered_view(entries, classifier("b", "d", "f"))
    visible = [e for e in view if not isinstance(e, HiddenFramesPlaceholder)]
    assert visible == [entries[1], entries[3], entries[5]]
    assert all(v is e for v, e in zip(visible, [entries[1], entries[3], entries[5]]))


def test_count_frames_expands_placeholders():
    assert count_frames([make("a"), HiddenFramesPlaceholder(5), None]) == 6


def test_adjacent_input_placeholders_merge():
    a = make("a")
    view = build_filtered_view([HiddenFramesPlaceholder(1), HiddenFramesPlaceholder(2), a], classifier("a"))
    assert view == [HiddenFramesPlaceholder(3), a]
    assert view[1] is a


def test_library_frame_after_placeholder_joins_it():
    a, lib, d = make("a"), make("lib"), make("d")
    view = build_filtered_view([a, HiddenFramesPlaceholder(2), lib, d], classifier("a", "d"))
    assert view == [a, HiddenFramesPlaceholder(3), d]
    assert view[0] is a and view[2] is d


def _mixed_entries(rng):
    """Random mix of visible frames, library frames and earlier placeholders."""
    entries = []
    for i in range(rng.randint(0, 14)):
        kind = rng.choice("vlP")
        if kind == "v":
            entries.append(make(f"v{i}"))
        elif kind == "l":
            entries.append(make(f"lib{i}"))
        else:
            entries.append(HiddenFramesPlaceholder(rng.randint(1, 4)))
    return entries


def _is_visible(frame):
    return frame.function.startswith("v")


@pytest.mark.parametrize("seed", range(40))
def test_laws_hold_on_mixed_input(seed):
    entries = _mixed_entries(random.Random(seed))
    view = build_filtered_view(entries, _is_visible)

    # Nothing is lost: hidden plus kept equals raw frames plus earlier hidden counts
    assert count_frames(view) == count_frames(entries)
    assert_no_adjacent_placeholders(view)

    expected = [e for e in entries if not isinstance(e, HiddenFramesPlaceholder) and _is_visible(e)]
    kept = [e for e in view if not isinstance(e, HiddenFramesPlaceholder)]
    assert len(kept) == len(expected)
    assert all(k is e for k, e in zip(kept, expected))

    again = build_filtered_view(view, _is_visible)
    assert again == view
    assert all(x is y for x, y in zip(again, view) if not isinstance(x, HiddenFramesPlaceholder))


def test_index_covering_maps_raw_positions():
    a, d = make("a"), make("d")
    view = [a, HiddenFramesPlaceholder(2), d]
    assert [index_covering(view, offset) for offset in range(4)] == [0, 1, 1, 2]
    assert index_covering(view, 10) == 2
    assert index_covering([], 0) == -1
