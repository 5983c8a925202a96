"""
Nearest-timestamp pairing of color and depth frames.
"""

from __future__ import annotations

import numpy as np
import pytest

from sun3dsens.errors import NoDepthFrames
from sun3dsens.utils.io import ImageDescriptor, StreamKind
from sun3dsens.utils.timestamp_match import align_frames, nearest_index


def _images(timestamps, kind):
    return [ImageDescriptor(path=f"{kind.value}/{i}-{ts}.x", index=i, timestamp=ts, kind=kind)
            for i, ts in enumerate(timestamps)]


def _brute_force(color_ts, depth_ts):
    """Lowest index with the minimum absolute difference."""
    out = []
    for c in color_ts:
        diffs = [abs(c - d) for d in depth_ts]
        out.append(diffs.index(min(diffs)))
    return out


def test_alignment_fixture():
    pairs = align_frames(_images([10, 20, 35], StreamKind.COLOR), _images([9, 21, 40], StreamKind.DEPTH))
    assert [p.depth.timestamp for p in pairs] == [9, 21, 40]
    assert [p.color.timestamp for p in pairs] == [10, 20, 35]


def test_depth_frames_can_be_reused():
    pairs = align_frames(_images([1, 2, 3, 100], StreamKind.COLOR), _images([2, 99], StreamKind.DEPTH))
    assert [p.depth.index for p in pairs] == [0, 0, 0, 1]


def test_tie_prefers_earlier_depth():
    pairs = align_frames(_images([15], StreamKind.COLOR), _images([10, 20], StreamKind.DEPTH))
    assert pairs[0].depth.timestamp == 10


def test_tie_among_duplicates_prefers_first_file():
    pairs = align_frames(_images([12, 30], StreamKind.COLOR), _images([10, 10, 14, 30, 30], StreamKind.DEPTH))
    assert [p.depth.index for p in pairs] == [0, 3]


def test_color_outside_depth_range():
    pairs = align_frames(_images([0, 1000], StreamKind.COLOR), _images([50, 60, 70], StreamKind.DEPTH))
    assert [p.depth.timestamp for p in pairs] == [50, 70]


def test_large_uint64_timestamps_do_not_wrap():
    big = 2**64 - 10
    pairs = align_frames(_images([5, big], StreamKind.COLOR), _images([0, big - 1], StreamKind.DEPTH))
    assert [p.depth.index for p in pairs] == [0, 1]


def test_matches_brute_force_on_uneven_rates():
    rng = np.random.default_rng(7)
    color_ts = np.sort(rng.integers(0, 10_000, size=200)).tolist()
    depth_ts = np.sort(rng.integers(0, 10_000, size=57)).tolist()
    pairs = align_frames(_images(color_ts, StreamKind.COLOR), _images(depth_ts, StreamKind.DEPTH))
    assert [p.depth.index for p in pairs] == _brute_force(color_ts, depth_ts)


def test_empty_color_gives_no_pairs():
    assert align_frames([], _images([1], StreamKind.DEPTH)) == []


def test_no_depth_frames_is_fatal():
    with pytest.raises(NoDepthFrames):
        align_frames(_images([1, 2], StreamKind.COLOR), [])


def test_nearest_index_direct():
    arr = np.array([9, 21, 40], dtype=np.uint64)
    assert [nearest_index(arr, t) for t in (0, 15, 16, 30, 31, 41)] == [0, 0, 1, 1, 2, 2]
    with pytest.raises(ValueError):
        nearest_index(np.array([], dtype=np.uint64), 3)
