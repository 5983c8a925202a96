from dataclasses import dataclass
from typing import List, Sequence
import numpy as np

from .io import ImageDescriptor
from ..errors import NoDepthFrames


@dataclass(frozen=True)
class FramePair:
    color: ImageDescriptor
    depth: ImageDescriptor


def nearest_index(ts_arr: np.ndarray, ts: int) -> int:
    """
    Index into sorted uint64 `ts_arr` of the entry closest to `ts`.
    On equal distance the lowest index wins, so the earlier timestamp is
    preferred and, among duplicates, the first one.
    """
    n = ts_arr.size
    if n == 0:
        raise ValueError("empty timestamp array")
    t = np.uint64(ts)
    j = int(np.searchsorted(ts_arr, t, side="left"))  # first entry >= ts
    if j == 0:
        return 0
    # differences as python ints, uint64 subtraction would wrap
    below = int(ts_arr[j - 1])
    if j < n and int(ts_arr[j]) - ts < ts - below:
        return j
    return int(np.searchsorted(ts_arr, ts_arr[j - 1], side="left"))


def align_frames(color: Sequence[ImageDescriptor], depth: Sequence[ImageDescriptor]) -> List[FramePair]:
    """One FramePair per color image, paired with the nearest depth image in time."""
    if not color:
        return []
    if not depth:
        raise NoDepthFrames(f"no depth frames to pair with {len(color)} color frames")

    depth_ts = np.array([d.timestamp for d in depth], dtype=np.uint64)
    # stable sort keeps enumeration order among equal timestamps
    order = np.argsort(depth_ts, kind="stable")
    depth_ts = depth_ts[order]

    pairs: List[FramePair] = []
    for c in color:
        j = nearest_index(depth_ts, c.timestamp)
        pairs.append(FramePair(color=c, depth=depth[int(order[j])]))
    return pairs
