import os
from collections import deque
from contextlib import closing
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from itertools import islice
from typing import Iterator, List, Optional, Sequence
from tqdm import tqdm

from .depth_codec import ZLIB_LEVEL, encode_depth
from .errors import FrameRangeExceeded, UsageError
from .sens import (DEFAULT_DEPTH_SHIFT, DEFAULT_SENSOR_NAME, ColorCompression, DepthCompression,
                   write_frame, write_header, write_trailer)
from .utils.geom import read_intrinsics
from .utils.io import StreamKind, image_size, list_stream_images, load_depth_u16, read_color_bytes
from .utils.timestamp_match import FramePair, align_frames


@dataclass(frozen=True)
class ConvertConfig:
    root: str
    out_path: str = "output.sens"
    start_frame: int = 0
    end_frame: Optional[int] = None
    sensor_name: str = DEFAULT_SENSOR_NAME
    depth_shift: float = DEFAULT_DEPTH_SHIFT
    zlib_level: int = ZLIB_LEVEL
    workers: int = 0
    progress: bool = True

    @property
    def color_dir(self) -> str: return os.path.join(self.root, "image")

    @property
    def depth_dir(self) -> str: return os.path.join(self.root, "depth")

    @property
    def intrinsics_path(self) -> str: return os.path.join(self.root, "intrinsics.txt")


@dataclass
class EncodedFrame:
    pair: FramePair
    color_bytes: bytes
    depth_bytes: bytes
    depth_size: tuple  # (w, h)


_COLOR_EXT = {".jpg": ColorCompression.JPEG, ".jpeg": ColorCompression.JPEG, ".png": ColorCompression.PNG}


def color_compression_for(path: str) -> ColorCompression:
    """Color payloads are copied verbatim, so the file type is the compression."""
    return _COLOR_EXT.get(os.path.splitext(path)[1].lower(), ColorCompression.UNKNOWN)


def build_frame_pairs(cfg: ConvertConfig) -> List[FramePair]:
    color = list_stream_images(cfg.color_dir, StreamKind.COLOR)
    depth = list_stream_images(cfg.depth_dir, StreamKind.DEPTH)
    return align_frames(color, depth)


def select_frames(pairs: Sequence[FramePair], start: int, end: Optional[int]) -> List[FramePair]:
    """Frames [start, end). Checked before anything is written."""
    if end is None:
        raise UsageError("Specify end frame")
    if start < 0 or end <= start:
        raise UsageError(f"invalid frame range [{start}, {end})")
    if end > len(pairs):
        raise FrameRangeExceeded(f"Number of frames exceeds frames in folder! end={end} available={len(pairs)}")
    return list(pairs[start:end])


def encode_frame(pair: FramePair, zlib_level: int = ZLIB_LEVEL) -> EncodedFrame:
    color = read_color_bytes(pair.color.path)
    depth = load_depth_u16(pair.depth.path)
    h, w = depth.shape
    return EncodedFrame(pair=pair, color_bytes=color,
                        depth_bytes=encode_depth(depth, zlib_level), depth_size=(w, h))


def iter_encoded_frames(pairs: Sequence[FramePair], zlib_level: int = ZLIB_LEVEL,
                        workers: int = 0) -> Iterator[EncodedFrame]:
    """
    Encoded frames in input order. With workers > 1 frames are encoded on a
    thread pool, at most 2*workers in flight.
    """
    if workers <= 1:
        for p in pairs:
            yield encode_frame(p, zlib_level)
        return
    it = iter(pairs)
    with ThreadPoolExecutor(max_workers=workers) as ex:
        pending = deque(ex.submit(encode_frame, p, zlib_level) for p in islice(it, 2 * workers))
        try:
            while pending:
                fr = pending.popleft().result()
                nxt = next(it, None)
                if nxt is not None:
                    pending.append(ex.submit(encode_frame, nxt, zlib_level))
                yield fr
        finally:
            # consumer stopped early: drop frames not started yet
            for fut in pending:
                fut.cancel()


def convert(cfg: ConvertConfig) -> int:
    """
    SUN3D folder -> .sens file. Returns the number of frames written.
    All input checks happen before the output file is opened; a failure while
    streaming frames leaves a truncated file behind.
    """
    pairs = build_frame_pairs(cfg)
    selected = select_frames(pairs, cfg.start_frame, cfg.end_frame)
    calib = read_intrinsics(cfg.intrinsics_path)

    color_size = image_size(pairs[0].color.path)
    depth_size = image_size(pairs[0].depth.path)

    with open(cfg.out_path, "wb") as f:
        write_header(f, cfg.sensor_name, calib,
                     color_compression_for(pairs[0].color.path), DepthCompression.ZLIB_USHORT,
                     color_size, depth_size, cfg.depth_shift, len(selected))
        # closing() shuts the encoder pool down as soon as a frame fails
        with closing(iter_encoded_frames(selected, cfg.zlib_level, cfg.workers)) as frames:
            for fr in tqdm(frames, total=len(selected), desc="frames", disable=not cfg.progress):
                if fr.depth_size != depth_size:
                    raise RuntimeError(f"Depth size {fr.depth_size} != {depth_size}: {fr.pair.depth.path}")
                write_frame(f, fr.pair.color.timestamp, fr.pair.depth.timestamp,
                            fr.color_bytes, fr.depth_bytes)
        write_trailer(f)
    return len(selected)
