import os
from dataclasses import dataclass
from enum import Enum
from typing import List, Tuple
import numpy as np
import cv2

from ..errors import FilenameParseError, PartialRead

U64_MAX = 2**64 - 1


class StreamKind(Enum):
    COLOR = "color"
    DEPTH = "depth"


@dataclass(frozen=True)
class ImageDescriptor:
    path: str
    index: int
    timestamp: int
    kind: StreamKind


def parse_frame_name(path: str) -> Tuple[int, int]:
    """
    SUN3D frame files are named  <frameIndex>-<timestamp>.<ext>
    e.g. "0000123-000004827100.jpg" -> (123, 4827100)

    The index is everything before the first '-', the timestamp is the rest of
    the stem (extension = text after the last '.').
    """
    name = os.path.basename(path)
    stem = name[:name.rfind(".")] if "." in name else name
    if "-" not in stem:
        raise FilenameParseError(f"no '-' between index and timestamp: {name}")
    idx_tok, ts_tok = stem.split("-", 1)
    # isdigit() also accepts non-ascii digits which int() would then choke on
    if not (idx_tok.isascii() and idx_tok.isdigit()):
        raise FilenameParseError(f"bad frame index '{idx_tok}' in {name}")
    if not (ts_tok.isascii() and ts_tok.isdigit()):
        raise FilenameParseError(f"bad timestamp '{ts_tok}' in {name}")
    ts = int(ts_tok)
    if ts > U64_MAX:
        raise FilenameParseError(f"timestamp out of uint64 range in {name}")
    return int(idx_tok), ts


def list_stream_images(image_dir: str, kind: StreamKind) -> List[ImageDescriptor]:
    """Regular files of `image_dir`, sorted by name, as ImageDescriptors."""
    if not os.path.isdir(image_dir):
        raise FileNotFoundError(image_dir)
    images: List[ImageDescriptor] = []
    for name in sorted(os.listdir(image_dir)):
        p = os.path.join(image_dir, name)
        if not os.path.isfile(p):
            continue
        index, ts = parse_frame_name(p)
        images.append(ImageDescriptor(path=p, index=index, timestamp=ts, kind=kind))
    return images


def read_color_bytes(path: str) -> bytes:
    """Verbatim file content; the color payload is stored without re-encoding."""
    expected = os.path.getsize(path)
    with open(path, "rb") as f:
        data = f.read(expected)
    if len(data) != expected:
        raise PartialRead(f"only {len(data)} of {expected} bytes could be read from {path}")
    return data


def load_depth_u16(path: str) -> np.ndarray:
    """(H,W) uint16 samples exactly as stored in the depth image."""
    depth = cv2.imread(path, cv2.IMREAD_UNCHANGED)
    if depth is None:
        raise FileNotFoundError(path)
    if depth.ndim == 3:
        # grey like a single channel decode, not just the blue plane
        code = cv2.COLOR_BGRA2GRAY if depth.shape[2] == 4 else cv2.COLOR_BGR2GRAY
        depth = cv2.cvtColor(depth, code)
    if depth.dtype == np.uint8:
        # widen 8-bit to 16-bit by replicating the byte (0xAB -> 0xABAB)
        depth = depth.astype(np.uint16) * 257
    elif depth.dtype != np.uint16:
        raise RuntimeError(f"Unsupported depth dtype {depth.dtype}: {path}")
    return np.ascontiguousarray(depth)


def image_size(path: str) -> Tuple[int, int]:
    """(width, height) of an image file."""
    img = cv2.imread(path, cv2.IMREAD_UNCHANGED)
    if img is None:
        raise FileNotFoundError(path)
    h, w = img.shape[:2]
    return w, h
