import os
import struct
from typing import Any, Dict, List
import numpy as np
import cv2

from ..depth_codec import decode_depth, inflate_depth
from ..errors import PartialRead
from ..sens import ColorCompression, DepthCompression, read_exact, read_frame, read_header, read_trailer


class SensFramesDataset:
    """
    Random access over the frames of a .sens file.
    Frame offsets are indexed once; payloads are read on demand.
    Each item:
      timestamp_color, timestamp_depth: int
      camera_to_world: float32 (4,4)
      color_bytes: raw color payload
      color: uint8 (H,W,3) BGR, only if decode_color=True
      depth: uint16 (H,W) stored samples (mm for SUN3D sources),
             or the original source samples if restore_source_depth=True
    """
    def __init__(self, sens_path: str, decode_color: bool = False, restore_source_depth: bool = False):
        self.path = sens_path
        self.decode_color = decode_color
        self.restore_source_depth = restore_source_depth
        self.offsets: List[int] = []
        with open(sens_path, "rb") as f:
            file_size = os.fstat(f.fileno()).st_size
            self.header = read_header(f)
            for i in range(self.header.num_frames):
                self.offsets.append(f.tell())
                f.seek(64 + 16, 1)  # pose + timestamps
                n_c, n_d = struct.unpack("<QQ", read_exact(f, 16))
                f.seek(n_c + n_d, 1)
                # seek happily moves past EOF
                if f.tell() > file_size:
                    raise PartialRead(f"frame {i} payload runs past end of {sens_path}")
            read_trailer(f)
        if self.header.depth_compression != DepthCompression.ZLIB_USHORT:
            raise ValueError(f"unsupported depth compression {self.header.depth_compression.name}")

    def __len__(self): return len(self.offsets)

    def __getitem__(self, idx: int) -> Dict[str, Any]:
        if idx < 0:
            idx += len(self)
        if not 0 <= idx < len(self):
            raise IndexError(idx)
        with open(self.path, "rb") as f:
            f.seek(self.offsets[idx])
            fr = read_frame(f)
        w, h = self.header.depth_size
        decode = decode_depth if self.restore_source_depth else inflate_depth
        item = {
            "timestamp_color": fr.timestamp_color,
            "timestamp_depth": fr.timestamp_depth,
            "camera_to_world": fr.camera_to_world,
            "color_bytes": fr.color_bytes,
            "depth": decode(fr.depth_bytes, w, h),
        }
        if self.decode_color:
            item["color"] = self._decode_color(fr.color_bytes)
        return item

    def _decode_color(self, data: bytes) -> np.ndarray:
        if self.header.color_compression == ColorCompression.RAW:
            w, h = self.header.color_size
            return np.frombuffer(data, dtype=np.uint8).reshape(h, w, 3)
        img = cv2.imdecode(np.frombuffer(data, dtype=np.uint8), cv2.IMREAD_COLOR)
        if img is None:
            raise RuntimeError("could not decode color payload")
        return img
