import os, sys, argparse
from pathlib import Path
import numpy as np
import cv2
from tqdm import tqdm

from sun3dsens.datasets.sens_frames import SensFramesDataset
from sun3dsens.sens import ColorCompression

_EXT = {ColorCompression.JPEG: "jpg", ColorCompression.PNG: "png"}


def summarize(ds: SensFramesDataset) -> str:
    h = ds.header
    K = h.intrinsics_color
    return (f"version={h.version} sensor={h.sensor_name} frames={h.num_frames}\n"
            f"color {h.color_size[0]}x{h.color_size[1]} {h.color_compression.name}  "
            f"depth {h.depth_size[0]}x{h.depth_size[1]} {h.depth_compression.name} shift={h.depth_shift}\n"
            f"fx={K[0,0]:.3f} fy={K[1,1]:.3f} cx={K[0,2]:.3f} cy={K[1,2]:.3f}")


def export_sun3d(ds: SensFramesDataset, out_dir: Path, max_frames=None) -> int:
    """
    Write frames back to a SUN3D-like folder:
      image/<i>-<ts>.<ext>   color payload as stored
      depth/<i>-<ts>.png     depth with the source bit layout restored
      intrinsics.txt
    """
    if ds.header.color_compression not in _EXT:
        raise RuntimeError(f"cannot export color stored as {ds.header.color_compression.name}")
    (out_dir/"image").mkdir(parents=True, exist_ok=True)
    (out_dir/"depth").mkdir(parents=True, exist_ok=True)
    K = ds.header.intrinsics_color[:3, :3]
    np.savetxt(out_dir/"intrinsics.txt", K, fmt="%.6f")

    ext = _EXT[ds.header.color_compression]
    n = len(ds) if max_frames is None else min(len(ds), max_frames)
    for i in tqdm(range(n), desc="export"):
        fr = ds[i]
        (out_dir/"image"/f"{i:07d}-{fr['timestamp_color']:012d}.{ext}").write_bytes(fr["color_bytes"])
        depth_path = out_dir/"depth"/f"{i:07d}-{fr['timestamp_depth']:012d}.png"
        if not cv2.imwrite(str(depth_path), fr["depth"]):
            raise RuntimeError(f"failed to write {depth_path}")
    return n


def main(argv=None) -> int:
    ap = argparse.ArgumentParser()
    ap.add_argument("--sens", required=True)
    ap.add_argument("--out_dir", default=None, help="export frames as a SUN3D folder")
    ap.add_argument("--max_frames", type=int, default=None)
    args = ap.parse_args(argv)

    if not os.path.exists(args.sens):
        raise FileNotFoundError(args.sens)
    ds = SensFramesDataset(args.sens, restore_source_depth=True)
    print(summarize(ds))
    if args.out_dir:
        n = export_sun3d(ds, Path(args.out_dir), args.max_frames)
        print(f"[OK] exported {n} frames to {args.out_dir}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
