import os, sys, argparse

from sun3dsens.convert import ConvertConfig, convert
from sun3dsens.depth_codec import ZLIB_LEVEL
from sun3dsens.errors import Sun3DSensError, UsageError
from sun3dsens.sens import DEFAULT_DEPTH_SHIFT, DEFAULT_SENSOR_NAME


class _ArgParser(argparse.ArgumentParser):
    # bad arguments print usage and exit 0, like a missing end frame
    def error(self, message):
        raise UsageError(message)


def build_parser() -> argparse.ArgumentParser:
    ap = _ArgParser(description="Convert a SUN3D capture (image/, depth/, intrinsics.txt) to a .sens file")
    ap.add_argument("root", nargs="?", help="SUN3D sequence dir, e.g. .../brown_bm_1/brown_bm_1")
    ap.add_argument("out", nargs="?", default="output.sens")
    ap.add_argument("start", nargs="?", type=int, default=0, help="first frame (inclusive)")
    ap.add_argument("end", nargs="?", type=int, default=None, help="last frame (exclusive), required")
    ap.add_argument("--sensor_name", default=DEFAULT_SENSOR_NAME)
    ap.add_argument("--depth_shift", type=float, default=DEFAULT_DEPTH_SHIFT, help="depth units per meter")
    ap.add_argument("--zlib_level", type=int, default=ZLIB_LEVEL, choices=range(0, 10))
    ap.add_argument("--workers", type=int, default=0, help="frame encoding threads (0 = sequential)")
    ap.add_argument("--no_progress", action="store_true")
    return ap


def main(argv=None) -> int:
    ap = build_parser()
    try:
        args = ap.parse_args(argv)
        if args.root is None:
            raise UsageError("missing SUN3D root dir")
        if args.end is None:
            raise UsageError("Specify endframe")
        cfg = ConvertConfig(
            root=args.root, out_path=args.out,
            start_frame=args.start, end_frame=args.end,
            sensor_name=args.sensor_name, depth_shift=args.depth_shift,
            zlib_level=args.zlib_level, workers=args.workers,
            progress=not args.no_progress,
        )
        print(f"[DEBUG] root={cfg.root} frames=[{cfg.start_frame},{cfg.end_frame}) workers={cfg.workers}")
        n = convert(cfg)
    except UsageError as e:
        print(f"[ERR] {e}")
        ap.print_usage()
        return 0
    except (Sun3DSensError, OSError, RuntimeError, ValueError) as e:
        print(f"[ERR] {e}", file=sys.stderr)
        return 1

    print(f"[OK] wrote {cfg.out_path} frames={n} size={os.path.getsize(cfg.out_path)}B")
    return 0


if __name__ == "__main__":
    sys.exit(main())
