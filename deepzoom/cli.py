from __future__ import annotations

import argparse
import logging
import os
import subprocess
from typing import Optional

from deepzoom import presets
from deepzoom.config import load_config, normalise_config
from deepzoom.pipeline import render_sequence, render_single
from deepzoom.util.logging_setup import get_logger, logging_session
from deepzoom.util.manifest import build_manifest, write_manifest
from deepzoom.video.opencv_writer import encode_with_opencv

def _git_commit() -> Optional[str]:
    try:
        r = subprocess.run(["git", "rev-parse", "HEAD"], capture_output=True, text=True, check=True)
        return r.stdout.strip()
    except (OSError, subprocess.CalledProcessError):
        return None

def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="deepzoom", description="Deep Mandelbrot zoom with perturbation rendering.")
    p.add_argument("--config", type=str, default=None, help="Path to config JSON. If omitted, built-in presets are used.")
    p.add_argument("--workers", type=int, default=None, help="Worker processes per frame (1 renders in-process).")
    p.add_argument("--log-level", type=str, default="INFO", choices=["DEBUG","INFO","WARNING","ERROR"], help="Log level.")
    p.add_argument("--log-file", type=str, default="deepzoom.log", help="Log file path (rotating). Set empty to disable file logging.")
    sub = p.add_subparsers(dest="cmd", required=True)

    r = sub.add_parser("render", help="Render the zoom sequence to the frames directory.")
    r.add_argument("--frames-dir", type=str, default=None, help="Override frames_dir from config.")
    r.add_argument("--frames", type=int, default=None, help="Override total_frames from config.")
    r.add_argument("--manifest", type=str, default=os.path.join("artifacts", "run.json"), help="Run manifest path.")
    r.add_argument("--no-progress", action="store_true", help="Disable the progress bar.")

    f = sub.add_parser("frame", help="Render a single frame at a given zoom.")
    f.add_argument("--zoom", type=float, default=None, help="Zoom factor (defaults to config.start_zoom).")
    f.add_argument("--output", type=str, default="frame.png", help="Output PNG file.")

    e = sub.add_parser("encode", help="Encode frames into an MP4 video using OpenCV.")
    e.add_argument("--input-dir", type=str, default=None, help="Frames directory (defaults to config.frames_dir).")
    e.add_argument("--output", type=str, default=None, help="Output MP4 file (defaults to config.output_video).")
    e.add_argument("--fps", type=int, default=None, help="Frames per second (defaults to config.fps).")

    sub.add_parser("presets", help="List the built-in center presets.")

    return p

def _run(args: argparse.Namespace, queue, log_level: int) -> int:
    logger = get_logger()

    if args.cmd == "presets":
        for key, (re, im) in sorted(presets.CENTER_PRESETS.items()):
            marker = "*" if key == presets.DEFAULT_CENTER_PRESET else " "
            print(f"{marker}{key}: {re} {im}")
        return 0

    cfg = load_config(args.config)
    if args.workers is not None:
        cfg["workers"] = args.workers

    if args.cmd == "render":
        if args.frames_dir:
            cfg["frames_dir"] = args.frames_dir
        if args.frames is not None:
            cfg["total_frames"] = args.frames
        cfg = normalise_config(cfg)

        summary = render_sequence(cfg=cfg, log_queue=queue, log_level=log_level, progress=not args.no_progress)

        manifest = build_manifest(config=cfg, render_summary=summary, git_commit=_git_commit())
        write_manifest(args.manifest, manifest)
        logger.info("Run manifest written: %s", args.manifest)
        return 0

    cfg = normalise_config(cfg)

    if args.cmd == "frame":
        zoom = args.zoom if args.zoom is not None else cfg["start_zoom"]
        render_single(cfg=cfg, zoom=zoom, output=args.output, log_queue=queue, log_level=log_level)
        return 0

    if args.cmd == "encode":
        input_dir = args.input_dir or cfg["frames_dir"]
        output = args.output or cfg["output_video"]
        fps = args.fps or cfg["fps"]

        encode_with_opencv(input_dir=input_dir, output_file=output, fps=fps)
        return 0

    raise RuntimeError("Unknown command.")

def main(argv: Optional[list] = None) -> int:
    args = build_arg_parser().parse_args(argv)

    log_level = getattr(logging, args.log_level.upper(), logging.INFO)
    log_file = args.log_file if args.log_file and args.log_file.strip() else None

    with logging_session(level=log_level, console=True, log_file=log_file) as queue:
        try:
            return _run(args, queue, log_level)
        except (ValueError, RuntimeError, OSError):
            get_logger().exception("deepzoom %s failed", args.cmd)
            return 1

if __name__ == "__main__":
    raise SystemExit(main())
