from __future__ import annotations

import glob
import os
from typing import List

from natsort import natsorted

from deepzoom.util.logging_setup import get_logger

def collect_frames(input_dir: str) -> List[str]:
    """PNG/JPEG frames in ``input_dir`` in natural order (frame_2 before frame_10)."""
    frames = [p for p in glob.glob(os.path.join(input_dir, "*")) if p.lower().endswith((".png", ".jpg", ".jpeg"))]
    if not frames:
        raise ValueError(f"No frames found in {input_dir}")
    return natsorted(frames)

def encode_with_opencv(*, input_dir: str, output_file: str, fps: int) -> int:
    logger = get_logger()
    if fps <= 0:
        raise ValueError("fps must be > 0")
    try:
        import cv2  # type: ignore
    except ImportError as e:
        raise RuntimeError(f"OpenCV not installed: {e}") from e

    frames = collect_frames(input_dir)

    # IMREAD_COLOR drops the alpha channel of RGBA frames.
    first = cv2.imread(frames[0], cv2.IMREAD_COLOR)
    if first is None:
        raise RuntimeError(f"Failed to read first frame: {frames[0]}")
    h, w, _ = first.shape

    fourcc = cv2.VideoWriter_fourcc(*"mp4v")
    out = cv2.VideoWriter(output_file, fourcc, fps, (w, h))
    if not out.isOpened():
        raise RuntimeError(f"Failed to open VideoWriter for {output_file}")

    logger.info("Encoding video %s from %s frames (%sx%s @ %sfps)", output_file, len(frames), w, h, fps)
    try:
        for i, path in enumerate(frames):
            img = cv2.imread(path, cv2.IMREAD_COLOR)
            if img is None:
                raise RuntimeError(f"Failed to read frame: {path}")
            if img.shape[0] != h or img.shape[1] != w:
                img = cv2.resize(img, (w, h), interpolation=cv2.INTER_AREA)
            out.write(img)
            if i % 200 == 0:
                logger.info("Encoded %s/%s frames", i, len(frames))
    finally:
        out.release()
    logger.info("Video written: %s", output_file)
    return len(frames)
