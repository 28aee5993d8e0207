import importlib.metadata as importlib_metadata
import json
import os
import platform
import sys
import time
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional

import mpmath.libmp

@dataclass(frozen=True)
class RunManifest:
    started_utc: str
    config: Dict[str, Any]
    python: Dict[str, Any]
    packages: Dict[str, str]
    git: Dict[str, Any]
    system: Dict[str, Any]
    arithmetic: Dict[str, Any]
    frames: List[Dict[str, Any]]

def _utc_iso() -> str:
    return time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime())

def _safe_pkg_version(name: str) -> Optional[str]:
    try:
        return importlib_metadata.version(name)
    except importlib_metadata.PackageNotFoundError:
        return None

def build_manifest(
    *,
    config: Dict[str, Any],
    render_summary: Optional[Dict[str, Any]] = None,
    git_commit: Optional[str] = None,
) -> RunManifest:
    pkgs = {}
    for name in ["numpy", "Pillow", "mpmath", "gmpy2", "tqdm", "opencv-python", "natsort"]:
        v = _safe_pkg_version(name)
        if v:
            pkgs[name] = v

    frames = list((render_summary or {}).get("frames", []))

    return RunManifest(
        started_utc=_utc_iso(),
        config=config,
        python={"version": sys.version, "executable": sys.executable},
        packages=pkgs,
        git={"commit": git_commit},
        system={"platform": platform.platform(), "machine": platform.machine(), "processor": platform.processor()},
        arithmetic={
            "mpmath_backend": mpmath.libmp.BACKEND,
            "precision_bits": config.get("precision_bits"),
            "float_info": {"mant_dig": sys.float_info.mant_dig, "max_exp": sys.float_info.max_exp},
        },
        frames=frames,
    )

def write_manifest(path: str, manifest: RunManifest) -> None:
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(asdict(manifest), f, indent=2, sort_keys=True)
