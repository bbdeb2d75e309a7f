#!/usr/bin/env python3
"""
Editorial Burst: photo burst composition, still and video export

Packs a folder of photos around a two-line headline, then animates them
through a scripted sequence: word-by-word text reveal, staggered burst-in
from behind the camera, slow drift toward the viewer, and a final
implosion. The same frame-driven sequence is used for the still and the
video, so both match the live composition exactly.

Usage:
    python pipeline.py                        # Layout + still of the finished composition
    python pipeline.py --video                # Record the full sequence to MP4
    python pipeline.py --layout-only          # Generate layout.json only
    python pipeline.py --frame=60             # Still of frame 60 of the full sequence
    python pipeline.py --scale=2              # Still at 2x the canvas resolution
    python pipeline.py --resolution=portrait  # window | square | portrait | landscape | print
    python pipeline.py --seed=7               # Reproducible layout
    python pipeline.py --headline="Spice of Life" --handle=CAROLWELLS
    python pipeline.py --rot-x=0.1 --rot-y=-0.2

The pipeline has four stages:
    1. Source Scan  - find photos in input/photos/
    2. Ingest       - decode, orient, downscale, round corners
    3. Layout       - constrained random packing around the headline band
    4. Export       - still PNG, or frame-by-frame render piped to ffmpeg
"""

import random
import sys

from assets import load_assets, scan_sources
from config import CONFIG, OUTPUT_DIR
from scene import Camera
from session import Session


def _arg_value(name, default=None):
    """Value of a --name=value flag, or default."""
    prefix = f"--{name}="
    for arg in sys.argv[1:]:
        if arg.startswith(prefix):
            return arg[len(prefix):]
    return default


def build_session():
    """Create a session from CONFIG plus command-line overrides."""
    seed = _arg_value("seed")
    rng = random.Random(int(seed)) if seed is not None else random.Random()
    session = Session(
        headline=_arg_value("headline", CONFIG["headline"]),
        handle=_arg_value("handle", CONFIG["handle"]),
        rng=rng,
    )
    session.select_resolution(_arg_value("resolution", CONFIG["default_resolution"]))
    return session


def still_options():
    """Parse the still-export flags.

    Returns:
        (frame offset into the full sequence or None, Camera, render scale)
    """
    frame = _arg_value("frame")
    offset = int(frame) if frame is not None else None
    camera = Camera(rot_x=float(_arg_value("rot-x", 0.0)),
                    rot_y=float(_arg_value("rot-y", 0.0)))
    scale = float(_arg_value("scale", 1.0))
    if scale <= 0:
        raise ValueError(f"--scale must be positive, got {scale}")
    return offset, camera, scale


def ingest(session, assets):
    """Feed assets through the upload path so they relayout exactly once."""
    now = session.clock()
    for asset in assets:
        session.add_asset(asset, now=now)
    session.poll_uploads(now=now + CONFIG["upload_batch_window"])


def record_video(session, path):
    """Tick the session until the recording auto-stops."""
    print("=== Recording video ===")
    if not session.start_recording(path):
        return None
    total = session.scripted_frames()
    fps = CONFIG["fps"]
    rendered = 0
    while session.is_recording:
        session.tick()
        rendered += 1
        if rendered % (fps * 2) == 0:
            print(f"    {rendered}/{total} frames ({rendered / total * 100:.0f}%)")
    return path


def main():
    """Pipeline entry point with CLI flag handling.

    Flags:
        --video:        Record the full sequence (intro to implosion)
        --layout-only:  Write layout.json, then exit
        --frame=N:      Export frame N of the full sequence instead of the
                        finished composition
    """
    video = "--video" in sys.argv
    layout_only = "--layout-only" in sys.argv

    print("Editorial Burst")
    print("=" * 40)

    paths = scan_sources()
    if not paths:
        print("ERROR: No photos found in input/photos/")
        sys.exit(1)
    assets = load_assets(paths)
    if not assets:
        print("ERROR: None of the photos could be decoded")
        sys.exit(1)

    try:
        session = build_session()
    except ValueError as e:
        print(f"ERROR: {e}")
        sys.exit(1)
    ingest(session, assets)

    OUTPUT_DIR.mkdir(exist_ok=True)
    layout_path = session.save_layout(OUTPUT_DIR / "layout.json")
    if layout_only:
        print("\n=== Done (layout only) ===")
        return

    if video:
        out = record_video(session, OUTPUT_DIR / "editorial_burst.mp4")
        if out is None:
            sys.exit(1)
        print("\n=== Done! ===")
        print(f"  Layout: {layout_path}")
        print(f"  Video:  {out}")
        return

    try:
        offset, camera, scale = still_options()
    except ValueError as e:
        print(f"ERROR: {e}")
        sys.exit(1)
    frame = None
    if offset is not None:
        session.play_full()
        frame = session.frame + offset
    session.camera = camera
    still = session.export_still(OUTPUT_DIR / "editorial_burst.png", scale=scale, frame=frame)

    print("\n=== Done! ===")
    print(f"  Layout: {layout_path}")
    print(f"  Still:  {still}")


if __name__ == "__main__":
    main()
