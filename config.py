"""
Editorial Burst configuration.

All tunable parameters live here. Every stage reads from this dict so you
can adjust any value without hunting through the code. Parameters are
grouped by the stage they affect.

The timeline values are counted in frames, not seconds: the live preview,
still export and video capture all advance one frame per tick, so the same
frame number always produces the same picture.
"""

import math
from pathlib import Path


CONFIG = {
    # --- Canvas ---
    "background_color": (233, 235, 230),   # #E9EBE6, off-white paper
    "resolutions": {
        "square": (1080, 1080),
        "portrait": (1080, 1920),
        "landscape": (1920, 1080),
        "print": (2400, 3000),
    },
    "default_resolution": "landscape",
    "window_size": (1920, 1080),  # Viewport used by "window" when none is given
    "safe_width_fraction": 0.96,  # Horizontal share of the canvas images may use
    "text_band_fraction": 0.15,   # Headline band height as a share of canvas height
    "text_band_margin": 30,       # Extra pixels kept clear above and below the band

    # --- Placement ---
    # Rejection sampling: each candidate gets max_attempts random centres at
    # its current scale, then shrinks by scale_step until placed or dropped.
    "max_attempts": 500,
    "scale_step": 0.05,
    "min_scale": 0.2,
    "edge_padding": 10,             # Gap kept from the band and the side edges
    "min_center_separation": 15,    # Minimum centre delta on each axis (px)
    "similar_area_ratio": 0.4,      # Above this area ratio, no overlap at all
    "max_overlap_fraction": 0.60,   # Allowed overlap of the smaller rectangle
    "hero_count": 2,
    "hero_size_range": (2.0, 3.0),  # Multipliers of the base size
    "base_size_range": (0.5, 1.2),
    "size_jitter": (0.85, 1.15),
    "base_size_fraction": 0.5,      # Base size as a share of the usable strip
    "z_spacing": 5,                 # Depth step between consecutive nodes

    # --- Timeline ---
    "intro_blank_frames": 20,
    "word_reveal_interval": 3,
    "line_break_pause": 5,
    "pre_burst_pause": 5,
    "stagger_frames": 1,
    "move_duration": 10,
    "ease_power": 4,              # Quartic ease-out for the burst
    "drift_delay": 5,             # Drift starts this many frames after the burst
    "max_drift_dist": 400,
    "drift_decay_power": 2,
    "text_drift_scale": 0.15,
    "expansion_buffer": 90,       # Frames held after the last arrival
    "implode_duration": 8,
    "start_z_depth": -200,        # Depth every node flies in from

    # --- Camera ---
    "camera_distance": 2200,
    "field_of_view": math.pi / 3,
    "near_plane": 0.1,
    "orbit_sensitivity": 0.005,   # Radians per pixel of pointer drag

    # --- Headline ---
    "headline": "Spice of Life",
    "handle": "CAROLWELLS",
    "headline_size": 48,
    "subhead_size": 44,
    "headline_tracking": -1.5,
    "subhead_tracking": -2.0,
    "leading_factor": 1.05,
    "text_color": (0, 0, 0, 255),
    "hero_word_count": 2,         # Line 2 words set in the headline face
    "headline_fonts": [
        "ItemsTextTrial-Medium.otf",
        "DejaVuSans-Bold.ttf",
    ],
    "subhead_fonts": [
        "ABCOracle-Medium-Trial.otf",
        "DejaVuSans.ttf",
    ],

    # --- Assets ---
    "corner_radius_fraction": 0.08,  # Of the shorter side
    "asset_max_side": 1600,          # Downscale large photos once on load
    "upload_debounce": 0.1,          # Seconds of quiet before a relayout
    "upload_batch_window": 1.0,      # Later uploads start a fresh batch

    # --- Video ---
    "fps": 30,
    "trailing_frames": 15,        # Held after the implosion before auto-stop
    "crf": 18,
    "preset": "medium",
}

# ---------------------------------------------------------------------------
# Derived paths, all relative to this file's location
# ---------------------------------------------------------------------------
ROOT = Path(__file__).parent
INPUT_DIR = ROOT / "input"
PHOTOS_DIR = INPUT_DIR / "photos"
FONTS_DIR = ROOT / "fonts"
OUTPUT_DIR = ROOT / "output"

SYSTEM_FONT_DIRS = [
    Path("/usr/share/fonts/truetype/dejavu"),
    Path("/System/Library/Fonts/Supplemental"),
    Path("/Library/Fonts"),
]
