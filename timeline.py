"""
Timeline engine: frame number -> animation state.

Everything here is a pure function of the frame number, the TimelineState
set by the last trigger, the node count and the word counts. Nothing is
stored between frames, which is what lets the live preview, a still export
and a video capture render the same frame identically.

Sequence after a full trigger (frames, default tuning):

    ├ blank ┤├ line 1 words ┤├ pause ┤├ line 2 words ┤├ pause ┤
    0       20                                              burst_start
                                                            ├ burst ┤├── drift ──┤├ implode ┤
                                                            stagger + move   +90     8 + stagger

Drift starts a few frames into the burst and keeps growing until the
implosion, when it freezes and collapses with the nodes.
"""

from dataclasses import dataclass

from config import CONFIG

PREVIEW_FRAME = -1


@dataclass(frozen=True)
class TimelineState:
    """Reference frames set by the last trigger.

    trigger_frame < 0 means preview: the finished composition, no animation.
    """

    trigger_frame: int = PREVIEW_FRAME
    burst_start_frame: int = 0

    @property
    def preview(self):
        return self.trigger_frame < 0


@dataclass(frozen=True)
class FrameState:
    phase: str
    progress: tuple
    drift: float
    text_scale: float
    text_alpha: float
    frames_passed: int


def clamp(v, lo=0.0, hi=1.0):
    return max(lo, min(hi, v))


def ease_out(t, power=None):
    """Power ease-out: fast start, soft landing. Maps [0, 1] -> [0, 1]."""
    if power is None:
        power = CONFIG["ease_power"]
    return 1 - (1 - clamp(t)) ** power


def intro_duration(words1, words2):
    """Frames from a full trigger to the first node of the burst."""
    interval = CONFIG["word_reveal_interval"]
    return (CONFIG["intro_blank_frames"]
            + len(words1) * interval
            + CONFIG["line_break_pause"]
            + len(words2) * interval
            + CONFIG["pre_burst_pause"])


def last_item_arrival(node_count):
    return max(node_count - 1, 0) * CONFIG["stagger_frames"] + CONFIG["move_duration"]


def implode_start(node_count):
    """Frames after burst start at which the implosion begins."""
    return last_item_arrival(node_count) + CONFIG["expansion_buffer"]


def implode_span(node_count):
    """Frames from implosion start until the last node has collapsed."""
    return max(node_count - 1, 0) * CONFIG["stagger_frames"] + CONFIG["implode_duration"]


def scripted_frames(words1, words2, node_count):
    """Length of a full sequence, plus a short trailing hold."""
    return (intro_duration(words1, words2)
            + implode_start(node_count)
            + implode_span(node_count)
            + CONFIG["trailing_frames"])


def instant_trigger(frame):
    """Show the finished composition straight away (reshuffle, upload, resize)."""
    return TimelineState(PREVIEW_FRAME, frame - CONFIG["move_duration"])


def full_trigger(frame, words1, words2):
    """Replay the whole sequence from a blank canvas starting at frame."""
    return TimelineState(frame, frame + intro_duration(words1, words2))


def drift_ease(elapsed, node_count):
    """Eased drift progress for a frame before the implosion."""
    horizon = implode_start(node_count)
    drift_time = max(0, elapsed - CONFIG["drift_delay"])
    p = clamp(drift_time / horizon)
    return 1 - (1 - p) ** CONFIG["drift_decay_power"]


def frame_state(state, frame, node_count):
    """Compute every animated quantity for one frame.

    Args:
        state: TimelineState from the last trigger
        frame: Current frame number
        node_count: Number of nodes in the current layout

    Returns:
        FrameState with the phase name, raw per-node progress t (0..1, in
        placement order), drift offset in scene units, text scale and text
        alpha (0..1)
    """
    if state.preview:
        return FrameState("preview", (1.0,) * node_count, 0.0, 1.0, 1.0,
                          frame - state.trigger_frame)

    stagger = CONFIG["stagger_frames"]
    elapsed = frame - state.burst_start_frame
    frames_passed = frame - state.trigger_frame
    start = implode_start(node_count)

    if elapsed <= start:
        move = CONFIG["move_duration"]
        progress = tuple(clamp((elapsed - i * stagger) / move) for i in range(node_count))
        ease = drift_ease(elapsed, node_count)
        if frames_passed < CONFIG["intro_blank_frames"]:
            phase = "intro"
        elif elapsed < 0:
            phase = "reveal"
        elif elapsed < last_item_arrival(node_count):
            phase = "burst"
        else:
            phase = "drift"
        return FrameState(phase, progress, ease * CONFIG["max_drift_dist"],
                          1.0 + ease * CONFIG["text_drift_scale"], 1.0, frames_passed)

    # Implosion: last placed node collapses first, drift freezes at its
    # implosion-start value and shrinks with the overall reverse progress.
    since = elapsed - start
    implode = CONFIG["implode_duration"]
    progress = tuple(
        1 - clamp((since - (node_count - 1 - i) * stagger) / implode)
        for i in range(node_count)
    )
    frozen = drift_ease(start, node_count)
    reverse = clamp(since / implode_span(node_count))
    remaining = 1 - reverse
    alpha = 0.0 if reverse >= 1 else 1.0
    phase = "settled" if reverse >= 1 else "implosion"
    return FrameState(phase, progress, frozen * remaining * CONFIG["max_drift_dist"],
                      1.0 + frozen * remaining * CONFIG["text_drift_scale"], alpha,
                      frames_passed)
