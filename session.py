"""
Session: the boundary layer between the host loop and the engines.

Holds the live state (assets, node set, timeline, camera, canvas size,
recording) and turns user commands into engine calls. The engines stay
pure; coalescing, ignoring events during a recording and reporting user
errors all happen here.

One tick renders one frame. The host calls tick() once per frame callback,
never concurrently.
"""

import json
import random
import time

import placement
import scene
import text_reveal
import timeline
from config import CONFIG
from video import FrameRecorder


class Session:
    """Live editorial-burst composition.

    Args:
        headline, handle: Headline text (defaults from CONFIG)
        rng: random.Random used for every layout (seed it for replays)
        recorder_factory: Callable (path, width, height) -> capture sink with
            start(), capture(frame) and stop()
        clock: Callable returning seconds, used for upload debouncing
    """

    def __init__(self, headline=None, handle=None, rng=None,
                 recorder_factory=FrameRecorder, clock=time.monotonic):
        self.headline = CONFIG["headline"] if headline is None else headline
        self.handle = CONFIG["handle"] if handle is None else handle
        self.rng = rng or random.Random()
        self.recorder_factory = recorder_factory
        self.clock = clock

        self.assets = []
        self.nodes = []
        self.layout_version = 0
        self.timeline = timeline.TimelineState()
        self.camera = scene.Camera()
        self.frame = 0

        self.resolution = CONFIG["default_resolution"]
        self.width, self.height = CONFIG["resolutions"][self.resolution]

        self.recorder = None
        self.record_end_frame = None
        self._last_upload = None
        self._upload_pending = False

    @property
    def is_recording(self):
        return self.recorder is not None

    def words(self):
        return text_reveal.line_words(self.headline, self.handle)

    def _warn(self, message):
        print(f"  WARNING: {message}")

    # -----------------------------------------------------------------------
    # Layout and triggers
    # -----------------------------------------------------------------------

    def relayout(self):
        """Build a new node set and swap it in whole."""
        nodes = placement.generate_layout(self.assets, self.width, self.height, self.rng)
        self.nodes = nodes
        self.layout_version += 1
        return nodes

    def trigger(self, instant=True):
        if instant:
            self.timeline = timeline.instant_trigger(self.frame)
        else:
            w1, w2 = self.words()
            self.timeline = timeline.full_trigger(self.frame, w1, w2)

    def reset_camera(self):
        self.camera = scene.Camera()

    def reshuffle(self):
        """New random layout of the current assets, shown finished."""
        if not self.assets:
            self._warn("Please upload images first!")
            return False
        self.reset_camera()
        self.relayout()
        self.trigger(instant=True)
        return True

    def play_full(self):
        """Replay the whole sequence from a blank canvas."""
        if not self.nodes:
            self._warn("Please upload images first!")
            return False
        self.trigger(instant=False)
        return True

    def drag(self, dx, dy):
        self.camera = self.camera.orbit(dx, dy)

    # -----------------------------------------------------------------------
    # Uploads
    # -----------------------------------------------------------------------
    # An upload more than upload_batch_window seconds after the previous one
    # starts a new batch and replaces the old images. Within a batch every
    # upload restarts the debounce timer; tick() polls and relayouts once the
    # batch has been quiet for upload_debounce seconds.
    # -----------------------------------------------------------------------

    def add_asset(self, asset, now=None):
        now = self.clock() if now is None else now
        if self._last_upload is None or now - self._last_upload > CONFIG["upload_batch_window"]:
            self.assets = []
            self.nodes = []
            self.reset_camera()
        self._last_upload = now
        self.assets.append(asset)
        self._upload_pending = True

    def poll_uploads(self, now=None):
        """Relayout if a settled upload batch is waiting. Returns True if it did."""
        if not self._upload_pending:
            return False
        now = self.clock() if now is None else now
        if now - self._last_upload < CONFIG["upload_debounce"]:
            return False
        self._upload_pending = False
        self.relayout()
        self.trigger(instant=True)
        return True

    # -----------------------------------------------------------------------
    # Resolution
    # -----------------------------------------------------------------------

    def select_resolution(self, choice, viewport=None):
        """Set the canvas pixel size and lay out again.

        "window" captures the viewport once; later window resizes only change
        how the canvas is displayed, never the layout. Ignored while
        recording so the capture stays frame-exact.
        """
        if self.is_recording:
            return False
        if choice == "window":
            size = viewport or CONFIG["window_size"]
        elif choice in CONFIG["resolutions"]:
            size = CONFIG["resolutions"][choice]
        else:
            raise ValueError(f"unknown resolution {choice!r}")
        self.resolution = choice
        self.width, self.height = int(size[0]), int(size[1])
        self.reset_camera()
        if self.assets:
            self.relayout()
        else:
            self.nodes = []
        self.trigger(instant=True)
        return True

    # -----------------------------------------------------------------------
    # Rendering
    # -----------------------------------------------------------------------

    def render(self, frame=None, scale=1.0):
        """Render a frame of the current composition at scale x canvas size."""
        frame = self.frame if frame is None else frame
        width = int(round(self.width * scale))
        height = int(round(self.height * scale))
        return scene.render_frame(
            self.nodes, self.timeline, frame, self.camera,
            width, height, scale, self.headline, self.handle,
        )

    def tick(self):
        """Lay out a settled upload batch, render the current frame, feed the
        recorder and advance the clock.

        A batch that settles during a recording waits until it has stopped.
        """
        if not self.is_recording:
            self.poll_uploads()
        image = self.render()
        if self.is_recording:
            try:
                self.recorder.capture(image)
            except RuntimeError as e:
                self._abort_recording(e)
        self.frame += 1
        if self.is_recording and self.frame >= self.record_end_frame:
            self.stop_recording()
        return image

    def export_still(self, path, scale=1.0, frame=None):
        print("=== Exporting still ===")
        image = self.render(frame=frame, scale=scale)
        image.save(path)
        print(f"  {image.size[0]}x{image.size[1]} -> {path}")
        return path

    def save_layout(self, path):
        data = {
            "canvas": {"width": self.width, "height": self.height,
                       "resolution": self.resolution},
            "nodes": [n.to_dict() for n in self.nodes],
        }
        with open(path, "w") as f:
            json.dump(data, f, indent=2)
        print(f"  Layout -> {path}")
        return path

    # -----------------------------------------------------------------------
    # Recording
    # -----------------------------------------------------------------------

    def scripted_frames(self):
        w1, w2 = self.words()
        return timeline.scripted_frames(w1, w2, len(self.nodes))

    def start_recording(self, path):
        """Replay the full sequence into a new recording.

        The recorder is started before anything else changes, so a failure
        leaves the layout and the timeline exactly as they were.
        """
        if self.is_recording:
            return False
        if not self.nodes:
            self._warn("Please upload images first!")
            return False
        try:
            recorder = self.recorder_factory(path, self.width, self.height)
            recorder.start()
        except RuntimeError as e:
            self._warn(f"Recording failed: {e}")
            return False

        self.recorder = recorder
        self.reset_camera()
        self.trigger(instant=False)
        self.record_end_frame = self.frame + self.scripted_frames()
        print(f"  Recording {self.scripted_frames()} frames")
        return True

    def stop_recording(self):
        if not self.is_recording:
            return None
        recorder, self.recorder = self.recorder, None
        self.record_end_frame = None
        try:
            return recorder.stop()
        except RuntimeError as e:
            self._warn(f"Recording failed: {e}")
            return None

    def toggle_recording(self, path):
        if self.is_recording:
            return self.stop_recording() is not None
        return self.start_recording(path)

    def _abort_recording(self, error):
        self._warn(f"Recording stopped: {error}")
        recorder, self.recorder = self.recorder, None
        self.record_end_frame = None
        try:
            recorder.stop()
        except RuntimeError as e:
            self._warn(f"Recording failed: {e}")
