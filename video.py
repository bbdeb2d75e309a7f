"""
Video capture: raw RGB frames piped to ffmpeg.

Frames are rendered with Pillow and written to ffmpeg's stdin as rawvideo,
one per tick, so the recording is exactly the frames the timeline produced
with no resampling in time.
"""

import subprocess
import threading

from config import CONFIG


class FrameRecorder:
    """Capture sink that encodes frames to an H.264 file through ffmpeg.

    Raises RuntimeError when ffmpeg is missing, closes the pipe early, or
    exits with an error; the caller decides how to report it.
    """

    def __init__(self, path, width, height, fps=None):
        self.path = path
        self.width = width
        self.height = height
        self.fps = fps or CONFIG["fps"]
        self.frames = 0
        self.proc = None
        self._stderr_chunks = []
        self._stderr_thread = None

    def command(self):
        return [
            "ffmpeg", "-y",
            "-f", "rawvideo",
            "-pix_fmt", "rgb24",
            "-s", f"{self.width}x{self.height}",
            "-r", str(self.fps),
            "-i", "pipe:0",
            # libx264 + yuv420p needs even dimensions ("window" sizes may be odd)
            "-vf", "crop=trunc(iw/2)*2:trunc(ih/2)*2",
            "-c:v", "libx264",
            "-preset", CONFIG["preset"],
            "-crf", str(CONFIG["crf"]),
            "-pix_fmt", "yuv420p",
            str(self.path),
        ]

    def start(self):
        try:
            self.proc = subprocess.Popen(self.command(), stdin=subprocess.PIPE,
                                         stderr=subprocess.PIPE)
        except OSError as e:
            raise RuntimeError(f"could not start ffmpeg: {e}") from e

        # Stderr drain thread: ffmpeg blocks once its stderr pipe fills up
        def drain_stderr():
            while True:
                chunk = self.proc.stderr.read(4096)
                if not chunk:
                    break
                self._stderr_chunks.append(chunk)
        self._stderr_thread = threading.Thread(target=drain_stderr, daemon=True)
        self._stderr_thread.start()
        print(f"  Recording {self.width}x{self.height} @ {self.fps}fps -> {self.path}")

    def capture(self, frame):
        if frame.size != (self.width, self.height):
            raise RuntimeError(
                f"frame size {frame.size[0]}x{frame.size[1]} does not match "
                f"recording size {self.width}x{self.height}")
        try:
            self.proc.stdin.write(frame.convert("RGB").tobytes())
        except BrokenPipeError as e:
            raise RuntimeError(f"ffmpeg closed pipe at frame {self.frames}") from e
        self.frames += 1

    def stop(self):
        if self.proc is None:
            return self.path
        try:
            self.proc.stdin.close()
        except BrokenPipeError:
            pass
        self._stderr_thread.join(timeout=30)
        self.proc.wait()
        stderr_data = b"".join(self._stderr_chunks)
        proc, self.proc = self.proc, None
        if proc.returncode != 0:
            print(f"  FFMPEG STDERR:\n{stderr_data.decode(errors='replace')[-3000:]}")
            raise RuntimeError("ffmpeg failed")
        print(f"  Video: {self.frames} frames ({self.frames / self.fps:.1f}s) -> {self.path}")
        return self.path
