"""
Scene composer: nodes + timeline -> pixels.

A small software camera replaces the browser's WebGL pipeline. Nodes are
billboards: after the orbit rotation only their centres move, the quads
always face the camera, so each one is a screen-aligned rectangle scaled by
focal / distance and painted far to near.

Every length in the scene (positions, depths, drift, camera distance) is
multiplied by the render scale s and the focal length follows the canvas
height. Rendering at (k*w, k*h, k*s) therefore reproduces the same picture
k times larger; the still export and the video both rely on this.
"""

import math
from dataclasses import dataclass, replace

import numpy as np
from PIL import Image

import text_reveal
import timeline
from config import CONFIG


@dataclass(frozen=True)
class Camera:
    """Orbit angles in radians, accumulated from pointer drags."""

    rot_x: float = 0.0
    rot_y: float = 0.0

    def orbit(self, dx, dy):
        k = CONFIG["orbit_sensitivity"]
        return replace(self, rot_x=self.rot_x + dy * k, rot_y=self.rot_y + dx * k)


@dataclass(frozen=True)
class ScreenQuad:
    node: object
    cx: float
    cy: float
    width: float
    height: float
    distance: float


def rotation_matrix(camera):
    """Orbit rotation: Y first, then X (points are transformed as Rx @ Ry @ p)."""
    cx, sx = math.cos(camera.rot_x), math.sin(camera.rot_x)
    cy, sy = math.cos(camera.rot_y), math.sin(camera.rot_y)
    rx = np.array([[1, 0, 0], [0, cx, -sx], [0, sx, cx]])
    ry = np.array([[cy, 0, sy], [0, 1, 0], [-sy, 0, cy]])
    return rx @ ry


def focal_length(height):
    return (height / 2) / math.tan(CONFIG["field_of_view"] / 2)


def project_nodes(nodes, fstate, camera, width, height, scale):
    """Project every visible node to a screen-space quad.

    Args:
        nodes: Node list in placement order
        fstate: timeline.FrameState for this frame
        camera: Camera orbit
        width, height: Output size in pixels
        scale: Render scale s

    Returns:
        List of ScreenQuads sorted far to near (painting order)
    """
    focal = focal_length(height)
    cam_dist = CONFIG["camera_distance"] * scale
    near = CONFIG["near_plane"] * scale
    start_z = CONFIG["start_z_depth"]
    rot = rotation_matrix(camera)

    quads = []
    for node, t in zip(nodes, fstate.progress):
        if t <= 0:
            continue
        ease = timeline.ease_out(t)
        depth = start_z + (node.z_target - start_z) * ease
        world = np.array([node.x * scale, node.y * scale, (depth + fstate.drift) * scale])
        vx, vy, vz = rot @ world
        dist = cam_dist - vz
        if dist <= near:
            continue
        k = focal / dist
        quads.append(ScreenQuad(
            node=node,
            cx=width / 2 + vx * k,
            cy=height / 2 + vy * k,
            width=node.width * scale * k,
            height=node.height * scale * k,
            distance=dist,
        ))

    quads.sort(key=lambda q: (-q.distance, q.node.order))
    return quads


def _paste_quad(canvas, quad):
    w = int(round(quad.width))
    h = int(round(quad.height))
    if w < 1 or h < 1:
        return
    tile = quad.node.asset.image.resize((w, h), Image.BICUBIC)
    x = int(round(quad.cx - quad.width / 2))
    y = int(round(quad.cy - quad.height / 2))
    canvas.paste(tile, (x, y), tile)


def _apply_text(canvas, layer, text_scale, alpha):
    """Composite the headline layer scaled about the canvas centre."""
    w, h = canvas.size
    if text_scale != 1.0:
        sw = max(1, int(round(w * text_scale)))
        sh = max(1, int(round(h * text_scale)))
        scaled = layer.resize((sw, sh), Image.BICUBIC)
        left = (sw - w) // 2
        top = (sh - h) // 2
        layer = scaled.crop((left, top, left + w, top + h))
    if alpha < 1.0:
        arr = np.array(layer)
        arr[:, :, 3] = (arr[:, :, 3].astype(np.float32) * max(0.0, alpha)).astype(np.uint8)
        layer = Image.fromarray(arr)
    canvas.alpha_composite(layer)


def render_frame(nodes, state, frame, camera, width, height, scale=1.0,
                 headline="", handle=""):
    """Render one composited frame.

    The live tick, the still export and each captured video frame all come
    through here; nothing else draws.

    Args:
        nodes: Node list in placement order
        state: timeline.TimelineState from the last trigger
        frame: Frame number to render
        camera: Camera orbit
        width, height: Output size in pixels
        scale: Render scale s relative to the layout canvas
        headline, handle: Text for the two headline lines

    Returns:
        PIL Image (RGB)
    """
    fstate = timeline.frame_state(state, frame, len(nodes))
    canvas = Image.new("RGBA", (width, height), CONFIG["background_color"] + (255,))

    for quad in project_nodes(nodes, fstate, camera, width, height, scale):
        _paste_quad(canvas, quad)

    if fstate.text_alpha > 0:
        layer = text_reveal.draw_headline(
            width, height, scale, headline, handle,
            fstate.frames_passed, preview=state.preview,
        )
        if layer is not None:
            text_scale = 1.0 if state.preview else fstate.text_scale
            _apply_text(canvas, layer, text_scale, fstate.text_alpha)

    return canvas.convert("RGB")
