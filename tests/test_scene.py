"""Tests for the scene composer."""

import math

import pytest

from placement import Node
from scene import Camera, focal_length, project_nodes, render_frame
from tests.conftest import make_asset
from timeline import TimelineState, frame_state, instant_trigger

BACKGROUND = (233, 235, 230)


def _nodes():
    asset = make_asset(300, 200, name="a.png")
    return [
        Node(asset=asset, width=240, height=160, x=-300, y=-320, z_target=-5, order=0),
        Node(asset=asset, width=180, height=120, x=250, y=330, z_target=0, order=1),
        Node(asset=asset, width=120, height=80, x=500, y=-280, z_target=5, order=2),
    ]


def _screen(quads):
    return [(q.node.order, q.cx, q.cy, q.width, q.height) for q in quads]


@pytest.mark.parametrize("state,frame,camera", [
    (instant_trigger(0), 0, Camera()),
    (TimelineState(0, 0), 30, Camera(0.2, -0.3)),
    (TimelineState(0, 0), 115, Camera(-0.1, 0.4)),
])
def test_projection_scales_with_render_scale(state, frame, camera):
    nodes = _nodes()
    fs = frame_state(state, frame, len(nodes))
    small = _screen(project_nodes(nodes, fs, camera, 960, 540, 1.0))
    big = _screen(project_nodes(nodes, fs, camera, 1920, 1080, 2.0))
    assert [q[0] for q in small] == [q[0] for q in big]
    for a, b in zip(small, big):
        assert b[1:] == pytest.approx(tuple(2 * v for v in a[1:]))


def test_node_at_origin_projects_to_centre():
    node = Node(asset=None, width=100, height=50, x=0, y=0, order=0)
    fs = frame_state(instant_trigger(0), 0, 1)
    (quad,) = project_nodes([node], fs, Camera(), 400, 400, 1.0)
    k = focal_length(400) / 2200
    assert quad.cx == pytest.approx(200)
    assert quad.cy == pytest.approx(200)
    assert quad.width == pytest.approx(100 * k)
    assert quad.height == pytest.approx(50 * k)


def test_focal_length_matches_field_of_view():
    assert focal_length(400) == pytest.approx(200 / math.tan(math.pi / 6))


def test_hidden_nodes_are_not_projected():
    fs = frame_state(TimelineState(0, 0), 0, 3)
    assert project_nodes(_nodes(), fs, Camera(), 960, 540, 1.0) == []


def test_painting_order_is_far_to_near():
    nodes = _nodes()
    fs = frame_state(instant_trigger(0), 0, len(nodes))
    quads = project_nodes(nodes, fs, Camera(), 960, 540, 1.0)
    distances = [q.distance for q in quads]
    assert distances == sorted(distances, reverse=True)
    assert [q.node.order for q in quads] == [0, 1, 2]


def test_intro_frame_is_blank():
    image = render_frame([], TimelineState(0, 0), 5, Camera(), 64, 48)
    assert image.mode == "RGB"
    assert image.getcolors() == [(64 * 48, BACKGROUND)]


def test_preview_draws_node_where_projected():
    asset = make_asset(300, 300, color=(255, 0, 0))
    node = Node(asset=asset, width=300, height=300, x=0, y=-400, order=0)
    image = render_frame([node], instant_trigger(0), 0, Camera(), 400, 400,
                         headline="", handle="x")
    # cy = 200 - 400 * focal / 2200
    assert image.getpixel((200, 137)) == (255, 0, 0)
    assert image.getpixel((5, 5)) == BACKGROUND


def test_render_scale_changes_output_size():
    image = render_frame(_nodes(), instant_trigger(0), 0, Camera(), 160, 90, scale=0.5)
    assert image.size == (160, 90)


def test_camera_orbit_accumulates():
    cam = Camera().orbit(100, 0).orbit(0, -40)
    assert cam.rot_y == pytest.approx(0.5)
    assert cam.rot_x == pytest.approx(-0.2)
