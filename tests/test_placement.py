"""Tests for the placement engine."""

import random

import pytest

from placement import (
    Node,
    canvas_region,
    find_violations,
    generate_layout,
    pair_allowed,
    sample_position,
    size_candidates,
    strip_counts,
)
from tests.conftest import make_asset


def test_empty_asset_list_gives_empty_layout():
    assert generate_layout([], 1920, 1080, random.Random(0)) == []


def test_scenario_five_images(scenario_assets, rng):
    nodes = generate_layout(scenario_assets, 1920, 1080, rng)
    assert len(nodes) == 5
    assert find_violations(nodes) == []

    heroes = [n for n in nodes if n.hero]
    others = [n for n in nodes if not n.hero]
    assert len(heroes) == 2
    assert min(h.area for h in heroes) > max(o.area for o in others)


def test_heroes_placed_first(scenario_assets, rng):
    nodes = generate_layout(scenario_assets, 1920, 1080, rng)
    assert [n.hero for n in nodes[:2]] == [True, True]


def test_invariants_hold_across_seeds(many_assets):
    for seed in range(5):
        nodes = generate_layout(many_assets, 1080, 1080, random.Random(seed))
        assert nodes
        assert find_violations(nodes) == []


def test_strips_stay_balanced(many_assets):
    for seed in range(5):
        nodes = generate_layout(many_assets, 1920, 1080, random.Random(seed))
        top, bottom = strip_counts(nodes)
        assert abs(top - bottom) <= 1


def test_nodes_stay_inside_their_strip(many_assets, rng):
    region = canvas_region(1080, 1920)
    nodes = generate_layout(many_assets, 1080, 1920, rng)
    for node in nodes:
        left, top, right, bottom = node.bounds()
        assert left >= -region.boundary_x - 1e-6
        assert right <= region.boundary_x + 1e-6
        assert top >= -region.boundary_y - 1e-6
        assert bottom <= region.boundary_y + 1e-6
        # Never inside the headline band
        assert bottom <= -region.dead_limit or top >= region.dead_limit


def test_depths_follow_placement_order(many_assets, rng):
    nodes = generate_layout(many_assets, 1920, 1080, rng)
    assert [n.order for n in nodes] == list(range(len(nodes)))
    steps = {b.z_target - a.z_target for a, b in zip(nodes, nodes[1:])}
    assert steps == {5}
    assert nodes[0].z_target == -(len(nodes) * 5 / 2)


def test_same_seed_same_layout(scenario_assets):
    a = generate_layout(scenario_assets, 1920, 1080, random.Random(7))
    b = generate_layout(scenario_assets, 1920, 1080, random.Random(7))
    assert [n.to_dict() for n in a] == [n.to_dict() for n in b]


def test_crowded_canvas_drops_instead_of_failing():
    assets = [make_asset(400, 300, name=f"c{i}.png") for i in range(20)]
    nodes = generate_layout(assets, 200, 200, random.Random(3))
    assert 0 < len(nodes) < len(assets)
    assert find_violations(nodes) == []


def test_canvas_too_small_for_strips():
    assets = [make_asset(100, 100)]
    assert generate_layout(assets, 160, 90, random.Random(0)) == []


def test_size_candidates_keep_aspect_and_clamp(scenario_assets, rng):
    region = canvas_region(1920, 1080)
    cands = size_candidates(scenario_assets, region, rng)
    assert [c["area"] for c in cands] == sorted((c["area"] for c in cands), reverse=True)
    for c in cands:
        assert abs(c["width"] / c["height"] - c["asset"].aspect) < 1e-6
        assert c["height"] <= region.strip_height - 10 + 1e-6


def test_pair_allowed_rules():
    # Similar sizes may not overlap at all
    assert not pair_allowed(0, 0, 100, 100, 50, 50, 100, 100)
    # A small item may overlap a big one by up to 60% of its own area
    assert pair_allowed(0, 0, 200, 200, 90, 90, 60, 60)
    assert not pair_allowed(0, 0, 200, 200, 50, 50, 60, 60)
    # Centres too close on either axis
    assert not pair_allowed(0, 0, 10, 10, 10, 500, 10, 10)
    assert not pair_allowed(0, 0, 10, 10, 500, 14, 10, 10)
    assert pair_allowed(0, 0, 10, 10, 500, 15, 10, 10)


def test_find_violations_reports_pairs():
    a = Node(asset=None, width=100, height=100, x=0, y=0)
    b = Node(asset=None, width=100, height=100, x=40, y=40)
    c = Node(asset=None, width=50, height=50, x=400, y=400)
    assert find_violations([a, b, c]) == [(0, 1)]


def _strip_area(region):
    return 2 * region.strip_height * region.safe_width


def test_candidates_fill_the_strips(scenario_assets):
    region = canvas_region(1920, 1080)
    coverage = []
    for seed in range(20):
        cands = size_candidates(scenario_assets, region, random.Random(seed))
        coverage.append(sum(c["area"] for c in cands) / _strip_area(region))
    assert sum(coverage) / len(coverage) > 0.2


def test_heroes_use_most_of_the_strip_height(scenario_assets):
    region = canvas_region(1920, 1080)
    for seed in range(5):
        cands = size_candidates(scenario_assets, region, random.Random(seed))
        for c in cands[:2]:
            assert c["hero"]
            assert c["height"] >= 0.5 * region.strip_height


def test_placed_layout_covers_the_strips(scenario_assets):
    region = canvas_region(1920, 1080)
    coverage = []
    for seed in range(5):
        nodes = generate_layout(scenario_assets, 1920, 1080, random.Random(seed))
        coverage.append(sum(n.area for n in nodes) / _strip_area(region))
    assert sum(coverage) / len(coverage) > 0.15


def test_full_height_item_still_fits():
    # One item clamped to the full usable strip height
    region = canvas_region(1920, 1080)
    h = region.strip_height - 10
    x, y = sample_position(h, h, region, 0, 1, random.Random(0))
    assert y == pytest.approx(-region.boundary_y + h / 2)


def test_layout_reports_packing_check(scenario_assets, rng, capsys):
    generate_layout(scenario_assets, 1920, 1080, rng)
    assert "Packing check: 0 violations" in capsys.readouterr().out
