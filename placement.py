"""
Placement engine: constrained random packing around the headline band.

The canvas is split into a top strip and a bottom strip by a reserved
horizontal band where the headline sits. Images are packed into the two
strips by rejection sampling, largest first, shrinking anything that will
not fit until it either lands or is dropped.

Coordinates are relative to the canvas centre with +y pointing down, so the
top strip is y < -dead_limit and the bottom strip is y > +dead_limit.
"""

import random
from dataclasses import dataclass

from config import CONFIG


@dataclass
class Node:
    """One placed image: centre, size and the depth it flies in to."""

    asset: object
    width: float
    height: float
    x: float
    y: float
    z_target: float = 0.0
    order: int = 0
    hero: bool = False

    @property
    def area(self):
        return self.width * self.height

    def bounds(self):
        """Return (left, top, right, bottom) in canvas-centre coordinates."""
        hw, hh = self.width / 2, self.height / 2
        return (self.x - hw, self.y - hh, self.x + hw, self.y + hh)

    def to_dict(self):
        return {
            "id": self.order + 1,
            "name": getattr(self.asset, "name", ""),
            "hero": self.hero,
            "center_x": round(self.x, 2),
            "center_y": round(self.y, 2),
            "width": round(self.width, 2),
            "height": round(self.height, 2),
            "z_target": self.z_target,
        }


@dataclass(frozen=True)
class CanvasRegion:
    safe_width: float
    boundary_x: float
    boundary_y: float
    dead_limit: float

    @property
    def strip_height(self):
        return self.boundary_y - self.dead_limit

    def top_range(self, h):
        """Valid centre y range (edge side first) for a rectangle of height h."""
        pad = CONFIG["edge_padding"]
        return (-self.boundary_y + h / 2, -self.dead_limit - h / 2 - pad)

    def bottom_range(self, h):
        pad = CONFIG["edge_padding"]
        return (self.boundary_y - h / 2, self.dead_limit + h / 2 + pad)


def canvas_region(width, height):
    """Derive the placement region for a canvas of the given pixel size."""
    safe_w = width * CONFIG["safe_width_fraction"]
    dead_limit = height * CONFIG["text_band_fraction"] / 2 + CONFIG["text_band_margin"]
    return CanvasRegion(
        safe_width=safe_w,
        boundary_x=safe_w / 2,
        boundary_y=height / 2,
        dead_limit=dead_limit,
    )


# ---------------------------------------------------------------------------
# Candidate sizing
# ---------------------------------------------------------------------------
# Target sizes are geometric-mean side lengths (sqrt of the area), so two
# images with the same target cover the same area whatever their aspect
# ratio. Heroes get a multiplier range that starts above the top of the
# regular range, which keeps them the largest items unless the strip clamp
# cuts them down.
# ---------------------------------------------------------------------------

def size_candidates(assets, region, rng):
    """Shuffle, size and clamp every asset, largest area first.

    Args:
        assets: Sequence of ImageAsset-like objects with an ``aspect`` attribute
        region: CanvasRegion for the current canvas
        rng: random.Random used for the shuffle and the size draws

    Returns:
        List of candidate dicts with asset, width, height, area and hero keys
    """
    max_h = region.strip_height - CONFIG["edge_padding"]
    max_w = region.safe_width - 2 * CONFIG["edge_padding"]
    base = max(0.0, min(max_h, max_w)) * CONFIG["base_size_fraction"]

    indices = list(range(len(assets)))
    rng.shuffle(indices)

    candidates = []
    for i in indices:
        asset = assets[i]
        ratio = asset.aspect
        hero = len(candidates) < CONFIG["hero_count"]
        lo, hi = CONFIG["hero_size_range"] if hero else CONFIG["base_size_range"]
        size = base * rng.uniform(lo, hi)
        size *= rng.uniform(*CONFIG["size_jitter"])

        w = size * ratio ** 0.5
        h = size / ratio ** 0.5
        if h > max_h:
            h = max_h
            w = h * ratio
        if w > max_w:
            w = max_w
            h = w / ratio

        candidates.append({
            "asset": asset,
            "width": w,
            "height": h,
            "area": w * h,
            "hero": hero,
        })

    candidates.sort(key=lambda c: c["area"], reverse=True)
    return candidates


# ---------------------------------------------------------------------------
# Acceptance test
# ---------------------------------------------------------------------------

def _overlap_area(a, b):
    al, at, ar, ab = a
    bl, bt, br, bb = b
    ow = min(ar, br) - max(al, bl)
    oh = min(ab, bb) - max(at, bt)
    if ow <= 0 or oh <= 0:
        return 0.0
    return ow * oh


def pair_allowed(x1, y1, w1, h1, x2, y2, w2, h2):
    """Check the separation and overlap rules for one pair of rectangles."""
    sep = CONFIG["min_center_separation"]
    if abs(x1 - x2) < sep or abs(y1 - y2) < sep:
        return False

    overlap = _overlap_area(
        (x1 - w1 / 2, y1 - h1 / 2, x1 + w1 / 2, y1 + h1 / 2),
        (x2 - w2 / 2, y2 - h2 / 2, x2 + w2 / 2, y2 + h2 / 2),
    )
    if overlap <= 0:
        return True

    area1, area2 = w1 * h1, w2 * h2
    smaller = min(area1, area2)
    if smaller / max(area1, area2) > CONFIG["similar_area_ratio"]:
        return False
    return overlap / smaller <= CONFIG["max_overlap_fraction"]


def position_allowed(x, y, w, h, placed):
    """Return True if a w x h rectangle centred at (x, y) fits among placed nodes."""
    for other in placed:
        if not pair_allowed(x, y, w, h, other.x, other.y, other.width, other.height):
            return False
    return True


def find_violations(nodes):
    """List index pairs of nodes that break the packing invariants."""
    bad = []
    for i in range(len(nodes)):
        for j in range(i + 1, len(nodes)):
            a, b = nodes[i], nodes[j]
            if not pair_allowed(a.x, a.y, a.width, a.height,
                                b.x, b.y, b.width, b.height):
                bad.append((i, j))
    return bad


def strip_counts(nodes):
    """Return (top, bottom) node counts."""
    top = sum(1 for n in nodes if n.y < 0)
    return top, len(nodes) - top


# ---------------------------------------------------------------------------
# Sampling
# ---------------------------------------------------------------------------
# The strip with fewer nodes is always tried first, so the two strips never
# drift more than one node apart. Within a strip, y = t^3 remapped onto the
# valid range: most samples land near the canvas edge, away from the
# headline band.
# ---------------------------------------------------------------------------

def sample_position(w, h, region, top_count, bottom_count, rng):
    """Draw one candidate centre, or None when neither strip can hold h."""
    pad = CONFIG["edge_padding"]
    top_edge, top_inner = region.top_range(h)
    bottom_edge, bottom_inner = region.bottom_range(h)
    # A zero-width range still admits one y: items clamped to the strip height
    top_ok = top_inner - top_edge > -1e-6
    bottom_ok = bottom_edge - bottom_inner > -1e-6
    if not top_ok and not bottom_ok:
        return None

    safe_rx = max(0.0, region.boundary_x - w / 2 - pad)
    x = rng.uniform(-safe_rx, safe_rx)

    if top_count < bottom_count:
        use_top = True
    elif bottom_count < top_count:
        use_top = False
    else:
        use_top = rng.random() > 0.5
    if use_top and not top_ok:
        use_top = False
    if not use_top and not bottom_ok:
        use_top = True

    t = rng.random() ** 3
    if use_top:
        y = top_edge + (top_inner - top_edge) * t
    else:
        y = bottom_edge + (bottom_inner - bottom_edge) * t
    return x, y


def place_candidate(cand, region, placed, rng):
    """Try to place one candidate, shrinking on failure.

    Returns:
        A Node, or None once the scale would drop to the floor
    """
    max_attempts = CONFIG["max_attempts"]
    scale = 1.0
    while scale > CONFIG["min_scale"]:
        w = cand["width"] * scale
        h = cand["height"] * scale
        top, bottom = strip_counts(placed)
        for _ in range(max_attempts):
            pos = sample_position(w, h, region, top, bottom, rng)
            if pos is None:
                break
            x, y = pos
            if position_allowed(x, y, w, h, placed):
                return Node(asset=cand["asset"], width=w, height=h, x=x, y=y,
                            hero=cand["hero"])
        # Round so repeated float steps land exactly on the floor
        scale = round(scale - CONFIG["scale_step"], 6)
    return None


def assign_depths(nodes):
    """Space z targets evenly around zero in placement order."""
    spacing = CONFIG["z_spacing"]
    start_z = -(len(nodes) * spacing / 2)
    for i, node in enumerate(nodes):
        node.order = i
        node.z_target = start_z + i * spacing
    return nodes


def generate_layout(assets, width, height, rng=None):
    """Pack all assets into the canvas and return a fresh node list.

    The returned list is new on every call; callers swap it in whole, so a
    render in progress never sees a half-built layout.

    Args:
        assets: Sequence of ImageAsset-like objects (need ``aspect``)
        width, height: Canvas pixel dimensions
        rng: Optional random.Random for reproducible layouts

    Returns:
        List of Nodes in placement order (the burst stagger order)
    """
    if not assets:
        return []
    rng = rng or random.Random()
    region = canvas_region(width, height)

    print("=== Generating layout ===")
    print(f"  Canvas: {width}x{height}, band half-height {region.dead_limit:.0f}px, "
          f"strip height {region.strip_height:.0f}px")
    if region.strip_height <= CONFIG["edge_padding"]:
        print("  Canvas too small: no room above or below the headline band")
        return []

    candidates = size_candidates(assets, region, rng)
    placed = []
    dropped = 0
    for cand in candidates:
        node = place_candidate(cand, region, placed, rng)
        if node is None:
            dropped += 1
            continue
        placed.append(node)

    assign_depths(placed)

    top, bottom = strip_counts(placed)
    print(f"  Placed {len(placed)}/{len(candidates)} images: {top} top, {bottom} bottom")
    if dropped:
        print(f"  Dropped {dropped} image(s) that did not fit at 20% scale")
    bad = find_violations(placed)
    if bad:
        print(f"  WARNING: {len(bad)} pair(s) break the packing rules: {bad}")
    else:
        print("  Packing check: 0 violations")
    return placed
