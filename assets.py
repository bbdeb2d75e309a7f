"""
Asset ingestion: photos on disk -> rounded, immutable image assets.

Photos are decoded once, oriented by their EXIF tag, downscaled so no side
exceeds CONFIG["asset_max_side"], and given rounded corners. The layout and
the renderer only ever see the finished RGBA bitmap and its aspect ratio.
"""

from dataclasses import dataclass

from PIL import Image, ImageDraw, ImageOps

from config import CONFIG, PHOTOS_DIR

PHOTO_SUFFIXES = (".jpg", ".jpeg", ".png", ".webp")


@dataclass(frozen=True)
class ImageAsset:
    image: Image.Image
    aspect: float
    name: str = ""


def round_corners(img, radius_fraction=None):
    """Return an RGBA copy of img with its corners masked off."""
    if radius_fraction is None:
        radius_fraction = CONFIG["corner_radius_fraction"]
    img = img.convert("RGBA")
    w, h = img.size
    radius = min(w, h) * radius_fraction
    mask = Image.new("L", (w, h), 0)
    ImageDraw.Draw(mask).rounded_rectangle((0, 0, w - 1, h - 1), radius=radius, fill=255)
    img.putalpha(mask)
    return img


def asset_from_image(img, name=""):
    """Build an asset from an already decoded PIL image."""
    img = ImageOps.exif_transpose(img)
    max_side = CONFIG["asset_max_side"]
    if max(img.size) > max_side:
        img = img.copy()
        img.thumbnail((max_side, max_side), Image.LANCZOS)
    w, h = img.size
    return ImageAsset(image=round_corners(img), aspect=w / h, name=name)


def load_asset(path):
    """Decode one photo. Returns None (with a warning) if it can't be read."""
    try:
        with Image.open(path) as img:
            img.load()
            return asset_from_image(img, name=path.name)
    except OSError as e:
        print(f"  WARNING: skipping {path.name}: {e}")
        return None


def scan_sources(photos_dir=None):
    """List photo files in the input directory, sorted by name."""
    photos_dir = photos_dir or PHOTOS_DIR
    print("=== Scanning sources ===")
    if not photos_dir.is_dir():
        print(f"  No photo directory at {photos_dir}")
        return []
    photos = [
        f for f in sorted(photos_dir.iterdir())
        if f.is_file() and f.suffix.lower() in PHOTO_SUFFIXES
    ]
    print(f"  Photos: {len(photos)}")
    return photos


def load_assets(paths):
    """Decode every path, dropping the ones that fail."""
    print("=== Loading photos ===")
    assets = []
    for p in paths:
        asset = load_asset(p)
        if asset is not None:
            assets.append(asset)
    print(f"  Loaded {len(assets)}/{len(paths)} photos")
    return assets
