"""
Headline layer: two centred lines revealed word by word.

Words are set glyph by glyph with a fixed negative tracking instead of the
font's own spacing, which gives the tight editorial look. Line widths are
measured the same way before drawing, so each line can be centred while
words are still appearing.
"""

from functools import lru_cache

from PIL import Image, ImageDraw, ImageFont

from config import CONFIG, FONTS_DIR, SYSTEM_FONT_DIRS


@lru_cache(maxsize=64)
def find_font(names, size):
    """Load the first available font from names, falling back to Pillow's default."""
    for name in names:
        for folder in [FONTS_DIR] + SYSTEM_FONT_DIRS:
            fp = folder / name
            if fp.exists():
                try:
                    return ImageFont.truetype(str(fp), size)
                except OSError:
                    continue
    return ImageFont.load_default(size=size)


def line_words(headline, handle):
    return headline.split(), ["curated", "by", f"@{handle}"]


def word_triggers(words1, words2):
    """Frames after the trigger at which each word may appear.

    Line 2 starts line_break_pause frames after the last word of line 1 has
    had its full interval.
    """
    interval = CONFIG["word_reveal_interval"]
    start = CONFIG["intro_blank_frames"]
    line1 = [start + i * interval for i in range(len(words1))]
    line1_finish = line1[-1] + interval if line1 else start
    line2_start = line1_finish + CONFIG["line_break_pause"]
    line2 = [line2_start + i * interval for i in range(len(words2))]
    return line1, line2


def visible_words(frames_passed, words1, words2, preview=False):
    """Return how many words of each line are visible."""
    if preview:
        return len(words1), len(words2)
    line1, line2 = word_triggers(words1, words2)
    return (sum(1 for t in line1 if frames_passed > t),
            sum(1 for t in line2 if frames_passed > t))


def tight_width(word, font, tracking):
    """Width of a word set glyph by glyph with fixed tracking."""
    return sum(font.getlength(ch) + tracking for ch in word)


def _draw_tight(draw, word, x, y, font, tracking, fill):
    cursor = x
    for ch in word:
        draw.text((cursor, y), ch, font=font, fill=fill)
        cursor += font.getlength(ch) + tracking
    return cursor


def _line_layout(words, fonts, tracking):
    """Per-word (x offset, width) plus total width of a line."""
    spans = []
    cursor = 0.0
    for i, word in enumerate(words):
        w = tight_width(word, fonts[i], tracking)
        spans.append((cursor, w))
        cursor += w
        if i < len(words) - 1:
            cursor += fonts[i].getlength(" ")
    return spans, cursor


def _top_for_center(font, text, center_y):
    """Top y that puts the ink of text vertically centred on center_y."""
    _, top, _, bottom = font.getbbox(text or "Hg")
    return center_y - (top + bottom) / 2


def draw_headline(width, height, scale, headline, handle, frames_passed, preview=False):
    """Render the headline layer for one frame.

    Args:
        width, height: Layer size in pixels
        scale: Render scale; font sizes and tracking are multiplied by it
        headline: Line 1 text
        handle: Handle shown on line 2 as "curated by @handle"
        frames_passed: Frames since the full trigger
        preview: Draw everything regardless of timing

    Returns:
        RGBA image, or None while the intro is still blank
    """
    if not preview and frames_passed < CONFIG["intro_blank_frames"]:
        return None

    words1, words2 = line_words(headline, handle)
    shown1, shown2 = visible_words(frames_passed, words1, words2, preview)

    size1 = CONFIG["headline_size"] * scale
    size2 = CONFIG["subhead_size"] * scale
    leading = (size1 + size2) / 2 * CONFIG["leading_factor"]
    track1 = CONFIG["headline_tracking"] * scale
    track2 = CONFIG["subhead_tracking"] * scale

    head1 = find_font(tuple(CONFIG["headline_fonts"]), size1)
    head2 = find_font(tuple(CONFIG["headline_fonts"]), size2)
    sub2 = find_font(tuple(CONFIG["subhead_fonts"]), size2)
    fonts1 = [head1] * len(words1)
    hero = CONFIG["hero_word_count"]
    fonts2 = [head2 if i < hero else sub2 for i in range(len(words2))]

    layer = Image.new("RGBA", (width, height), (0, 0, 0, 0))
    draw = ImageDraw.Draw(layer)
    fill = CONFIG["text_color"]

    lines = [
        (words1, fonts1, track1, shown1, height / 2 - leading / 2),
        (words2, fonts2, track2, shown2, height / 2 + leading / 2),
    ]
    for words, fonts, tracking, shown, center_y in lines:
        spans, total = _line_layout(words, fonts, tracking)
        x0 = (width - total) / 2
        for i in range(shown):
            y = _top_for_center(fonts[i], " ".join(words), center_y)
            _draw_tight(draw, words[i], x0 + spans[i][0], y, fonts[i], tracking, fill)
    return layer
