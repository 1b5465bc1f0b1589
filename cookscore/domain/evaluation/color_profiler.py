"""Coarse color bucketing of RGBA pixels.

Each pixel lands in at most one bucket, checked in precedence order
green → red → brown → yellow (first match wins). Alpha is ignored.
"""

from __future__ import annotations

from .models import ColorCounts, PixelBuffer


def profile_colors(pixels: PixelBuffer) -> ColorCounts:
    """Count green/red/brown/yellow pixels.

    An empty buffer yields all-zero counts with ``total_pixels == 0``;
    callers must not divide by it.

    Example:
        >>> counts = profile_colors(PixelBuffer([0, 200, 0, 255] * 100))
        >>> (counts.green, counts.total_pixels)
        (100, 100)
    """
    total = pixels.total_pixels
    if total == 0:
        return ColorCounts(green=0, red=0, brown=0, yellow=0, total_pixels=0)

    rgba = pixels.channels()
    r = rgba[:, 0]
    g = rgba[:, 1]
    b = rgba[:, 2]

    green = (g > r) & (g > b) & (g > 100)
    unmatched = ~green

    red = unmatched & (r > g) & (r > b) & (r > 100)
    unmatched &= ~red

    brown = unmatched & (r > 80) & (g > 60) & (b < 80) & (r > g) & (r > b)
    unmatched &= ~brown

    yellow = unmatched & (r > 150) & (g > 150) & (b < 100)

    return ColorCounts(
        green=int(green.sum()),
        red=int(red.sum()),
        brown=int(brown.sum()),
        yellow=int(yellow.sum()),
        total_pixels=total,
    )
