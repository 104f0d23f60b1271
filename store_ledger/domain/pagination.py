"""Tiling of a tall rasterized document onto fixed-height pages"""

from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class PagePlacement:
    """Where the full image is drawn on one page"""

    page_number: int
    offset: float  # vertical position of the image top; <= 0, in page units


def scaled_height(raster_width: float, raster_height: float, page_width: float) -> float:
    """Height of the raster once scaled to the page width (aspect ratio preserved)"""
    if raster_width <= 0:
        raise ValueError("raster_width must be positive")
    return raster_height * page_width / raster_width


def paginate(img_height: float, page_height: float) -> List[PagePlacement]:
    """
    Place one tall image across as many pages as it needs.

    Every page draws the same full image; later pages shift it upward by the
    height already consumed so only the next slice is visible:

        page 1: offset 0
        page n: offset = height_left - img_height  (== -(n - 1) * page_height)

    Content ending exactly on a page edge does not open an extra blank page,
    so an image of 3 * page_height yields exactly 3 pages and anything up to
    one page_height yields 1.

    Example:
        img_height=700, page_height=295 -> offsets [0, -295, -590]
    """
    if page_height <= 0:
        raise ValueError("page_height must be positive")

    placements = [PagePlacement(page_number=1, offset=0)]
    height_left = img_height - page_height

    while height_left > 0:
        placements.append(
            PagePlacement(page_number=len(placements) + 1, offset=height_left - img_height)
        )
        height_left -= page_height

    return placements
