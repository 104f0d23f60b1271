"""Unit tests for statement page tiling"""

import pytest
from store_ledger.domain.pagination import paginate, scaled_height

PAGE = 295.0


def visible_slice(offset: float) -> tuple[float, float]:
    """Image rows [start, end) shown on a page whose image is drawn at offset"""
    return -offset, -offset + PAGE


def test_short_document_is_single_page():
    placements = paginate(120.0, PAGE)

    assert len(placements) == 1
    assert placements[0].offset == 0


def test_exactly_one_page_is_single_page():
    assert len(paginate(PAGE, PAGE)) == 1


def test_three_page_heights_give_three_pages():
    """No trailing blank page when content ends exactly on a page edge"""
    placements = paginate(3 * PAGE, PAGE)

    assert [p.page_number for p in placements] == [1, 2, 3]
    assert [p.offset for p in placements] == [0, -PAGE, -2 * PAGE]


def test_slices_tile_image_without_gap_or_overlap():
    img_height = 3 * PAGE
    slices = [visible_slice(p.offset) for p in paginate(img_height, PAGE)]

    assert slices[0][0] == 0
    for previous, current in zip(slices, slices[1:]):
        assert current[0] == previous[1]
    assert slices[-1][1] == img_height
    assert len(set(slices)) == len(slices)


def test_partial_last_page():
    placements = paginate(700.0, PAGE)

    assert [p.offset for p in placements] == [0, -295.0, -590.0]
    # last slice still reaches the bottom of the image
    assert visible_slice(placements[-1].offset)[1] >= 700.0


def test_offset_follows_height_left_formula():
    img_height = 1000.0
    placements = paginate(img_height, PAGE)
    height_left = img_height - PAGE

    for placement in placements[1:]:
        assert placement.offset == height_left - img_height
        height_left -= PAGE


def test_rejects_non_positive_page_height():
    with pytest.raises(ValueError):
        paginate(100.0, 0)


def test_scaled_height_preserves_aspect_ratio():
    # 1600x4800 raster on a 210-wide page -> 630 tall
    assert scaled_height(1600, 4800, 210) == pytest.approx(630.0)


def test_scaled_height_rejects_empty_raster():
    with pytest.raises(ValueError):
        scaled_height(0, 100, 210)
