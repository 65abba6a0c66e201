import random

import numpy as np

from chroma_blocks.game import CATALOG, PALETTE, Color, ColorPool, deal_piece, palette_index, select_random_shape
from chroma_blocks.game.pieces import TOTAL_DISTRIBUTION_POINTS
from tests.helpers import piece_of


class FixedRandom:
    """Stand-in rng whose random() always returns `value`."""

    def __init__(self, value):
        self.value = value

    def random(self):
        return self.value

    def randrange(self, n):
        return 0


def test_color_equality_uses_tolerance_below_one():
    base = Color(100, 50, 25)
    assert base.matches((100.6, 49.5, 25.99))
    assert not base.matches((101, 50, 25))
    assert not base.matches((100, 50, 24))


def test_palette_has_eight_distinct_colors():
    assert len(PALETTE) == 8
    for i, a in enumerate(PALETTE):
        for b in PALETTE[i + 1:]:
            assert not a.matches(b)
    assert palette_index(PALETTE[5]) == 5
    assert palette_index((1, 2, 3)) == -1


def test_color_pool_shrinks_then_resets():
    pool = ColorPool()
    assert len(pool) == 8
    pool.consume(PALETTE[0])
    assert len(pool) == 7
    assert PALETTE[0] not in pool
    # consuming a color that is already gone changes nothing
    pool.consume(PALETTE[0])
    assert len(pool) == 7
    for color in PALETTE[1:]:
        pool.consume(color)
    assert len(pool) == 8
    assert pool.colors == list(PALETTE)


def test_catalog_shapes_and_weights():
    assert len(CATALOG) == 24
    assert all(1 <= s.distribution_points <= 6 for s in CATALOG)
    assert TOTAL_DISTRIBUTION_POINTS == sum(s.distribution_points for s in CATALOG)
    for shape in CATALOG:
        arr = shape.array
        assert set(np.unique(arr)) <= {0, 1}
        # occupancy matrices are tight: no empty border rows/columns
        assert arr[0].any() and arr[-1].any() and arr[:, 0].any() and arr[:, -1].any()


def test_weighted_selection_walks_catalog_in_order():
    assert select_random_shape(FixedRandom(0.0)) is CATALOG[0]
    # just past the first weight the remainder stays non-negative
    first = CATALOG[0].distribution_points
    assert select_random_shape(FixedRandom((first + 1e-6) / TOTAL_DISTRIBUTION_POINTS)) is CATALOG[1]
    assert select_random_shape(FixedRandom(0.999999)) is CATALOG[-1]


def test_weighted_selection_prefers_heavy_shapes():
    rng = random.Random(7)
    counts = {}
    for _ in range(5000):
        shape = select_random_shape(rng)
        counts[shape.name] = counts.get(shape.name, 0) + 1
    # the 2x2 block carries weight 6, each S/Z carries 1
    assert counts["O2"] > 3 * counts.get("S0", 0)


def test_deal_piece_binds_color():
    rng = random.Random(1)
    piece = deal_piece(PALETTE[3], rng)
    assert piece.color == PALETTE[3]
    assert piece.shape in CATALOG
    anonymous = deal_piece(rng=rng)
    assert palette_index(anonymous.color) >= 0


def test_piece_cells_skip_holes():
    piece = piece_of("L0")
    assert piece.block_count == 4
    assert piece.cells_at(2, 3) == [(2, 3), (2, 4), (3, 4), (4, 4)]
