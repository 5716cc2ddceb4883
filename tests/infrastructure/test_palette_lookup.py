"""palette_lookup.py のテスト。"""

import numpy as np

from indexed_color_converter.domain.color import rgb_to_lab
from indexed_color_converter.domain.palette import (
    PaletteIndex,
    find_closest_color_index,
    resolve_metric,
)
from indexed_color_converter.infrastructure.palette_lookup import (
    lab_for_colors,
    nearest_palette_indices,
)


class TestNearestPaletteIndices:
    def test_basic(self) -> None:
        colors = np.array([[10, 10, 10], [250, 240, 245]], dtype=np.float64)
        indices = nearest_palette_indices(colors, [(0, 0, 0), (255, 255, 255)])
        np.testing.assert_array_equal(indices, [0, 1])

    def test_tie_prefers_first_entry(self) -> None:
        colors = np.array([[5, 5, 5], [0, 0, 0]], dtype=np.float64)
        indices = nearest_palette_indices(colors, [(0, 0, 0), (10, 10, 10)])
        np.testing.assert_array_equal(indices, [0, 0])
        indices = nearest_palette_indices(colors, [(5, 5, 5), (5, 5, 5)])
        np.testing.assert_array_equal(indices, [0, 0])

    def test_matches_scalar_search(self) -> None:
        rng = np.random.default_rng(42)
        colors = rng.integers(0, 256, size=(200, 3), dtype=np.uint8)
        index = PaletteIndex([[0, 0, 0], [255, 255, 255], [200, 0, 0], [30, 90, 160], [30, 90, 160]])
        for metric, query in [
            ("rgb", colors.astype(np.float64)),
            ("lab", lab_for_colors(colors)),
        ]:
            batch = nearest_palette_indices(query, index.values_for(resolve_metric(metric)))
            scalar = [find_closest_color_index(tuple(int(c) for c in rgb), index, metric) for rgb in colors]
            np.testing.assert_array_equal(batch, scalar)

    def test_chunked_matches_single_pass(self) -> None:
        rng = np.random.default_rng(1)
        colors = rng.uniform(-50, 300, size=(1000, 3))
        palette = [(0, 0, 0), (255, 255, 255), (200, 0, 0), (30, 90, 160)]
        np.testing.assert_array_equal(
            nearest_palette_indices(colors, palette, chunk_size=7),
            nearest_palette_indices(colors, palette),
        )

    def test_diverged_colors_do_not_raise(self) -> None:
        colors = np.array([[1e200, 0, 0], [-1e200, 1e200, 0]], dtype=np.float64)
        indices = nearest_palette_indices(colors, [(0, 0, 0), (255, 255, 255)])
        assert indices.shape == (2,)


class TestLabForColors:
    def test_matches_scalar(self) -> None:
        colors = np.array([[0, 0, 0], [255, 0, 0], [0, 0, 0], [12, 34, 56]], dtype=np.uint8)
        lab = lab_for_colors(colors)
        assert lab.shape == (4, 3)
        for rgb, row in zip(colors, lab):
            assert tuple(row) == rgb_to_lab(tuple(int(c) for c in rgb)).to_tuple()
