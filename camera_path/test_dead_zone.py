import unittest

import numpy as np

from camera_path.cursor_glyphs import CursorMargins
from camera_path.dead_zone import (
    OutputOverscan,
    calculate_follow_target,
    get_adaptive_dead_zone_ratio,
    get_half_windows,
)
from camera_path.visibility import (
    ContentBounds,
    clamp_center_to_content_bounds,
    cursor_fully_visible,
    project_center_to_keep_cursor_visible,
)


class DeadZoneTests(unittest.TestCase):
    def test_adaptive_ratio(self):
        self.assertEqual(get_adaptive_dead_zone_ratio(1.0), 0.4)
        self.assertEqual(get_adaptive_dead_zone_ratio(1.5), 0.4)
        self.assertAlmostEqual(get_adaptive_dead_zone_ratio(2.0), 0.376)
        self.assertAlmostEqual(get_adaptive_dead_zone_ratio(4.0), 0.28)
        self.assertAlmostEqual(get_adaptive_dead_zone_ratio(10.0), 0.28)
        self.assertAlmostEqual(get_adaptive_dead_zone_ratio(4.0, 0.5), 0.425)

    def test_half_windows(self):
        self.assertEqual(get_half_windows(1.0, 1920, 1080), (0.5, 0.5))
        self.assertEqual(get_half_windows(2.0, 1920, 1080, 1920, 1080), (0.25, 0.25))
        hx, hy = get_half_windows(2.0, 1920, 1080, 1080, 1080)
        self.assertAlmostEqual(hx, 0.25 * (1920 / 1080))
        self.assertEqual(hy, 0.25)
        hx, hy = get_half_windows(2.0, 1080, 1080, 1920, 1080)
        self.assertEqual(hx, 0.25)
        self.assertAlmostEqual(hy, 0.25 * (1920 / 1080))

    def test_cursor_inside_dead_zone_does_not_move_camera(self):
        center = (0.5, 0.5)
        for cursor in [(0.55, 0.45), (0.5, 0.5), (0.59, 0.41)]:
            self.assertEqual(calculate_follow_target(cursor, center, 0.25, 0.25, 2.0), center)

    def test_tracks_to_dead_zone_edge(self):
        tx, ty = calculate_follow_target((0.8, 0.8), (0.5, 0.5), 0.25, 0.25, 2.0)
        self.assertAlmostEqual(tx, 0.706)
        self.assertAlmostEqual(ty, 0.706)
        tx, _ = calculate_follow_target((0.2, 0.5), (0.5, 0.5), 0.25, 0.25, 2.0)
        self.assertAlmostEqual(tx, 0.294)

    def test_soft_band_is_continuous(self):
        xs = np.linspace(0.5, 0.9, 4001)
        targets = np.array([calculate_follow_target((x, 0.5), (0.5, 0.5), 0.25, 0.25, 2.0)[0] for x in xs])
        step = xs[1] - xs[0]
        self.assertLess(np.max(np.abs(np.diff(targets))), 3.0 * step)
        self.assertTrue(np.all(np.diff(targets) >= -1e-12))


class OverscanTests(unittest.TestCase):
    def test_output_space_round_trip(self):
        ov = OutputOverscan(left=0.1, right=0.1, top=0.05, bottom=0.15)
        self.assertAlmostEqual(ov.fill_scale, 1.2)
        x, y = ov.to_output(0.0, 0.0)
        self.assertAlmostEqual(x, 0.1 / 1.2)
        self.assertAlmostEqual(y, 0.05 / 1.2)
        bx, by = ov.from_output(x, y)
        self.assertAlmostEqual(bx, 0.0)
        self.assertAlmostEqual(by, 0.0)
        self.assertFalse(OutputOverscan().any)


class ClampTests(unittest.TestCase):
    ov05 = OutputOverscan(0.05, 0.05, 0.05, 0.05)
    ov10 = OutputOverscan(0.1, 0.1, 0.1, 0.1)

    def test_output_space_strict(self):
        self.assertEqual(clamp_center_to_content_bounds((0.1, 0.9), 0.25, 0.25, self.ov05, True, True), (0.25, 0.75))
        x, y = clamp_center_to_content_bounds((0.0, 1.0), 0.2, 0.2, self.ov10, True, True)
        self.assertGreaterEqual(x, 0.2)
        self.assertLessEqual(y, 0.8)

    def test_output_space_reveals_padding(self):
        self.assertEqual(clamp_center_to_content_bounds((0.0, 1.0), 0.25, 0.25, self.ov05, True, False), (0.0, 1.0))
        self.assertEqual(clamp_center_to_content_bounds((0.1, 0.9), 0.25, 0.25, self.ov10, True, False), (0.1, 0.9))
        self.assertEqual(clamp_center_to_content_bounds((-0.5, 1.5), 0.25, 0.25, self.ov10, True, False), (0.0, 1.0))

    def test_video_space(self):
        x, y = clamp_center_to_content_bounds((-0.05, 1.05), 0.2, 0.2, self.ov10, False, False)
        self.assertAlmostEqual(x, 0.1)
        self.assertAlmostEqual(y, 0.9)
        self.assertEqual(clamp_center_to_content_bounds((0.1, 0.9), 0.25, 0.25, self.ov10, False, True), (0.25, 0.75))

    def test_crop_bounds(self):
        crop = ContentBounds.from_crop({"x": 0.2, "y": 0.0, "width": 0.6, "height": 1.0})
        x, y = clamp_center_to_content_bounds((0.1, 0.5), 0.25, 0.25, content_bounds=crop)
        self.assertAlmostEqual(x, 0.45)
        self.assertEqual(y, 0.5)

    def test_infeasible_range_resolves_to_midpoint(self):
        narrow = ContentBounds.from_crop({"x": 0.2, "y": 0.0, "width": 0.3, "height": 1.0})
        x, _ = clamp_center_to_content_bounds((0.9, 0.5), 0.25, 0.25, content_bounds=narrow)
        self.assertAlmostEqual(x, 0.35)


class VisibilityTests(unittest.TestCase):
    def test_cursor_glyph_stays_on_screen(self):
        rng = np.random.RandomState(7)
        hw = 0.25
        for _ in range(500):
            center = tuple(rng.uniform(hw, 1 - hw, 2))
            cursor = tuple(rng.uniform(0, 1, 2))
            m = CursorMargins(*rng.uniform(0, 0.05, 4))
            out = project_center_to_keep_cursor_visible(center, cursor, hw, hw, margins=m)
            if cursor_fully_visible(out, cursor, hw, hw, m):
                continue
            # Only allowed to fail on an axis pinned at the widest feasible bound
            x_ok = cursor_fully_visible(out, cursor, hw, hw, CursorMargins(m.left, m.right, 0, 0))
            y_ok = cursor_fully_visible(out, cursor, hw, hw, CursorMargins(0, 0, m.top, m.bottom))
            for ok, c in ((x_ok, out[0]), (y_ok, out[1])):
                if not ok:
                    self.assertTrue(abs(c - hw) < 1e-12 or abs(c - (1 - hw)) < 1e-12, (center, cursor, m, out))

    def test_visible_cursor_leaves_center_alone(self):
        m = CursorMargins(0.01, 0.01, 0.01, 0.01)
        self.assertEqual(project_center_to_keep_cursor_visible((0.5, 0.5), (0.55, 0.45), 0.25, 0.25, margins=m),
                         (0.5, 0.5))

    def test_pushes_minimum_distance(self):
        m = CursorMargins(0.0, 0.05, 0.0, 0.0)
        x, y = project_center_to_keep_cursor_visible((0.3, 0.5), (0.6, 0.5), 0.25, 0.25, margins=m)
        self.assertAlmostEqual(x, 0.4)
        self.assertEqual(y, 0.5)

    def test_giant_glyph_is_centered_on(self):
        m = CursorMargins(0.3, 0.3, 0.3, 0.3)
        x, y = project_center_to_keep_cursor_visible((0.7, 0.3), (0.5, 0.5), 0.25, 0.25, margins=m)
        self.assertAlmostEqual(x, 0.5)
        self.assertAlmostEqual(y, 0.5)

    def test_edge_cursor_stops_at_allowed_range(self):
        m = CursorMargins(0.0, 0.05, 0.0, 0.05)
        x, y = project_center_to_keep_cursor_visible((0.5, 0.5), (1.0, 1.0), 0.25, 0.25, margins=m)
        self.assertEqual((x, y), (0.75, 0.75))


if __name__ == "__main__":
    unittest.main()
