import math
import os
import unittest
from unittest import mock

from camera_path.config import SPRING_CONFIG, CameraSettings, SpringDynamics
from camera_path.physics import (
    INITIAL_STATE,
    SpringParams,
    advance,
    exponential_tau,
    integrate_exponential,
    integrate_spring,
    normalize_smoothing_amount,
    spring_params,
)


class SpringTests(unittest.TestCase):
    def test_converges_and_snaps(self):
        center, vel = (0.5, 0.5), (0.0, 0.0)
        target = (0.7, 0.3)
        params = spring_params(None)
        for _ in range(600):
            center, vel = integrate_spring(center, vel, target, 1 / 60, params)
        self.assertEqual(center, target)
        self.assertEqual(vel, (0.0, 0.0))

    def test_substeps_match_small_frames(self):
        params = SpringParams(60.0, 15.0)
        one, _ = integrate_spring((0.5, 0.5), (0.0, 0.0), (0.8, 0.5), 0.032, params)
        two, v = integrate_spring((0.5, 0.5), (0.0, 0.0), (0.8, 0.5), 0.016, params)
        two, _ = integrate_spring(two, v, (0.8, 0.5), 0.016, params)
        self.assertAlmostEqual(one[0], two[0])

    def test_param_precedence(self):
        dyn = CameraSettings(smoothness=50, dynamics=SpringDynamics(100.0, 10.0, 2.0))
        frozen = spring_params(dyn, outro=True, frozen=True)
        self.assertEqual(frozen.stiffness, SPRING_CONFIG["frozen_stiffness"])
        self.assertEqual(spring_params(dyn, outro=True), SpringParams(100.0, 10.0, 2.0))

        smooth = CameraSettings(smoothness=50)
        self.assertEqual(spring_params(smooth, outro=True).stiffness, SPRING_CONFIG["outro_stiffness"])
        mid = spring_params(smooth)
        self.assertAlmostEqual(mid.stiffness, 170.0)
        self.assertAlmostEqual(mid.damping, 27.5)
        self.assertEqual(spring_params(None).stiffness, SPRING_CONFIG["stiffness"])


class ExponentialTests(unittest.TestCase):
    def test_tau_uses_strongest_smoothing(self):
        settings = CameraSettings(smoothness=0, integrator="exponential")
        self.assertAlmostEqual(exponential_tau(settings, 0, 1.0), 0.08 + 0.42 * 0.08)
        self.assertAlmostEqual(exponential_tau(settings, 100, 1.0), 0.5)
        self.assertAlmostEqual(exponential_tau(settings, 0, 1.0, outro=True),
                               2 * exponential_tau(settings, 0, 1.0))
        self.assertGreater(exponential_tau(settings, 0, 3.0), exponential_tau(settings, 0, 1.0))

    def test_tau_follows_spring_dynamics(self):
        soft = CameraSettings(smoothness=100, integrator="exponential", dynamics=SpringDynamics(100.0, 10.0))
        stiff = CameraSettings(integrator="exponential", dynamics=SpringDynamics(400.0, 10.0))
        self.assertAlmostEqual(exponential_tau(soft, 100, 3.0), 0.1)
        self.assertAlmostEqual(exponential_tau(stiff, 0, 1.0), 0.05)
        self.assertAlmostEqual(exponential_tau(stiff, 0, 1.0, outro=True), 0.1)

        soft_center, _ = advance((0.5, 0.5), (0.0, 0.0), (0.8, 0.5), 1 / 60, soft)
        stiff_center, _ = advance((0.5, 0.5), (0.0, 0.0), (0.8, 0.5), 1 / 60, stiff)
        self.assertGreater(stiff_center[0], soft_center[0])

    def test_first_order_lag(self):
        (x, _), (vx, _) = integrate_exponential((0.0, 0.0), (1.0, 0.0), 0.1, 0.1)
        self.assertAlmostEqual(x, 1 - math.exp(-1))
        self.assertAlmostEqual(vx, x / 0.1)


class AdvanceTests(unittest.TestCase):
    def test_large_gap_snaps(self):
        self.assertEqual(advance((0.2, 0.2), (1.0, 1.0), (0.6, 0.4), 0.6, None), ((0.6, 0.4), (0.0, 0.0)))

    def test_non_positive_dt_is_a_no_op(self):
        self.assertEqual(advance((0.2, 0.2), (1.0, 1.0), (0.6, 0.4), 0.0, None), ((0.2, 0.2), (1.0, 1.0)))
        self.assertEqual(advance((0.2, 0.2), (1.0, 1.0), (0.6, 0.4), -0.1, None), ((0.2, 0.2), (1.0, 1.0)))

    def test_selects_integrator(self):
        settings = CameraSettings(integrator="exponential")
        center, _ = advance((0.5, 0.5), (0.0, 0.0), (0.6, 0.5), 1 / 60, settings)
        expected, _ = integrate_exponential((0.5, 0.5), (0.6, 0.5), 1 / 60, exponential_tau(settings, 0.0, 1.0))
        self.assertEqual(center, expected)

    def test_initial_state(self):
        self.assertEqual(INITIAL_STATE.center, (0.5, 0.5))
        self.assertIsNone(INITIAL_STATE.last_time_ms)
        moved = INITIAL_STATE.evolve(x=0.7)
        self.assertEqual(moved.center, (0.7, 0.5))
        self.assertEqual(INITIAL_STATE.x, 0.5)


class SettingsTests(unittest.TestCase):
    def test_normalize_smoothing(self):
        self.assertEqual(normalize_smoothing_amount(None), 0.0)
        self.assertEqual(normalize_smoothing_amount(math.nan), 0.0)
        self.assertEqual(normalize_smoothing_amount(0.5), 50.0)
        self.assertEqual(normalize_smoothing_amount(40), 40.0)
        self.assertEqual(normalize_smoothing_amount(250), 100.0)
        self.assertEqual(normalize_smoothing_amount(-3), 0.0)

    def test_from_dict(self):
        s = CameraSettings.from_dict({
            "cameraSmoothness": 30,
            "cameraDynamics": {"stiffness": 120, "damping": 14},
            "integrator": "exponential",
            "motionBlurEnabled": False,
        })
        self.assertEqual(s.smoothness, 30.0)
        self.assertEqual(s.dynamics, SpringDynamics(120.0, 14.0, 1.0))
        self.assertEqual(s.integrator, "exponential")
        self.assertFalse(s.motion_blur_enabled)
        self.assertEqual(CameraSettings.from_dict(None), CameraSettings())

    def test_unknown_integrator(self):
        with self.assertRaises(ValueError):
            CameraSettings(integrator="verlet")

    def test_env_overrides(self):
        env = {"CAMERA_PATH_SMOOTHNESS": "80", "CAMERA_PATH_INTEGRATOR": " Exponential ",
               "CAMERA_PATH_MOTION_BLUR": "off"}
        with mock.patch.dict(os.environ, env):
            s = CameraSettings.from_env(CameraSettings(smoothness=10))
        self.assertEqual(s.smoothness, 80.0)
        self.assertEqual(s.integrator, "exponential")
        self.assertFalse(s.motion_blur_enabled)

    def test_env_untouched_keeps_base(self):
        base = CameraSettings(smoothness=10)
        with mock.patch.dict(os.environ, {}, clear=True):
            self.assertEqual(CameraSettings.from_env(base), base)


if __name__ == "__main__":
    unittest.main()
