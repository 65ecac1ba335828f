import unittest

import numpy as np

import constants
from hemodynamics import DEFAULT_PARAMETERS, SimulationParameters
from particle_field import ParticleField
from simulator import AnimationLoop, FlowSimulator


def make_simulator(**kwargs):
    return FlowSimulator(np.random.default_rng(11), **kwargs)


class TestFlowSimulator(unittest.TestCase):

    def test_defaults(self):
        sim = make_simulator()
        self.assertEqual(sim.parameters, DEFAULT_PARAMETERS)
        self.assertAlmostEqual(sim.flow, 5000.0, delta=1e-6)
        self.assertEqual(sim.flow_direction, 1)
        self.assertEqual(len(sim.profile), constants.PROFILE_STEPS + 1)
        self.assertIsNone(sim.geometry)

    def test_set_parameters_accepts_any_finite_pressures(self):
        sim = make_simulator()
        sim.set_parameters(SimulationParameters(5, 120, 28))
        self.assertEqual(sim.parameters, SimulationParameters(5, 120, 28))
        self.assertEqual(sim.effective.upstream, 5)
        self.assertAlmostEqual(sim.flow, -5000.0, delta=1e-6)
        self.assertEqual(sim.flow_direction, -1)
        self.assertEqual(sim.profile[0].pressure, 5)
        self.assertEqual(sim.profile[-1].pressure, 120)

    def test_set_parameters_limits_only_constriction(self):
        sim = make_simulator()
        sim.set_parameters(SimulationParameters(400, 5, 100))
        self.assertEqual(sim.parameters.constriction_percent, 90.0)
        self.assertEqual(sim.parameters.upstream_pressure, 400)
        self.assertTrue(np.isfinite(sim.flow))

    def test_non_finite_parameters_are_rejected(self):
        with self.assertRaises(ValueError):
            make_simulator(parameters=SimulationParameters(120, 5, float('nan')))
        sim = make_simulator()
        with self.assertRaises(ValueError):
            sim.set_parameters(SimulationParameters(float('inf'), 5, 28))
        self.assertEqual(sim.parameters, DEFAULT_PARAMETERS)

    def test_set_parameters_logs_the_change(self):
        sim = make_simulator()
        with self.assertLogs('flow_sim', level='INFO') as captured:
            sim.set_parameters(SimulationParameters(100, 5, 40))
        self.assertIn('constriction=40%', captured.output[0])

    def test_reset_restores_defaults(self):
        sim = make_simulator()
        sim.set_parameters(SimulationParameters(200, 50, 70))
        sim.reset()
        self.assertEqual(sim.parameters, DEFAULT_PARAMETERS)
        self.assertAlmostEqual(sim.flow, 5000.0, delta=1e-6)

    def test_tick_before_layout_is_skipped(self):
        sim = make_simulator()
        self.assertFalse(sim.tick())
        self.assertEqual(sim.particles.state, ParticleField.UNINITIALIZED)

    def test_resize_seeds_and_tick_moves_particles(self):
        sim = make_simulator(particle_count=50)
        sim.resize(640, 160)
        self.assertEqual(sim.particles.state, ParticleField.RUNNING)
        before = sim.particles.xs.copy()
        self.assertTrue(sim.tick())
        self.assertFalse(np.array_equal(before, sim.particles.xs))
        self.assertEqual(sim.geometry.width, 640)

    def test_resize_replaces_collection_only_on_change(self):
        sim = make_simulator(particle_count=20)
        sim.resize(640, 160)
        xs = sim.particles.xs
        sim.resize(640, 160)
        self.assertIs(sim.particles.xs, xs)
        sim.resize(800, 200)
        self.assertIsNot(sim.particles.xs, xs)
        self.assertEqual(len(sim.particles.xs), 20)

    def test_resize_to_zero_pauses_updates(self):
        sim = make_simulator(particle_count=20)
        sim.resize(640, 160)
        sim.resize(640, 0)
        self.assertFalse(sim.tick())

    def test_geometry_follows_constriction(self):
        sim = make_simulator()
        sim.resize(640, 160)
        sim.set_parameters(SimulationParameters(120, 5, 50))
        sim.tick()
        self.assertAlmostEqual(sim.geometry.restricted_width, sim.geometry.normal_width / 2.0)

    def test_reversed_flow_moves_particles_upstream(self):
        sim = make_simulator(particle_count=50)
        sim.resize(640, 160)
        sim.set_parameters(SimulationParameters(5, 120, 28))
        sim.tick()
        self.assertTrue(np.all(sim.particles.speeds <= 0))


class TestAnimationLoop(unittest.TestCase):

    def test_runs_requested_number_of_frames(self):
        calls = []
        loop = AnimationLoop(lambda: calls.append(1))
        self.assertEqual(loop.run(max_frames=5), 5)
        self.assertEqual(len(calls), 5)
        self.assertEqual(loop.state, AnimationLoop.IDLE)

    def test_stop_from_inside_a_frame_cancels_further_frames(self):
        calls = []

        def frame():
            calls.append(1)
            if len(calls) == 3:
                loop.stop()

        loop = AnimationLoop(frame)
        loop.run(max_frames=100)
        self.assertEqual(len(calls), 3)
        self.assertEqual(loop.state, AnimationLoop.STOPPED)

    def test_stopped_loop_cannot_restart(self):
        loop = AnimationLoop(lambda: None)
        loop.stop()
        with self.assertRaises(RuntimeError):
            loop.run(max_frames=1)

    def test_failing_frame_stops_the_loop(self):
        def frame():
            raise ZeroDivisionError("frame failed")

        loop = AnimationLoop(frame)
        with self.assertRaises(ZeroDivisionError):
            loop.run(max_frames=10)
        self.assertEqual(loop.state, AnimationLoop.STOPPED)
        with self.assertRaises(RuntimeError):
            loop.run(max_frames=1)

    def test_drives_simulator_with_particles_contained(self):
        sim = make_simulator(particle_count=100)
        sim.resize(640, 160)
        loop = AnimationLoop(sim.tick)
        loop.run(max_frames=300)
        offsets = np.abs(sim.particles.ys - sim.geometry.centerline)
        self.assertTrue(np.all(offsets <= sim.geometry.normal_width / 2.0 + 1e-9))


if __name__ == '__main__':
    unittest.main()
