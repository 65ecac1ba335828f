import os
import unittest

import numpy as np
import pygame

import main
from hemodynamics import DEFAULT_PARAMETERS, PressureSample, SimulationParameters
from renderer import chart_points
from simulator import FlowSimulator

ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


class TestControls(unittest.TestCase):

    def setUp(self):
        self.sim = FlowSimulator(np.random.default_rng(0), particle_count=10)

    def test_keys_nudge_parameters(self):
        main.handle_key(self.sim, pygame.K_q)
        main.handle_key(self.sim, pygame.K_s)
        main.handle_key(self.sim, pygame.K_e)
        self.assertEqual(self.sim.parameters, SimulationParameters(121, 4, 29))

    def test_nudges_stop_at_range_limits(self):
        self.sim.set_parameters(SimulationParameters(250, 0, 90))
        main.handle_key(self.sim, pygame.K_q)
        main.handle_key(self.sim, pygame.K_s)
        main.handle_key(self.sim, pygame.K_e)
        self.assertEqual(self.sim.parameters, SimulationParameters(250, 0, 90))

    def test_reset_key(self):
        self.sim.set_parameters(SimulationParameters(10, 90, 60))
        self.assertTrue(main.handle_key(self.sim, pygame.K_r))
        self.assertEqual(self.sim.parameters, DEFAULT_PARAMETERS)

    def test_escape_requests_quit(self):
        self.assertFalse(main.handle_key(self.sim, pygame.K_ESCAPE))
        self.assertTrue(main.handle_key(self.sim, pygame.K_SPACE))


class TestConfigAndLayout(unittest.TestCase):

    def test_shipped_config_gives_default_parameters(self):
        config = main.load_config(os.path.join(ROOT, 'config.json'))
        self.assertEqual(main.initial_parameters(config['simulation']), DEFAULT_PARAMETERS)
        self.assertEqual(config['simulation']['particle_count'], 200)

    def test_missing_simulation_values_fall_back_to_defaults(self):
        self.assertEqual(main.initial_parameters({}), DEFAULT_PARAMETERS)

    def test_layout_stacks_canvas_readout_and_chart(self):
        canvas, readout, chart = main.layout((1000, 800))
        self.assertEqual(canvas.size, (1000, 280))
        self.assertEqual(readout.top, canvas.bottom)
        self.assertGreater(chart.top, readout.bottom)
        self.assertLessEqual(chart.bottom, 800)

    def test_layout_never_produces_negative_sizes(self):
        for rect in main.layout((50, 60)):
            self.assertGreaterEqual(rect.width, 0)
            self.assertGreaterEqual(rect.height, 0)


class TestChartPoints(unittest.TestCase):

    def test_maps_samples_into_rect(self):
        rect = pygame.Rect(0, 0, 100, 50)
        profile = [PressureSample(0.0, 200), PressureSample(50.0, 100), PressureSample(100.0, 0)]
        self.assertEqual(chart_points(profile, rect), [(0, 0), (50, 25), (100, 50)])

    def test_clamps_out_of_domain_pressures(self):
        rect = pygame.Rect(10, 10, 100, 50)
        points = chart_points([PressureSample(0.0, 260), PressureSample(100.0, -5)], rect)
        self.assertEqual(points, [(10, 10), (110, 60)])


if __name__ == '__main__':
    unittest.main()
