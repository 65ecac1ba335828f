# main.py

import json
import logging

import numpy as np
import pygame

import constants
import logger_setup
import renderer
from simulator import AnimationLoop, FlowSimulator
from hemodynamics import SimulationParameters

# Get the application's dedicated logger
logger = logging.getLogger(logger_setup.LOGGER_NAME)

# Keyboard controls: key -> (upstream, downstream, constriction) increments.
CONTROL_KEYS = {
    pygame.K_q: (1.0, 0.0, 0.0),
    pygame.K_a: (-1.0, 0.0, 0.0),
    pygame.K_w: (0.0, 1.0, 0.0),
    pygame.K_s: (0.0, -1.0, 0.0),
    pygame.K_e: (0.0, 0.0, 1.0),
    pygame.K_d: (0.0, 0.0, -1.0),
}

LOG_EVERY_FRAMES = 100
MAX_FRAMES_PER_TICK = 3.0


def load_config(config_path='config.json') -> dict:
    with open(config_path, 'r') as f:
        return json.load(f)


def initial_parameters(sim_config: dict) -> SimulationParameters:
    return SimulationParameters(
        upstream_pressure=sim_config.get('upstream_pressure', constants.DEFAULT_UPSTREAM_PRESSURE),
        downstream_pressure=sim_config.get('downstream_pressure', constants.DEFAULT_DOWNSTREAM_PRESSURE),
        constriction_percent=sim_config.get('constriction_percent', constants.DEFAULT_CONSTRICTION_PERCENT),
    )


def handle_key(simulator: FlowSimulator, key: int) -> bool:
    """
    Applies a control key to the simulator. Returns False if the key asks the
    application to quit.
    """
    if key == pygame.K_ESCAPE:
        return False
    if key == pygame.K_r:
        simulator.reset()
    elif key in CONTROL_KEYS:
        upstream, downstream, constriction = CONTROL_KEYS[key]
        simulator.set_parameters(simulator.parameters.nudged(upstream, downstream, constriction))
    return True


def layout(window_size: tuple):
    """Splits the window into vessel canvas, readout band and chart rects."""
    width, height = window_size
    canvas_height = int(height * constants.CANVAS_HEIGHT_FRACTION)
    readout_height = 80
    canvas_rect = pygame.Rect(0, 0, width, canvas_height)
    readout_rect = pygame.Rect(0, canvas_height, width, readout_height)
    chart_top = canvas_height + readout_height + 30
    chart_rect = pygame.Rect(60, chart_top, max(width - 90, 0), max(height - chart_top - 20, 0))
    return canvas_rect, readout_rect, chart_rect


def main():
    """
    Loads the run configuration, initializes pygame and runs the simulator
    until the window is closed.
    """
    config = load_config()
    logger_setup.setup_logging(config)
    sim_config = config['simulation']

    logger.info("Application starting...")
    logger.info(f"Loaded configuration: {config}")

    rng = np.random.default_rng(config['master_seed'])
    logger.info(f"Master RNG initialized with seed: {config['master_seed']}")

    pygame.init()
    screen = pygame.display.set_mode((constants.WIDTH, constants.HEIGHT), pygame.RESIZABLE)
    pygame.display.set_caption(constants.TITLE)
    clock = pygame.time.Clock()
    font = pygame.font.SysFont(None, 22)
    small_font = pygame.font.SysFont(None, 16)

    simulator = FlowSimulator(
        rng,
        particle_count=sim_config.get('particle_count', constants.PARTICLE_COUNT),
        profile_steps=sim_config.get('profile_steps', constants.PROFILE_STEPS),
        parameters=initial_parameters(sim_config),
    )
    canvas_rect, readout_rect, chart_rect = layout(screen.get_size())
    simulator.resize(canvas_rect.width, canvas_rect.height)

    loop = None

    def frame():
        nonlocal canvas_rect, readout_rect, chart_rect

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                loop.stop()
                return
            if event.type == pygame.VIDEORESIZE:
                canvas_rect, readout_rect, chart_rect = layout(screen.get_size())
                simulator.resize(canvas_rect.width, canvas_rect.height)
            elif event.type == pygame.KEYDOWN and not handle_key(simulator, event.key):
                loop.stop()
                return

        elapsed_ms = clock.tick(constants.FPS)
        # Long stalls (window drags) advance at most a few frames.
        simulator.tick(min(elapsed_ms / constants.FRAME_MS, MAX_FRAMES_PER_TICK))

        if loop.frames % LOG_EVERY_FRAMES == 0:
            logger.debug(
                f"Frame={loop.frames}, "
                f"Flow={simulator.flow:.2f}, "
                f"Direction={simulator.flow_direction:+d}, "
                f"MeanSpeed={np.mean(np.abs(simulator.particles.speeds)):.3f}, "
                f"FPS={clock.get_fps():.1f}"
            )

        screen.fill(constants.BACKGROUND)
        if simulator.geometry is not None and not simulator.geometry.is_degenerate:
            canvas = screen.subsurface(canvas_rect)
            renderer.draw_vessel(canvas, simulator.geometry)
            renderer.draw_particles(canvas, simulator.particles)
            renderer.draw_credit(canvas, small_font, canvas.get_rect())
        renderer.draw_readout(screen, font, readout_rect, simulator)
        if chart_rect.width > 0 and chart_rect.height > 0:
            renderer.draw_pressure_chart(screen, font, chart_rect, simulator.profile)
        pygame.display.flip()

    loop = AnimationLoop(frame)
    try:
        loop.run()
    finally:
        logger.info("Application shutting down.")
        pygame.quit()


if __name__ == "__main__":
    main()
