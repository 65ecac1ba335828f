# simulator.py

"""
Ties the flow model to the particle field for a host that drives frames.

FlowSimulator owns the current parameters and canvas size. Parameter changes
are applied as a whole between ticks, and the derived flow and pressure
profile are recomputed at that moment, never mid-tick. AnimationLoop is the
cancellable frame scheduler used by the pygame host and by the tests.
"""

import logging

import numpy as np

import constants
import logger_setup
from hemodynamics import (
    DEFAULT_PARAMETERS,
    SimulationParameters,
    adjust_pressures,
    compute_flow,
    compute_pressure_profile,
    flow_direction,
)
from particle_field import Geometry, ParticleField

logger = logging.getLogger(logger_setup.LOGGER_NAME)


class FlowSimulator:
    """
    Host-facing engine state.

    Data Contract:
    - Inputs:
        - rng (np.random.Generator): Passed to the particle field.
        - particle_count (int): Size of the particle field.
        - profile_steps (int): Number of intervals in the pressure profile.
        - parameters (SimulationParameters): Initial inputs. Constriction is
          limited to its safe range on entry; pressures are taken as given.
    - Outputs: flow, effective, profile, particles, geometry.
    - Invariants: flow, effective and profile always describe the current
      parameters.
    """
    def __init__(self, rng: np.random.Generator, particle_count: int = constants.PARTICLE_COUNT,
                 profile_steps: int = constants.PROFILE_STEPS,
                 parameters: SimulationParameters = DEFAULT_PARAMETERS):
        self.profile_steps = profile_steps
        self.particles = ParticleField(particle_count, rng)
        self.canvas_size = (0, 0)
        self.geometry = None
        self._apply(parameters.guarded())

    def _apply(self, parameters: SimulationParameters):
        self.parameters = parameters
        self.effective = adjust_pressures(
            parameters.upstream_pressure,
            parameters.downstream_pressure,
            parameters.constriction_percent,
        )
        self.flow = compute_flow(self.effective.upstream, self.effective.downstream, parameters.constriction_percent)
        self.profile = compute_pressure_profile(self.effective.upstream, self.effective.downstream, self.profile_steps)

    @property
    def flow_direction(self) -> int:
        return flow_direction(self.effective.upstream, self.effective.downstream)

    def set_parameters(self, parameters: SimulationParameters):
        """
        Replaces all three inputs at once and recomputes every derived value.
        Pressures are accepted as given; only the constriction is limited.
        Raises ValueError for non-finite input.
        """
        parameters = parameters.guarded()
        if parameters == self.parameters:
            return
        self._apply(parameters)
        logger.info(
            f"Parameters: upstream={parameters.upstream_pressure:.0f} mmHg, "
            f"downstream={parameters.downstream_pressure:.0f} mmHg, "
            f"constriction={parameters.constriction_percent:.0f}%. "
            f"Effective={self.effective.upstream:.1f}/{self.effective.downstream:.1f} mmHg, "
            f"flow={self.flow:.2f} mL/min"
        )

    def reset(self):
        self.set_parameters(DEFAULT_PARAMETERS)

    def resize(self, width: int, height: int):
        """
        Records a new drawing-surface size. The particle collection is replaced
        when the size actually changes to a usable one; geometry itself is
        rebuilt at the start of the next tick.
        """
        size = (int(width), int(height))
        if size == self.canvas_size:
            return
        self.canvas_size = size
        geometry = self._current_geometry()
        if geometry.is_degenerate:
            logger.debug(f"Canvas resized to {size[0]}x{size[1]}; waiting for layout.")
            return
        self.particles.seed(geometry)

    def _current_geometry(self) -> Geometry:
        return Geometry.from_canvas(self.canvas_size[0], self.canvas_size[1], self.parameters.constriction_percent)

    def tick(self, delta_tick: float = 1.0) -> bool:
        """One complete, synchronous pass over the particles. Returns True if they moved."""
        self.geometry = self._current_geometry()
        if self.particles.state == ParticleField.UNINITIALIZED and not self.geometry.is_degenerate:
            self.particles.seed(self.geometry)
        return self.particles.advance(self.flow, self.geometry, delta_tick)


class AnimationLoop:
    """
    Cooperative frame scheduler.

    The frame callback runs once per frame. stop() cancels the loop: no callback
    is invoked after it, including when stop() is called from inside a callback.
    A stopped loop cannot be restarted. An exception from the callback stops
    the loop and propagates to the caller of run().
    """
    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"

    def __init__(self, frame_callback):
        self.frame_callback = frame_callback
        self.state = self.IDLE
        self.frames = 0

    def stop(self):
        if self.state != self.STOPPED:
            logger.info(f"Animation loop stopped after {self.frames} frames.")
        self.state = self.STOPPED

    def run(self, max_frames: int = None):
        if self.state == self.STOPPED:
            raise RuntimeError("Animation loop has been stopped and cannot be restarted.")
        self.state = self.RUNNING
        try:
            while self.state == self.RUNNING:
                if max_frames is not None and self.frames >= max_frames:
                    self.state = self.IDLE
                    break
                self.frame_callback()
                self.frames += 1
        finally:
            # A callback that raised leaves the loop cancelled, not running.
            if self.state == self.RUNNING:
                self.stop()
        return self.frames
