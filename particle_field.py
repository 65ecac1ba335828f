# particle_field.py

import math
import logging
from dataclasses import dataclass

import numpy as np
import numba

import constants
import logger_setup

logger = logging.getLogger(logger_setup.LOGGER_NAME)

# --- JIT-Compiled Kinematics ---
# The per-particle update is compiled by Numba. It is kept outside the
# ParticleField class and operates only on NumPy arrays and scalars, as
# required by Numba's nopython mode. Random respawn positions are drawn by the
# caller from the injected generator and passed in as an array.

@numba.jit(nopython=True)
def _advance_particles_jit(xs, ys, speeds, draws, base_speed, direction, delta_tick,
                           width, centerline, normal_width, restricted_width,
                           restriction_point, velocity_cap):
    """
    Numba-accelerated single tick over every particle.

    Each particle moves along x with a speed made of three factors:
    - the continuity speed-up, (normal/restricted)^2 capped at velocity_cap,
      applied at and after the restriction point;
    - the parabolic laminar profile across the local vessel width;
    - the flow-derived base speed and direction.
    Particles found outside the local wall respawn at the inlet edge inside the
    normal band. Particles leaving the canvas downstream wrap to the opposite
    edge inside the local band.
    """
    if restricted_width > 0.0:
        area_ratio = (normal_width / restricted_width) ** 2
        restricted_multiplier = min(area_ratio, velocity_cap)
    else:
        restricted_multiplier = velocity_cap

    inlet_x = 0.0 if direction > 0 else width

    for i in range(xs.shape[0]):
        if xs[i] < restriction_point:
            current_width = normal_width
            multiplier = 1.0
        else:
            current_width = restricted_width
            multiplier = restricted_multiplier

        half_width = current_width / 2.0
        distance = abs(ys[i] - centerline)

        if half_width > 0.0:
            normalized = distance / half_width
            laminar = max(0.0, 1.0 - normalized * normalized)
        else:
            laminar = 0.0

        speeds[i] = base_speed * multiplier * direction * laminar

        if distance <= half_width:
            xs[i] += speeds[i] * delta_tick
            if (direction > 0 and xs[i] > width) or (direction < 0 and xs[i] < 0.0):
                xs[i] = inlet_x
                ys[i] = draws[i] * current_width + (centerline - half_width)
        else:
            xs[i] = inlet_x
            ys[i] = draws[i] * normal_width + (centerline - normal_width / 2.0)


@dataclass(frozen=True)
class Geometry:
    """
    Pixel geometry of the vessel on the drawing surface.

    Data Contract:
    - width, height: canvas size in pixels. Either may be 0 before layout.
    - constriction_percent: narrows the vessel from restriction_point to the
      right edge of the canvas.
    """
    width: float
    height: float
    constriction_percent: float

    @classmethod
    def from_canvas(cls, width: float, height: float, constriction_percent: float) -> "Geometry":
        return cls(float(width), float(height), float(constriction_percent))

    @property
    def is_degenerate(self) -> bool:
        return self.width <= 0 or self.height <= 0

    @property
    def centerline(self) -> float:
        return self.height / 2.0

    @property
    def normal_width(self) -> float:
        """Full vessel width upstream of the restriction."""
        return self.height * constants.VESSEL_WIDTH_FRACTION

    @property
    def restricted_width(self) -> float:
        return self.normal_width * (1.0 - self.constriction_percent / 100.0)

    @property
    def restriction_point(self) -> float:
        return self.width * constants.RESTRICTION_POINT_FRACTION

    def local_width(self, x):
        """Vessel width at longitudinal position x (a scalar or an array)."""
        return np.where(np.asarray(x) < self.restriction_point, self.normal_width, self.restricted_width)

    def outline(self):
        """
        Vessel wall polygon, clockwise from the top-left corner.
        Used by the renderer; kept here so the drawn wall and the containment
        test come from the same numbers.
        """
        top_normal = self.centerline - self.normal_width / 2.0
        top_restricted = self.centerline - self.restricted_width / 2.0
        bottom_restricted = self.centerline + self.restricted_width / 2.0
        bottom_normal = self.centerline + self.normal_width / 2.0
        return [
            (0.0, top_normal),
            (self.restriction_point, top_normal),
            (self.restriction_point, top_restricted),
            (self.width, top_restricted),
            (self.width, bottom_restricted),
            (self.restriction_point, bottom_restricted),
            (self.restriction_point, bottom_normal),
            (0.0, bottom_normal),
        ]


class ParticleField:
    """
    Manages the tracer particles that visualize flow through the vessel, using
    NumPy arrays (Structure of Arrays).

    Data Contract:
    - Inputs:
        - num_particles (int): The fixed number of tracer particles.
        - rng (np.random.Generator): Source of every random position; seed it
          for reproducible runs.
    - Outputs: None. This class modifies its internal state.
    - Side Effects: xs, ys and speeds are mutated in place on every advance().
    - Invariants: The particle count never changes. All arrays have length
      num_particles. After any advance() with valid geometry, every particle
      lies within the normal vessel band.

    Lifecycle: a new field is Uninitialized (no geometry). seed() moves it to
    Running; reset() returns it to Uninitialized.
    """
    UNINITIALIZED = "uninitialized"
    RUNNING = "running"

    def __init__(self, num_particles: int, rng: np.random.Generator):
        if num_particles < 0:
            raise ValueError(f"num_particles must be non-negative, got {num_particles}")
        self.num_particles = num_particles
        self.rng = rng
        self.geometry = None
        self.xs = np.zeros(num_particles, dtype=float)
        self.ys = np.zeros(num_particles, dtype=float)
        self.speeds = np.zeros(num_particles, dtype=float)
        self._warned_non_finite = False
        self._skipping = False

    @property
    def state(self) -> str:
        return self.UNINITIALIZED if self.geometry is None else self.RUNNING

    def seed(self, geometry: Geometry):
        """
        Replaces the particle collection for a new drawing surface.
        Particles are spread across the full length and the normal vessel band.
        """
        self.geometry = geometry
        self.speeds = np.zeros(self.num_particles, dtype=float)
        band_top = geometry.centerline - geometry.normal_width / 2.0
        self.xs = self.rng.random(self.num_particles) * geometry.width
        self.ys = self.rng.random(self.num_particles) * geometry.normal_width + band_top
        logger.info(
            f"ParticleField seeded with {self.num_particles} particles "
            f"on a {geometry.width:.0f}x{geometry.height:.0f} canvas."
        )

    def reset(self):
        self.geometry = None
        self.speeds.fill(0.0)

    def advance(self, flow: float, geometry: Geometry, delta_tick: float = 1.0) -> bool:
        """
        Moves every particle by one tick of the velocity field for this flow.

        Returns False when the tick was skipped because the geometry is
        degenerate (canvas not laid out yet); positions are left untouched.
        """
        if geometry.is_degenerate:
            if not self._skipping:
                logger.debug("Canvas has zero size; skipping particle updates.")
                self._skipping = True
            return False
        self._skipping = False
        self.geometry = geometry

        if math.isfinite(flow):
            self._warned_non_finite = False
            base_speed = max(abs(flow) / constants.REFERENCE_FLOW, constants.MIN_BASE_SPEED)
            direction = 1 if flow >= 0 else -1
        else:
            if not self._warned_non_finite:
                logger.warning(f"Non-finite flow ({flow}); particles held at zero velocity.")
                self._warned_non_finite = True
            base_speed = 0.0
            direction = 1

        draws = self.rng.random(self.num_particles)
        _advance_particles_jit(
            self.xs,
            self.ys,
            self.speeds,
            draws,
            base_speed,
            direction,
            float(delta_tick),
            geometry.width,
            geometry.centerline,
            geometry.normal_width,
            geometry.restricted_width,
            geometry.restriction_point,
            constants.VELOCITY_CAP,
        )
        return True

    def inside_mask(self) -> np.ndarray:
        """Boolean mask of particles inside the local vessel band."""
        if self.geometry is None:
            return np.zeros(self.num_particles, dtype=bool)
        local_widths = self.geometry.local_width(self.xs)
        return np.abs(self.ys - self.geometry.centerline) <= local_widths / 2.0


def advance_particles(particles: ParticleField, flow: float, geometry: Geometry, delta_tick: float = 1.0):
    """Advances the field in place by one animation tick. Returns nothing."""
    particles.advance(flow, geometry, delta_tick)
