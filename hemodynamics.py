# hemodynamics.py

"""
Steady-state hemodynamics of a vessel with a single stenosis.

Three pure functions make up the flow model:
- adjust_pressures: nominal pressures -> effective boundary pressures.
- compute_flow: effective pressures + constriction -> signed flow (mL/min).
- compute_pressure_profile: effective pressures -> pressure along the vessel.

None of them carry state between calls. SimulationParameters is the value the
host replaces wholesale whenever the user changes an input.
"""

import math
from dataclasses import dataclass, replace
from typing import List, NamedTuple

import constants


class EffectivePressures(NamedTuple):
    upstream: float
    downstream: float


class PressureSample(NamedTuple):
    position: float  # Percent of vessel length
    pressure: int    # mmHg, rounded for display


def _clamp(value: float, bounds: tuple) -> float:
    low, high = bounds
    return min(max(value, low), high)


@dataclass(frozen=True)
class SimulationParameters:
    """
    User-set inputs for one evaluation of the model.

    Data Contract:
    - upstream_pressure, downstream_pressure: mmHg. Any finite value is a valid
      model input; the host's control ranges are applied by clamped().
    - constriction_percent: percent narrowing of the stenosis. The flow model is
      undefined at 100; call guarded() (or clamped()) before handing input to
      the solver.
    - Non-finite fields are rejected with ValueError by both.
    """
    upstream_pressure: float = constants.DEFAULT_UPSTREAM_PRESSURE
    downstream_pressure: float = constants.DEFAULT_DOWNSTREAM_PRESSURE
    constriction_percent: float = constants.DEFAULT_CONSTRICTION_PERCENT

    def _check_finite(self):
        for name in ('upstream_pressure', 'downstream_pressure', 'constriction_percent'):
            value = getattr(self, name)
            if not math.isfinite(value):
                raise ValueError(f"{name} must be finite, got {value}")

    def guarded(self) -> "SimulationParameters":
        """Returns a copy with only the constriction limited to its safe range."""
        self._check_finite()
        return replace(self, constriction_percent=_clamp(self.constriction_percent, constants.CONSTRICTION_RANGE))

    def clamped(self) -> "SimulationParameters":
        """Returns a copy with every field limited to the host's control range."""
        self._check_finite()
        return SimulationParameters(
            upstream_pressure=_clamp(self.upstream_pressure, constants.UPSTREAM_RANGE),
            downstream_pressure=_clamp(self.downstream_pressure, constants.DOWNSTREAM_RANGE),
            constriction_percent=_clamp(self.constriction_percent, constants.CONSTRICTION_RANGE),
        )

    def nudged(self, upstream: float = 0.0, downstream: float = 0.0, constriction: float = 0.0) -> "SimulationParameters":
        """Returns a clamped copy with each field shifted by the given amount."""
        return replace(
            self,
            upstream_pressure=self.upstream_pressure + upstream,
            downstream_pressure=self.downstream_pressure + downstream,
            constriction_percent=self.constriction_percent + constriction,
        ).clamped()


DEFAULT_PARAMETERS = SimulationParameters()


def adjust_pressures(upstream: float, downstream: float, constriction: float) -> EffectivePressures:
    """
    Applies the autoregulation offset to the upstream pressure.

    At the resting tone (28%) the correction is zero; every percent of
    constriction above or below it shifts the effective upstream pressure by
    0.5 mmHg. The downstream pressure is passed through.
    """
    correction = (constriction - constants.NORMAL_CONSTRICTION) * constants.PRESSURE_CORRECTION_GAIN
    return EffectivePressures(upstream + correction, downstream)


def flow_direction(upstream: float, downstream: float) -> int:
    """+1 for upstream -> downstream flow (including zero gradient), -1 otherwise."""
    return 1 if upstream >= downstream else -1


def calculate_resistance(constriction: float) -> float:
    """
    Resistance of the vessel at the given constriction.

    The effective radius shrinks linearly with the open fraction, so resistance
    grows with its inverse fourth power. A fully occluded vessel has infinite
    resistance; the model is not meaningful above 90% and callers clamp first.
    """
    open_percent = 100.0 - constriction
    if open_percent == 0:
        return math.inf
    return constants.BASE_RESISTANCE * (100.0 / open_percent) ** constants.RESISTANCE_EXPONENT


def compute_flow(upstream: float, downstream: float, constriction: float) -> float:
    """
    Volumetric flow (mL/min) through the vessel, signed by direction.

    Expects effective pressures (see adjust_pressures). A zero pressure
    gradient gives exactly zero flow.
    """
    delta_p = upstream - downstream
    if delta_p == 0:
        return 0.0
    return delta_p / calculate_resistance(constriction)


def _display_round(value: float) -> int:
    # Halves round toward +inf, matching the chart's integer labels.
    return int(math.floor(value + 0.5))


def compute_pressure_profile(upstream: float, downstream: float, step_count: int = constants.PROFILE_STEPS) -> List[PressureSample]:
    """
    Samples the pressure along the vessel at step_count + 1 evenly spaced points.

    The drop is split across three zones and is linear inside each one:
    10% before the stenosis, 80% across it, and 10% after it. Each incremental
    drop is signed by the flow direction, so the curve always falls in the
    direction of flow and runs from upstream at 0% to downstream at 100%.
    """
    if step_count < 1:
        raise ValueError(f"step_count must be at least 1, got {step_count}")

    direction = flow_direction(upstream, downstream)
    drop = abs(upstream - downstream)
    pre_drop = drop * constants.PRE_STENOSIS_DROP
    stenosis_drop = drop * constants.STENOSIS_DROP
    post_drop = drop * constants.POST_STENOSIS_DROP
    stenosis_length = constants.STENOSIS_END - constants.STENOSIS_START
    post_length = 100.0 - constants.STENOSIS_END

    samples = []
    for i in range(step_count + 1):
        position = (i / step_count) * 100.0

        if position < constants.STENOSIS_START:
            lost = pre_drop * (position / constants.STENOSIS_START)
        elif position < constants.STENOSIS_END:
            fraction = (position - constants.STENOSIS_START) / stenosis_length
            lost = pre_drop + stenosis_drop * fraction
        else:
            fraction = (position - constants.STENOSIS_END) / post_length
            lost = pre_drop + stenosis_drop + post_drop * fraction

        pressure = upstream - lost * direction
        samples.append(PressureSample(position, _display_round(pressure)))

    return samples
