# renderer.py

"""
pygame drawing for the flow simulator.

Nothing here feeds back into the model: every function reads the simulator's
current values and paints them onto a surface.
"""

import pygame

import constants


def draw_vessel(surface: pygame.Surface, geometry):
    """Fills the stenotic vessel outline and strokes its wall."""
    points = geometry.outline()
    pygame.draw.polygon(surface, constants.VESSEL_FILL, points)
    pygame.draw.polygon(surface, constants.VESSEL_WALL, points, width=2)


def draw_particles(surface: pygame.Surface, particles):
    """
    Draws the particles that are inside the local vessel band.
    Particles outside it are about to respawn and are not shown.
    """
    inside = particles.inside_mask()
    for x, y in zip(particles.xs[inside], particles.ys[inside]):
        pygame.draw.circle(surface, constants.RED, (int(x), int(y)), constants.PARTICLE_RADIUS)


def direction_arrow(direction: int) -> str:
    return "-->" if direction > 0 else "<--"


def draw_readout(surface: pygame.Surface, font: pygame.font.Font, rect: pygame.Rect, simulator):
    """Effective pressures either side of a direction arrow, and the flow below."""
    effective = simulator.effective
    upstream = font.render(f"Upstream {effective.upstream:.1f} mmHg", True, constants.PRESSURE_BLUE)
    downstream = font.render(f"Downstream {effective.downstream:.1f} mmHg", True, constants.PRESSURE_BLUE)
    arrow = font.render(direction_arrow(simulator.flow_direction), True, constants.BLACK)
    flow = font.render(f"Flow {simulator.flow:.2f} mL/min", True, constants.FLOW_GREEN)

    row_y = rect.top + 4
    surface.blit(upstream, (rect.left + 8, row_y))
    surface.blit(arrow, (rect.centerx - arrow.get_width() // 2, row_y))
    surface.blit(downstream, (rect.right - downstream.get_width() - 8, row_y))
    surface.blit(flow, (rect.centerx - flow.get_width() // 2, row_y + upstream.get_height() + 4))

    params = simulator.parameters
    controls = font.render(
        f"[Q/A] upstream {params.upstream_pressure:.0f}   "
        f"[W/S] downstream {params.downstream_pressure:.0f}   "
        f"[E/D] constriction {params.constriction_percent:.0f}%   [R] reset",
        True,
        constants.GREY,
    )
    surface.blit(controls, (rect.centerx - controls.get_width() // 2, rect.bottom - controls.get_height() - 4))


def chart_points(profile, rect: pygame.Rect, pressure_range=constants.CHART_PRESSURE_RANGE):
    """
    Maps pressure samples into screen coordinates inside rect.
    Position 0-100% spans the width; the pressure domain is fixed so the curve
    does not rescale as the user moves the controls. Values outside the domain
    are clamped to the rect edge.
    """
    low, high = pressure_range
    points = []
    for sample in profile:
        x = rect.left + rect.width * sample.position / 100.0
        fraction = (sample.pressure - low) / (high - low)
        fraction = min(max(fraction, 0.0), 1.0)
        y = rect.bottom - rect.height * fraction
        points.append((int(round(x)), int(round(y))))
    return points


def draw_pressure_chart(surface: pygame.Surface, font: pygame.font.Font, rect: pygame.Rect, profile):
    """Pressure along the vessel as a line chart with a light grid."""
    pygame.draw.rect(surface, constants.WHITE, rect)
    low, high = constants.CHART_PRESSURE_RANGE
    for i in range(constants.CHART_GRID_LINES + 1):
        y = rect.bottom - rect.height * i / constants.CHART_GRID_LINES
        pygame.draw.line(surface, constants.LIGHT_GREY, (rect.left, y), (rect.right, y))
        label = font.render(f"{low + (high - low) * i / constants.CHART_GRID_LINES:.0f}", True, constants.GREY)
        surface.blit(label, (rect.left - label.get_width() - 6, y - label.get_height() // 2))

    points = chart_points(profile, rect)
    if len(points) > 1:
        pygame.draw.lines(surface, constants.PRESSURE_BLUE, False, points, 2)
    for point in points:
        pygame.draw.circle(surface, constants.PRESSURE_BLUE, point, 3)

    title = font.render("Pressure (mmHg) vs position along vessel (%)", True, constants.BLACK)
    surface.blit(title, (rect.centerx - title.get_width() // 2, rect.top - title.get_height() - 4))


def draw_credit(surface: pygame.Surface, font: pygame.font.Font, rect: pygame.Rect) -> pygame.Rect:
    """Attribution in the bottom-right corner of rect, on a light backing. Returns the area drawn."""
    text = font.render(constants.CREDIT_TEXT, True, constants.GREY)
    area = text.get_rect(
        bottomright=(rect.right - constants.CREDIT_MARGIN, rect.bottom - constants.CREDIT_MARGIN)
    )
    pygame.draw.rect(surface, constants.WHITE, area.inflate(4, 2))
    surface.blit(text, area)
    return area
