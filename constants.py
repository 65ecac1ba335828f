# constants.py

"""
Application Constants

This module defines static configuration values for the flow model and the
pygame host. These are not expected to change between simulation runs.

Data Contract:
- All values are immutable constants.
- Units are specified in comments where applicable.
"""

# Window dimensions (initial; the window is resizable)
WIDTH = 1200  # Pixels
HEIGHT = 800  # Pixels

# Fraction of the window height given to the vessel canvas. The rest holds the chart.
CANVAS_HEIGHT_FRACTION = 0.35

# Framerate
FPS = 60  # Frames per second
FRAME_MS = 1000.0 / FPS  # Duration of one nominal animation frame

# Colors (RGB)
BLACK = (0, 0, 0)
WHITE = (255, 255, 255)
RED = (255, 0, 0)
GREY = (120, 120, 120)
LIGHT_GREY = (230, 230, 230)
BACKGROUND = (245, 245, 247)
VESSEL_FILL = (255, 240, 240)
VESSEL_WALL = (230, 110, 110)
PRESSURE_BLUE = (59, 130, 246)
FLOW_GREEN = (22, 163, 74)

# Window Title
TITLE = "Blood Flow Simulator: Vessel with Variable Constriction"

# --- Physiological model ---
NORMAL_CONSTRICTION = 28.0        # Percent. Resting arteriolar tone.
PRESSURE_CORRECTION_GAIN = 0.5    # mmHg of upstream correction per percent away from tone.
RESISTANCE_EXPONENT = 4           # Poiseuille: R ~ 1/r^4

# Default operating point (mmHg, mmHg, percent)
DEFAULT_UPSTREAM_PRESSURE = 120.0
DEFAULT_DOWNSTREAM_PRESSURE = 5.0
DEFAULT_CONSTRICTION_PERCENT = NORMAL_CONSTRICTION

# Resting flow (mL/min). Also the scale that maps flow to on-screen particle speed.
REFERENCE_FLOW = 5000.0

# Calibrated so the default operating point yields exactly REFERENCE_FLOW.
BASE_RESISTANCE = (DEFAULT_UPSTREAM_PRESSURE - DEFAULT_DOWNSTREAM_PRESSURE) / (
    REFERENCE_FLOW * (100.0 / (100.0 - DEFAULT_CONSTRICTION_PERCENT)) ** RESISTANCE_EXPONENT
)

# Host input ranges, enforced before anything reaches the solver.
UPSTREAM_RANGE = (0.0, 250.0)      # mmHg
DOWNSTREAM_RANGE = (0.0, 100.0)    # mmHg
CONSTRICTION_RANGE = (0.0, 90.0)   # Percent

# --- Pressure profile zones (percent of vessel length) ---
STENOSIS_START = 30.0
STENOSIS_END = 50.0
PROFILE_STEPS = 10

# Share of the total pressure drop lost in each zone.
PRE_STENOSIS_DROP = 0.1
STENOSIS_DROP = 0.8
POST_STENOSIS_DROP = 0.1

# --- Particle field ---
PARTICLE_COUNT = 200
VESSEL_WIDTH_FRACTION = 0.4       # Full vessel width as a fraction of canvas height.
RESTRICTION_POINT_FRACTION = 0.3  # Start of the narrowing as a fraction of canvas width.
VELOCITY_CAP = 5.0                # Upper bound on the area-ratio speed-up.
MIN_BASE_SPEED = 0.1              # Pixels per frame; keeps particles visibly moving.
PARTICLE_RADIUS = 2               # Pixels

# Pressure chart
CHART_PRESSURE_RANGE = (0.0, 200.0)  # mmHg
CHART_GRID_LINES = 5

# Attribution for the original educational simulation, shown on the canvas.
CREDIT_TEXT = "Created by Dr Ian Murray; CC BY-NC-SA"
CREDIT_MARGIN = 4  # Pixels from the canvas' bottom-right corner
