# constants.py
"""
Application-level constants.

These values are static and do not change between simulation runs.
They describe the simulated world and the fixed coefficients of the two
motion models, as opposed to the tunable parameters in config.json.
"""

# --- World ---
# Half-extent of the axis-aligned cube that encloses the simulation.
WORLD_SIZE = 5.0
# Index of the vertical axis. Gravity acts along -y.
VERTICAL_AXIS = 1

# --- Collision Model ---
# Fraction of the normal velocity kept after a particle or wall collision.
DAMPING = 0.8

# --- Flocking Model ---
# Falloff exponent of the pairwise repulsion field.
ALPHA = 2.0
# Blend factor of the field into the existing velocity.
BETA = 0.1
# Particles closer than this to a wall are pushed back by it.
WALL_REPULSION_DISTANCE = 2.0

# --- Spawning ---
SPAWN_SIZE_MIN = 0.1
SPAWN_SIZE_MAX = 1.0
# Particles appear on the y = 0 plane within [-SPAWN_EXTENT, SPAWN_EXTENT].
SPAWN_EXTENT = 4.0
PARTICLE_ALPHA = 0.8

# --- Default Simulation Parameters ---
# Used for any key missing from the "simulation_parameters" config section.
DEFAULT_SPAWN_INTERVAL = 0.3
DEFAULT_SPAWN_COUNT = 100
DEFAULT_BASE_SPEED = 5.0
DEFAULT_LIFETIME = 1.0
DEFAULT_GRAVITY_STRENGTH = 9.81

# Initial slot capacity of the particle store. It grows on demand.
INITIAL_CAPACITY = 256
