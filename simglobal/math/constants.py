"""
Constants for rotation math.
"""

# Below this |cos(pitch)| the X-Y-Z decomposition is treated as gimbal locked
GIMBAL_LOCK_EPSILON = 1e-9

# Unit axes of the world frame
UNIT_X = (1.0, 0.0, 0.0)
UNIT_Y = (0.0, 1.0, 0.0)
UNIT_Z = (0.0, 0.0, 1.0)
