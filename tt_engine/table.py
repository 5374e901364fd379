"""Board dimensions and physical constants.

Distances are board pixels, velocities are pixels per tick (one tick is one
display frame at 60 Hz, so dt=1.0 advances a single frame).
"""

import math

# Board
BOARD_WIDTH = 800
BOARD_HEIGHT = 400

# Ball
BALL_RADIUS = 8
BALL_MAX_SPEED = 8.0
SERVE_SPEED = 4.0
SERVE_ANGLE_RANGE = math.pi / 6  # serve leaves within ±30 degrees of horizontal

# Paddles
PADDLE_WIDTH = 15
PADDLE_HEIGHT = 100
PADDLE_SPEED = 8.0
PADDLE_MARGIN = 20  # gap between board edge and paddle face

# Paddle bounce
MAX_BOUNCE_ANGLE = math.pi / 3  # 60 degrees at the paddle tip
SPEEDUP_PER_HIT = 1.05

# AI
AI_JITTER = 50.0  # peak-to-peak tracking noise for a 0% accurate AI
