# curvekit global settings

import math

# Curve/curve intersection: regions flatter than threshold**2 are treated as lines
DEFAULT_CURVE_INTERSECTION_THRESHOLD = 0.5

# Parameter step used when reducing a curve to simple segments
REDUCE_STEP = 0.01

# Largest angle between end normals for a segment to count as simple
SIMPLE_ANGLE = math.pi / 3.0

# Sample count for BezierCurve.lookup_table
LOOKUP_TABLE_STEPS = 100

# Legendre-Gauss points used for arc length
QUADRATURE_ORDER = 24

# Parameter offset used to estimate the binormal of 3D curves
NORMAL_PROBE = 0.01
