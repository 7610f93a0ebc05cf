"""Central module containing constants and definitions for Bezier path geometry."""

from __future__ import annotations

from enum import Enum, auto

###############################################################################
# Distances
###############################################################################

# Two points closer than this are treated as the same point
SMALL_DISTANCE: float = 0.001

# A gap smaller than this is negligible (node merging, snapping)
CLOSE_DISTANCE: float = 0.01

# Default tolerance for intersection searches and boolean arithmetic
DEFAULT_ACCURACY: float = 0.01

# Sections with a control polygon shorter than this are considered tiny
SMALL_T_DISTANCE: float = 1.0e-6

###############################################################################
# Bezier clipping
###############################################################################

# If clipping removes less than this share of a curve, the curve is split in half
CLIP_SPLIT_RATIO: float = 0.8

# Clipped t-ranges narrower than this are widened around their center
MIN_CLIP_RANGE: float = 0.01

# Padding applied to clipped t-ranges to absorb floating point error
CLIP_T_PADDING: float = 1.0e-5

# Recursion guard for degenerate clipping inputs
MAX_CLIP_DEPTH: int = 64

###############################################################################
# Enums
###############################################################################


class FillRule(Enum):
    """Enum to define how the inside of a (multi) path is determined."""

    EVEN_ODD = auto()
    NON_ZERO = auto()
