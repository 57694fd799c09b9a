"""Cube state entry, validation, facelet encoding and remote solving."""

from .cube import CubeColor, CubeState, Face
from .solver import SolveResult, solve_cube
from .validation import ValidationResult, cube_to_string, validate_cube

__version__ = "0.3.0"

__all__ = [
    "CubeColor",
    "CubeState",
    "Face",
    "SolveResult",
    "ValidationResult",
    "cube_to_string",
    "solve_cube",
    "validate_cube",
]
