"""Runtime constants for the cube solver service.

Values here are defaults. The remote solver endpoints and the per-attempt
timeout can be overridden through ``CUBE_SOLVER_ENDPOINTS`` (comma separated
base URLs) and ``CUBE_SOLVER_TIMEOUT`` (seconds) when the process starts.
"""

from __future__ import annotations

import logging
import os
from typing import Dict, List, Tuple


logger = logging.getLogger("cube_solver.config")


# ---------------- Cube layout ----------------

# Faces in the order the facelet string is written.
FACE_ORDER: List[str] = ['U', 'R', 'F', 'D', 'L', 'B']

# Sticker colors in the order they are reported to the user.
COLOR_ORDER: List[str] = ['W', 'Y', 'R', 'O', 'G', 'B']

COLOR_NAMES: Dict[str, str] = {
    'W': 'White',
    'Y': 'Yellow',
    'R': 'Red',
    'O': 'Orange',
    'G': 'Green',
    'B': 'Blue',
}

# Reference colors used by every classifier (RGB order).
CANONICAL_RGB: Dict[str, Tuple[int, int, int]] = {
    'W': (255, 255, 255),
    'Y': (255, 213, 0),
    'R': (183, 18, 52),
    'O': (255, 88, 0),
    'G': (0, 155, 72),
    'B': (0, 70, 173),
}

CANONICAL_HEX: Dict[str, str] = {
    'W': '#FFFFFF',
    'Y': '#FFD500',
    'R': '#B71234',
    'O': '#FF5800',
    'G': '#009B48',
    'B': '#0046AD',
}

# Home face of every color, the alphabet the remote solvers expect.
COLOR_TO_FACE: Dict[str, str] = {'W': 'U', 'Y': 'D', 'R': 'R', 'O': 'L', 'G': 'F', 'B': 'B'}
FACE_TO_COLOR: Dict[str, str] = {face: color for color, face in COLOR_TO_FACE.items()}

STICKERS_PER_FACE = 9
CENTER_INDEX = 4

UNSET_SENTINEL = '?'
SOLVED_FACELETS = "UUUUUUUUURRRRRRRRRFFFFFFFFFDDDDDDDDDLLLLLLLLLBBBBBBBBB"


# ---------------- Remote solvers ----------------

DEFAULT_SOLVER_ENDPOINTS: List[str] = [
    "https://rubiks-cube-solver.onrender.com/solve",
    "https://www.speedcubing.ch/api/solve",
]
DEFAULT_SOLVER_TIMEOUT: float = 10.0

# Shown when every remote solver failed. It is NOT a solution for the
# submitted cube; results carrying it are flagged ``is_placeholder``.
PLACEHOLDER_SEQUENCE = "R U R' U' R' F R2 U' R' U' R U R' F'"

MOVE_PATTERN = r"^[URFDLB2' ]+$"
MOVE_TOKEN_PATTERN = r"^[URFDLB](2|')?$"


def _endpoints_from_env() -> List[str]:
  raw = os.environ.get("CUBE_SOLVER_ENDPOINTS", "")
  endpoints = [item.strip() for item in raw.split(",") if item.strip()]
  return endpoints or list(DEFAULT_SOLVER_ENDPOINTS)


def _timeout_from_env() -> float:
  raw = os.environ.get("CUBE_SOLVER_TIMEOUT")
  if not raw:
    return DEFAULT_SOLVER_TIMEOUT
  try:
    value = float(raw)
  except ValueError:
    value = 0.0
  if not value > 0:
    logger.warning("config_invalid_timeout value=%r using=%s", raw, DEFAULT_SOLVER_TIMEOUT)
    return DEFAULT_SOLVER_TIMEOUT
  return value


SOLVER_ENDPOINTS: List[str] = _endpoints_from_env()
SOLVER_TIMEOUT: float = _timeout_from_env()


# ---------------- Photo sampling ----------------

# Side of the square averaged around a click in the sampling dialog.
CLICK_SAMPLE_SIZE = 10
# Fraction of the smaller side trimmed from each edge of a sticker cell.
REGION_MARGIN = 0.2
# Photos are scaled down to this size (long side) before auto detection.
MAX_IMAGE_SIZE = 800
# Face size relative to min(width, height) in a corner photo.
CORNER_FACE_SCALE = 0.28


# ---------------- Logging ----------------

LOG_LEVEL = os.environ.get("CUBE_SOLVER_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s %(levelname)s %(message)s"
