"""Move notation helpers for the step-by-step walkthrough."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional

from .solver import ALREADY_SOLVED_MESSAGE


CLOCKWISE = "clockwise"
COUNTERCLOCKWISE = "counterclockwise"
TWICE = "twice"

FACE_NAMES: Dict[str, str] = {
    'U': 'TOP',
    'D': 'BOTTOM',
    'R': 'RIGHT',
    'L': 'LEFT',
    'F': 'FRONT',
    'B': 'BACK',
}

FACE_POSITIONS: Dict[str, str] = {
    'U': 'the side facing up',
    'D': 'the side facing down',
    'R': 'the side on your right',
    'L': 'the side on your left',
    'F': 'the side facing you',
    'B': 'the side facing away from you',
}

DIRECTION_TEXT: Dict[str, str] = {
    CLOCKWISE: 'CLOCKWISE',
    COUNTERCLOCKWISE: 'COUNTER-CLOCKWISE',
    TWICE: 'TWICE (180°)',
}

NOTATION_LEGEND: Dict[str, str] = {
    'U': 'Up (top face) - clockwise',
    'D': 'Down (bottom face) - clockwise',
    'R': 'Right face - clockwise',
    'L': 'Left face - clockwise',
    'F': 'Front face - clockwise',
    'B': 'Back face - clockwise',
    "'": "Counter-clockwise (e.g., R' means turn right face counter-clockwise)",
    '2': 'Double turn (e.g., R2 means turn right face twice)',
}

_PRIME_MARKS = ("'", "’", "`")


@dataclass(frozen=True)
class Move:
  face: str
  direction: str
  notation: str


def parse_move(notation: str) -> Move:
  token = notation.strip()
  if not token or token[0].upper() not in FACE_NAMES:
    raise ValueError(f"Not a face turn: {notation!r}")

  if any(mark in token for mark in _PRIME_MARKS):
    direction = COUNTERCLOCKWISE
  elif '2' in token:
    direction = TWICE
  else:
    direction = CLOCKWISE
  return Move(face=token[0].upper(), direction=direction, notation=token)


def parse_moves(solution: Optional[str]) -> List[Move]:
  if not solution or ALREADY_SOLVED_MESSAGE.rstrip('!') in solution:
    return []
  return [parse_move(token) for token in solution.split()]


def describe_move(move: Move) -> str:
  return (f"Turn the {FACE_NAMES[move.face]} side ({FACE_POSITIONS[move.face]}) "
          f"{DIRECTION_TEXT[move.direction]}")
