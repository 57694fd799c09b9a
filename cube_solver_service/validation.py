"""Cube state validation and facelet encoding."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence, Union

from .config import SOLVED_FACELETS, STICKERS_PER_FACE, UNSET_SENTINEL
from .cube import COLORS, CubeColor, CubeState, FaceLike, ColorLike, as_cube_state

CubeInput = Union[CubeState, Mapping[FaceLike, Sequence[Optional[ColorLike]]]]


@dataclass
class ValidationResult:
  is_valid: bool
  errors: List[str] = field(default_factory=list)
  color_counts: Dict[CubeColor, int] = field(default_factory=dict)

  def counts_by_letter(self) -> Dict[str, int]:
    return {color.value: count for color, count in self.color_counts.items()}


def validate_cube(cube: CubeInput) -> ValidationResult:
  """Check that every slot is filled and every color appears nine times.

  Only counts are checked. A balanced arrangement that no sequence of turns
  can reach (a twisted corner, a single flipped edge) still passes.
  """
  state = as_cube_state(cube)
  errors: List[str] = []
  color_counts: Dict[CubeColor, int] = {color: 0 for color in COLORS}

  unset = 0
  for slot in state.slots():
    if slot is None:
      unset += 1
    else:
      color_counts[slot] += 1

  if unset > 0:
    errors.append(f"{unset} sticker{'s' if unset > 1 else ''} not filled in yet.")

  incorrect = [
      f"{color.display_name}: {count}"
      for color, count in color_counts.items()
      if count != STICKERS_PER_FACE
  ]
  if incorrect:
    errors.append(
        f"Each color should appear exactly {STICKERS_PER_FACE} times. "
        f"Current counts: {', '.join(incorrect)}")

  return ValidationResult(is_valid=not errors, errors=errors, color_counts=color_counts)


def cube_to_string(cube: CubeInput) -> str:
  """Encode the cube as the 54-character facelet string remote solvers take.

  Faces are written U, R, F, D, L, B, each row-major. A sticker is written as
  the home face of its color, not the face it sits on; unset slots become
  ``?``.
  """
  state = as_cube_state(cube)
  return ''.join(
      slot.home_face.value if slot is not None else UNSET_SENTINEL
      for slot in state.slots())


def is_complete(facelets: str) -> bool:
  return UNSET_SENTINEL not in facelets


def is_solved(facelets: str) -> bool:
  return facelets == SOLVED_FACELETS


def parse_solution(solution: Optional[str]) -> List[str]:
  if not solution or not solution.strip():
    return []
  return solution.strip().split()
