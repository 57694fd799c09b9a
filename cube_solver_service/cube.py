"""Sticker colors, faces and the owned cube state.

The cube is six faces of nine slots in row-major order. A slot holds a
``CubeColor`` or ``None`` while it has not been filled in. Slot 4 of every
face is the center: it never moves on a real cube, so ``CubeState`` refuses
to change it once the state is in use.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from .config import (
    CANONICAL_HEX,
    CANONICAL_RGB,
    CENTER_INDEX,
    COLOR_NAMES,
    COLOR_ORDER,
    COLOR_TO_FACE,
    FACE_ORDER,
    STICKERS_PER_FACE,
)


class InvalidStickerError(ValueError):
  """Raised for an unknown face, color or slot index."""


class CenterStickerError(ValueError):
  """Raised when a mutation targets a face center."""


class CubeColor(str, Enum):
  W = 'W'
  Y = 'Y'
  R = 'R'
  O = 'O'
  G = 'G'
  B = 'B'

  @property
  def display_name(self) -> str:
    return COLOR_NAMES[self.value]

  @property
  def rgb(self) -> Tuple[int, int, int]:
    return CANONICAL_RGB[self.value]

  @property
  def hex(self) -> str:
    return CANONICAL_HEX[self.value]

  @property
  def home_face(self) -> "Face":
    return Face(COLOR_TO_FACE[self.value])


class Face(str, Enum):
  U = 'U'
  R = 'R'
  F = 'F'
  D = 'D'
  L = 'L'
  B = 'B'

  @property
  def center_color(self) -> CubeColor:
    for color in CubeColor:
      if COLOR_TO_FACE[color.value] == self.value:
        return color
    raise InvalidStickerError(f"No color maps to face {self.value}")


FACES: List[Face] = [Face(letter) for letter in FACE_ORDER]
COLORS: List[CubeColor] = [CubeColor(letter) for letter in COLOR_ORDER]

Slot = Optional[CubeColor]
ColorLike = Union[CubeColor, str]
FaceLike = Union[Face, str]

_UNSET_MARKERS = {'?', '.', '-', ' '}


def to_color(value: ColorLike) -> CubeColor:
  if isinstance(value, CubeColor):
    return value
  try:
    return CubeColor(str(value).strip().upper())
  except ValueError as exc:
    raise InvalidStickerError(f"Unknown sticker color: {value!r}") from exc


def to_face(value: FaceLike) -> Face:
  if isinstance(value, Face):
    return value
  try:
    return Face(str(value).strip().upper())
  except ValueError as exc:
    raise InvalidStickerError(f"Unknown face: {value!r}") from exc


def _to_slot(value: Optional[ColorLike]) -> Slot:
  if value is None:
    return None
  if isinstance(value, str) and value in _UNSET_MARKERS:
    return None
  return to_color(value)


class CubeState:
  """The 54 sticker slots of one cube being entered by a user.

  Mutation goes through ``set_sticker``/``clear_sticker``/``reset`` so centers
  stay fixed. Readers get copies; nothing outside the object can change its
  slots.
  """

  def __init__(self, faces: Mapping[Face, Sequence[Optional[ColorLike]]]):
    self._faces: Dict[Face, List[Slot]] = {}
    for face in FACES:
      stickers = faces.get(face)
      if stickers is None:
        raise InvalidStickerError(f"Missing face: {face.value}")
      if len(stickers) != STICKERS_PER_FACE:
        raise InvalidStickerError(
            f"Face {face.value} needs {STICKERS_PER_FACE} stickers, got {len(stickers)}")
      self._faces[face] = [_to_slot(sticker) for sticker in stickers]

  # ---------------- constructors ----------------

  @classmethod
  def with_centers(cls) -> "CubeState":
    faces = {}
    for face in FACES:
      slots: List[Slot] = [None] * STICKERS_PER_FACE
      slots[CENTER_INDEX] = face.center_color
      faces[face] = slots
    return cls(faces)

  @classmethod
  def solved(cls) -> "CubeState":
    return cls({face: [face.center_color] * STICKERS_PER_FACE for face in FACES})

  @classmethod
  def empty(cls) -> "CubeState":
    return cls({face: [None] * STICKERS_PER_FACE for face in FACES})

  @classmethod
  def from_faces(cls, faces: Mapping[FaceLike, Sequence[Optional[ColorLike]]]) -> "CubeState":
    """Build a state from face letters to nine color letters (or ``None``)."""
    parsed: Dict[Face, List[Slot]] = {}
    for key, stickers in faces.items():
      face = to_face(key)
      if len(stickers) != STICKERS_PER_FACE:
        raise InvalidStickerError(
            f"Face {face.value} needs {STICKERS_PER_FACE} stickers, got {len(stickers)}")
      parsed[face] = [_to_slot(sticker) for sticker in stickers]

    missing = [face.value for face in FACES if face not in parsed]
    if missing:
      raise InvalidStickerError(f"Missing faces: {', '.join(missing)}")
    return cls(parsed)

  @classmethod
  def from_color_string(cls, colors: str) -> "CubeState":
    """Build a state from 54 color letters in U, R, F, D, L, B order."""
    cleaned = "".join(colors.split())
    if len(cleaned) != STICKERS_PER_FACE * len(FACES):
      raise InvalidStickerError(
          f"Color string must contain {STICKERS_PER_FACE * len(FACES)} stickers, got {len(cleaned)}")
    faces = {}
    for offset, face in enumerate(FACES):
      chunk = cleaned[offset * STICKERS_PER_FACE:(offset + 1) * STICKERS_PER_FACE]
      faces[face] = [_to_slot(char) for char in chunk]
    return cls(faces)

  # ---------------- mutation ----------------

  def set_sticker(self, face: FaceLike, index: int, color: ColorLike) -> None:
    target = self._check_slot(face, index)
    self._faces[target][index] = to_color(color)

  def clear_sticker(self, face: FaceLike, index: int) -> None:
    target = self._check_slot(face, index)
    self._faces[target][index] = None

  def apply_samples(self, samples: Iterable[Tuple[FaceLike, int, ColorLike]]) -> None:
    for face, index, color in samples:
      self.set_sticker(face, index, color)

  def reset(self) -> None:
    self._faces = CubeState.with_centers()._faces

  def _check_slot(self, face: FaceLike, index: int) -> Face:
    target = to_face(face)
    if not 0 <= index < STICKERS_PER_FACE:
      raise InvalidStickerError(f"Sticker index out of range: {index}")
    if index == CENTER_INDEX:
      raise CenterStickerError(f"The center of face {target.value} cannot be changed")
    return target

  # ---------------- read access ----------------

  def stickers(self, face: FaceLike) -> List[Slot]:
    return list(self._faces[to_face(face)])

  def slots(self) -> List[Slot]:
    return [slot for face in FACES for slot in self._faces[face]]

  def to_dict(self) -> Dict[str, List[Optional[str]]]:
    return {
        face.value: [slot.value if slot is not None else None for slot in self._faces[face]]
        for face in FACES
    }

  def copy(self) -> "CubeState":
    return CubeState(self._faces)

  def __eq__(self, other: object) -> bool:
    if not isinstance(other, CubeState):
      return NotImplemented
    return self._faces == other._faces

  def __repr__(self) -> str:
    rows = " ".join(
        face.value + ":" + "".join(slot.value if slot else '?' for slot in self._faces[face])
        for face in FACES)
    return f"CubeState({rows})"


def as_cube_state(cube: Union[CubeState, Mapping[FaceLike, Sequence[Optional[ColorLike]]]]) -> CubeState:
  if isinstance(cube, CubeState):
    return cube
  return CubeState.from_faces(cube)
