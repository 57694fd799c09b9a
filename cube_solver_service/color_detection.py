"""Sticker color classification and photo sampling.

Two classifier strategies are kept side by side:

* ``hsl``: ordered hue/saturation/lightness bands, first match wins, with a
  plain RGB nearest-reference fallback. Used for grid sampling of whole faces.
* ``weighted_rgb``: nearest reference by Euclidean RGB distance with the
  channels weighted R×2, G×4, B×3. Used by the click-to-sample dialog, where
  the user points at each sticker.

Both are total: any RGB triple maps to one of the six sticker colors.

Photos are handled as OpenCV BGR arrays. Sampling averages pixels and hands
RGB triples to a classifier; there is no segmentation, the sticker positions
come from user clicks or from fixed corner-photo layouts.
"""

from __future__ import annotations

import base64
import binascii
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Sequence, Tuple

import cv2
import numpy as np

from .config import (
    CANONICAL_RGB,
    CENTER_INDEX,
    CLICK_SAMPLE_SIZE,
    COLOR_ORDER,
    CORNER_FACE_SCALE,
    MAX_IMAGE_SIZE,
    REGION_MARGIN,
    STICKERS_PER_FACE,
)
from .cube import FACES, CubeColor, CubeState, Face, Slot


logger = logging.getLogger("cube_solver.color_detection")

RGB = Tuple[int, int, int]
Rect = Tuple[float, float, float, float]


class ImageDecodeError(ValueError):
  """Raised when an uploaded photo cannot be decoded."""


class SamplingError(ValueError):
  """Raised when a sample point or region falls outside the photo."""


class ClassifierStrategy(str, Enum):
  HSL = "hsl"
  WEIGHTED_RGB = "weighted_rgb"


_REFERENCE_LABELS = [CubeColor(letter) for letter in COLOR_ORDER]
_REFERENCE_RGB = np.array([CANONICAL_RGB[letter] for letter in COLOR_ORDER], dtype=np.float64)
_RGB_WEIGHTS = np.array([2.0, 4.0, 3.0])


# ---------------- classification ----------------

def _clamp_rgb(r: float, g: float, b: float) -> np.ndarray:
  return np.clip(np.array([r, g, b], dtype=np.float64), 0, 255)


def rgb_to_hsl(r: float, g: float, b: float) -> Tuple[float, float, float]:
  """Return hue in degrees and saturation/lightness in percent."""
  pixel = (_clamp_rgb(r, g, b) / 255.0).astype(np.float32).reshape(1, 1, 3)
  hue, lightness, saturation = cv2.cvtColor(pixel, cv2.COLOR_RGB2HLS)[0, 0]
  return float(hue) % 360.0, float(saturation) * 100.0, float(lightness) * 100.0


def _nearest(rgb: np.ndarray, weights: np.ndarray) -> CubeColor:
  diff = _REFERENCE_RGB - rgb
  distances = np.sqrt(np.sum(weights * diff * diff, axis=1))
  return _REFERENCE_LABELS[int(np.argmin(distances))]


def nearest_rgb(r: float, g: float, b: float) -> CubeColor:
  return _nearest(_clamp_rgb(r, g, b), np.ones(3))


def nearest_weighted_rgb(r: float, g: float, b: float) -> CubeColor:
  return _nearest(_clamp_rgb(r, g, b), _RGB_WEIGHTS)


def classify_hsl(r: float, g: float, b: float) -> CubeColor:
  h, s, l = rgb_to_hsl(r, g, b)

  if s < 20 and l > 70:
    return CubeColor.W
  if 40 <= h <= 70 and s > 50:
    return CubeColor.Y
  if 10 <= h <= 45 and s > 50:
    return CubeColor.O
  # Red wraps through 0°.
  if h <= 15 or h >= 340:
    return CubeColor.R
  if 80 <= h <= 170 and s > 30:
    return CubeColor.G
  if 180 <= h <= 270 and s > 30:
    return CubeColor.B

  return nearest_rgb(r, g, b)


_CLASSIFIERS = {
    ClassifierStrategy.HSL: classify_hsl,
    ClassifierStrategy.WEIGHTED_RGB: nearest_weighted_rgb,
}


def classify(rgb: Sequence[float], strategy: ClassifierStrategy = ClassifierStrategy.HSL) -> CubeColor:
  if len(rgb) != 3:
    raise ValueError(f"Expected an RGB triple, got {len(rgb)} values")
  r, g, b = (float(value) for value in rgb)
  return _CLASSIFIERS[ClassifierStrategy(strategy)](r, g, b)


# ---------------- image helpers ----------------

def decode_base64_image(data: str) -> np.ndarray:
  """Decode a base64 (or data URL) photo into a BGR array."""
  if data.startswith("data:") and "," in data:
    data = data.split(",", 1)[1]
  try:
    raw = base64.b64decode(data, validate=False)
  except (binascii.Error, ValueError) as exc:
    raise ImageDecodeError("Image payload is not valid base64") from exc

  array = np.frombuffer(raw, dtype=np.uint8)
  image = cv2.imdecode(array, cv2.IMREAD_COLOR) if array.size else None
  if image is None:
    raise ImageDecodeError("Image payload could not be decoded")
  return image


def limit_size(image: np.ndarray, max_size: int = MAX_IMAGE_SIZE) -> np.ndarray:
  height, width = image.shape[:2]
  if width <= max_size and height <= max_size:
    return image
  scale = max_size / float(max(width, height))
  new_size = (max(1, int(round(width * scale))), max(1, int(round(height * scale))))
  return cv2.resize(image, new_size, interpolation=cv2.INTER_AREA)


def _mean_rgb(image: np.ndarray, x0: int, y0: int, x1: int, y1: int) -> RGB:
  height, width = image.shape[:2]
  x0, x1 = max(0, x0), min(width, x1)
  y0, y1 = max(0, y0), min(height, y1)
  if x1 <= x0 or y1 <= y0:
    raise SamplingError(f"Sample area ({x0}, {y0})-({x1}, {y1}) is outside the image")

  mean_bgr = image[y0:y1, x0:x1].reshape(-1, 3).mean(axis=0)
  b, g, r = (int(round(float(value))) for value in mean_bgr)
  return r, g, b


def average_color(image: np.ndarray, x: int, y: int, sample_size: int = CLICK_SAMPLE_SIZE) -> RGB:
  """Average RGB of a ``sample_size`` square centred on a click."""
  half = sample_size // 2
  x0, y0 = int(x) - half, int(y) - half
  return _mean_rgb(image, x0, y0, x0 + sample_size, y0 + sample_size)


def sample_region(image: np.ndarray, x: float, y: float, width: float, height: float) -> RGB:
  """Average RGB of a sticker cell with its borders trimmed off."""
  margin = min(width, height) * REGION_MARGIN
  x0 = int(round(x + margin))
  y0 = int(round(y + margin))
  w = int(round(width - margin * 2))
  h = int(round(height - margin * 2))
  return _mean_rgb(image, x0, y0, x0 + max(w, 1), y0 + max(h, 1))


def detect_face_colors(image: np.ndarray, rect: Rect) -> List[CubeColor]:
  """Classify the nine stickers of a face occupying ``rect`` (x, y, w, h)."""
  x, y, width, height = rect
  cell_w, cell_h = width / 3.0, height / 3.0
  colors: List[CubeColor] = []
  for row in range(3):
    for col in range(3):
      rgb = sample_region(image, x + col * cell_w, y + row * cell_h, cell_w, cell_h)
      colors.append(classify(rgb, ClassifierStrategy.HSL))
  return colors


# ---------------- corner photos ----------------

@dataclass(frozen=True)
class StickerRef:
  face: Face
  index: int
  label: str


@dataclass
class StickerSample:
  face: Face
  index: int
  label: str
  rgb: RGB
  color: CubeColor


def _corner_stickers(faces: Sequence[Face]) -> List[StickerRef]:
  return [
      StickerRef(face, index, f"{face.value}{index + 1}")
      for face in faces
      for index in range(STICKERS_PER_FACE)
      if index != CENTER_INDEX
  ]


# Stickers the user clicks, in order, on each photo. Centers are skipped.
CORNER_STICKERS: Dict[str, List[StickerRef]] = {
    "corner1": _corner_stickers([Face.U, Face.F, Face.R]),
    "corner2": _corner_stickers([Face.D, Face.B, Face.L]),
}


def sample_clicks(
    image: np.ndarray,
    corner: str,
    points: Sequence[Tuple[int, int]],
    strategy: ClassifierStrategy = ClassifierStrategy.WEIGHTED_RGB,
    sample_size: int = CLICK_SAMPLE_SIZE,
) -> List[StickerSample]:
  """Pair click points with the corner's sticker order and classify them."""
  if corner not in CORNER_STICKERS:
    raise SamplingError(f"Unknown corner photo: {corner!r}")
  stickers = CORNER_STICKERS[corner]
  if len(points) > len(stickers):
    raise SamplingError(f"{corner} has {len(stickers)} stickers, got {len(points)} points")

  samples: List[StickerSample] = []
  for ref, (x, y) in zip(stickers, points):
    rgb = average_color(image, x, y, sample_size)
    color = classify(rgb, strategy)
    samples.append(StickerSample(ref.face, ref.index, ref.label, rgb, color))
    logger.debug("sample label=%s rgb=%s color=%s", ref.label, rgb, color.value)
  return samples


def _corner1_rects(width: int, height: int) -> Dict[Face, Rect]:
  center_x = width / 2.0
  face_size = min(width, height) * CORNER_FACE_SCALE
  return {
      Face.U: (center_x - face_size * 0.9, height * 0.08, face_size * 1.8, face_size * 0.9),
      Face.F: (width * 0.1, height * 0.4, face_size * 1.2, face_size * 1.4),
      Face.R: (width * 0.52, height * 0.4, face_size * 1.2, face_size * 1.4),
  }


def _corner2_rects(width: int, height: int) -> Dict[Face, Rect]:
  center_x = width / 2.0
  face_size = min(width, height) * CORNER_FACE_SCALE
  return {
      Face.D: (center_x - face_size * 0.9, height * 0.55, face_size * 1.8, face_size * 0.9),
      Face.B: (width * 0.52, height * 0.1, face_size * 1.2, face_size * 1.4),
      Face.L: (width * 0.1, height * 0.1, face_size * 1.2, face_size * 1.4),
  }


def _detect_corner(image: np.ndarray, rects: Dict[Face, Rect]) -> Dict[Face, List[CubeColor]]:
  faces: Dict[Face, List[CubeColor]] = {}
  for face, rect in rects.items():
    try:
      faces[face] = detect_face_colors(image, rect)
    except SamplingError:
      logger.warning("face_detection_failed face=%s rect=%s", face.value, rect)
  return faces


def detect_corner1(image: np.ndarray) -> Dict[Face, List[CubeColor]]:
  """Faces U, F and R from a photo of the up-front-right corner."""
  height, width = image.shape[:2]
  return _detect_corner(image, _corner1_rects(width, height))


def detect_corner2(image: np.ndarray) -> Dict[Face, List[CubeColor]]:
  """Faces D, B and L from a photo of the down-back-left corner."""
  height, width = image.shape[:2]
  return _detect_corner(image, _corner2_rects(width, height))


def auto_detect_cube(image1: np.ndarray, image2: np.ndarray) -> CubeState:
  """Estimate all six faces from two corner photos.

  A face that could not be sampled falls back to its solved colors. Centers
  are always forced to the canonical color of their face.
  """
  detected: Dict[Face, List[CubeColor]] = {}
  detected.update(detect_corner1(limit_size(image1)))
  detected.update(detect_corner2(limit_size(image2)))

  faces: Dict[Face, List[Slot]] = {}
  for face in FACES:
    stickers: List[Slot] = list(detected.get(face) or [face.center_color] * STICKERS_PER_FACE)
    stickers[CENTER_INDEX] = face.center_color
    faces[face] = stickers

  missing = [face.value for face in FACES if face not in detected]
  if missing:
    logger.warning("auto_detect_defaulted faces=%s", ",".join(missing))
  return CubeState(faces)
