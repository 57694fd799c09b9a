"""FastAPI service for entering a scrambled Rubik cube and getting it solved.

The cube travels as JSON: six faces (U, R, F, D, L, B) of nine color letters
(W, Y, R, O, G, B) in row-major order, ``null`` for a sticker that has not
been filled in. Centers are fixed to White (U), Red (R), Green (F),
Yellow (D), Orange (L) and Blue (B).

Solving is delegated to remote Kociemba solvers. When every remote solver
fails the response still carries a move sequence, but it is a fixed example
and is marked with ``is_placeholder``. Clients should present it as such.

Photos are accepted base64-encoded. They are only sampled at user-provided
click points or at fixed positions of a corner photo; there is no face
detection.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Literal, Optional, Tuple

from fastapi import Depends, FastAPI, HTTPException
from pydantic import BaseModel, Field

from .color_detection import (
    ClassifierStrategy,
    ImageDecodeError,
    SamplingError,
    auto_detect_cube,
    classify,
    decode_base64_image,
    rgb_to_hsl,
    sample_clicks,
)
from .config import LOG_FORMAT, LOG_LEVEL
from .cube import CubeState, InvalidStickerError
from .notation import NOTATION_LEGEND, describe_move, parse_moves
from .solver import SolverClient
from .validation import ValidationResult, cube_to_string, is_complete, validate_cube


app = FastAPI(title="Rubik Cube Solver Service", version="0.3.0")
logger = logging.getLogger("cube_solver")
if not logger.handlers:
  logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT)

SOLVE_FAILED_MESSAGE = "Failed to solve. Please check your colors."

Faces = Dict[str, List[Optional[str]]]


class CubeRequest(BaseModel):
  faces: Faces = Field(
      ..., description="Face letter -> nine color letters (or null), row-major")


class CubeResponse(BaseModel):
  faces: Faces


class StickerRequest(CubeRequest):
  face: str = Field(..., description="Face letter U, R, F, D, L or B")
  index: int = Field(..., ge=0, le=8, description="Row-major slot index")
  color: str = Field(..., description="Color letter W, Y, R, O, G or B")


class ValidationResponse(BaseModel):
  is_valid: bool
  errors: List[str]
  color_counts: Dict[str, int]


class EncodeResponse(BaseModel):
  facelets: str = Field(..., description="54-character facelet string")
  complete: bool


class MoveStep(BaseModel):
  notation: str
  face: str
  direction: str
  description: str


class SolveResponse(BaseModel):
  solution: str
  moves: List[str]
  steps: List[MoveStep]
  error: Optional[str] = None
  is_placeholder: bool = False
  already_solved: bool = False


class ClassifyRequest(BaseModel):
  rgb: List[float] = Field(..., min_length=3, max_length=3)
  strategy: ClassifierStrategy = ClassifierStrategy.HSL


class ClassifyResponse(BaseModel):
  color: str
  name: str
  hsl: List[float]


class SampleRequest(BaseModel):
  image: str = Field(..., description="Base64-encoded corner photo")
  corner: Literal["corner1", "corner2"]
  points: List[Tuple[int, int]] = Field(
      ..., description="Click points (x, y) in the sticker order of the corner")
  strategy: ClassifierStrategy = ClassifierStrategy.WEIGHTED_RGB
  faces: Optional[Faces] = Field(
      None, description="Optional cube the samples are applied to")


class StickerSampleModel(BaseModel):
  face: str
  index: int
  label: str
  rgb: List[int]
  color: str


class SampleResponse(BaseModel):
  samples: List[StickerSampleModel]
  faces: Optional[Faces] = None


class AutoDetectRequest(BaseModel):
  images: List[str] = Field(
      ..., min_length=2, max_length=2,
      description="Base64 photos of the U/F/R corner and the D/B/L corner")


class AutoDetectResponse(BaseModel):
  faces: Faces
  facelets: str
  validation: ValidationResponse


def get_solver() -> SolverClient:
  return SolverClient()


@app.get("/healthz")
def healthz() -> dict[str, str]:
  return {"status": "ok"}


@app.get("/cube/initial", response_model=CubeResponse)
def initial_cube() -> CubeResponse:
  return CubeResponse(faces=CubeState.with_centers().to_dict())


@app.get("/cube/solved", response_model=CubeResponse)
def solved_cube() -> CubeResponse:
  return CubeResponse(faces=CubeState.solved().to_dict())


@app.post("/cube/validate", response_model=ValidationResponse)
def validate(req: CubeRequest) -> ValidationResponse:
  return _validation_response(validate_cube(_cube_from_request(req.faces)))


@app.post("/cube/encode", response_model=EncodeResponse)
def encode(req: CubeRequest) -> EncodeResponse:
  facelets = cube_to_string(_cube_from_request(req.faces))
  return EncodeResponse(facelets=facelets, complete=is_complete(facelets))


@app.post("/cube/sticker", response_model=CubeResponse)
def set_sticker(req: StickerRequest) -> CubeResponse:
  cube = _cube_from_request(req.faces)
  try:
    cube.set_sticker(req.face, req.index, req.color)
  except ValueError as exc:
    raise HTTPException(status_code=400, detail=str(exc)) from exc
  return CubeResponse(faces=cube.to_dict())


@app.post("/solve", response_model=SolveResponse)
async def solve(req: CubeRequest, solver: SolverClient = Depends(get_solver)) -> SolveResponse:
  cube = _cube_from_request(req.faces)
  validation = validate_cube(cube)
  facelets = cube_to_string(cube)
  if not validation.is_valid and is_complete(facelets):
    logger.warning("solve_rejected facelets=%s errors=%s", facelets, validation.errors)
    raise HTTPException(status_code=400, detail=validation.errors)

  try:
    result = await solver.solve(cube.copy())
    steps = [
        MoveStep(notation=move.notation, face=move.face, direction=move.direction,
                 description=describe_move(move))
        for move in parse_moves(" ".join(result.moves))
    ]
  except Exception:
    logger.exception("solve_exception facelets=%s", facelets)
    raise HTTPException(status_code=500, detail=SOLVE_FAILED_MESSAGE)

  if result.is_placeholder:
    logger.warning("solve_placeholder facelets=%s", facelets)

  return SolveResponse(
      solution=result.solution,
      moves=result.moves,
      steps=steps,
      error=result.error,
      is_placeholder=result.is_placeholder,
      already_solved=result.already_solved,
  )


@app.post("/classify", response_model=ClassifyResponse)
def classify_color(req: ClassifyRequest) -> ClassifyResponse:
  color = classify(req.rgb, req.strategy)
  return ClassifyResponse(color=color.value, name=color.display_name, hsl=list(rgb_to_hsl(*req.rgb)))


@app.post("/photo/sample", response_model=SampleResponse)
def sample_photo(req: SampleRequest) -> SampleResponse:
  image = _decode_or_400(req.image, 0)
  try:
    samples = sample_clicks(image, req.corner, req.points, req.strategy)
  except SamplingError as exc:
    logger.warning("sample_failed corner=%s reason=%s", req.corner, exc)
    raise HTTPException(status_code=422, detail=str(exc)) from exc

  faces = None
  if req.faces is not None:
    cube = _cube_from_request(req.faces)
    try:
      cube.apply_samples((sample.face, sample.index, sample.color) for sample in samples)
    except ValueError as exc:
      raise HTTPException(status_code=400, detail=str(exc)) from exc
    faces = cube.to_dict()

  logger.info("sample_success corner=%s samples=%d", req.corner, len(samples))
  return SampleResponse(
      samples=[
          StickerSampleModel(
              face=sample.face.value, index=sample.index, label=sample.label,
              rgb=list(sample.rgb), color=sample.color.value)
          for sample in samples
      ],
      faces=faces,
  )


@app.post("/photo/auto-detect", response_model=AutoDetectResponse)
def auto_detect(req: AutoDetectRequest) -> AutoDetectResponse:
  first, second = (_decode_or_400(encoded, index) for index, encoded in enumerate(req.images))
  cube = auto_detect_cube(first, second)
  facelets = cube_to_string(cube)
  validation = validate_cube(cube)
  logger.info("auto_detect facelets=%s valid=%s", facelets, validation.is_valid)
  return AutoDetectResponse(
      faces=cube.to_dict(),
      facelets=facelets,
      validation=_validation_response(validation),
  )


@app.get("/notation")
def notation() -> Dict[str, str]:
  return NOTATION_LEGEND


def _cube_from_request(faces: Faces) -> CubeState:
  try:
    return CubeState.from_faces(faces)
  except InvalidStickerError as exc:
    raise HTTPException(status_code=400, detail=str(exc)) from exc


def _decode_or_400(encoded: str, index: int):
  try:
    return decode_base64_image(encoded)
  except ImageDecodeError:
    logger.warning("decode_failed image_index=%d", index)
    raise HTTPException(status_code=400, detail=f"Image {index + 1} invalid")


def _validation_response(result: ValidationResult) -> ValidationResponse:
  return ValidationResponse(
      is_valid=result.is_valid,
      errors=result.errors,
      color_counts=result.counts_by_letter(),
  )
