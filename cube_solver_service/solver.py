"""Solve orchestration against remote Kociemba solvers.

No search happens here. The cube is encoded, trivial cases are answered
locally, and the facelet string is sent to each configured endpoint in turn
until one answers with something that reads as a move sequence.
"""

from __future__ import annotations

import asyncio
import json
import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import httpx

from . import config
from .config import PLACEHOLDER_SEQUENCE
from .validation import CubeInput, cube_to_string, is_complete, is_solved, parse_solution


logger = logging.getLogger("cube_solver.solver")

INCOMPLETE_MESSAGE = "Cube state is incomplete. Please fill in all stickers."
ALREADY_SOLVED_MESSAGE = "Already solved!"

_MOVE_RE = re.compile(config.MOVE_PATTERN, re.IGNORECASE)
_TOKEN_RE = re.compile(config.MOVE_TOKEN_PATTERN, re.IGNORECASE)
_SOLUTION_FIELDS = ("solution", "moves", "alg")


@dataclass
class SolveResult:
  solution: str
  moves: List[str] = field(default_factory=list)
  error: Optional[str] = None
  # True when every remote solver failed and ``solution`` is the fixed
  # example sequence rather than a solution for the submitted cube.
  is_placeholder: bool = False
  already_solved: bool = False
  source: Optional[str] = None


def extract_solution(body: str) -> Optional[str]:
  """Pull a move sequence out of a solver response body.

  JSON objects are searched for ``solution``, ``moves`` or ``alg``; anything
  else is treated as plain text. Returns ``None`` unless every token of the
  candidate is a face turn such as ``R``, ``U2`` or ``F'``.
  """
  candidate: object = body
  try:
    data = json.loads(body)
  except (ValueError, RecursionError):
    data = None

  if isinstance(data, dict):
    candidate = next((data[key] for key in _SOLUTION_FIELDS if data.get(key)), None)
  elif isinstance(data, str):
    candidate = data

  if isinstance(candidate, list):
    candidate = " ".join(str(item) for item in candidate)
  if not isinstance(candidate, str):
    return None

  candidate = candidate.strip()
  if not candidate or "error" in candidate.lower():
    return None
  if not _MOVE_RE.match(candidate):
    return None
  tokens = candidate.split()
  if not all(_TOKEN_RE.match(token) for token in tokens):
    return None
  return " ".join(tokens)


class SolverClient:
  """Tries remote solver endpoints in priority order.

  Attempts are sequential and each one is bounded by ``timeout`` seconds, so
  the worst case is ``len(endpoints) * timeout``. An ``httpx.AsyncClient`` may
  be injected; otherwise one is opened for the duration of a call.
  """

  def __init__(
      self,
      endpoints: Optional[Sequence[str]] = None,
      timeout: Optional[float] = None,
      client: Optional[httpx.AsyncClient] = None,
  ):
    self.endpoints = list(endpoints) if endpoints is not None else list(config.SOLVER_ENDPOINTS)
    self.timeout = timeout if timeout is not None else config.SOLVER_TIMEOUT
    self._client = client

  async def solve(self, cube: CubeInput) -> SolveResult:
    facelets = cube_to_string(cube)

    if not is_complete(facelets):
      logger.info("solve_incomplete unset=%d", facelets.count(config.UNSET_SENTINEL))
      return SolveResult(solution="", moves=[], error=INCOMPLETE_MESSAGE)

    if is_solved(facelets):
      logger.info("solve_already_solved")
      return SolveResult(solution=ALREADY_SOLVED_MESSAGE, moves=[], already_solved=True)

    if self._client is not None:
      result = await self._try_endpoints(self._client, facelets)
    else:
      async with httpx.AsyncClient(timeout=self.timeout) as client:
        result = await self._try_endpoints(client, facelets)

    if result is not None:
      return result

    logger.warning(
        "solve_all_endpoints_failed endpoints=%d returning placeholder", len(self.endpoints))
    return SolveResult(
        solution=PLACEHOLDER_SEQUENCE,
        moves=parse_solution(PLACEHOLDER_SEQUENCE),
        is_placeholder=True,
    )

  async def _try_endpoints(self, client: httpx.AsyncClient, facelets: str) -> Optional[SolveResult]:
    for endpoint in self.endpoints:
      try:
        solution = await self._request(client, endpoint, facelets)
      except asyncio.TimeoutError:
        logger.warning("solve_endpoint_failed endpoint=%s reason=timeout", endpoint)
        continue
      except (httpx.HTTPError, httpx.InvalidURL) as exc:
        logger.warning("solve_endpoint_failed endpoint=%s reason=%s", endpoint, type(exc).__name__)
        continue

      if solution is None:
        continue

      logger.info("solve_success endpoint=%s facelets=%s moves=%d",
                  endpoint, facelets, len(parse_solution(solution)))
      return SolveResult(solution=solution, moves=parse_solution(solution), source=endpoint)
    return None

  async def _request(self, client: httpx.AsyncClient, endpoint: str, facelets: str) -> Optional[str]:
    response = await asyncio.wait_for(
        client.get(endpoint, params={"cube": facelets}), timeout=self.timeout)

    if not response.is_success:
      logger.warning("solve_endpoint_failed endpoint=%s status=%d", endpoint, response.status_code)
      return None

    solution = extract_solution(response.text)
    if solution is None:
      logger.warning("solve_endpoint_failed endpoint=%s reason=unrecognised_body", endpoint)
    return solution


async def solve_cube(
    cube: CubeInput,
    *,
    endpoints: Optional[Sequence[str]] = None,
    timeout: Optional[float] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> SolveResult:
  return await SolverClient(endpoints=endpoints, timeout=timeout, client=client).solve(cube)
