import asyncio
from typing import Callable, List, Optional

import httpx
import pytest

from cube_solver_service.config import PLACEHOLDER_SEQUENCE
from cube_solver_service.cube import CubeState
from cube_solver_service.solver import (
    ALREADY_SOLVED_MESSAGE,
    INCOMPLETE_MESSAGE,
    extract_solution,
    solve_cube,
)


ENDPOINTS = ['https://solver-one.test/solve', 'https://solver-two.test/api/solve']


def _scrambled_cube() -> CubeState:
    cube = CubeState.solved()
    cube.set_sticker('U', 0, 'G')
    cube.set_sticker('F', 0, 'W')
    return cube


def _solve(cube, handler: Callable, timeout: float = 1.0, endpoints: Optional[List[str]] = None):
    async def run():
        transport = httpx.MockTransport(handler)
        async with httpx.AsyncClient(transport=transport) as client:
            return await solve_cube(
                cube, endpoints=ENDPOINTS if endpoints is None else endpoints, timeout=timeout, client=client)

    return asyncio.run(run())


class Recorder:
    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request):
        self.requests.append(request)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def test_incomplete_cube_makes_no_request():
    recorder = Recorder()

    result = _solve(CubeState.with_centers(), recorder)

    assert result.error == INCOMPLETE_MESSAGE
    assert result.solution == ''
    assert result.moves == []
    assert recorder.requests == []


def test_solved_cube_short_circuits():
    recorder = Recorder()

    result = _solve(CubeState.solved(), recorder)

    assert result.already_solved
    assert result.solution == ALREADY_SOLVED_MESSAGE
    assert result.moves == []
    assert result.error is None
    assert recorder.requests == []


def test_first_endpoint_json_solution():
    recorder = Recorder(httpx.Response(200, json={'solution': "R U R' U'"}))

    result = _solve(_scrambled_cube(), recorder)

    assert result.solution == "R U R' U'"
    assert result.moves == ['R', 'U', "R'", "U'"]
    assert result.source == ENDPOINTS[0]
    assert not result.is_placeholder
    assert len(recorder.requests) == 1
    sent = recorder.requests[0]
    assert sent.url.params['cube'] == 'FUUUUUUUURRRRRRRRRUFFFFFFFFDDDDDDDDDLLLLLLLLLBBBBBBBBB'
    assert str(sent.url).startswith(ENDPOINTS[0])


def test_server_error_falls_through_to_next_endpoint():
    recorder = Recorder(
        httpx.Response(500, text='boom'),
        httpx.Response(200, text="F2 B' L"),
    )

    result = _solve(_scrambled_cube(), recorder)

    assert result.moves == ['F2', "B'", 'L']
    assert result.source == ENDPOINTS[1]
    assert [str(r.url).split('?')[0] for r in recorder.requests] == ENDPOINTS


def test_transport_error_falls_through_to_next_endpoint():
    recorder = Recorder(
        httpx.ConnectError('connection refused'),
        httpx.Response(200, json={'moves': ['D', 'R2']}),
    )

    result = _solve(_scrambled_cube(), recorder)

    assert result.solution == 'D R2'
    assert result.source == ENDPOINTS[1]


def test_timeout_falls_through_to_next_endpoint():
    calls = []

    async def handler(request):
        calls.append(str(request.url))
        if len(calls) == 1:
            await asyncio.sleep(1)
        return httpx.Response(200, json={'alg': 'U2 D2'})

    result = _solve(_scrambled_cube(), handler, timeout=0.05)

    assert result.solution == 'U2 D2'
    assert result.source == ENDPOINTS[1]
    assert len(calls) == 2


def test_all_endpoints_failing_returns_flagged_placeholder():
    recorder = Recorder(
        httpx.Response(200, text='<html>not a solution</html>'),
        httpx.Response(200, json={'error': 'Error 2: not all 12 edges exist exactly once'}),
    )

    result = _solve(_scrambled_cube(), recorder)

    assert result.is_placeholder
    assert result.error is None
    assert result.solution == PLACEHOLDER_SEQUENCE
    assert result.moves == PLACEHOLDER_SEQUENCE.split()
    assert result.source is None
    assert len(recorder.requests) == 2


def test_no_endpoints_returns_placeholder():
    result = _solve(_scrambled_cube(), Recorder(), endpoints=[])

    assert result.is_placeholder


@pytest.mark.parametrize('body, expected', [
    ('{"solution": "R U R\' U\'"}', "R U R' U'"),
    ('{"moves": ["R", "U2"]}', 'R U2'),
    ('{"alg": "B L\'"}', "B L'"),
    ('{"solution": "", "alg": "F"}', 'F'),
    ('"D2"', 'D2'),
    ("  R  U'\n", "R U'"),
    ("r u'", "r u'"),
    ('{"solution": "Error: invalid cube"}', None),
    ('{"status": "ok"}', None),
    ('R U X', None),
    ('', None),
    ('[1, 2]', None),
    ("2 '", None),
    ('{"solution": "R 2 U"}', None),
    ('RU', None),
    ("'R", None),
    ('R2\'', None),
])
def test_extract_solution(body, expected):
    assert extract_solution(body) == expected


def test_bare_modifiers_fall_through_to_next_endpoint():
    recorder = Recorder(
        httpx.Response(200, text="2 '"),
        httpx.Response(200, text='R U'),
    )

    result = _solve(_scrambled_cube(), recorder)

    assert result.solution == 'R U'
    assert result.source == ENDPOINTS[1]
    assert len(recorder.requests) == 2


def test_deeply_nested_body_falls_through_to_next_endpoint():
    recorder = Recorder(
        httpx.Response(200, text='[' * 100000 + ']' * 100000),
        httpx.Response(200, text='R U'),
    )

    result = _solve(_scrambled_cube(), recorder)

    assert result.solution == 'R U'
    assert result.source == ENDPOINTS[1]


def test_malformed_endpoint_url_is_skipped():
    recorder = Recorder(httpx.Response(200, text="L2 D'"))
    endpoints = ['https://solver-one.test:notaport/solve', ENDPOINTS[1]]

    result = _solve(_scrambled_cube(), recorder, endpoints=endpoints)

    assert result.solution == "L2 D'"
    assert result.source == ENDPOINTS[1]
    assert len(recorder.requests) == 1
