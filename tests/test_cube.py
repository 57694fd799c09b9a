import pytest

from cube_solver_service.cube import (
    FACES,
    CenterStickerError,
    CubeColor,
    CubeState,
    Face,
    InvalidStickerError,
)


def test_with_centers_sets_only_the_centers():
    cube = CubeState.with_centers()

    for face in FACES:
        stickers = cube.stickers(face)
        assert stickers[4] == face.center_color
        assert stickers[:4] == [None] * 4
        assert stickers[5:] == [None] * 4


def test_center_colors_follow_the_home_face_mapping():
    assert Face.U.center_color is CubeColor.W
    assert Face.D.center_color is CubeColor.Y
    assert Face.R.center_color is CubeColor.R
    assert Face.L.center_color is CubeColor.O
    assert Face.F.center_color is CubeColor.G
    assert Face.B.center_color is CubeColor.B


def test_set_sticker_accepts_any_color_on_any_face():
    cube = CubeState.with_centers()

    cube.set_sticker('F', 0, 'W')
    cube.set_sticker(Face.D, 8, CubeColor.B)

    assert cube.stickers('F')[0] is CubeColor.W
    assert cube.stickers('D')[8] is CubeColor.B


def test_set_sticker_refuses_to_change_a_center():
    cube = CubeState.with_centers()
    before = cube.copy()

    with pytest.raises(CenterStickerError):
        cube.set_sticker('U', 4, 'Y')
    with pytest.raises(CenterStickerError):
        cube.clear_sticker('U', 4)

    assert cube == before


@pytest.mark.parametrize('face, index, color', [
    ('X', 0, 'W'),
    ('U', 9, 'W'),
    ('U', -1, 'W'),
    ('U', 0, 'P'),
])
def test_set_sticker_rejects_unknown_positions_and_colors(face, index, color):
    cube = CubeState.with_centers()

    with pytest.raises(InvalidStickerError):
        cube.set_sticker(face, index, color)


def test_reset_restores_centers_only_state():
    cube = CubeState.with_centers()
    cube.apply_samples([('U', 0, 'W'), ('R', 3, 'G'), ('B', 8, 'Y')])

    cube.reset()

    assert cube == CubeState.with_centers()


def test_readers_get_copies():
    cube = CubeState.with_centers()

    cube.stickers('U')[0] = CubeColor.R
    cube.slots()[0] = CubeColor.R
    cube.to_dict()['U'][0] = 'R'

    assert cube.stickers('U')[0] is None


def test_from_faces_parses_letters_and_unset_markers():
    faces = CubeState.solved().to_dict()
    faces['U'][0] = None
    faces['R'][1] = '?'

    cube = CubeState.from_faces(faces)

    assert cube.stickers('U')[0] is None
    assert cube.stickers('R')[1] is None
    assert cube.stickers('F') == [CubeColor.G] * 9


def test_from_faces_requires_six_faces_of_nine():
    faces = CubeState.solved().to_dict()
    del faces['B']
    with pytest.raises(InvalidStickerError):
        CubeState.from_faces(faces)

    faces = CubeState.solved().to_dict()
    faces['U'] = faces['U'][:8]
    with pytest.raises(InvalidStickerError):
        CubeState.from_faces(faces)


def test_from_color_string_reads_face_order():
    colors = 'W' * 9 + 'R' * 9 + 'G' * 9 + 'Y' * 9 + 'O' * 9 + 'B' * 9

    assert CubeState.from_color_string(colors) == CubeState.solved()

    with pytest.raises(InvalidStickerError):
        CubeState.from_color_string(colors[:-1])


def test_constructor_checks_slot_counts_and_colors():
    faces = {face: [face.center_color] * 9 for face in FACES}
    faces[Face.U] = faces[Face.U][:8]
    with pytest.raises(InvalidStickerError):
        CubeState(faces)

    faces = {face: [face.center_color] * 9 for face in FACES}
    faces[Face.R] = ['x'] * 9
    with pytest.raises(InvalidStickerError):
        CubeState(faces)

    faces = {face: [face.center_color] * 9 for face in FACES}
    del faces[Face.B]
    with pytest.raises(InvalidStickerError):
        CubeState(faces)


def test_constructor_normalizes_letters_to_colors():
    faces = {face: [face.center_color.value] * 9 for face in FACES}

    cube = CubeState(faces)

    assert cube == CubeState.solved()
    assert cube.stickers('F') == [CubeColor.G] * 9
