"""
Render the two corner photos the auto-detect endpoint expects (and optionally
emit a ready-to-post JSON payload).

Usage:
  python3 generate_corner_photos.py \
     --output-dir ./samples/generated \
     --scheme WWWWWWWWWRRRRRRRRRGGGGGGGGGYYYYYYYYYOOOOOOOOOBBBBBBBBB \
     --emit-payload

The scheme is 54 color letters (W, Y, R, O, G, B) in face order
U, R, F, D, L, B, row-major. By default the solved cube is rendered.
``corner1.png`` shows U, F and R; ``corner2.png`` shows D, B and L, each
painted where ``cube_solver_service.color_detection`` samples them.
"""

from __future__ import annotations

import argparse
import base64
import json
from io import BytesIO
from pathlib import Path
from typing import Dict, Tuple

from PIL import Image
import numpy as np

from cube_solver_service.config import CANONICAL_RGB, CORNER_FACE_SCALE, FACE_ORDER


DEFAULT_SCHEME = "WWWWWWWWWRRRRRRRRRGGGGGGGGGYYYYYYYYYOOOOOOOOOBBBBBBBBB"
SIZE = 600
BACKGROUND = (24, 24, 24)


def parse_arguments() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Render two Rubik corner photos to PNGs.")
    parser.add_argument(
        "--output-dir",
        type=str,
        default="samples/generated",
        help="Directory where corner1.png and corner2.png will be stored."
    )
    parser.add_argument(
        "--scheme",
        type=str,
        default=None,
        help="Optional 54-character color string in order U(9),R(9),F(9),D(9),L(9),B(9)."
    )
    parser.add_argument(
        "--emit-payload",
        action="store_true",
        help="Write auto_detect_payload.json with both photos base64-encoded."
    )
    return parser.parse_args()


def split_scheme(raw: str | None) -> Dict[str, str]:
    raw = (raw or DEFAULT_SCHEME).strip().upper()
    if len(raw) != 54:
        raise ValueError("Scheme must contain exactly 54 characters.")
    unknown = set(raw) - set(CANONICAL_RGB)
    if unknown:
        raise ValueError(f"Unknown colors in scheme: {''.join(sorted(unknown))}")
    return {face: raw[index * 9:(index + 1) * 9] for index, face in enumerate(FACE_ORDER)}


def face_rects(corner: str) -> Dict[str, Tuple[float, float, float, float]]:
    face_size = SIZE * CORNER_FACE_SCALE
    center = SIZE / 2
    if corner == "corner1":
        return {
            "U": (center - face_size * 0.9, SIZE * 0.08, face_size * 1.8, face_size * 0.9),
            "F": (SIZE * 0.1, SIZE * 0.4, face_size * 1.2, face_size * 1.4),
            "R": (SIZE * 0.52, SIZE * 0.4, face_size * 1.2, face_size * 1.4),
        }
    return {
        "D": (center - face_size * 0.9, SIZE * 0.55, face_size * 1.8, face_size * 0.9),
        "B": (SIZE * 0.52, SIZE * 0.1, face_size * 1.2, face_size * 1.4),
        "L": (SIZE * 0.1, SIZE * 0.1, face_size * 1.2, face_size * 1.4),
    }


def render_corner(corner: str, scheme: Dict[str, str]) -> np.ndarray:
    image = np.zeros((SIZE, SIZE, 3), dtype=np.uint8)
    image[:, :] = BACKGROUND
    for face, (x, y, width, height) in face_rects(corner).items():
        cell_w, cell_h = width / 3, height / 3
        for idx, char in enumerate(scheme[face]):
            row, col = divmod(idx, 3)
            start_c, start_r = int(x + col * cell_w), int(y + row * cell_h)
            end_c, end_r = int(x + (col + 1) * cell_w), int(y + (row + 1) * cell_h)

            noise = np.random.default_rng().integers(-3, 4, size=(end_r - start_r, end_c - start_c, 3), dtype=np.int16)
            patch = np.clip(np.array(CANONICAL_RGB[char], dtype=np.int16) + noise, 0, 255).astype(np.uint8)
            image[start_r:end_r, start_c:end_c] = patch

            # Dark gaps between stickers fall inside the trimmed cell margin.
            image[start_r:end_r, start_c:start_c + 2] = BACKGROUND
            image[start_r:start_r + 2, start_c:end_c] = BACKGROUND
    return image


def encode_base64(image: np.ndarray) -> str:
    pil = Image.fromarray(image)
    buffer = BytesIO()
    pil.save(buffer, format="PNG", optimize=True)
    return base64.b64encode(buffer.getvalue()).decode("ascii")


def main() -> None:
    args = parse_arguments()
    scheme = split_scheme(args.scheme)
    output_dir = Path(args.output_dir).expanduser().resolve()
    output_dir.mkdir(parents=True, exist_ok=True)

    payload = []
    for corner in ("corner1", "corner2"):
        image = render_corner(corner, scheme)
        filepath = output_dir / f"{corner}.png"
        Image.fromarray(image).save(filepath)
        payload.append(encode_base64(image))
        print(f"Generated {filepath}")

    if args.emit_payload:
        payload_path = output_dir / "auto_detect_payload.json"
        payload_path.write_text(json.dumps({"images": payload}))
        print(f"Wrote {payload_path} (POST it to /photo/auto-detect)")


if __name__ == "__main__":
    main()
