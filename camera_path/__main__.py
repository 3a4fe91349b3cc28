"""
Compute the camera path of a project file.

    python -m camera_path project.json --fps 30 --out path.json

The project file holds ``effects``, ``recordings`` (with ``mouseEvents``),
``clips`` (``startFrame``, ``endFrame``, ``recordingId``, ``sourceIn``,
``playbackRate``), ``canvas`` (``width``, ``height``) and optional
``camera`` settings.
"""

import argparse
import json
import logging
import sys

from .config import CameraSettings, setup_logging
from .errors import CameraPathError
from .path_calculator import ClipLayout, Recording, calculate_camera_path

logger = logging.getLogger("camera_path")


def load_project(path):
    with open(path, "r", encoding="utf-8") as f:
        project = json.load(f)
    recordings = {r.id: r for r in (Recording.from_dict(d) for d in project.get("recordings", []))}
    clips = [ClipLayout.from_dict(d) for d in project.get("clips", [])]
    canvas = project.get("canvas") or {}
    return project.get("effects", []), recordings, clips, canvas, project.get("camera") or {}


def main(argv=None):
    parser = argparse.ArgumentParser(prog="camera-path", description="Compute per-frame camera transforms.")
    parser.add_argument("project", help="project JSON file")
    parser.add_argument("--fps", type=float, default=30.0)
    parser.add_argument("--out", help="write frames here (default: stdout)")
    parser.add_argument("--width", type=int, help="canvas width override")
    parser.add_argument("--height", type=int, help="canvas height override")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args(argv)

    setup_logging(logging.DEBUG if args.verbose else logging.INFO)

    effects, recordings, clips, canvas, camera = load_project(args.project)
    settings = CameraSettings.from_env(CameraSettings.from_dict(camera))
    first = next(iter(recordings.values()), None)
    width = args.width or canvas.get("width") or (first.width if first else 1920)
    height = args.height or canvas.get("height") or (first.height if first else 1080)

    try:
        frames = calculate_camera_path(effects, recordings, clips, args.fps, width, height, settings=settings)
    except (CameraPathError, ValueError) as e:
        logger.error("%s", e)
        return 1

    payload = {"fps": args.fps, "width": width, "height": height, "frames": [f.to_dict() for f in frames]}
    if args.out:
        with open(args.out, "w", encoding="utf-8") as f:
            json.dump(payload, f)
        logger.info("Done -> %s (%d frames)", args.out, len(frames))
    else:
        json.dump(payload, sys.stdout)
        sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
