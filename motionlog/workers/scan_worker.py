import argparse
import json
import time
from pathlib import Path

from sqlmodel import Session

from motionlog.core.config import settings
from motionlog.core.logging_setup import setup_logging
from motionlog.db.session import engine, init_db
from motionlog.services.scan_service import scan_all, scan_camera


def scan_once(args: argparse.Namespace) -> list[dict]:
    root = Path(args.root) if args.root else settings.clip_storage_dir
    with Session(engine) as session:
        if args.camera_id:
            summaries = [scan_camera(session, args.camera_id, root=root)]
        else:
            summaries = scan_all(session, root=root)
    return [summary.model_dump() for summary in summaries]


def run(args: argparse.Namespace) -> None:
    while True:
        report = scan_once(args)
        print(json.dumps({"scanned": report}, ensure_ascii=True))
        if args.once:
            break
        time.sleep(max(args.poll_seconds, 1.0))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Index new clips from clip storage")
    parser.add_argument("--camera-id", default="", help="Only scan this camera's directory")
    parser.add_argument("--root", default="", help="Clip storage root (default: CLIP_STORAGE_DIR)")
    parser.add_argument("--once", action="store_true", help="Scan once and exit")
    parser.add_argument("--poll-seconds", type=float, default=60.0)
    return parser


if __name__ == "__main__":
    setup_logging()
    init_db()
    run(build_parser().parse_args())
