from fastapi import APIRouter, Depends, HTTPException, Query
from sqlmodel import Session, select

from motionlog.core.auth import verify_api_key
from motionlog.core.config import settings
from motionlog.db.models import Camera, ClipEvent
from motionlog.db.session import get_session
from motionlog.schemas.domain import CameraCreate, ClipCreate, FeedPage, ScanSummary
from motionlog.services.cursor_service import InvalidCursor
from motionlog.services.feed_service import fetch_feed_page
from motionlog.services.scan_service import DuplicateClip, index_clip, scan_all, scan_camera

router = APIRouter(dependencies=[Depends(verify_api_key)])


@router.post("/cameras")
def create_camera(payload: CameraCreate, session: Session = Depends(get_session)) -> Camera:
    if session.get(Camera, payload.camera_id):
        raise HTTPException(status_code=409, detail="Camera already exists")
    camera = Camera(**payload.model_dump())
    session.add(camera)
    session.commit()
    session.refresh(camera)
    return camera


@router.get("/cameras")
def list_cameras(session: Session = Depends(get_session)) -> list[Camera]:
    return list(session.exec(select(Camera).order_by(Camera.camera_id)))


@router.get("/clips")
def list_clips(
    cam: str = Query(default=""),
    cursor: str = Query(default=""),
    limit: int | None = Query(default=None, ge=1),
    session: Session = Depends(get_session),
) -> FeedPage:
    page_size = min(limit or settings.feed_page_size, settings.feed_max_page_size)
    try:
        return fetch_feed_page(session, cam=cam.strip(), cursor=cursor.strip(), limit=page_size)
    except InvalidCursor as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@router.post("/clips")
def create_clip(payload: ClipCreate, session: Session = Depends(get_session)) -> ClipEvent:
    try:
        return index_clip(session, payload)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail="Camera not found") from exc
    except DuplicateClip as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc


@router.post("/clips/notify", status_code=201)
def notify_new_clip(cam: str = Query(...), session: Session = Depends(get_session)) -> ScanSummary:
    try:
        return scan_camera(session, cam.strip())
    except LookupError as exc:
        raise HTTPException(status_code=404, detail="Camera not found") from exc


@router.post("/clips/scan")
def scan_all_cameras(session: Session = Depends(get_session)) -> list[ScanSummary]:
    return scan_all(session)
