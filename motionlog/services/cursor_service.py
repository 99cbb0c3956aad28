from datetime import datetime

from motionlog.core.crypto import decrypt_json, encrypt_json


class InvalidCursor(ValueError):
    pass


def encode_cursor(ts: datetime, clip_id: str) -> str:
    """Opaque continuation token for the keyset position just after ``(ts, clip_id)``."""
    return encrypt_json({"ts": ts.isoformat(), "id": clip_id}).decode("ascii")


def decode_cursor(token: str) -> tuple[datetime, str]:
    try:
        payload = decrypt_json(token.encode("ascii"))
        return datetime.fromisoformat(payload["ts"]), str(payload["id"])
    except (ValueError, KeyError, TypeError, UnicodeEncodeError) as exc:
        raise InvalidCursor("Invalid cursor") from exc
