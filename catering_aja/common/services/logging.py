import json
import sys
from datetime import datetime


_LEVELS = {"debug": 10, "info": 20, "warning": 30, "error": 40}
_min_level = _LEVELS["info"]


def set_log_level(level: str) -> None:
    global _min_level
    _min_level = _LEVELS.get((level or "info").lower(), _LEVELS["info"])


def log_event(level: str, event: str, **fields) -> None:
    if _LEVELS.get(level.lower(), _LEVELS["info"]) < _min_level:
        return
    payload = {
        "ts": datetime.utcnow().isoformat() + "Z",
        "level": level.lower(),
        "event": event,
    }
    payload.update(fields or {})
    try:
        sys.stdout.write(json.dumps(payload, ensure_ascii=False, default=str) + "\n")
    except Exception:
        # best-effort logging
        pass
