import threading
from datetime import datetime, timezone
from flask import jsonify, request, current_app

_rate_state: dict[str, tuple[int, int]] = {}
_rate_lock = threading.Lock()

def jerror(status: int, code: str, message: str, details=None):
    payload = {"code": code, "message": message}
    if details:
        payload["details"] = details
    return jsonify(payload), status

def client_ip() -> str:
    fwd = request.headers.get("X-Forwarded-For")
    return (fwd.split(",")[0].strip() if fwd else request.remote_addr or "0.0.0.0")

def allow_write(ip: str) -> bool:
    """Fixed-window counter of write requests per client IP. Only the current window is kept."""
    window_len = current_app.config["RATE_LIMIT_WINDOW"]
    now = int(datetime.now(tz=timezone.utc).timestamp())
    window = now // window_len
    with _rate_lock:
        for stale in [k for k, (_, win) in _rate_state.items() if win != window]:
            del _rate_state[stale]
        count = _rate_state.get(ip, (0, window))[0] + 1
        _rate_state[ip] = (count, window)
    return count <= current_app.config["RATE_LIMIT_MAX"]

def schema_details(e) -> list[dict]:
    """JSON-safe per-field error list from a pydantic ValidationError."""
    return [
        {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"], "type": err["type"]}
        for err in e.errors(include_url=False)
    ]
