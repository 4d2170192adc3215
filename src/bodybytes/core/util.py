from __future__ import annotations
import base64
from typing import Dict, Any, Iterable
from .model import Report


def report_asdict(rep: Report, *, fields: Iterable[str] | None = None, bytes_peek: int | None = None) -> Dict[str, Any]:
    """Return a JSON-serialisable dict (skip None) optionally filtered."""
    if not rep.success or rep.body is None:
        return {"success": False, "source": rep.source, "error": rep.error,
                "chunks_read": rep.chunks_read, "bytes_read": rep.bytes_read}
    payload: Dict[str, Any] = {
        "source": rep.source,
        "length": len(rep.body),
        "max_length": rep.max_length,
    }
    if rep.max_length is not None:
        payload["limit_reached"] = len(rep.body) >= rep.max_length
    if bytes_peek and bytes_peek > 0:
        payload["peek_bytes_b64"] = base64.b64encode(rep.body[:bytes_peek]).decode()
    payload = {k: v for k, v in payload.items() if v is not None}
    if fields:
        wanted = set(fields)
        payload = {k: v for k, v in payload.items() if k in wanted}
    payload.update({"success": True, "chunks_read": rep.chunks_read, "bytes_read": rep.bytes_read})
    return payload
