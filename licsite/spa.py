"""
Fallback for client-side routes: serves files from the frontend build, or its index.html shell.
"""

from __future__ import annotations

from pathlib import Path

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import FileResponse

router = APIRouter()


def resolve_static_file(static_dir: Path, request_path: str) -> Path | None:
    root = static_dir.resolve()
    candidate = (root / request_path.lstrip("/")).resolve()
    if candidate != root and root not in candidate.parents:
        return None
    if candidate.is_file():
        return candidate
    return None


@router.get("/{full_path:path}", include_in_schema=False)
def spa_shell(full_path: str, request: Request):
    static_dir = Path(request.app.state.settings.static_dir)
    asset = resolve_static_file(static_dir, full_path)
    if asset is not None:
        return FileResponse(asset)

    shell = static_dir / "index.html"
    if not shell.is_file():
        raise HTTPException(status_code=404, detail="Not found")
    return FileResponse(shell)
