"""Built frontend serving with single-page-app fallback.

Registered last so it only sees paths no API route claimed. Paths whose last
segment has no extension are client-side routes and get ``index.html``.
"""

from __future__ import annotations

from pathlib import Path

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse

from algo_catalog.core.container import AppContainer, get_container
from algo_catalog.core.errors import NotFoundAppError

router = APIRouter(include_in_schema=False)

INDEX_FILE = "index.html"


def resolve_static_path(static_dir: Path, request_path: str) -> Path | None:
    """Map a URL path to a file under ``static_dir``.

    Returns None when nothing should be served (missing file, or a path that
    escapes the directory).
    """
    root = static_dir.resolve()
    last_segment = request_path.rstrip("/").rsplit("/", 1)[-1]
    if not request_path.strip("/") or "." not in last_segment:
        candidate = root / INDEX_FILE
    else:
        candidate = (root / request_path.lstrip("/")).resolve()
        if not candidate.is_relative_to(root):
            return None
    return candidate if candidate.is_file() else None


@router.get("/{full_path:path}")
def serve_frontend(full_path: str, container: AppContainer = Depends(get_container)) -> FileResponse:
    if full_path == "api" or full_path.startswith("api/"):
        raise NotFoundAppError(code="not_found", message="Not found", details={"path": "/" + full_path})

    static_dir = Path(container.settings.app.static_dir)
    if not static_dir.is_dir():
        raise NotFoundAppError(code="frontend_not_built", message="Frontend not built")

    target = resolve_static_path(static_dir, full_path)
    if target is None:
        raise NotFoundAppError(code="not_found", message="Not found", details={"path": "/" + full_path})
    return FileResponse(target)
