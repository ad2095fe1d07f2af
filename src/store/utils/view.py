# src/store/utils/view.py
import os
from typing import Dict, Any

from fastapi.templating import Jinja2Templates
from starlette.responses import Response

from src.store.utils.csrf import csrf_token_for

_current_dir = os.path.dirname(os.path.abspath(__file__))
_project_root = os.path.abspath(os.path.join(_current_dir, "../../.."))
TEMPLATES_PATH = os.path.join(_project_root, "frontend", "templates")
templates = Jinja2Templates(directory=TEMPLATES_PATH)


def _no_cache(resp: Response) -> Response:
    resp.headers["Cache-Control"] = "no-store, no-cache, must-revalidate, max-age=0"
    resp.headers["Pragma"] = "no-cache"
    resp.headers["Expires"] = "0"
    return resp


async def render(template_name: str, ctx: Dict[str, Any], status_code: int = 200) -> Response:
    request = ctx["request"]
    ctx.setdefault("csrf_token", csrf_token_for(request))
    ctx.setdefault("flashes", [])
    resp = templates.TemplateResponse(request, template_name, ctx, status_code=status_code)
    return _no_cache(resp)
