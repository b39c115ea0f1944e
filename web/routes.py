"""
web/routes.py -- Jinja2 template routes for the Todoboard web UI.

These routes serve server-rendered HTML. They share app.state with the API
routes (same todo store, same auth client) but return pages and HTMX
fragments instead of JSON.

Routes:
  GET  /            -- home page
  GET  /signin      -- sign-in form (hx-post to /api/auth/signin)
  GET  /register    -- registration form (hx-post to /api/auth/register)
  GET  /dashboard   -- signed-in landing page (auth required)
  GET  /todos       -- todo list with add form and hx-delete buttons
  POST /todos       -- HTMX: add a todo, return the new <li> fragment
  GET  /api/error   -- error page; renders ?message= in the alert fragment
"""

import logging
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse, Response
from fastapi.templating import Jinja2Templates

from auth.dependencies import try_get_current_user
from auth.provider import AuthProviderClient, AuthProviderError
from auth.tokens import REFRESH_COOKIE, clear_session_cookies, set_session_cookies, user_from_token
from todos.store import TodoStore

logger = logging.getLogger("todoboard.web")

templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))
# Exposed as a Jinja2 global so layout.html can render the signed-in nav
# without every handler passing current_user into the context.
templates.env.globals["try_get_current_user"] = try_get_current_user
router = APIRouter()

# ---------------------------------------------------------------------------
# Auth helpers
# ---------------------------------------------------------------------------

# Whitelist mapping for ?notice= on /signin. The raw query param is never
# rendered -- only the message from this dict is.
_NOTICES: dict[str, str] = {
    "check_email": "Check your email to confirm your account, then sign in.",
    "expired": "Your session has expired. Please sign in again.",
}

_MAX_ERROR_CHARS = 200


def _require_auth(request: Request) -> Optional[Response]:
    """Check if the current request carries a valid session.

    Returns a redirect when it does not, None if OK. Call at the top of
    protected route handlers:
        if redirect := _require_auth(request):
            return redirect

    An expired access token is renewed through the provider when a refresh
    cookie is present: the browser is bounced back to the same path with new
    cookies. A failed refresh clears both cookies so the next request starts
    clean.
    """
    if try_get_current_user(request) is not None:
        return None

    path = request.url.path
    refresh_token = request.cookies.get(REFRESH_COOKIE)
    if not refresh_token:
        return RedirectResponse(f"/signin?next={path}", status_code=302)

    client: AuthProviderClient = request.app.state.auth_client
    try:
        session = client.refresh_session(refresh_token)
    except AuthProviderError as e:
        logger.info("Session refresh failed: %s", e.message)
        session = None

    # A refreshed token that still fails verification would loop forever.
    if session is None or user_from_token(session.access_token) is None:
        resp = RedirectResponse(f"/signin?next={path}&notice=expired", status_code=302)
        clear_session_cookies(resp)
        return resp

    resp = RedirectResponse(path, status_code=302)
    set_session_cookies(resp, session)
    return resp


# ---------------------------------------------------------------------------
# Pages
# ---------------------------------------------------------------------------


@router.get("/", response_class=HTMLResponse)
def home(request: Request) -> HTMLResponse:
    return templates.TemplateResponse(request, "index.html", {})


@router.get("/signin", response_class=HTMLResponse)
def signin_form(request: Request) -> HTMLResponse:
    """Render the sign-in form. Signed-in users go straight to the dashboard."""
    if try_get_current_user(request) is not None:
        return RedirectResponse("/dashboard", status_code=302)

    notice = _NOTICES.get(request.query_params.get("notice", ""))
    return templates.TemplateResponse(
        request,
        "signin.html",
        {
            "notice": notice,
            "next_url": request.query_params.get("next", ""),
        },
    )


@router.get("/register", response_class=HTMLResponse)
def register_form(request: Request) -> HTMLResponse:
    if try_get_current_user(request) is not None:
        return RedirectResponse("/dashboard", status_code=302)
    return templates.TemplateResponse(request, "register.html", {})


@router.get("/dashboard", response_class=HTMLResponse)
def dashboard(request: Request) -> HTMLResponse:
    if redirect := _require_auth(request):
        return redirect
    user = try_get_current_user(request)
    return templates.TemplateResponse(request, "dashboard.html", {"user": user})


# ---------------------------------------------------------------------------
# Todos
# ---------------------------------------------------------------------------


@router.get("/todos", response_class=HTMLResponse)
async def todo_list(request: Request) -> HTMLResponse:
    store: TodoStore = request.app.state.todo_store
    todos = await store.list()
    return templates.TemplateResponse(request, "todos.html", {"todos": todos})


@router.post("/todos", response_class=HTMLResponse)
async def todo_add_htmx(request: Request, text: str = Form(default="")) -> HTMLResponse:
    """Add a todo and return its <li> for HTMX to append to the list."""
    store: TodoStore = request.app.state.todo_store
    todo = await store.add(text)
    return templates.TemplateResponse(request, "partials/todo_item.html", {"todo": todo})


# ---------------------------------------------------------------------------
# GET /api/error -- target of the auth endpoints' failure redirects
# ---------------------------------------------------------------------------


@router.get("/api/error", response_class=HTMLResponse)
def error_page(request: Request, message: str = "") -> HTMLResponse:
    """Render an error message. Jinja2 autoescaping neutralises any markup."""
    message = message.strip()[:_MAX_ERROR_CHARS] or "Something went wrong."
    return templates.TemplateResponse(request, "error.html", {"message": message})
