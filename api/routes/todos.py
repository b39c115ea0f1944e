"""
api/routes/todos.py -- JSON endpoints for the in-memory todo store.

Routes:
  GET    /api/todos        -- list all todos in insertion order
  POST   /api/todos        -- create a todo from a JSON body; 201
  DELETE /api/todos/{id}   -- remove a todo; empty 200, or empty 400 when the id has no leading digits

DELETE is the endpoint the todo page's hx-delete buttons call. An empty 200
body is all HTMX needs: with hx-swap="outerHTML" the list item is replaced
by nothing.

Auth policy: public. Todos are not scoped per user.
"""

from __future__ import annotations

import logging
import re

from fastapi import APIRouter, Request, Response

from api.models import TodoCreate, TodoResponse
from todos.store import TodoStore

logger = logging.getLogger("todoboard.api.todos")

router = APIRouter()

_LEADING_INT = re.compile(r"\s*([+-]?[0-9]+)")


@router.get("/todos", response_model=list[TodoResponse])
async def list_todos(request: Request) -> list[TodoResponse]:
    store: TodoStore = request.app.state.todo_store
    return [TodoResponse.from_todo(t) for t in await store.list()]


@router.post("/todos", response_model=TodoResponse, status_code=201)
async def create_todo(request: Request, body: TodoCreate) -> TodoResponse:
    store: TodoStore = request.app.state.todo_store
    todo = await store.add(body.text)
    return TodoResponse.from_todo(todo)


@router.delete("/todos/{todo_id}")
async def delete_todo(request: Request, todo_id: str) -> Response:
    """Delete by id.

    The id is read the way a browser's parseInt would: leading whitespace,
    an optional sign, then as many digits as follow. Trailing text is ignored,
    so "2abc" and "2.5" both delete todo 2. Only an id with no leading digits
    is a bare 400, never the 422 validation envelope.
    """
    match = _LEADING_INT.match(todo_id)
    if match is None:
        logger.warning("Invalid ID in DELETE /api/todos/%s", todo_id[:40])
        return Response(status_code=400)

    store: TodoStore = request.app.state.todo_store
    await store.delete(int(match.group(1)))
    return Response(status_code=200)
