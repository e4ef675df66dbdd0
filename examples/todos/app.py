"""Todos — a CRUD function backed by the data service.

Demonstrates global middleware (CORS, access logging, auth), body
validation with pydantic, and per-user queries through ``ctx.supabase()``.

Run:
    SUPABASE_URL=... SUPABASE_ANON_KEY=... uvicorn app:app
"""

from pydantic import BaseModel, Field

from supaedge import App, HTTPError
from supaedge.middleware import AuthMiddleware, CORSMiddleware, LoggerMiddleware, ValidatorMiddleware


class NewTodo(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    completed: bool = False


class TodoUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=255)
    completed: bool | None = None


def create_app(**kwargs) -> App:
    """Build the app; keyword arguments are passed to ``App``."""
    app = App(**kwargs)
    app.add_middleware(CORSMiddleware())
    app.add_middleware(LoggerMiddleware())
    app.add_middleware(AuthMiddleware())

    @app.get("/todos")
    def list_todos(ctx):
        try:
            result = ctx.supabase().table("todos").select("*").order("created_at", desc=True).execute()
        except Exception as exc:
            raise HTTPError.internal(str(exc)) from exc
        return ctx.respond.json(result.data)

    @app.get("/todos/:id")
    def get_todo(ctx):
        try:
            result = ctx.supabase().table("todos").select("*").eq("id", ctx.params["id"]).single().execute()
        except Exception as exc:
            raise HTTPError.not_found("Todo not found") from exc
        return ctx.respond.json(result.data)

    @app.post("/todos", middleware=[ValidatorMiddleware(body=NewTodo)])
    def create_todo(ctx):
        todo = ctx.validated.body
        row = {"title": todo.title, "completed": todo.completed, "user_id": ctx.user.id}
        try:
            result = ctx.supabase().table("todos").insert(row).execute()
        except Exception as exc:
            raise HTTPError.internal(str(exc)) from exc
        return ctx.respond.json(result.data, 201)

    @app.patch("/todos/:id", middleware=[ValidatorMiddleware(body=TodoUpdate)])
    def update_todo(ctx):
        changes = ctx.validated.body.model_dump(exclude_none=True)
        if not changes:
            raise HTTPError.bad_request("Nothing to update")
        try:
            result = ctx.supabase().table("todos").update(changes).eq("id", ctx.params["id"]).execute()
        except Exception as exc:
            raise HTTPError.not_found("Todo not found") from exc
        return ctx.respond.json(result.data)

    @app.delete("/todos/:id")
    def delete_todo(ctx):
        try:
            ctx.supabase().table("todos").delete().eq("id", ctx.params["id"]).execute()
        except Exception as exc:
            raise HTTPError.internal(str(exc)) from exc
        return ctx.respond.empty()

    return app


app = create_app()
