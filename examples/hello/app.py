"""Hello World — the simplest supaedge function.

Demonstrates routes, path parameters, and global CORS middleware.

Run:
    uvicorn app:app
"""

from supaedge import App
from supaedge.middleware import CORSMiddleware

app = App()
app.add_middleware(CORSMiddleware())


@app.get("/")
def index(ctx):
    return ctx.respond.json({"message": "Hello from supaedge!"})


@app.get("/greet/:name")
def greet(ctx):
    return ctx.respond.json({"message": f"Hello, {ctx.params['name']}!"})
