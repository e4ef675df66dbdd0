"""Tests for the App orchestrator — dispatch, prefixes, HEAD, and errors."""

import pytest

from supaedge.app import App
from supaedge.config import AppConfig
from supaedge.errors import HTTPError
from supaedge.http.request import Request
from supaedge.http.response import Response
from supaedge.testing import TestClient


def _get(url: str, method: str = "GET", **kwargs) -> Request:
    return Request.build(method, f"http://localhost{url}", **kwargs)


class TestAppBasics:
    async def test_basic_get_route(self) -> None:
        app = App()

        @app.get("/hello")
        def hello(ctx):
            return ctx.respond.json({"message": "hello"})

        response = await app.handle(_get("/hello"))
        assert response.status == 200
        assert response.json() == {"message": "hello"}

    async def test_post_route_with_body(self) -> None:
        app = App()

        @app.post("/items")
        async def create(ctx):
            body = await ctx.json()
            return ctx.respond.json({"received": body}, 201)

        response = await app.handle(
            _get("/items", "POST", headers={"Content-Type": "application/json"}, body=b'{"name": "test"}')
        )
        assert response.status == 201
        assert response.json()["received"]["name"] == "test"

    async def test_path_params_available(self) -> None:
        app = App()

        @app.get("/users/:id")
        def show(ctx):
            return ctx.respond.json({"id": ctx.params["id"]})

        response = await app.handle(_get("/users/42"))
        assert response.json() == {"id": "42"}

    async def test_every_method_decorator(self) -> None:
        app = App()
        for method in ("get", "post", "put", "patch", "delete"):
            name = method.upper()

            def handler(ctx, name=name):
                return ctx.respond.text(name)

            getattr(app, method)("/r")(handler)

        for name in ("GET", "POST", "PUT", "PATCH", "DELETE"):
            response = await app.handle(_get("/r", name))
            assert response.text == name

    async def test_route_with_multiple_methods(self) -> None:
        app = App()

        @app.route("/r", methods=["GET", "POST"])
        def both(ctx):
            return ctx.respond.text(ctx.method)

        assert (await app.handle(_get("/r", "POST"))).text == "POST"
        assert len(app.routes) == 2

    async def test_all_route_answers_any_method(self) -> None:
        app = App()

        @app.all("/any")
        def anything(ctx):
            return ctx.respond.text(ctx.method)

        assert (await app.handle(_get("/any", "DELETE"))).text == "DELETE"

    async def test_handler_returning_non_response_is_500(self) -> None:
        app = App()

        @app.get("/bad")
        def bad(ctx):
            return {"not": "a response"}

        response = await app.handle(_get("/bad"))
        assert response.status == 500
        assert "expected Response" in response.json()["error"]


class TestNotFound:
    async def test_unmatched_route_is_404(self) -> None:
        app = App()

        @app.get("/hello")
        def hello(ctx):
            return ctx.respond.text("hi")

        response = await app.handle(_get("/unknown"))
        assert response.status == 404
        body = response.json()
        assert "No route matched" in body["error"]
        assert "GET /unknown" in body["error"]
        assert body["status"] == 404

    async def test_global_middleware_runs_on_404(self) -> None:
        app = App()
        calls: list[str] = []

        async def tag(ctx, next):
            calls.append("global")
            ctx.response_headers.set("X-Custom", "middleware")
            return await next()

        app.add_middleware(tag)

        @app.get("/hello")
        def hello(ctx):
            return ctx.respond.text("hi")

        response = await app.handle(_get("/nope"))
        assert response.status == 404
        assert response.header("X-Custom") == "middleware"
        assert calls == ["global"]

    async def test_route_middleware_does_not_run_on_404(self) -> None:
        app = App()
        calls: list[str] = []

        async def route_mw(ctx, next):
            calls.append("route")
            return await next()

        @app.get("/hello", middleware=[route_mw])
        def hello(ctx):
            return ctx.respond.text("hi")

        response = await app.handle(_get("/nope"))
        assert response.status == 404
        assert calls == []

    async def test_global_middleware_can_answer_unmatched(self) -> None:
        app = App()

        async def short_circuit(ctx, next):
            return ctx.respond.text("handled", 200)

        app.add_middleware(short_circuit)
        response = await app.handle(_get("/anything"))
        assert response.status == 200
        assert response.text == "handled"


class TestPrefixStripping:
    async def test_strips_function_prefix(self) -> None:
        app = App()

        @app.get("/todos")
        def todos(ctx):
            return ctx.respond.json({"ok": True})

        response = await app.handle(_get("/functions/v1/my-fn/todos"))
        assert response.status == 200
        assert response.json() == {"ok": True}

    async def test_bare_function_path_becomes_root(self) -> None:
        app = App()

        @app.get("/")
        def root(ctx):
            return ctx.respond.text("root")

        response = await app.handle(_get("/functions/v1/my-fn"))
        assert response.text == "root"

    async def test_query_string_kept_after_strip(self) -> None:
        app = App()

        @app.get("/search")
        def search(ctx):
            return ctx.respond.json({"q": ctx.url.query.get("q")})

        response = await app.handle(_get("/functions/v1/my-fn/search?q=abc"))
        assert response.json() == {"q": "abc"}

    async def test_unprefixed_paths_still_route(self) -> None:
        app = App()

        @app.get("/todos")
        def todos(ctx):
            return ctx.respond.text("ok")

        assert (await app.handle(_get("/todos"))).status == 200

    async def test_explicit_base_path_disables_stripping(self) -> None:
        app = App(AppConfig(base_path="/functions/v1/todos"))

        @app.get("/items")
        def items(ctx):
            return ctx.respond.text("ok")

        assert (await app.handle(_get("/functions/v1/todos/items"))).status == 200
        assert (await app.handle(_get("/items"))).status == 404

    async def test_custom_function_prefix(self) -> None:
        app = App(AppConfig(function_prefix="/fn"))

        @app.get("/todos")
        def todos(ctx):
            return ctx.respond.text("ok")

        assert (await app.handle(_get("/fn/my-fn/todos"))).status == 200

    async def test_original_path_in_not_found_message(self) -> None:
        app = App()
        response = await app.handle(_get("/functions/v1/my-fn/missing"))
        assert "/functions/v1/my-fn/missing" in response.json()["error"]


class TestHead:
    async def test_head_uses_get_route_without_body(self) -> None:
        app = App()

        @app.get("/data")
        def data(ctx):
            return ctx.respond.json({"items": [1, 2, 3]})

        response = await app.handle(_get("/data", "HEAD"))
        assert response.status == 200
        assert response.content_type == "application/json"
        assert response.body == b""

    async def test_head_on_404_has_no_body(self) -> None:
        app = App()
        response = await app.handle(_get("/nope", "HEAD"))
        assert response.status == 404
        assert response.body == b""

    async def test_head_over_asgi_has_no_body(self) -> None:
        app = App()

        @app.get("/data")
        def data(ctx):
            return ctx.respond.text("payload")

        async with TestClient(app) as client:
            get = await client.get("/data")
            response = await client.head("/data")
        assert response.status == 200
        assert response.body == b""
        assert response.headers == get.headers
        assert response.header("content-length") == "7"



async def _asgi_get(app: App, path: str, raw_path: bytes | None = None) -> tuple[int, bytes]:
    scope = {"type": "http", "method": "GET", "path": path, "query_string": b"", "headers": []}
    if raw_path is not None:
        scope["raw_path"] = raw_path
    sent: list[dict] = []

    async def receive():
        return {"type": "http.request", "body": b"", "more_body": False}

    async def send(message):
        sent.append(message)

    await app(scope, receive, send)
    return sent[0]["status"], sent[1]["body"]


class TestEncodedPaths:
    @staticmethod
    def _app() -> App:
        app = App()

        @app.get("/tags/:name")
        def tag(ctx):
            return ctx.respond.json({"name": ctx.params["name"]})

        @app.get("/q/:term")
        def search(ctx):
            return ctx.respond.json({"term": ctx.params["term"], "page": ctx.url.query.get("page")})

        return app

    async def test_encoded_hash_and_question_mark_stay_in_param(self) -> None:
        async with TestClient(self._app()) as client:
            tag = await client.get("/tags/c%23")
            search = await client.get("/q/why%3F?page=2")
        assert tag.json() == {"name": "c#"}
        assert search.json() == {"term": "why?", "page": "2"}

    async def test_raw_path_is_matched_not_decoded_path(self) -> None:
        status, body = await _asgi_get(self._app(), "/tags/c#", b"/tags/c%23")
        assert status == 200
        assert body == b'{"name": "c#"}'

    async def test_decoded_path_requoted_without_raw_path(self) -> None:
        status, body = await _asgi_get(self._app(), "/q/why?")
        assert status == 200
        assert b'"term": "why?"' in body

    async def test_encoded_slash_stays_in_one_segment(self) -> None:
        async with TestClient(self._app()) as client:
            response = await client.get("/tags/a%2Fb")
        assert response.json() == {"name": "a/b"}


class TestErrors:
    async def test_http_error_serialized(self) -> None:
        app = App()

        @app.get("/fail")
        def fail(ctx):
            raise HTTPError.bad_request("bad input", {"field": "name"})

        response = await app.handle(_get("/fail"))
        assert response.status == 400
        assert response.json() == {"error": "bad input", "status": 400, "details": {"field": "name"}}

    async def test_unexpected_error_is_500(self) -> None:
        app = App()

        @app.get("/boom")
        def boom(ctx):
            raise RuntimeError("boom")

        response = await app.handle(_get("/boom"))
        assert response.status == 500
        assert response.json() == {"error": "boom", "status": 500}

    async def test_error_response_keeps_middleware_headers(self) -> None:
        app = App()

        async def tag(ctx, next):
            ctx.response_headers.set("X-Trace", "abc")
            return await next()

        app.add_middleware(tag)

        @app.get("/boom")
        def boom(ctx):
            raise HTTPError.forbidden()

        response = await app.handle(_get("/boom"))
        assert response.status == 403
        assert response.header("X-Trace") == "abc"

    async def test_custom_error_hook(self) -> None:
        app = App()

        @app.error
        def on_error(error, ctx):
            return ctx.respond.json({"custom": str(error)}, 500)

        @app.get("/fail")
        def fail(ctx):
            raise RuntimeError("boom")

        response = await app.handle(_get("/fail"))
        assert response.status == 500
        assert response.json() == {"custom": "boom"}

    async def test_error_hook_from_config(self) -> None:
        async def on_error(error, ctx):
            return ctx.respond.text("handled", 418)

        app = App(AppConfig(on_error=on_error))
        response = await app.handle(_get("/missing"))
        assert response.status == 418

    async def test_raising_error_hook_falls_back(self) -> None:
        app = App()

        @app.error
        def on_error(error, ctx):
            raise ValueError("hook broke")

        @app.get("/fail")
        def fail(ctx):
            raise HTTPError.conflict("taken")

        response = await app.handle(_get("/fail"))
        assert response.status == 409
        assert response.json() == {"error": "taken", "status": 409}

    async def test_error_hook_returning_non_response_falls_back(self) -> None:
        app = App()

        @app.error
        def on_error(error, ctx):
            return None

        @app.get("/fail")
        def fail(ctx):
            raise HTTPError.bad_request("nope")

        response = await app.handle(_get("/fail"))
        assert response.status == 400

    async def test_double_next_becomes_500(self) -> None:
        app = App()

        async def twice(ctx, next):
            await next()
            return await next()

        @app.get("/x", middleware=[twice])
        def x(ctx):
            return ctx.respond.text("ok")

        response = await app.handle(_get("/x"))
        assert response.status == 500
        assert "next() called multiple times" in response.json()["error"]


class TestMiddlewareOrder:
    async def test_global_then_route_then_handler(self) -> None:
        app = App()
        order: list[str] = []

        def tracker(name: str):
            async def mw(ctx, next):
                order.append(f"{name}:in")
                response = await next()
                order.append(f"{name}:out")
                return response

            return mw

        app.add_middleware(tracker("g1"))
        app.add_middleware(tracker("g2"))

        @app.get("/x", middleware=[tracker("r1"), tracker("r2")])
        def x(ctx):
            order.append("handler")
            return ctx.respond.text("ok")

        await app.handle(_get("/x"))
        assert order == [
            "g1:in",
            "g2:in",
            "r1:in",
            "r2:in",
            "handler",
            "r2:out",
            "r1:out",
            "g2:out",
            "g1:out",
        ]

    async def test_middleware_can_transform_response(self) -> None:
        app = App()

        async def stamp(ctx, next):
            response = await next()
            return response.with_header("X-Stamp", "1")

        app.add_middleware(stamp)

        @app.get("/x")
        def x(ctx):
            return ctx.respond.text("ok")

        response = await app.handle(_get("/x"))
        assert response.header("X-Stamp") == "1"


class TestFreeze:
    async def test_cannot_add_route_after_first_request(self) -> None:
        app = App()
        await app.handle(_get("/"))
        with pytest.raises(RuntimeError, match="Cannot modify the app"):
            app.add_route("GET", "/late", lambda ctx: None)

    async def test_cannot_add_middleware_after_first_request(self) -> None:
        app = App()
        await app.handle(_get("/"))
        with pytest.raises(RuntimeError):
            app.add_middleware(lambda ctx, next: next())

    async def test_lifespan_freezes_app(self) -> None:
        app = App()
        messages = iter([{"type": "lifespan.startup"}, {"type": "lifespan.shutdown"}])
        sent: list[dict] = []

        async def receive():
            return next(messages)

        async def send(message):
            sent.append(message)

        await app({"type": "lifespan"}, receive, send)
        assert [m["type"] for m in sent] == [
            "lifespan.startup.complete",
            "lifespan.shutdown.complete",
        ]
        with pytest.raises(RuntimeError):
            app.add_middleware(lambda ctx, next: next())


class TestBackgroundWork:
    async def test_wait_until_runs_after_response(self) -> None:
        app = App()
        done: list[str] = []

        async def audit() -> None:
            done.append("audit")

        @app.get("/x")
        def x(ctx):
            ctx.wait_until(audit())
            assert done == []
            return ctx.respond.text("ok")

        async with TestClient(app) as client:
            response = await client.get("/x")
        assert response.status == 200
        assert done == ["audit"]

    async def test_background_failure_is_logged_not_raised(self, caplog) -> None:
        app = App()

        async def broken() -> None:
            raise RuntimeError("background boom")

        @app.get("/x")
        def x(ctx):
            ctx.wait_until(broken())
            return ctx.respond.text("ok")

        async with TestClient(app) as client:
            with caplog.at_level("ERROR", logger="supaedge.server"):
                response = await client.get("/x")
        assert response.status == 200
        assert "Background task failed" in caplog.text

    async def test_handle_awaits_background_work(self) -> None:
        app = App()
        done: list[str] = []

        async def audit() -> None:
            done.append("audit")

        @app.get("/x")
        def x(ctx):
            ctx.wait_until(audit())
            return ctx.respond.text("ok")

        response = await app.handle(_get("/x"))
        assert response.text == "ok"
        assert done == ["audit"]


class TestResponseShape:
    async def test_response_is_plain_dataclass(self) -> None:
        app = App()

        @app.get("/x")
        def x(ctx):
            return Response(body=b"raw", status=202)

        response = await app.handle(_get("/x"))
        assert response.status == 202
        assert response.body == b"raw"
