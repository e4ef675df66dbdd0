"""Request pipeline — path resolution, dispatch, error translation, ASGI send."""
