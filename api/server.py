"""Local FastAPI endpoint the desktop shell forwards deep links to."""

from __future__ import annotations

import os

from fastapi import FastAPI, Header, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse
from pydantic import BaseModel, Field

from command_dispatcher.router import Dispatcher
from utils.log_utils import log


# Origins the desktop webview uses. Requests without an Origin header come
# from local processes (the shell, curl) and are accepted.
DEFAULT_ALLOWED_ORIGINS = ("tauri://localhost", "http://tauri.localhost", "https://tauri.localhost")


def allowed_origins() -> list[str]:
    """Return the webview origins allowed to post triggers (``TOOLY_API_ORIGINS`` overrides)."""
    raw = os.getenv("TOOLY_API_ORIGINS")
    if raw is None:
        return list(DEFAULT_ALLOWED_ORIGINS)
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


class TriggerRequest(BaseModel):
    url: str = Field(min_length=1, max_length=65536)


def create_app(dispatcher: Dispatcher | None = None, origins: list[str] | None = None) -> FastAPI:
    dispatcher = dispatcher or Dispatcher()
    origins = allowed_origins() if origins is None else list(origins)
    app = FastAPI(title="Tooly Dispatcher API", version="0.1.0")
    app.state.dispatcher = dispatcher

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=False,
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type"],
    )

    @app.post("/trigger")
    def trigger(req: TriggerRequest, origin: str | None = Header(default=None)):
        if origin is not None and origin not in origins:
            log("API", f"Rejected trigger from origin '{origin}'", "WARN")
            raise HTTPException(status_code=403, detail="origin not allowed")
        result = dispatcher.dispatch_url(req.url)
        if result.status == "invalid":
            raise HTTPException(status_code=400, detail=result.details.get("reason") if result.details else "invalid")
        return result.to_dict()

    @app.get("/status")
    def status():
        return {
            "status": "ready",
            "os": dispatcher.launcher.os_name,
            "action_types": dispatcher.action_types,
            "active_scripts": len(dispatcher.runner.active_tasks()),
            "script_timeout_s": dispatcher.runner.timeout,
        }

    @app.get("/", response_class=HTMLResponse)
    def root():
        return "<html><body><h1>Tooly Dispatcher</h1><p>Status: OK</p></body></html>"

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("api.server:app", host="127.0.0.1", port=8000, reload=True)
