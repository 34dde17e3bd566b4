"""Entry point for the Tooly dispatcher shell.

The desktop shell (single-instance handler, deep-link handler) starts this
with the trigger URLs as arguments, or with ``--serve`` to keep a local
trigger endpoint running.
"""

import argparse
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from command_dispatcher.router import Dispatcher
from ui.windows import ConsoleWindowHost
from utils.app_paths import app_data_dir, is_first_run
from utils.log_utils import tprint
from utils.settings_store import get_settings


def _is_enabled(name: str, default: bool = True) -> bool:
    """Read a boolean-like environment variable (1/0/true/false)."""
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _load_env_files() -> None:
    """Load .env files from common locations (repo, bundle, home)."""
    candidates: list[Path] = []
    cwd = Path.cwd()
    candidates.extend([cwd / "env/.env", cwd / ".env"])

    module_root = Path(__file__).resolve().parent
    candidates.extend([module_root / "env/.env", module_root / ".env"])

    home = Path.home()
    candidates.extend([home / ".tooly.env", home / ".env.tooly"])

    if getattr(sys, "frozen", False):
        meipass = Path(getattr(sys, "_MEIPASS", ""))
        if meipass:
            candidates.extend([meipass / "env/.env", meipass / ".env"])
        exec_path = Path(sys.executable).resolve()
        resources = exec_path.parent.parent / "Resources"
        candidates.extend([resources / "env/.env", resources / ".env"])

    for path in candidates:
        if path.exists():
            load_dotenv(dotenv_path=str(path), override=False)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run Tooly context-menu triggers.")
    parser.add_argument("urls", nargs="*", help="Trigger URLs, e.g. tooly://run?payload=...")
    parser.add_argument(
        "--serve",
        action="store_true",
        default=None,
        help="Serve the local trigger API after handling the given URLs.",
    )
    parser.add_argument("--host", default=None, help="Trigger API host (default 127.0.0.1).")
    parser.add_argument("--port", type=int, default=None, help="Trigger API port (default 8765).")
    parser.add_argument(
        "--wait",
        type=float,
        default=None,
        help="Seconds to wait for background scripts before exiting (default: until done).",
    )
    return parser


def _serve(dispatcher: Dispatcher, host: str, port: int) -> None:
    import uvicorn

    from api.server import create_app

    settings = get_settings()
    log_level = str(settings.get("log_level", "INFO")).upper()
    if log_level == "DEEP":
        log_level = "DEBUG"
    uvicorn.run(
        create_app(dispatcher),
        host=host,
        port=port,
        log_level=log_level.lower(),
        access_log=bool(settings.get("http_access_log", False)),
    )


def bootstrap(argv: list[str] | None = None) -> int:
    """Wire up the dispatcher, handle first run, then dispatch every URL."""
    _load_env_files()
    args = _build_parser().parse_args(argv)

    window_host = ConsoleWindowHost()
    dispatcher = Dispatcher(window_host=window_host)

    if is_first_run(app_data_dir()):
        tprint("[MAIN] First time running application.")
        window_host.open_main()

    failures = 0
    for url in args.urls:
        tprint(f"[MAIN] URL: {url}")
        result = dispatcher.dispatch_url(url)
        if not result.ok:
            failures += 1

    serve = args.serve if args.serve is not None else _is_enabled("TOOLY_SERVE", False)
    try:
        if serve:
            host = args.host or os.getenv("TOOLY_API_HOST", "127.0.0.1")
            port = args.port or int(os.getenv("TOOLY_API_PORT", "8765"))
            _serve(dispatcher, host, port)
        elif not args.urls:
            window_host.open_main()
    except KeyboardInterrupt:
        tprint("[MAIN] Received interrupt. Shutting down...")

    if not dispatcher.join(args.wait):
        tprint("[MAIN][WARN] Exiting with scripts still running.")
    return 1 if failures else 0


if __name__ == "__main__":
    raise SystemExit(bootstrap())
