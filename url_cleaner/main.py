"""URL Cleaner service entrypoint."""

from __future__ import annotations

from . import create_app

app = create_app()


def run() -> None:  # pragma: no cover - manual execution helper
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)


if __name__ == "__main__":  # pragma: no cover
    run()
