from __future__ import annotations

import argparse

import uvicorn

from ..config import Config


def main() -> None:
    cfg = Config.from_env()
    parser = argparse.ArgumentParser(description="Serve the duoqueen engine over HTTP")
    parser.add_argument("--host", default=cfg.server.host)
    parser.add_argument("--port", type=int, default=cfg.server.port)
    args = parser.parse_args()
    uvicorn.run(
        "duoqueen.protocol.http.app:create_app",
        factory=True,
        host=args.host,
        port=args.port,
        log_level=cfg.log_level.lower(),
    )


if __name__ == "__main__":
    main()
