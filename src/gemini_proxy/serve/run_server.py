"""Run the proxy under uvicorn."""
from __future__ import annotations
import argparse
import os

import uvicorn

from gemini_proxy.common.logging_setup import setup_logging


def main() -> None:
    ap = argparse.ArgumentParser(description="Serve the Gemini proxy")
    ap.add_argument("--host", default=os.getenv("PROXY_HOST", "0.0.0.0"))
    ap.add_argument("--port", type=int, default=int(os.getenv("PROXY_PORT", "8080")))
    ap.add_argument("--log-level", default=os.getenv("LOG_LEVEL", "INFO"))
    args = ap.parse_args()

    # the app module configures logging again on import
    os.environ["LOG_LEVEL"] = args.log_level.upper()
    setup_logging()
    uvicorn.run(
        "gemini_proxy.serve.fastapi_app:app",
        host=args.host,
        port=args.port,
        log_level=args.log_level.lower(),
        log_config=None,
    )

if __name__ == "__main__":
    main()
