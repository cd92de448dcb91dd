"""Entry point for running the social graph service with Uvicorn."""
from __future__ import annotations

import os

import uvicorn


def main() -> None:
  port = int(os.getenv("SOCIAL_GRAPH_PORT", "3333"))
  reload = os.getenv("UVICORN_RELOAD", "false").lower() == "true"
  uvicorn.run("social_graph.main:app", host="0.0.0.0", port=port, reload=reload)


if __name__ == "__main__":
  main()
