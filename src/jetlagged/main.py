"""Entry point for running a JetLagged service."""

import sys

import uvicorn

from jetlagged.config import get_settings
from jetlagged.services.coverage import build_app as build_coverage_app
from jetlagged.services.resolver import build_app as build_resolver_app

SERVICES = {
    "resolver": build_resolver_app,
    "coverage": build_coverage_app,
}


def main() -> None:
    """Run the service named on the command line (default: resolver)."""
    name = sys.argv[1] if len(sys.argv) > 1 else "resolver"
    if name not in SERVICES:
        sys.exit(f"unknown service '{name}'; choose from {', '.join(SERVICES)}")
    settings = get_settings()
    app = SERVICES[name](settings)
    uvicorn.run(app, host=settings.server.host, port=settings.server.port, log_level="info")


if __name__ == "__main__":
    main()
