"""Development launcher for Uvicorn that ensures logging is configured before reload workers start."""

from __future__ import annotations

import uvicorn

from common.core.config_service import ConfigService
from common.logging.setup_logging import setup_logging


def main() -> None:
    """Configure logging and delegate to uvicorn.run."""

    # ConfigService loads the .env files, so LOG_* options are visible to setup_logging
    config_service = ConfigService()
    setup_logging(level=config_service.get("log_level"))

    uvicorn.run(
        "app.main:create_app",
        factory=True,
        host=config_service.get("host", "0.0.0.0"),
        port=int(config_service.get("port", 8000)),
        reload=config_service.is_local(),
        reload_dirs=[".", "../libs"],  # Watch current dir (backend) and libs
    )


if __name__ == "__main__":
    main()
