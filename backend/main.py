"""
School Portal API entrypoint

Run with ``python main.py`` from the backend directory, or point uvicorn at
``school_portal.main:app``.
"""

import os
import re

import uvicorn

from school_portal.core.config import settings
from school_portal.main import app  # noqa: F401


if __name__ == "__main__":
    port_str = os.environ.get("PORT") or "8000"

    try:
        port = int(port_str)
    except ValueError:
        print(f"ERROR: Invalid PORT value '{port_str}'. Using default port 8000.")
        port = 8000

    print(f"Starting server on port {port}")
    print(f"Environment: {settings.ENVIRONMENT}")
    # Mask password in URL for logging
    masked_url = re.sub(r'://([^:]+):([^@]+)@', r'://\1:***@', settings.DATABASE_URL)
    print(f"Database URL: {masked_url}")

    uvicorn.run(
        "school_portal.main:app",
        host="0.0.0.0",
        port=port,
        reload=settings.ENVIRONMENT == "development",
        log_level="info"
    )
