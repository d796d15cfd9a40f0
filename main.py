import os
import sys
import signal
import traceback
from pathlib import Path

import uvicorn
from dotenv import load_dotenv

# Load .env before reading HOST/PORT/ENVIRONMENT
env_path = Path(__file__).resolve().parent / ".env"
if env_path.exists():
    load_dotenv(env_path)

from drivelog.utils.config import load_settings


def _unhandled_exception(exc_type, exc_value, exc_tb):
    """Print unhandled exceptions so the process log shows the cause before exit."""
    if exc_type is KeyboardInterrupt:
        sys.__excepthook__(exc_type, exc_value, exc_tb)
        return
    msg = "".join(traceback.format_exception(exc_type, exc_value, exc_tb))
    print("Unhandled exception (process will exit):\n" + msg, file=sys.stderr, flush=True)
    sys.__excepthook__(exc_type, exc_value, exc_tb)


if __name__ == "__main__":
    """
    Entry point for drivelog.
    Bootstraps the admin on first run, sweeps expired sessions, then serves.
    """
    root_dir = os.path.dirname(os.path.abspath(__file__))
    sys.path.insert(0, root_dir)
    sys.excepthook = _unhandled_exception

    settings = load_settings()
    reload = settings.environment == "development" and os.getenv("RELOAD", "").lower() in ("1", "true", "yes")

    print(f"Starting drivelog from {root_dir}...")
    print(f"Environment: {settings.environment}")
    print(f"Data directory: {settings.data_dir}")
    print(f"Listening on http://{settings.host}:{settings.port}")
    print("Press CTRL+C to stop the server")

    def signal_handler(sig, frame):
        print("\n\nShutdown signal received. Stopping server...")
        sys.exit(0)

    signal.signal(signal.SIGINT, signal_handler)
    if hasattr(signal, "SIGTERM"):
        signal.signal(signal.SIGTERM, signal_handler)

    try:
        # Single worker: the JSON stores lock in-process only
        uvicorn.run(
            "web.main:app",
            host=settings.host,
            port=settings.port,
            reload=reload,
            log_level="info" if settings.is_production else "debug",
        )
    except KeyboardInterrupt:
        print("\n\nShutdown complete.")
        sys.exit(0)
    except Exception as e:
        print(f"\nFatal error: {e}", file=sys.stderr)
        traceback.print_exc(file=sys.stderr)
        sys.exit(1)
