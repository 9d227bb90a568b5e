import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import bootstrap
bootstrap.add_src_to_path()

import uvicorn

from sqlprobe.api import app
from sqlprobe.config import get_api_settings
from sqlprobe.logging import setup_logging


def main() -> None:
    setup_logging("logs/api.log")
    settings = get_api_settings()
    uvicorn.run(app, host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    main()
