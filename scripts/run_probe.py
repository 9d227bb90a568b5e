import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import bootstrap
bootstrap.add_src_to_path()

from sqlprobe.cli import main


if __name__ == "__main__":
    raise SystemExit(main())
