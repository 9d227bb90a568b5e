from pathlib import Path
import sys


def add_src_to_path() -> None:
    """
    Put `src/` on sys.path so `sqlprobe` imports without installing
    the package (python scripts/run_probe.py).
    """
    src = str(Path(__file__).resolve().parent / "src")
    if src not in sys.path:
        sys.path.insert(0, src)
