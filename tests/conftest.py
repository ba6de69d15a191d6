import sys
from pathlib import Path

# (1) Repository root (for `scripts.*`) and src/ (for `allocheck.*`) on sys.path
ROOT = Path(__file__).resolve().parents[1]
for entry in (ROOT, ROOT / "src"):
    if str(entry) not in sys.path:
        sys.path.insert(0, str(entry))
