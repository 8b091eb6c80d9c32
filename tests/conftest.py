import sys
from pathlib import Path

# Garante que src esteja no path (shared e editpdf_orphans)
_root = Path(__file__).resolve().parents[1]
src_path = str(_root / "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)
