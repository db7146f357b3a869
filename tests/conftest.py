# puts 'src' (flat packages app, core, services, ...) and the shared
# track builders in tests/unit on sys.path
import sys
from pathlib import Path

root = Path(__file__).resolve().parents[1]
for path in (root / "src", root / "tests" / "unit"):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))
