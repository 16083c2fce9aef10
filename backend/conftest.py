# Ensure 'backend/' is on sys.path so 'import studio_booking' works
# even when pytest is started from the repository root.
from pathlib import Path
import sys

_BACKEND_ROOT = Path(__file__).resolve().parent
if str(_BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(_BACKEND_ROOT))
