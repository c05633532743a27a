"""Pytest configuration.

The packages are importable without an editable install; when pytest runs
without the repository root on `sys.path`, `import lob_core` / `import lob_sync`
would fail, so the root is added here.
"""

from __future__ import annotations

import sys
from pathlib import Path


ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
