"""Pytest bootstrap for local source imports.

Test directories carry no ``__init__.py``, so pytest puts each test's own
directory on ``sys.path``. Add the repository root so ``import peek``
resolves to the working tree rather than an installed copy.
"""

from __future__ import annotations

import sys
from pathlib import Path

PROJECT_ROOT = str(Path(__file__).resolve().parent.parent)

if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)
