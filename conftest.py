"""Root conftest.py: make the local replaycheck package take precedence over any installed version."""

from __future__ import annotations

import sys
from pathlib import Path

# Insert src/ at the front of sys.path so that `import replaycheck` always
# resolves to the local source tree, and the project root so that
# `from tests.conftest import ...` works.
_root = Path(__file__).parent
for _path in (str(_root / "src"), str(_root)):
    if _path not in sys.path:
        sys.path.insert(0, _path)
