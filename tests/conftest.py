"""Shared test fixtures."""
import sys
from pathlib import Path

# Ensure src/ is on sys.path so `rush` imports work without installing
SRC_ROOT = Path(__file__).resolve().parent.parent / 'src'
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))
