"""Pytest conftest: put the repo root on sys.path so the flat modules import without installing."""

import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))
