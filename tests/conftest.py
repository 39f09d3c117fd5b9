"""Shared fixtures."""

from __future__ import annotations

import importlib.abc
import sys
from collections.abc import Iterator

import pytest


class _NotARaspberryPiFinder(importlib.abc.MetaPathFinder):
    """Makes ``import RPi.GPIO`` fail the way it does on non-Pi Linux hosts."""

    def find_spec(self, fullname, path, target=None):  # type: ignore[no-untyped-def]
        if fullname == "RPi" or fullname.startswith("RPi."):
            raise RuntimeError("This module can only be run on a Raspberry Pi!")
        return None


@pytest.fixture
def not_a_raspberry_pi(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    for name in [n for n in sys.modules if n == "RPi" or n.startswith("RPi.")]:
        monkeypatch.delitem(sys.modules, name)
    finder = _NotARaspberryPiFinder()
    sys.meta_path.insert(0, finder)
    try:
        yield
    finally:
        sys.meta_path.remove(finder)
