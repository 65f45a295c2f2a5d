import sys
from pathlib import Path
import importlib
import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


@pytest.fixture()
def cli():
    """Lazily import the CLI module for tests to avoid module-level import."""
    return importlib.import_module("huff")


@pytest.fixture()
def text_data():
    return b"A MAN A PLAN A CANAL PANAMA. " * 20


@pytest.fixture()
def all_bytes():
    """Every byte value exactly once."""
    return bytes(range(256))


def assert_prefix_free(codings):
    codes = list(codings.values())
    for i, a in enumerate(codes):
        for j, b in enumerate(codes):
            if i != j:
                assert not b.startswith(a), (a, b)


@pytest.fixture()
def assert_prefix_free_fn():
    """
    Fixture that provides the prefix check without importing conftest.
    """
    return assert_prefix_free
