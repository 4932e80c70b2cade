from __future__ import annotations

import pytest

from bartab.bar import Bar


@pytest.fixture
def bar(tmp_path):
    return Bar.open(tmp_path / "bar.db", seed=False)


@pytest.fixture
def beer(bar):
    return bar.catalog.create("Pilsen 600ml", "12.50", 10, "Drinks")


@pytest.fixture
def member(bar):
    return bar.members.create("Ana Souza", email="ana@example.com", phone="11999990000")
