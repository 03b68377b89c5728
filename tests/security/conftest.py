"""Security test fixtures and configuration."""

import pytest


@pytest.fixture(autouse=True)
def isolate_security_tests(monkeypatch, tmp_path):
    """
    Run every security test inside a temp directory.

    Keeps traversal payloads from creating files under the project root.
    """
    monkeypatch.chdir(tmp_path)
    yield tmp_path
