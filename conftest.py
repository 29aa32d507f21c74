"""
Shared pytest fixtures for the minipack test suite.
"""
import os
import textwrap

import pytest


@pytest.fixture
def project(tmp_path):
    """
    Write module files into a temporary project directory.

    Calling project("lib/util.py", source) creates the file (dedenting the
    source) and returns its canonical absolute path.
    """
    def write(name, source=""):
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(source), encoding="utf-8")
        return os.path.realpath(str(path))

    write.root = os.path.realpath(str(tmp_path))
    return write


@pytest.fixture
def run_bundle():
    """Execute bundle text the way a host would and return its globals."""
    def run(output, name="bundle"):
        namespace = {"__name__": name}
        exec(compile(output, "<bundle>", "exec"), namespace)
        return namespace

    return run
