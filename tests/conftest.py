"""
Pytest configuration and shared fixtures for test suite.

Provides fake process handles for backend tests and temporary project
trees with SCM marker directories.
"""

import io
import os
import pytest
from unittest.mock import MagicMock


@pytest.fixture
def fake_proc():
    """Factory for Popen-like handles with canned stdout and exit status."""
    def _make(output=b'', returncode=0, command='git'):
        proc = MagicMock()
        proc.args = [command]
        proc.stdout = io.BytesIO(output)
        proc.wait.return_value = returncode
        return proc
    return _make


@pytest.fixture
def git_tree(tmp_path):
    """A project tree with a .git directory and a nested source folder."""
    (tmp_path / '.git').mkdir()
    src = tmp_path / 'src' / 'pkg'
    src.mkdir(parents=True)
    (src / 'module.py').write_text('x = 1\n')
    return tmp_path


@pytest.fixture
def plain_tree(tmp_path):
    """A nested directory chain without any SCM markers."""
    deep = tmp_path / 'a' / 'b' / 'c'
    deep.mkdir(parents=True)
    return deep


@pytest.fixture
def version_file(tmp_path):
    """Write a version record to a file and return its path."""
    def _write(content, name='.version'):
        path = tmp_path / name
        path.write_text(content)
        return str(path)
    return _write


@pytest.fixture(autouse=True)
def restore_cwd():
    """Make sure no test leaves the process in another directory."""
    cwd = os.getcwd()
    yield
    os.chdir(cwd)
