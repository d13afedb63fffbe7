"""
Tests for api.py module.

Tests live resolution (with the backends mocked), reading version records
from files and stdin, and persisting them.
"""

import io
import os
import pytest
from unittest.mock import MagicMock, patch

from scmver.api import RECORD_BUFSIZE, persist, resolve_from_record, resolve_live
from scmver.errors import (
    BackendProtocolError,
    DetectionError,
    ScmNotFoundError,
    VersionIOError,
    VersionParseError,
    WorkingDirectoryError,
)
from scmver.models import ScmKind, VersionRecord


class TestResolveLive:
    """Test live SCM resolution."""

    def test_runs_extractor_in_root(self, git_tree):
        seen = {}

        def fake_git(record):
            seen['cwd'] = os.getcwd()
            record.vtag = '1.0.0'
            record.dist = 3
            record.rvsn = (0x1a2b3c4 << 4) | 7
            return record

        before = os.getcwd()
        with patch.dict('scmver.api.EXTRACTORS', {ScmKind.GIT: fake_git}):
            record = resolve_live(str(git_tree / 'src' / 'pkg'))

        assert os.path.samefile(seen['cwd'], git_tree)
        assert os.getcwd() == before
        assert record.scm == ScmKind.GIT
        assert record.vtag == '1.0.0'
        assert record.dist == 3

    def test_restores_cwd_on_backend_failure(self, git_tree):
        before = os.getcwd()
        failing = MagicMock(side_effect=BackendProtocolError('git describe exited with status 128'))
        with patch.dict('scmver.api.EXTRACTORS', {ScmKind.GIT: failing}):
            with pytest.raises(BackendProtocolError):
                resolve_live(str(git_tree))
        assert os.getcwd() == before

    @pytest.mark.parametrize('kind', [ScmKind.BZR, ScmKind.HG])
    def test_dispatches_by_kind(self, tmp_path, kind):
        extractor = MagicMock(side_effect=lambda record: record)
        with patch('scmver.api.find_scm', return_value=(kind, str(tmp_path))), \
                patch.dict('scmver.api.EXTRACTORS', {kind: extractor}):
            record = resolve_live(str(tmp_path))
        extractor.assert_called_once()
        assert record.scm == kind

    def test_no_scm(self, plain_tree):
        with pytest.raises(ScmNotFoundError) as exc_info:
            resolve_live(str(plain_tree))
        assert exc_info.value.record.scm == ScmKind.TARBALL

    def test_detection_error(self, tmp_path):
        with pytest.raises(DetectionError):
            resolve_live(str(tmp_path / 'missing'))

    def test_root_vanished(self, tmp_path):
        with patch('scmver.api.find_scm', return_value=(ScmKind.GIT, str(tmp_path / 'gone'))):
            with pytest.raises(DetectionError):
                resolve_live()

    def test_extractor_os_error_propagates(self, git_tree):
        before = os.getcwd()
        failing = MagicMock(side_effect=BrokenPipeError('pipe closed'))
        with patch.dict('scmver.api.EXTRACTORS', {ScmKind.GIT: failing}):
            with pytest.raises(BrokenPipeError):
                resolve_live(str(git_tree))
        assert os.getcwd() == before

    def test_restore_failure_escalated(self, git_tree):
        ok = MagicMock(side_effect=lambda record: record)
        with patch.dict('scmver.api.EXTRACTORS', {ScmKind.GIT: ok}), \
                patch('scmver.utils.os.chdir', side_effect=[None, OSError('cwd removed')]):
            with pytest.raises(WorkingDirectoryError):
                resolve_live(str(git_tree))
        ok.assert_called_once()


class TestResolveFromRecord:
    """Test reading stored version records."""

    def test_file(self, version_file):
        path = version_file('v1.0.0-3-g1a2b3c4-dirty\n')
        record = resolve_from_record(path)
        assert record.vtag == '1.0.0'
        assert record.dist == 3
        assert record.scm == ScmKind.GIT
        assert record.dirty is True

    def test_first_line_only(self, version_file):
        path = version_file('v2.0\nv3.0\n')
        assert resolve_from_record(path).vtag == '2.0'

    def test_no_trailing_newline(self, version_file):
        assert resolve_from_record(version_file('v1.0.0')).vtag == '1.0.0'

    def test_crlf(self, version_file):
        assert resolve_from_record(version_file('v1.0-2-gabc\r\n')).revision == 0xabc

    def test_stdin(self):
        with patch('sys.stdin', io.StringIO('v1.2.3.git4.abc1234\n')):
            record = resolve_from_record('-')
        assert record.vtag == '1.2.3'
        assert record.scm == ScmKind.GIT
        assert record.dist == 4

    def test_bounded_read(self, version_file):
        path = version_file('v1.0-' + '9' * (RECORD_BUFSIZE * 2) + '\n')
        record = resolve_from_record(path)
        assert record.dist == int('9' * (RECORD_BUFSIZE - 5))

    def test_missing_file(self, tmp_path):
        with pytest.raises(VersionIOError):
            resolve_from_record(str(tmp_path / 'nope'))

    def test_empty_file(self, version_file):
        with pytest.raises(VersionParseError):
            resolve_from_record(version_file(''))

    def test_garbage(self, version_file):
        with pytest.raises(VersionParseError):
            resolve_from_record(version_file('not a version\n'))


class TestPersist:
    """Test writing version records."""

    def test_file(self, tmp_path):
        path = tmp_path / 'version'
        record = VersionRecord(scm=ScmKind.GIT, vtag='1.0.0', dist=3, revision=0x1a2b3c4,
                               revision_width=7, dirty=True)
        persist(record, str(path))
        assert path.read_text() == 'v1.0.0-3-g1a2b3c4-dirty\n'

    def test_truncates_existing(self, tmp_path):
        path = tmp_path / 'version'
        path.write_text('v99.99.99-12345-gdeadbee-dirty\nleftover\n')
        persist(VersionRecord(vtag='1.0'), str(path))
        assert path.read_text() == 'v1.0\n'

    def test_stdout(self, capsys):
        persist(VersionRecord(vtag='1.0'), '-')
        assert capsys.readouterr().out == 'v1.0\n'

    def test_unwritable(self, tmp_path):
        with pytest.raises(VersionIOError):
            persist(VersionRecord(vtag='1.0'), str(tmp_path / 'missing-dir' / 'version'))

    def test_round_trip_through_file(self, tmp_path):
        path = str(tmp_path / 'version')
        record = VersionRecord(scm=ScmKind.HG, vtag='0.3', dist=2, revision=0xab, revision_width=4)
        persist(record, path)
        assert resolve_from_record(path) == record
