"""
Tests for audioscripts/validation.py.
"""

import pytest

from audioscripts.types import FileResult, FileStatus
from audioscripts.validation import ContainerValidationRouter, ValidationRouter, build_router, validate_files

from conftest import write_mp3_with_cue, write_wav


class ExplodingRouter(ValidationRouter):
    def handle_files(self, paths):
        if paths[0].endswith("bad.wav"):
            raise RuntimeError("router crashed")
        return [FileResult(FileStatus.ACCEPTED, paths[0])]


class TestValidateFiles:
    def test_router_is_abstract(self):
        with pytest.raises(TypeError):
            ValidationRouter()

    def test_router_exception_rejects_only_that_file(self):
        results = validate_files(["/a/good.wav", "/a/bad.wav", "/a/other.wav"], router=ExplodingRouter())
        assert [r.status for r in results] == [FileStatus.ACCEPTED, FileStatus.REJECTED, FileStatus.ACCEPTED]
        assert results[1] == FileResult(FileStatus.REJECTED, "bad.wav", "Error")

    def test_to_dict(self):
        assert FileResult(FileStatus.REJECTED, "x.wav", "Error").to_dict() == {
            "status": "REJECTED", "fileName": "x.wav", "reason": "Error"
        }


class TestContainerRouter:
    def test_default_router(self):
        assert isinstance(build_router(), ContainerValidationRouter)

    def test_classification(self, tmp_path):
        good = tmp_path / "good.wav"
        write_wav(good, [(1, "orature-vm-1")])
        unmarked = tmp_path / "unmarked.wav"
        write_wav(unmarked)
        unknown = tmp_path / "unknown.wav"
        write_wav(unknown, [(1, "junk")])
        silent = tmp_path / "silent.wav"
        write_wav(silent, [(0, "orature-vm-1")], pcm=b"")
        broken = tmp_path / "broken.wav"
        broken.write_bytes(b"nope")

        results = validate_files([str(p) for p in (good, unmarked, unknown, silent, broken)])
        assert [r.status for r in results] == [
            FileStatus.ACCEPTED, FileStatus.WARNING, FileStatus.WARNING, FileStatus.REJECTED, FileStatus.REJECTED
        ]
        assert results[2].reason == "1 unknown marker(s)"
        assert results[0].file_name == "good.wav"

    def test_mp3_uses_correlated_sidecar(self, tmp_path):
        mp3 = tmp_path / "b" / "mp3" / "hi" / "chapter" / "en_ulb_gen_c01.mp3"
        write_mp3_with_cue(mp3, [("orature-vm-1", "00:00:00")])
        (result,) = validate_files([str(mp3)])
        assert result.status is FileStatus.ACCEPTED

    def test_unsupported_format_rejected(self, tmp_path):
        (result,) = validate_files([str(tmp_path / "a.ogg")])
        assert result.status is FileStatus.REJECTED
