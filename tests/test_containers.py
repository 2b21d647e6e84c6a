"""
Tests for audioscripts/containers.py and audioscripts/riff.py.

Validates:
    - WAV markers are read from cue / adtl chunks
    - commit rewrites markers without touching PCM data or unrelated chunks
    - read-only and capability errors
    - MP3 containers read and write their cue-sheet sidecar
"""

import struct

import pytest

from audioscripts import riff
from audioscripts.containers import AudioContainer, Mp3Container, WavContainer, container_class_for, open_container
from audioscripts.errors import ContainerOpenError, ContainerReadOnlyError, UnsupportedOperation
from audioscripts.types import MarkerKind

from conftest import MP3_BYTES, cue_text, read_pcm, write_float_wav, write_wav

# ---------------------------------------------------------------------------
# WAV
# ---------------------------------------------------------------------------


class TestWavContainer:
    def test_reads_markers_in_stored_order(self, wav_file):
        with open_container(str(wav_file)) as c:
            markers = c.get_markers()
        assert [(m.kind, m.position, m.label) for m in markers] == [
            (MarkerKind.VERSE, 100, "orature-vm-1"),
            (MarkerKind.UNKNOWN, 200, "random marker"),
            (MarkerKind.CHUNK, 300, "orature-chunk-1"),
        ]

    def test_frames_and_capabilities(self, tmp_path):
        path = tmp_path / "stereo.wav"
        write_wav(path, frames=500, channels=2)
        with open_container(str(path)) as c:
            assert c.total_frames == 500
            assert c.frame_size == 4
            assert c.can_read_samples
            assert c.can_fingerprint()
            assert not c.uses_sidecar

    def test_cue_point_without_label_is_unknown(self, tmp_path):
        path = tmp_path / "nolabel.wav"
        write_wav(path)
        with open(path, "ab") as f:
            payload = struct.pack("<I", 1) + struct.pack("<II4sIII", 9, 50, b"data", 0, 0, 50)
            f.write(b"cue " + struct.pack("<I", len(payload)) + payload)
        _fix_riff_size(path)
        with open_container(str(path)) as c:
            (marker,) = c.get_markers()
        assert marker.kind is MarkerKind.UNKNOWN
        assert marker.label == ""
        assert marker.position == 50

    def test_commit_removes_unknown_and_preserves_pcm(self, wav_file):
        pcm_before = read_pcm(wav_file)
        with open_container(str(wav_file), mode="w") as c:
            c.remove_markers(MarkerKind.UNKNOWN)
            c.commit()
        with open_container(str(wav_file)) as c:
            assert [m.label for m in c.get_markers()] == ["orature-vm-1", "orature-chunk-1"]
        assert read_pcm(wav_file) == pcm_before

    def test_commit_with_markers_before_data(self, tmp_path, scenario_markers):
        path = tmp_path / "early.wav"
        pcm = write_wav(path, scenario_markers, markers_before_data=True)
        with open_container(str(path), mode="w") as c:
            c.remove_markers(MarkerKind.UNKNOWN)
            c.commit()
        assert read_pcm(path) == pcm
        with open_container(str(path)) as c:
            assert len(c.get_markers()) == 2

    def test_commit_without_markers_drops_chunks(self, tmp_path):
        path = tmp_path / "only_unknown.wav"
        write_wav(path, [(10, "junk"), (20, "more junk")])
        with open_container(str(path), mode="w") as c:
            c.remove_markers(MarkerKind.UNKNOWN)
            c.commit()
        raw = path.read_bytes()
        assert b"cue " not in raw
        assert b"adtl" not in raw
        assert struct.unpack_from("<I", raw, 4)[0] == len(raw) - 8

    def test_commit_keeps_unrelated_chunks(self, tmp_path, scenario_markers):
        info = b"LIST" + struct.pack("<I", 16) + b"INFO" + b"INAM" + struct.pack("<I", 4) + b"gen\x00"
        path = tmp_path / "info.wav"
        write_wav(path, scenario_markers, extra_chunks=info)
        with open_container(str(path), mode="w") as c:
            c.remove_markers(MarkerKind.UNKNOWN)
            c.commit()
        assert info in path.read_bytes()

    def test_commit_keeps_notes_of_surviving_cues(self, tmp_path):
        ltxt = struct.pack("<I4sHHHH", 10, b"rgn ", 0, 0, 0, 0)
        path = tmp_path / "notes.wav"
        write_wav(
            path,
            [(10, "junk"), (20, "orature-vm-1"), (30, "orature-vm-2")],
            adtl_extra=[(b"note", 1, b"about junk\x00"), (b"ltxt", 2, ltxt), (b"note", 3, b"second verse\x00")],
        )
        with open_container(str(path), mode="w") as c:
            c.remove_markers(MarkerKind.UNKNOWN)
            c.commit()

        with open(path, "rb") as fh:
            layout = riff.read_layout(fh)
            adtl = next(ch for ch in layout.chunks if ch.chunk_id == b"LIST" and ch.list_type == b"adtl")
            entries = riff.parse_adtl_entries(riff.read_payload(fh, adtl))
        assert entries == [
            (b"labl", 1, b"orature-vm-1\x00"),
            (b"labl", 2, b"orature-vm-2\x00"),
            (b"ltxt", 1, ltxt),
            (b"note", 2, b"second verse\x00"),
        ]
        with open_container(str(path)) as c:
            assert [(m.position, m.label) for m in c.get_markers()] == [(20, "orature-vm-1"), (30, "orature-vm-2")]

    def test_remove_missing_kind_is_noop(self, wav_file):
        with open_container(str(wav_file), mode="w") as c:
            c.remove_markers(MarkerKind.OTHER)
            assert len(c.get_markers()) == 3

    def test_read_only_rejects_mutation(self, wav_file):
        with open_container(str(wav_file)) as c:
            with pytest.raises(ContainerReadOnlyError):
                c.remove_markers(MarkerKind.UNKNOWN)
            with pytest.raises(ContainerReadOnlyError):
                c.commit()

    def test_read_samples_matches_written_pcm(self, tmp_path):
        path = tmp_path / "pcm.wav"
        pcm = write_wav(path, frames=321)
        with WavContainer(str(path)) as c:
            assert c.read_samples() == pcm

    def test_read_samples_of_float_wav(self, tmp_path):
        path = tmp_path / "float.wav"
        samples = write_float_wav(path, [(10, "orature-vm-1")], frames=250, channels=2)
        with WavContainer(str(path)) as c:
            assert c.frame_size == 8
            assert c.total_frames == 250
            assert c.read_samples() == samples

    def test_base_accessor_is_abstract(self, wav_file):
        with pytest.raises(TypeError):
            AudioContainer(str(wav_file))

    def test_missing_file(self, tmp_path):
        with pytest.raises(ContainerOpenError):
            open_container(str(tmp_path / "absent.wav"))

    @pytest.mark.parametrize("content", [b"", b"not a riff file at all", b"RIFF\x04\x00\x00\x00WAVE"])
    def test_malformed_file(self, tmp_path, content):
        path = tmp_path / "bad.wav"
        path.write_bytes(content)
        with pytest.raises(ContainerOpenError):
            open_container(str(path))

    def test_close_releases_handle(self, wav_file):
        c = open_container(str(wav_file))
        c.close()
        c.close()
        assert c._fh is None


def _fix_riff_size(path):
    raw = bytearray(path.read_bytes())
    raw[4:8] = struct.pack("<I", len(raw) - 8)
    path.write_bytes(bytes(raw))


# ---------------------------------------------------------------------------
# MP3 + cue sidecar
# ---------------------------------------------------------------------------


class TestMp3Container:
    def _write(self, tmp_path, tracks):
        mp3 = tmp_path / "book.mp3"
        mp3.write_bytes(MP3_BYTES)
        cue = tmp_path / "book.cue"
        cue.write_text(cue_text(tracks), encoding="utf-8")
        return mp3, cue

    def test_reads_markers_from_sidecar(self, tmp_path):
        mp3, _ = self._write(tmp_path, [("orature-vm-1", "00:00:00"), ("junk", "00:01:00")])
        with open_container(str(mp3)) as c:
            markers = c.get_markers()
            assert c.uses_sidecar
            assert not c.can_fingerprint()
        assert [(m.kind, m.position) for m in markers] == [(MarkerKind.VERSE, 0), (MarkerKind.UNKNOWN, 44100)]

    def test_read_samples_unsupported(self, tmp_path):
        mp3, _ = self._write(tmp_path, [("orature-vm-1", "00:00:00")])
        with open_container(str(mp3)) as c:
            with pytest.raises(UnsupportedOperation):
                c.read_samples()

    def test_commit_rewrites_sidecar_only(self, tmp_path):
        mp3, cue = self._write(tmp_path, [("orature-vm-1", "00:00:00"), ("junk", "00:01:00"), ("orature-vm-2", "00:02:00")])
        with open_container(str(mp3), mode="w") as c:
            c.remove_markers(MarkerKind.UNKNOWN)
            c.commit()
        text = cue.read_text(encoding="utf-8")
        assert "junk" not in text
        assert "TRACK 02 AUDIO" in text
        assert 'TITLE "orature-vm-2"' in text
        assert "TRACK 03" not in text
        assert mp3.read_bytes() == MP3_BYTES

    def test_explicit_sidecar_path(self, tmp_path):
        mp3 = tmp_path / "x.mp3"
        mp3.write_bytes(MP3_BYTES)
        other = tmp_path / "elsewhere.cue"
        other.write_text(cue_text([("orature-chunk-1", "00:00:10")]), encoding="utf-8")
        with Mp3Container(str(mp3), sidecar_path=str(other)) as c:
            assert c.get_markers()[0].kind is MarkerKind.CHUNK

    def test_missing_sidecar(self, tmp_path):
        mp3 = tmp_path / "alone.mp3"
        mp3.write_bytes(MP3_BYTES)
        with pytest.raises(ContainerOpenError):
            open_container(str(mp3))

    def test_not_an_mp3(self, tmp_path):
        mp3, _ = self._write(tmp_path, [("orature-vm-1", "00:00:00")])
        mp3.write_bytes(b"plain text")
        with pytest.raises(ContainerOpenError):
            open_container(str(mp3))


class TestVariantSelection:
    def test_by_extension(self):
        assert container_class_for("/a/b.WAV") is WavContainer
        assert container_class_for("/a/b.mp3") is Mp3Container

    def test_unsupported(self):
        with pytest.raises(ContainerOpenError):
            container_class_for("/a/b.flac")

    def test_bad_mode(self, wav_file):
        with pytest.raises(ValueError):
            WavContainer(str(wav_file), mode="x")
