"""Tests for the command-line interface.

HOW: main() is called with an explicit argv list against files written
to pytest's tmp_path. Status output is captured from stderr.
"""

import json

import pytest

from whisper_converter.cli import _resolve_output_path, main


def _write_json(path, data):
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


class TestResolveOutputPath:

    def test_free_name(self, tmp_path):
        assert _resolve_output_path("talk", ".srt", tmp_path) == tmp_path / "talk.srt"

    def test_conflict_inserts_counter_before_extension(self, tmp_path):
        (tmp_path / "talk.srt").write_text("x")
        assert _resolve_output_path("talk", ".srt", tmp_path) == tmp_path / "talk-2.srt"

    def test_conflict_with_named_suffix(self, tmp_path):
        (tmp_path / "talk-karaoke.ass").write_text("x")
        (tmp_path / "talk-karaoke-2.ass").write_text("x")
        assert _resolve_output_path("talk", "-karaoke.ass", tmp_path) == (
            tmp_path / "talk-karaoke-3.ass"
        )


class TestMain:

    def test_writes_all_formats_next_to_source(self, tmp_path, sample_record, capsys):
        source = _write_json(tmp_path / "talk.json", sample_record)
        main([str(source)])

        names = sorted(p.name for p in tmp_path.iterdir())
        assert names == [
            "talk-analysis.json",
            "talk-cleaned.txt",
            "talk-karaoke.ass",
            "talk-paragraphs.txt",
            "talk-word-timings.json",
            "talk.json",
            "talk.srt",
            "talk.vtt",
        ]
        assert (tmp_path / "talk.srt").read_text(encoding="utf-8").startswith(
            "1\n00:00:00,000 --> 00:00:01,500\n"
        )
        err = capsys.readouterr().err
        assert "3 segments" in err
        assert "Saved 7 file(s), 0 failed" in err

    def test_selected_formats_and_output_dir(self, tmp_path, json_envelope):
        source = _write_json(tmp_path / "talk.json", [json_envelope["json"]])
        out_dir = tmp_path / "out"
        out_dir.mkdir()
        main([str(source), "--formats", "srt,vtt", "--output-dir", str(out_dir)])
        assert sorted(p.name for p in out_dir.iterdir()) == ["talk.srt", "talk.vtt"]

    def test_second_run_does_not_overwrite(self, tmp_path, sample_record):
        source = _write_json(tmp_path / "talk.json", sample_record)
        main([str(source), "--formats", "srt"])
        main([str(source), "--formats", "srt"])
        assert (tmp_path / "talk-2.srt").exists()

    def test_bad_file_fails_but_siblings_are_written(self, tmp_path, sample_record, capsys):
        good = _write_json(tmp_path / "good.json", sample_record)
        bad = tmp_path / "bad.json"
        bad.write_text("{not json", encoding="utf-8")
        wrong_shape = _write_json(tmp_path / "shape.json", "just a string")

        with pytest.raises(SystemExit) as exc_info:
            main([str(bad), str(good), str(wrong_shape), "--formats", "srt"])

        assert exc_info.value.code == 1
        assert (tmp_path / "good.srt").exists()
        assert not (tmp_path / "shape.srt").exists()
        err = capsys.readouterr().err
        assert "Failed: bad.json" in err
        assert "Failed: shape.json" in err
        assert "2 failed" in err

    def test_missing_file(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main([str(tmp_path / "nope.json")])
        assert exc_info.value.code == 1
        assert "file not found" in capsys.readouterr().err

    def test_unknown_format(self, tmp_path, sample_record, capsys):
        source = _write_json(tmp_path / "talk.json", sample_record)
        with pytest.raises(SystemExit) as exc_info:
            main([str(source), "--formats", "docx"])
        assert exc_info.value.code == 1
        assert "Unknown format 'docx'" in capsys.readouterr().err

    def test_missing_output_dir(self, tmp_path, sample_record):
        source = _write_json(tmp_path / "talk.json", sample_record)
        with pytest.raises(SystemExit):
            main([str(source), "--output-dir", str(tmp_path / "missing")])

    def test_non_positive_batch_size(self, tmp_path, sample_record):
        source = _write_json(tmp_path / "talk.json", sample_record)
        with pytest.raises(SystemExit) as exc_info:
            main([str(source), "--batch-size", "0"])
        assert exc_info.value.code == 2
