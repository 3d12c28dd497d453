"""Integration tests for the collect CLI."""

import zipfile
from pathlib import Path

import pytest

from speech_collector.cli import main as cli
from speech_collector.cli.main import (
    EXIT_CONFIG_ERROR,
    EXIT_SUCCESS,
    EXIT_USAGE_ERROR,
    EXIT_VALIDATION_ERROR,
    create_parser,
    run,
)


@pytest.fixture
def workspace(tmp_path: Path, monkeypatch) -> Path:
    """Point storage at a temporary directory."""
    monkeypatch.setenv("COLLECTOR_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("COLLECTOR_EXPORT_DIR", str(tmp_path / "exports"))
    return tmp_path


@pytest.fixture
def invoke(workspace):
    def _invoke(*argv: str) -> int:
        return run(create_parser().parse_args(list(argv)))

    return _invoke


@pytest.fixture
def fake_audio(monkeypatch, device_factory, player_factory):
    """Replace the sounddevice adapters used by record/verify."""
    device = device_factory(seconds=16.0)
    player = player_factory()
    monkeypatch.setattr(cli, "SoundDeviceCapture", lambda config: device)
    monkeypatch.setattr(cli, "SoundDevicePlayer", lambda: player)
    return device, player


@pytest.fixture
def scripted_input(monkeypatch):
    def _script(*lines: str) -> None:
        remaining = list(lines)

        def fake_input(prompt: str = "") -> str:
            if not remaining:
                raise EOFError
            return remaining.pop(0)

        monkeypatch.setattr("builtins.input", fake_input)

    return _script


class TestParser:
    def test_no_command_is_usage_error(self, invoke):
        assert invoke() == EXIT_USAGE_ERROR

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            create_parser().parse_args(["--version"])

        assert exc_info.value.code == 0
        assert "collect" in capsys.readouterr().out

    def test_ingest_needs_a_source(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args(["ingest"])


class TestCollectionCommands:
    def test_ingest_list_stats(self, invoke, capsys):
        assert invoke("ingest", "--text", "Omwana 12 nigo 7 abwate. Naende 3 akore.") == EXIT_SUCCESS
        assert "Created 2 chunk(s)" in capsys.readouterr().out

        assert invoke("list") == EXIT_SUCCESS
        listing = capsys.readouterr().out
        assert "Omwana nigo abwate." in listing
        assert "Naende akore." in listing

        assert invoke("stats") == EXIT_SUCCESS
        assert "Total sentences:    2" in capsys.readouterr().out

    def test_ingest_file(self, invoke, workspace, capsys):
        source = workspace / "story.txt"
        source.write_text("First. Second. Third.", encoding="utf-8")

        assert invoke("ingest", str(source)) == EXIT_SUCCESS
        assert "Created 3 chunk(s)" in capsys.readouterr().out

    def test_blank_text_rejected(self, invoke, capsys):
        assert invoke("ingest", "--text", "  42  ") == EXIT_VALIDATION_ERROR
        assert "ERR_INPUT_401" in capsys.readouterr().err

    def test_missing_file_rejected(self, invoke, workspace):
        assert invoke("ingest", str(workspace / "absent.txt")) == EXIT_VALIDATION_ERROR

    def test_delete(self, invoke, capsys):
        invoke("ingest", "--text", "Only one.")
        invoke("list")
        listing = capsys.readouterr().out
        chunk_id = next(word for word in listing.split() if word.startswith("chunk-"))

        assert invoke("delete", chunk_id) == EXIT_SUCCESS
        assert "Deleted" in capsys.readouterr().out
        assert invoke("delete", chunk_id) == EXIT_SUCCESS
        assert "nothing deleted" in capsys.readouterr().out

    def test_list_by_status(self, invoke, capsys):
        invoke("ingest", "--text", "One. Two.")
        capsys.readouterr()

        assert invoke("list", "--status", "Verified") == EXIT_SUCCESS
        assert "The collection is empty" in capsys.readouterr().out

    def test_export_without_verified(self, invoke, capsys):
        invoke("ingest", "--text", "One.")

        assert invoke("export", "csv") == EXIT_VALIDATION_ERROR
        assert "ERR_EXPORT_301" in capsys.readouterr().err

    def test_theme(self, invoke, capsys):
        assert invoke("theme") == EXIT_SUCCESS
        assert "Theme: light" in capsys.readouterr().out

        assert invoke("theme", "dark") == EXIT_SUCCESS
        assert invoke("theme") == EXIT_SUCCESS
        assert capsys.readouterr().out.strip().endswith("Theme: dark")

    def test_bad_configuration(self, invoke, monkeypatch, capsys):
        monkeypatch.setenv("RECORDING_MIN_SECONDS", "40")
        monkeypatch.setenv("RECORDING_MAX_SECONDS", "20")
        invoke("ingest", "--text", "One.")

        assert invoke("record") == EXIT_CONFIG_ERROR
        assert "ERR_CONFIG_501" in capsys.readouterr().err


class TestEndToEnd:
    def test_ingest_record_verify_export(self, invoke, fake_audio, scripted_input, workspace, capsys):
        device, _ = fake_audio
        invoke("ingest", "--text", "Omwana nigo abwate. Naende akore.")

        scripted_input("r", "s", "w", "r", "s", "w")
        assert invoke("record") == EXIT_SUCCESS

        scripted_input("e Omwana nigo abwate!", "a", "a")
        assert invoke("verify") == EXIT_SUCCESS

        out = workspace / "dataset"
        assert invoke("export", "backup", "-o", str(out)) == EXIT_SUCCESS

        (archive_path,) = out.iterdir()
        with zipfile.ZipFile(archive_path) as archive:
            table = archive.read("data/metadata.csv").decode("utf-8")
        assert table == (
            "filename|transcription\n"
            "sentence1.wav|Omwana nigo abwate!\n"
            "sentence2.wav|Naende akore."
        )
        assert all(h.release_calls == 1 for h in device.handles)
