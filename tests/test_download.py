"""
Tests for DownloadPipeline — resumable transfer, atomic rename, download-and-execute.
"""

from pathlib import Path

import pytest

from devinit.adapters.mock import MockRunner
from devinit.core.models.command import Command
from devinit.core.services.bootstrap.execution.download import DownloadPipeline


def _output_path(cmd: Command) -> Path:
    argv = list(cmd.argv)
    return Path(argv[argv.index("-o") + 1])


class FakeCurl:
    """curl stand-in: appends ``chunk`` to the -o file, exits with scripted codes."""

    def __init__(self, codes=(0,), chunk: bytes = b"data"):
        self.codes = list(codes)
        self.chunk = chunk
        self.outputs: list[Path] = []

    def __call__(self, cmd: Command) -> int:
        out = _output_path(cmd)
        self.outputs.append(out)
        with out.open("ab") as fh:
            fh.write(self.chunk)
        return self.codes.pop(0) if len(self.codes) > 1 else self.codes[0]


@pytest.fixture
def pipeline(runner, reporter, sleeper):
    return DownloadPipeline(runner, reporter, sleep=sleeper)


# ── Command shape ────────────────────────────────────────────────────


class TestTransferCommand:
    def test_flags(self, pipeline, runner, tmp_path: Path):
        runner.set_handler(("curl",), FakeCurl())
        pipeline.download("https://example.com/f", tmp_path / "f", ["-H", "X: 1"])
        argv = runner.calls_to("curl")[0].argv
        assert argv[:2] == ("curl", "-fsSL")
        assert argv[argv.index("--connect-timeout") + 1] == "30"
        assert argv[argv.index("--max-time") + 1] == "300"
        assert argv[argv.index("--retry") + 1] == "3"
        assert argv[argv.index("--retry-delay") + 1] == "5"
        assert argv[argv.index("--retry-max-time") + 1] == "60"
        assert argv[argv.index("-C") + 1] == "-"
        assert ("-H", "X: 1") == argv[argv.index("-H"): argv.index("-H") + 2]
        assert argv[-1] == "https://example.com/f"
        assert argv[argv.index("-o") + 1] == str(tmp_path / "f.part")


# ── download ─────────────────────────────────────────────────────────


class TestDownload:
    def test_success_renames_into_place(self, pipeline, runner, tmp_path: Path, sleeper):
        runner.set_handler(("curl",), FakeCurl(chunk=b"payload"))
        dest = tmp_path / "f.bin"
        assert pipeline.download("https://example.com/f", dest) == 0
        assert dest.read_bytes() == b"payload"
        assert not (tmp_path / "f.bin.part").exists()
        assert sleeper.calls == []

    def test_resumes_across_attempts(self, pipeline, runner, reporter, sink, tmp_path: Path, sleeper):
        curl = FakeCurl(codes=[18, 18, 0], chunk=b"ab")
        runner.set_handler(("curl",), curl)
        dest = tmp_path / "f.bin"
        assert pipeline.download("https://example.com/f", dest) == 0
        # every attempt appended to the same partial file
        assert dest.read_bytes() == b"ababab"
        assert sleeper.calls == [3, 6]
        assert any("Resuming" in m for m in sink.messages("debug"))

    def test_exhaustion_leaves_destination_untouched(self, pipeline, runner, tmp_path: Path, sleeper):
        runner.set_handler(("curl",), FakeCurl(codes=[28]))
        dest = tmp_path / "f.bin"
        dest.write_bytes(b"old")
        assert pipeline.download("https://example.com/f", dest) == 28
        assert dest.read_bytes() == b"old"
        assert not (tmp_path / "f.bin.part").exists()
        assert sleeper.calls == [3, 6, 12, 24]
        assert len(runner.calls_to("curl")) == 5

    def test_success_without_body_creates_empty_file(self, pipeline, runner, tmp_path: Path):
        runner.set_exit(("curl",), 0)
        dest = tmp_path / "empty"
        assert pipeline.download("https://example.com/empty", dest) == 0
        assert dest.read_bytes() == b""

    def test_custom_settings_budget(self, runner, reporter, sleeper, tmp_path: Path):
        from devinit.core.models.settings import BootstrapSettings

        settings = BootstrapSettings(download_attempts=2, download_initial_delay=1)
        runner.set_exit(("curl",), 7)
        code = DownloadPipeline(runner, reporter, settings, sleep=sleeper).download(
            "https://x", tmp_path / "f"
        )
        assert code == 7
        assert sleeper.calls == [1]


# ── download_and_execute ─────────────────────────────────────────────


class TestDownloadAndExecute:
    def test_runs_interpreter_with_script_on_stdin(self, pipeline, runner, tmp_path: Path):
        curl = FakeCurl(chunk=b"echo hi\n")
        runner.set_handler(("curl",), curl)
        assert pipeline.download_and_execute("https://get.example/install.sh", ["sh", "-"]) == 0
        assert runner.calls_to("sh", "-")
        assert runner.stdin_log[-1] == b"echo hi\n"

    def test_interpreter_exit_code_propagates(self, pipeline, runner):
        runner.set_handler(("curl",), FakeCurl())
        runner.set_exit(("bash",), 3)
        assert pipeline.download_and_execute("https://x/s.sh", ["bash"]) == 3

    @pytest.mark.parametrize(
        ("curl_code", "interp_code", "expected"),
        [(0, 0, 0), (0, 5, 5), (22, 0, 22), (22, 5, 22)],
    )
    def test_temp_file_always_removed(self, pipeline, runner, curl_code, interp_code, expected):
        curl = FakeCurl(codes=[curl_code])
        runner.set_handler(("curl",), curl)
        runner.set_exit(("sh",), interp_code)
        assert pipeline.download_and_execute("https://x/s.sh", ["sh"]) == expected

        script = curl.outputs[0].with_name(curl.outputs[0].name.removesuffix(".part"))
        assert script.name.startswith("devinit_")
        assert not script.exists()
        assert not curl.outputs[0].exists()

    def test_failed_download_never_runs_interpreter(self, pipeline, runner):
        runner.set_handler(("curl",), FakeCurl(codes=[6]))
        assert pipeline.download_and_execute("https://x/s.sh", ["sh"]) == 6
        assert runner.calls_to("sh") == []

    def test_empty_interpreter_rejected(self, pipeline):
        with pytest.raises(ValueError):
            pipeline.download_and_execute("https://x/s.sh", [])


# ── dry run ──────────────────────────────────────────────────────────


class TestDryRun:
    @pytest.fixture
    def planner(self, reporter, sleeper):
        runner = MockRunner(available=[], dry_run=True)
        return runner, DownloadPipeline(runner, reporter, sleep=sleeper)

    def test_download_leaves_destination_alone(self, planner, sink, tmp_path: Path):
        runner, pipeline = planner
        dest = tmp_path / "keep.bin"
        dest.write_bytes(b"precious")
        assert pipeline.download("https://example.com/f", dest) == 0
        assert dest.read_bytes() == b"precious"
        assert sorted(p.name for p in tmp_path.iterdir()) == ["keep.bin"]
        assert runner.call_count == 0
        planned = sink.messages("info")[-1]
        assert planned.startswith("Would run: curl -fsSL")
        assert planned.endswith(f"-o {tmp_path / 'keep.bin.part'} https://example.com/f")

    def test_download_and_execute_only_reports(self, planner, sink):
        runner, pipeline = planner
        assert pipeline.download_and_execute("https://x/s.sh", ["sh", "-s"]) == 0
        assert runner.call_count == 0
        assert runner.stdin_log == []
        planned = sink.messages("info")[-1]
        assert planned.startswith("Would run: curl -fsSL")
        assert planned.endswith("https://x/s.sh | sh -s")
