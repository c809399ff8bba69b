"""
Tests for runners (mock and shell) and the docker adapter.
"""

import os
import sys
from pathlib import Path

from devinit.adapters import MockRunner, ShellRunner
from devinit.adapters.base import EXIT_NOT_EXECUTABLE, EXIT_NOT_FOUND, EXIT_TIMEOUT
from devinit.adapters.containers.docker import DockerCli
from devinit.core.models.command import Command
from devinit.core.models.retry import FixedBackoff
from devinit.core.reliability.retry import RetryExecutor

# ── Mock Runner Tests ────────────────────────────────────────────────


class TestMockRunner:
    def test_default_success(self):
        mock = MockRunner(available=[])
        assert mock.run(Command.of("anything")) == 0
        assert mock.call_count == 1

    def test_scripted_sequence_last_repeats(self):
        mock = MockRunner()
        mock.set_exit(("x",), [1, 2])
        assert [mock.run(Command.of("x")) for _ in range(3)] == [1, 2, 2]

    def test_longest_prefix_wins(self):
        mock = MockRunner()
        mock.set_exit(("apt-get",), 1)
        mock.set_exit(("apt-get", "update"), 0)
        assert mock.run(Command.of("apt-get", "update")) == 0
        assert mock.run(Command.of("apt-get", "install")) == 1

    def test_capture_output(self):
        mock = MockRunner()
        mock.set_output(("git", "config"), "url\n")
        out = mock.capture(Command.of("git", "config", "--get", "x"))
        assert out.ok
        assert out.stdout == "url\n"

    def test_which(self):
        mock = MockRunner(available=["brew"])
        assert mock.which("brew") == "/usr/bin/brew"
        assert not mock.has("apt-get")
        mock.set_missing("brew")
        assert not mock.has("brew")

    def test_reset(self):
        mock = MockRunner()
        mock.set_exit(("x",), 1)
        mock.run(Command.of("x"))
        mock.reset()
        assert mock.call_count == 0
        assert mock.run(Command.of("x")) == 0

    def test_repr(self):
        assert repr(MockRunner()) == "<MockRunner name='mock'>"


# ── Shell Runner Tests ───────────────────────────────────────────────


class TestShellRunner:
    def test_run_exit_code(self):
        runner = ShellRunner()
        assert runner.run(Command.of(sys.executable, "-c", "raise SystemExit(3)")) == 3

    def test_missing_program_is_127(self):
        assert ShellRunner().run(Command.of("definitely-not-a-real-binary-xyz")) == EXIT_NOT_FOUND

    def test_non_executable_is_126(self, tmp_path: Path):
        script = tmp_path / "noexec.sh"
        script.write_text("#!/bin/sh\nexit 0\n")
        script.chmod(0o644)
        runner = ShellRunner()
        assert runner.run(Command.of(str(script))) == EXIT_NOT_EXECUTABLE
        out = runner.capture(Command.of(str(script)))
        assert out.exit_code == EXIT_NOT_EXECUTABLE
        assert "noexec.sh" in out.stderr

    def test_non_executable_under_retry(self, tmp_path: Path, reporter, sink, sleeper):
        script = tmp_path / "noexec.sh"
        script.write_text("#!/bin/sh\nexit 0\n")
        script.chmod(0o644)
        executor = RetryExecutor(ShellRunner(), reporter, sleep=sleeper)
        assert executor.run(Command.of(str(script)), 3, FixedBackoff(1)) == EXIT_NOT_EXECUTABLE
        assert sleeper.calls == [1, 1]
        assert sink.messages("error") == ["Command failed after 3 attempts"]

    def test_timeout_is_124(self):
        cmd = Command.of(sys.executable, "-c", "import time; time.sleep(5)")
        assert ShellRunner().run(cmd, timeout=0.2) == EXIT_TIMEOUT

    def test_capture(self):
        out = ShellRunner().capture(Command.of(sys.executable, "-c", "print('hi')"))
        assert out.ok
        assert out.stdout.strip() == "hi"

    def test_capture_undecodable_output(self):
        cmd = Command.of(
            sys.executable, "-c",
            "import sys; sys.stderr.buffer.write(b'\\xff\\xfe'); sys.exit(1)",
        )
        out = ShellRunner().capture(cmd)
        assert out.exit_code == 1
        assert out.stderr == "\ufffd\ufffd"

    def test_stdin_from_file(self, tmp_path: Path):
        script = tmp_path / "s.py"
        script.write_text("raise SystemExit(7)\n")
        assert ShellRunner().run(Command.of(sys.executable, "-"), stdin_path=script) == 7

    def test_env_and_cwd(self, tmp_path: Path):
        cmd = Command.of(
            sys.executable, "-c",
            "import os; print(os.environ['DEVINIT_T'], os.getcwd())",
            env={"DEVINIT_T": "v"}, cwd=str(tmp_path),
        )
        out = ShellRunner().capture(cmd)
        value, cwd = out.stdout.split()
        assert value == "v"
        assert Path(cwd).resolve() == tmp_path.resolve()

    def test_which(self):
        assert ShellRunner().which("definitely-not-a-real-binary-xyz") is None


# ── Docker ───────────────────────────────────────────────────────────


class TestDockerCli:
    def test_pull_success(self, runner, reporter, sink):
        assert DockerCli(runner, reporter).pull("img:latest")
        assert runner.calls_to("docker", "pull", "img:latest")
        assert sink.messages("success") == ["Pulled img:latest"]

    def test_pull_failure_warns(self, runner, reporter, sink):
        runner.set_exit(("docker", "pull"), 1)
        assert not DockerCli(runner, reporter).pull("img")
        assert sink.messages("warning") == ["Could not pull latest image, using cached version"]

    def test_pull_binary_stderr_is_a_failure(self, tmp_path: Path, monkeypatch, reporter, sink):
        bin_dir = tmp_path / "bin"
        bin_dir.mkdir()
        docker = bin_dir / "docker"
        docker.write_text("#!/bin/sh\nprintf '\\377\\376' >&2\nexit 1\n")
        docker.chmod(0o755)
        monkeypatch.setenv("PATH", f"{bin_dir}:{os.environ.get('PATH', '')}")

        assert not DockerCli(ShellRunner(), reporter).pull("img")
        assert sink.messages("warning") == ["Could not pull latest image, using cached version"]

    def test_compose_down(self, runner, reporter, sink, tmp_path: Path):
        compose = tmp_path / "docker-compose.yml"
        runner.set_exit(("docker", "compose"), 1)
        assert not DockerCli(runner, reporter).compose_down(compose, "proj")
        assert runner.call_log[0].argv == (
            "docker", "compose", "-f", str(compose), "--project-name", "proj",
            "down", "--remove-orphans", "--timeout", "0",
        )
        assert sink.messages("info")[-1] == "Cleanup complete"
