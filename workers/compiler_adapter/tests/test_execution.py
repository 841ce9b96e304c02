"""
test_execution — subprocess execution around the compiler.

Invariants:
  - The working directory is the input file's directory, whatever the
    caller's options say, and the caller's options are not mutated.
  - Nonzero exit codes are returned as data.
  - A missing executable raises CompilerSpawnError.
  - A timeout kills the child and still returns a result.
"""
import asyncio
import os
from pathlib import Path

import pytest

from compiler_adapter.config import Settings
from compiler_adapter.core.execution import (
    TIMEOUT_EXIT_CODE,
    TRUNCATED_MARKER,
    ExecutionOptions,
    default_exec_options,
    run_compiler_process,
    run_process,
)
from compiler_adapter.errors import CompilerSpawnError
from compiler_adapter.tests.conftest import requires_posix


def _cwd_of(stdout: str) -> Path:
    for line in stdout.splitlines():
        if line.startswith("cwd="):
            return Path(line[len("cwd="):]).resolve()
    raise AssertionError(f"no cwd line in {stdout!r}")


@requires_posix
class TestWorkingDirectory:

    def test_cwd_is_input_directory(self, fake_compiler, source_file):
        result = asyncio.run(run_compiler_process(
            str(fake_compiler), [str(source_file)], str(source_file),
            ExecutionOptions(timeout=10),
        ))
        assert _cwd_of(result.stdout) == source_file.parent.resolve()

    def test_caller_cwd_is_overridden(self, fake_compiler, source_file, tmp_path):
        elsewhere = tmp_path / "elsewhere"
        elsewhere.mkdir()
        options = ExecutionOptions(custom_cwd=str(elsewhere), timeout=10)

        result = asyncio.run(run_compiler_process(
            str(fake_compiler), [str(source_file)], str(source_file), options,
        ))

        assert _cwd_of(result.stdout) == source_file.parent.resolve()
        # caller's object untouched
        assert options.custom_cwd == str(elsewhere)

    def test_module_file_lands_beside_source(self, fake_compiler, source_file):
        asyncio.run(run_compiler_process(
            str(fake_compiler), [str(source_file)], str(source_file),
        ))
        assert (source_file.parent / "fake_module.mod").exists()
        assert not (Path.cwd() / "fake_module.mod").exists()

    def test_default_options_used_when_none(self, fake_compiler, source_file):
        result = asyncio.run(run_compiler_process(
            str(fake_compiler), [str(source_file)], str(source_file), None,
        ))
        assert result.exit_code == 0
        assert _cwd_of(result.stdout) == source_file.parent.resolve()


@requires_posix
class TestRunProcess:

    def test_arguments_passed_verbatim(self, fake_compiler, source_file):
        args = ["-O2", "-I/opt/with space/include", str(source_file)]
        result = asyncio.run(run_process(str(fake_compiler), args, ExecutionOptions(timeout=10)))
        arg_lines = [l[len("arg="):] for l in result.stdout.splitlines() if l.startswith("arg=")]
        assert arg_lines == args

    def test_nonzero_exit_is_data(self, fake_compiler, source_file):
        env = dict(os.environ, FAKE_EXIT="3")
        result = asyncio.run(run_process(
            str(fake_compiler), [str(source_file)], ExecutionOptions(env=env, timeout=10),
        ))
        assert result.exit_code == 3
        assert result.timed_out is False
        assert "main.f90:3:5: error" in result.stderr

    def test_env_is_passed(self, fake_compiler, source_file):
        env = dict(os.environ, FAKE_EXIT="0")
        result = asyncio.run(run_process(
            str(fake_compiler), [str(source_file)], ExecutionOptions(env=env),
        ))
        assert result.exit_code == 0

    def test_missing_executable_raises(self, tmp_path):
        with pytest.raises(CompilerSpawnError) as exc_info:
            asyncio.run(run_process(str(tmp_path / "no-such-gfortran"), [], ExecutionOptions()))
        assert "no-such-gfortran" in exc_info.value.compiler

    def test_non_executable_raises(self, tmp_path):
        script = tmp_path / "not-exec"
        script.write_text("#!/bin/sh\necho hi\n")
        script.chmod(0o644)
        with pytest.raises(CompilerSpawnError):
            asyncio.run(run_process(str(script), [], ExecutionOptions()))

    def test_timeout_kills_and_returns(self, slow_compiler):
        result = asyncio.run(run_process(
            str(slow_compiler), [], ExecutionOptions(timeout=0.5),
        ))
        assert result.timed_out is True
        assert result.exit_code == TIMEOUT_EXIT_CODE
        assert "processing time exceeded" in result.stderr

    def test_timeout_survives_child_already_gone(self, slow_compiler, monkeypatch):
        real_kill = asyncio.subprocess.Process.kill

        def kill_then_vanish(proc):
            real_kill(proc)
            raise ProcessLookupError

        monkeypatch.setattr(asyncio.subprocess.Process, "kill", kill_then_vanish)
        result = asyncio.run(run_process(
            str(slow_compiler), [], ExecutionOptions(timeout=0.5),
        ))
        assert result.timed_out is True
        assert result.exit_code == TIMEOUT_EXIT_CODE

    def test_output_truncated(self, noisy_compiler):
        result = asyncio.run(run_process(
            str(noisy_compiler), [], ExecutionOptions(timeout=10, max_output=100),
        ))
        assert result.truncated is True
        assert result.stdout.endswith(TRUNCATED_MARKER)
        assert len(result.stdout) == 100 + len(TRUNCATED_MARKER)

    def test_output_not_truncated_without_limit(self, noisy_compiler):
        result = asyncio.run(run_process(str(noisy_compiler), [], ExecutionOptions(timeout=10)))
        assert result.truncated is False
        assert len(result.stdout.splitlines()) == 500


class TestExecutionOptions:

    def test_with_cwd_copies(self):
        original = ExecutionOptions(custom_cwd="/a", timeout=3)
        updated = original.with_cwd("/b")
        assert updated.custom_cwd == "/b"
        assert updated.timeout == 3
        assert original.custom_cwd == "/a"

    def test_defaults_from_settings(self):
        settings = Settings(EXEC_TIMEOUT=2.5, MAX_OUTPUT=1234)
        options = default_exec_options({"EXTRA_VAR": "1"}, settings)
        assert options.timeout == 2.5
        assert options.max_output == 1234
        assert options.env["EXTRA_VAR"] == "1"
        assert options.custom_cwd is None

    def test_defaults_inherit_environment(self, monkeypatch):
        monkeypatch.setenv("MODFORGE_TEST_MARKER", "yes")
        options = default_exec_options(settings=Settings())
        assert options.env["MODFORGE_TEST_MARKER"] == "yes"
