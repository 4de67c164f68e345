import pytest

import launcher
from launcher import CommandError, Status


def test_unsupported_command_exits_3(install_dir, launches, capsys):
	assert launcher.launcher_main(["frobnicate"], launches) == Status.UNSUPPORTED
	out = capsys.readouterr().out
	assert "Unsupported command: frobnicate" in out
	assert "usage: launcher" in out
	assert launches.calls == []


def test_no_command_exits_2(install_dir, launches, capsys):
	assert launcher.launcher_main([], launches) == Status.INVALID_ARGS
	assert "Expected a single command, got ''" in capsys.readouterr().out


def test_two_commands_exit_2(install_dir, launches, capsys):
	assert launcher.launcher_main(["stop", "start"], launches) == Status.INVALID_ARGS
	assert "Expected a single command, got 'stop start'" in capsys.readouterr().out
	assert launches.calls == []


def test_help_exits_2(install_dir, launches, capsys):
	assert launcher.launcher_main(["--help"], launches) == Status.INVALID_ARGS
	out = capsys.readouterr().out
	assert "--pid-file" in out
	assert "restart" in out


def test_unknown_option_exits_2(install_dir, launches, capsys):
	assert launcher.launcher_main(["--bogus", "stop"], launches) == Status.INVALID_ARGS
	captured = capsys.readouterr()
	assert "usage: launcher" in captured.err
	assert "unrecognized arguments: --bogus" in captured.out


def test_config_property_rejected(install_dir, launches, capsys):
	code = launcher.launcher_main(["-Dconfig=etc/other.properties", "start"], launches)
	assert code == Status.INVALID_ARGS
	assert "Use --config instead" in capsys.readouterr().out
	assert launches.calls == []


def test_stop_without_process_exits_0(install_dir, launches, capsys):
	pid_file = install_dir / "var" / "run" / "launcher.pid"
	assert launcher.launcher_main(["stop"], launches) == Status.SUCCESS
	assert capsys.readouterr().out.strip() == "Stopped"
	assert not pid_file.exists()


def test_stop_running_process(install_dir, child, launches, capsys):
	pid_file = install_dir / "app.pid"
	pid_file.write_text(str(child.pid))
	code = launcher.launcher_main(["--pid-file", str(pid_file), "stop"], launches)
	assert code == Status.SUCCESS
	assert capsys.readouterr().out.strip() == f"Stopped {child.pid}"
	assert not pid_file.exists()


def test_stop_with_out_of_range_signal_exits_1(install_dir, child, launches, capsys):
	(install_dir / "etc" / "launcher.toml").write_text('[signals]\nstop_signal = "99"\n')
	pid_file = install_dir / "app.pid"
	pid_file.write_text(str(child.pid))
	code = launcher.launcher_main(["--pid-file", str(pid_file), "stop"], launches)
	assert code == Status.GENERIC_ERROR
	assert "Unknown signal: 99" in capsys.readouterr().out
	assert pid_file.exists()


def test_start_passes_full_argv(install_dir, launches):
	argv = ["-Dnode.id=abc", "start"]
	assert launcher.launcher_main(argv, launches) == Status.SUCCESS
	[(cmd, env)] = launches.calls
	assert cmd[-2:] == argv
	assert "-Dnode.id=abc" in cmd[:-2]
	assert env["LAUNCHER_DATA_DIR"] == str(install_dir.absolute())


def test_command_error_sets_exit_code(install_dir, capsys):
	def failing_launch(cmd, env):
		raise CommandError(Status.GENERIC_ERROR, "Failed to launch java: No such file")

	assert launcher.launcher_main(["status"], failing_launch) == Status.GENERIC_ERROR
	assert capsys.readouterr().out.strip() == "Failed to launch java: No such file"


def test_command_error_echoes_code_when_verbose(install_dir, capsys):
	def failing_launch(cmd, env):
		raise CommandError(Status.CONFIG_MISSING, "jvm.config missing")

	assert launcher.launcher_main(["-v", "start"], failing_launch) == Status.CONFIG_MISSING
	out = capsys.readouterr().out.splitlines()
	assert out[-2:] == ["jvm.config missing", "config_missing"]


def test_missing_explicit_node_config_exits_6(install_dir, launches, capsys):
	missing = install_dir / "nope.properties"
	code = launcher.launcher_main(["--node-config", str(missing), "start"], launches)
	assert code == Status.CONFIG_MISSING
	assert str(missing) in capsys.readouterr().out
	assert launches.calls == []


def test_verbose_prints_resolved_options(install_dir, launches, capsys):
	launcher.launcher_main(["--verbose", "stop"], launches)
	out = capsys.readouterr().out
	assert f"pid_file={install_dir.absolute() / 'var' / 'run' / 'launcher.pid'}" in out
	assert f"data_dir={install_dir.absolute()}" in out


def test_quiet_still_shows_warnings(install_dir, launches, capsys):
	(install_dir / "etc" / "launcher.toml").write_text("not = [valid")
	assert launcher.launcher_main(["-q", "stop"], launches) == Status.SUCCESS
	assert "WRN Failed to load" in capsys.readouterr().out


def test_dispatch_prints_message_and_returns_status(make_invocation, monkeypatch, capsys):
	monkeypatch.setitem(
		launcher.LAUNCHER_COMMANDS,
		launcher.Verb.STOP,
		lambda invocation, launch: launcher.Result(Status.TIMEOUT, "Timed out"),
	)
	assert launcher.launcher_CLI_dispatch(make_invocation()) == Status.TIMEOUT
	assert capsys.readouterr().out.strip() == "Timed out"


@pytest.mark.parametrize("verb", ["start", "stop", "restart", "kill", "status"])
def test_every_verb_is_accepted(install_dir, launches, verb):
	assert launcher.launcher_main([verb], launches) == Status.SUCCESS
