"""Shared fixtures for launcher tests."""

from __future__ import annotations

import os
import signal
import subprocess
import sys
import threading
from pathlib import Path

import pytest

import launcher

LAUNCHER_ENV = (
	"LAUNCHER_INSTALL_PATH",
	"LAUNCHER_DATA_DIR",
	"LAUNCHER_PID_FILE",
	"LAUNCHER_LOG_FILE",
	"LAUNCHER_COMMAND",
	"LAUNCHER_STOP_TIMEOUT",
	"LAUNCHER_KILL_TIMEOUT",
)


@pytest.fixture(autouse=True)
def clean_state(monkeypatch):
	"""Reset output globals and LAUNCHER_* variables for every test."""
	monkeypatch.setattr(launcher, "_verbose", False)
	monkeypatch.setattr(launcher, "_quiet", False)
	monkeypatch.setattr(launcher, "_no_color", True)
	for key in LAUNCHER_ENV:
		monkeypatch.delenv(key, raising=False)


@pytest.fixture
def install_dir(tmp_path, monkeypatch) -> Path:
	"""Empty install tree with an etc/ directory."""
	(tmp_path / "etc").mkdir()
	monkeypatch.setenv("LAUNCHER_INSTALL_PATH", str(tmp_path))
	return tmp_path


@pytest.fixture
def options(tmp_path) -> launcher.Options:
	"""Resolved options with a fast poll interval and short timeouts."""
	opts = launcher.launcher_config_defaults(tmp_path)
	opts.pid_file = tmp_path / "launcher.pid"
	opts.log_path = tmp_path / "launcher.log"
	opts.poll_interval = 0.01
	opts.stop_timeout = 5
	opts.kill_timeout = 5
	return opts


@pytest.fixture
def make_invocation(options):
	def factory(verb=launcher.Verb.STOP, argv=None) -> launcher.Invocation:
		return launcher.Invocation(
			verb=verb, options=options, argv=tuple(argv or [verb.value])
		)

	return factory


class Launches:
	"""Records launch calls instead of replacing the test process."""

	def __init__(self):
		self.calls = []

	def __call__(self, cmd, env):
		self.calls.append((cmd, env))


@pytest.fixture
def launches() -> Launches:
	return Launches()


def _spawn(args):
	proc = subprocess.Popen(args, stdout=subprocess.PIPE, text=True)
	# Reap in the background so a signalled child does not linger as a zombie
	reaper = threading.Thread(target=proc.wait, daemon=True)
	reaper.start()
	return proc, reaper


def _cleanup(proc, reaper):
	try:
		os.kill(proc.pid, signal.SIGKILL)
	except ProcessLookupError:
		pass
	reaper.join(timeout=5)
	if proc.stdout:
		proc.stdout.close()


@pytest.fixture
def child():
	"""A long-running child process."""
	proc, reaper = _spawn(["sleep", "60"])
	yield proc
	_cleanup(proc, reaper)


@pytest.fixture
def stubborn_child():
	"""A child that ignores SIGTERM, ready once it has printed a line."""
	code = (
		"import signal, sys, time\n"
		"signal.signal(signal.SIGTERM, signal.SIG_IGN)\n"
		"print('ready', flush=True)\n"
		"time.sleep(60)\n"
	)
	proc, reaper = _spawn([sys.executable, "-c", code])
	assert proc.stdout.readline().strip() == "ready"
	yield proc
	_cleanup(proc, reaper)
