#!/usr/bin/env python
# --
# File: launcher.py
#
# `launcher` starts, stops, restarts, kills and reports the status of a single
# long-running child process. The process is tracked through a PID file that
# the child writes itself, and is controlled with OS signals.
#
# ## Usage
#
# >   launcher [OPTIONS] COMMAND
#
# ## Commands
#
# >   start    - Replace this process with the child command
# >   stop     - Send the stop signal (TERM) and wait for exit
# >   restart  - stop, then start
# >   kill     - Send KILL and wait for exit
# >   status   - Delegate to the child command
#
# ## Install Directory Convention
#
# >   ${LAUNCHER_INSTALL_PATH}/
# >     etc/[launcher.toml]     - Optional launcher configuration
# >     etc/[node.properties]   - Node properties (node.data-dir, ...)
# >     etc/jvm.config
# >     etc/config.properties
# >     etc/log.properties      - Log levels (etc/log.config is deprecated)
# >     lib/launcher.jar        - Target of the default child command
#
# The PID file defaults to `DATA_DIR/var/run/launcher.pid` and the log file
# to `DATA_DIR/var/log/launcher.log`, where DATA_DIR defaults to the install
# path.

import argparse
import enum
import os
import re
import shlex
import signal
import sys
import time
import tomllib
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Callable, NoReturn, Optional

# -----------------------------------------------------------------------------
#
# CONFIGURATION
#
# -----------------------------------------------------------------------------

VERSION = "1.0.0"
LAUNCHER_NO_COLOR = os.environ.get("LAUNCHER_NO_COLOR", "") == "1"

DEFAULT_COMMAND = "java"
DEFAULT_STOP_SIGNAL = "TERM"
DEFAULT_STOP_TIMEOUT = 30
DEFAULT_KILL_TIMEOUT = 30
DEFAULT_POLL_INTERVAL = 0.1

# Largest value of a signed 32-bit pid_t
PID_MAX = 2**31 - 1

# Global runtime state (output only)
_verbose = False
_quiet = False
_no_color = LAUNCHER_NO_COLOR

# -----------------------------------------------------------------------------
#
# TYPES
#
# -----------------------------------------------------------------------------


class Status(enum.IntEnum):
	"""Outcome of an operation, valued as the process exit code."""

	SUCCESS = 0
	GENERIC_ERROR = 1
	INVALID_ARGS = 2
	UNSUPPORTED = 3
	TIMEOUT = 4
	CONFIG_MISSING = 6


class Verb(enum.Enum):
	"""Supported commands."""

	START = "start"
	STOP = "stop"
	RESTART = "restart"
	KILL = "kill"
	STATUS = "status"


class CommandError(Exception):
	"""Raised when a command fails with an explicit exit status."""

	def __init__(self, code: Status, message: str):
		super().__init__(message)
		self.code = code
		self.message = message


@dataclass(frozen=True)
class Result:
	"""Outcome of a command: status and optional message for the user."""

	status: Status
	message: Optional[str] = None


@dataclass
class PIDFile:
	"""PID file of the supervised process.

	The PID is never cached: the child writes and removes the file on its
	own, so every query goes back to disk.
	"""

	path: Path
	verbose: bool = False

	def __post_init__(self) -> None:
		if self.path is None:
			raise ValueError("Nil path provided")
		self.path = Path(self.path)


@dataclass
class Options:
	"""Resolved launcher options."""

	install_path: Path
	node_properties_path: Path
	jvm_config_path: Path
	config_path: Path
	data_dir: Path
	log_levels_path: Path
	launcher_config_path: Path
	pid_file: Optional[Path] = None
	log_path: Optional[Path] = None
	system_properties: dict[str, str] = field(default_factory=dict)
	command: str = DEFAULT_COMMAND
	args: list[str] = field(default_factory=list)
	environment: dict[str, str] = field(default_factory=dict)
	stop_signal: str = DEFAULT_STOP_SIGNAL
	stop_timeout: float = DEFAULT_STOP_TIMEOUT
	kill_timeout: float = DEFAULT_KILL_TIMEOUT
	poll_interval: float = DEFAULT_POLL_INTERVAL
	verbose: bool = False


@dataclass(frozen=True)
class Invocation:
	"""A single run of the launcher: the verb, its options and the original argv."""

	verb: Verb
	options: Options
	argv: tuple[str, ...]


# Replaces the current process image with CMD, using ENV as its environment.
Launch = Callable[[list[str], dict[str, str]], None]

# -----------------------------------------------------------------------------
#
# UTILITIES
#
# -----------------------------------------------------------------------------

# =============================================================================
# Logging
# =============================================================================


# Function: launcher_util_log LEVEL MESSAGE
# Log message respecting verbose/quiet settings.
def launcher_util_log(level: str, msg: str) -> None:
	"""Log message respecting verbose/quiet settings."""
	levels = {"debug": 0, "info": 1, "warn": 2, "error": 3}
	level_num = levels.get(level, 1)
	if _quiet and level_num < 2:
		return
	if level == "debug" and not _verbose:
		return
	prefix = {"debug": "DBG", "info": "---", "warn": "WRN", "error": "ERR"}.get(
		level, "---"
	)
	color = {"debug": "dim", "info": "", "warn": "yellow", "error": "red"}.get(
		level, ""
	)
	line = f"{prefix} {msg}"
	if color:
		line = launcher_util_color(line, color)
	print(line, file=sys.stderr if level == "error" else sys.stdout)


# Function: launcher_util_color TEXT COLOR
# Colorize text if colors enabled.
def launcher_util_color(text: str, color: str) -> str:
	"""Colorize text if colors enabled."""
	if _no_color or not sys.stdout.isatty():
		return text
	codes = {
		"red": "\033[31m",
		"yellow": "\033[33m",
		"dim": "\033[2m",
		"reset": "\033[0m",
	}
	return f"{codes.get(color, '')}{text}{codes['reset']}"


# =============================================================================
# Parsing
# =============================================================================


# Function: launcher_util_parse_duration STRING
# Parse '5s', '30m', '1h', '7d' to seconds. Plain numbers are seconds.
def launcher_util_parse_duration(value) -> float:
	"""Parse duration (number or string with unit) to seconds."""
	if isinstance(value, bool):
		raise ValueError(f"Invalid duration: {value}")
	if isinstance(value, (int, float)):
		if value < 0:
			raise ValueError(f"Invalid duration: {value}")
		return float(value)
	match = re.match(r"^(\d+(?:\.\d+)?)([smhd])?$", str(value).strip().lower())
	if not match:
		raise ValueError(f"Invalid duration: {value}")
	num, unit = float(match.group(1)), match.group(2) or "s"
	multipliers = {"s": 1, "m": 60, "h": 3600, "d": 86400}
	return num * multipliers[unit]


# Function: launcher_util_parse_signal NAME
# Resolve 'TERM', 'SIGTERM' or '15' to a signal number.
def launcher_util_parse_signal(name: str) -> int:
	"""Resolve a signal name or number."""
	sig_name = str(name).strip().upper()
	if not sig_name.startswith("SIG") and not sig_name.isdigit():
		sig_name = f"SIG{sig_name}"
	# Only real signals: no 0, no SIG_DFL/SIG_IGN handler constants
	try:
		if sig_name.isdigit():
			return signal.Signals(int(sig_name))
		return signal.Signals[sig_name]
	except (KeyError, ValueError):
		raise CommandError(Status.GENERIC_ERROR, f"Unknown signal: {name}") from None


# Function: launcher_util_load_lines PATH
# Load lines from a file, stripped, skipping comments and blank lines.
def launcher_util_load_lines(path: Path) -> list[str]:
	"""Load stripped lines from a file, without comments or blank lines."""
	with open(path, "r") as f:
		lines = [line.strip() for line in f]
	return [line for line in lines if line and not line.startswith("#")]


# Function: launcher_util_load_properties PATH
# Load KEY=VALUE lines from a properties file.
def launcher_util_load_properties(path: Path) -> dict[str, str]:
	"""Load a properties file as an ordered dict."""
	properties = {}
	for line in launcher_util_load_lines(path):
		key, _, value = line.partition("=")
		properties[key.strip()] = value.strip()
	return properties


# -----------------------------------------------------------------------------
#
# CONFIG
#
# -----------------------------------------------------------------------------


# Function: launcher_config_defaults [INSTALL_PATH]
# Default options relative to the install path.
def launcher_config_defaults(install_path: Optional[Path] = None) -> Options:
	"""Return default options for the given install path."""
	if install_path is None:
		install_path = Path(os.environ.get("LAUNCHER_INSTALL_PATH") or os.getcwd())
	install = Path(install_path).expanduser().absolute()
	etc = install / "etc"

	log_levels = etc / "log.properties"
	legacy_log_levels = etc / "log.config"
	if not os.access(log_levels, os.R_OK) and os.access(legacy_log_levels, os.R_OK):
		log_levels = legacy_log_levels
		launcher_util_log(
			"warn",
			"Did not find a log.properties, but found a log.config instead. "
			"log.config is deprecated, please use log.properties.",
		)

	return Options(
		install_path=install,
		node_properties_path=etc / "node.properties",
		jvm_config_path=etc / "jvm.config",
		config_path=etc / "config.properties",
		data_dir=install,
		log_levels_path=log_levels,
		launcher_config_path=etc / "launcher.toml",
		args=["-jar", str(install / "lib" / "launcher.jar")],
	)


# Function: launcher_config_path OPTIONS VALUE
# Resolve a configured path, relative paths being relative to the install path.
def launcher_config_path(options: Options, value) -> Path:
	"""Resolve a path from configuration against the install path."""
	path = Path(str(value)).expanduser()
	return path if path.is_absolute() else options.install_path / path


# Function: launcher_config_load OPTIONS PATH REQUIRED
# Apply the launcher TOML config file at PATH, if present.
def launcher_config_load(options: Options, path: Path, required: bool = False) -> Options:
	"""Load launcher.toml into options."""
	options.launcher_config_path = path
	if not path.exists():
		if required:
			raise CommandError(Status.CONFIG_MISSING, f"Config file not found: {path}")
		return options
	try:
		with open(path, "rb") as f:
			data = tomllib.load(f)
		options = launcher_config_from_dict(data, options)
	except (OSError, tomllib.TOMLDecodeError, ValueError, TypeError, AttributeError) as e:
		launcher_util_log("warn", f"Failed to load {path}: {e}")
	return options


# Function: launcher_config_from_dict DATA OPTIONS
# Apply TOML data to options.
def launcher_config_from_dict(data: dict, options: Options) -> Options:
	"""Apply dictionary data to options."""
	if "data_dir" in data:
		options.data_dir = launcher_config_path(options, data["data_dir"])

	if "process" in data:
		p = data["process"]
		if "command" in p:
			options.command = str(p["command"])
		if "args" in p:
			options.args = [str(arg) for arg in p["args"]]
		if "environment" in p:
			options.environment = {str(k): str(v) for k, v in p["environment"].items()}

	if "pidfile" in data:
		pf = data["pidfile"]
		if "path" in pf:
			options.pid_file = launcher_config_path(options, pf["path"])

	if "logging" in data:
		lg = data["logging"]
		if "file" in lg:
			options.log_path = launcher_config_path(options, lg["file"])
		if "levels_file" in lg:
			options.log_levels_path = launcher_config_path(options, lg["levels_file"])

	if "signals" in data:
		sg = data["signals"]
		if "stop_signal" in sg:
			options.stop_signal = str(sg["stop_signal"])
		if "stop_timeout" in sg:
			options.stop_timeout = launcher_util_parse_duration(sg["stop_timeout"])
		if "kill_timeout" in sg:
			options.kill_timeout = launcher_util_parse_duration(sg["kill_timeout"])
		if "poll_interval" in sg:
			options.poll_interval = launcher_util_parse_duration(sg["poll_interval"])

	return options


# Function: launcher_config_from_env OPTIONS
# Apply LAUNCHER_{KEY} environment overrides.
def launcher_config_from_env(options: Options) -> Options:
	"""Apply environment variable overrides to options."""
	env = os.environ
	if env.get("LAUNCHER_DATA_DIR"):
		options.data_dir = launcher_config_path(options, env["LAUNCHER_DATA_DIR"])
	if env.get("LAUNCHER_PID_FILE"):
		options.pid_file = launcher_config_path(options, env["LAUNCHER_PID_FILE"])
	if env.get("LAUNCHER_LOG_FILE"):
		options.log_path = launcher_config_path(options, env["LAUNCHER_LOG_FILE"])
	if env.get("LAUNCHER_COMMAND"):
		parts = shlex.split(env["LAUNCHER_COMMAND"])
		if parts:
			options.command, options.args = parts[0], parts[1:]
	for key, attr in (
		("LAUNCHER_STOP_TIMEOUT", "stop_timeout"),
		("LAUNCHER_KILL_TIMEOUT", "kill_timeout"),
	):
		if not env.get(key):
			continue
		try:
			setattr(options, attr, launcher_util_parse_duration(env[key]))
		except ValueError as e:
			launcher_util_log("warn", f"Ignoring {key}: {e}")
	return options


# Function: launcher_config_apply_CLI_overrides ARGS OPTIONS
# Apply command-line flags to options.
def launcher_config_apply_CLI_overrides(
	args: argparse.Namespace, options: Options
) -> Options:
	"""Apply CLI arguments to options."""

	def cli_path(value: str) -> Path:
		return Path(value).expanduser().absolute()

	if args.node_config:
		options.node_properties_path = cli_path(args.node_config)
	if args.jvm_config:
		options.jvm_config_path = cli_path(args.jvm_config)
	if args.config:
		options.config_path = cli_path(args.config)
	if args.data:
		options.data_dir = cli_path(args.data)
	if args.pid_file:
		options.pid_file = cli_path(args.pid_file)
	if args.log_file:
		options.log_path = cli_path(args.log_file)
	if args.log_levels_file:
		options.log_levels_path = cli_path(args.log_levels_file)

	for prop in args.properties or []:
		if prop.startswith("config="):
			raise CommandError(
				Status.INVALID_ARGS,
				"Config can not be passed in a -D argument. Use --config instead",
			)
		key, _, value = prop.partition("=")
		if not key.strip():
			raise CommandError(Status.INVALID_ARGS, f"Invalid property: -D{prop}")
		options.system_properties[key.strip()] = value.strip()

	options.verbose = args.verbose
	return options


# Function: launcher_config_merge_node_properties OPTIONS REQUIRED
# Merge node.properties under the -D properties; node.data-dir sets DATA_DIR.
def launcher_config_merge_node_properties(
	options: Options, required: bool = False
) -> Options:
	"""Merge node properties into the system properties."""
	path = options.node_properties_path
	properties: dict[str, str] = {}
	if path.exists():
		try:
			properties = launcher_util_load_properties(path)
		except OSError as e:
			launcher_util_log("warn", f"Failed to load {path}: {e}")
	elif required:
		raise CommandError(Status.CONFIG_MISSING, f"Node config not found: {path}")

	data_dir = properties.get("node.data-dir")
	properties.update(options.system_properties)
	options.system_properties = properties
	if data_dir is not None:
		options.data_dir = launcher_config_path(options, data_dir)
	return options


# Function: launcher_config_resolve ARGS
# Load and merge options: defaults + launcher.toml + env vars + CLI + node.properties.
def launcher_config_resolve(args: argparse.Namespace) -> Options:
	"""Resolve the options for a run."""
	options = launcher_config_defaults()

	if args.launcher_config:
		path = Path(args.launcher_config).expanduser().absolute()
		options = launcher_config_load(options, path, required=True)
	else:
		options = launcher_config_load(options, options.launcher_config_path)

	options = launcher_config_from_env(options)
	options = launcher_config_apply_CLI_overrides(args, options)
	options = launcher_config_merge_node_properties(
		options, required=bool(args.node_config)
	)

	if options.log_path is None:
		options.log_path = options.data_dir / "var" / "log" / "launcher.log"
	if options.pid_file is None:
		options.pid_file = options.data_dir / "var" / "run" / "launcher.pid"

	return options


# Function: launcher_config_dump OPTIONS
# Render options as KEY=VALUE lines.
def launcher_config_dump(options: Options) -> list[str]:
	"""Return options as KEY=VALUE lines."""
	return [f"{f.name}={getattr(options, f.name)}" for f in fields(options)]


# -----------------------------------------------------------------------------
#
# PROCESS
#
# -----------------------------------------------------------------------------


# Function: launcher_process_PID_get PIDFILE
# Read PID from pidfile, return None if missing/invalid.
def launcher_process_PID_get(pidfile: PIDFile) -> Optional[int]:
	"""Read PID from file, return None if missing or invalid."""
	try:
		content = pidfile.path.read_text().strip()
	except FileNotFoundError:
		if pidfile.verbose:
			launcher_util_log("info", f"Can't find pid file {pidfile.path}")
		return None
	except (OSError, UnicodeDecodeError):
		return None
	if not (content.isascii() and content.isdigit()):
		return None
	PID = int(content)
	# 0 would signal our own process group
	return PID if 0 < PID <= PID_MAX else None


# Function: launcher_process_PID_alive PIDFILE
# Check whether the process in the pidfile is running.
def launcher_process_PID_alive(pidfile: PIDFile) -> bool:
	"""Check if the PID in the file belongs to a running process.

	A process we are not allowed to signal counts as running.
	"""
	PID = launcher_process_PID_get(pidfile)
	if PID is None:
		return False
	return launcher_process_is_running(PID, pidfile.verbose)


# Function: launcher_process_is_running PID [VERBOSE]
# Check whether PID exists using signal 0.
def launcher_process_is_running(PID: int, verbose: bool = False) -> bool:
	"""Check if a process with the given PID exists."""
	try:
		os.kill(PID, 0)
	except ProcessLookupError:
		if verbose:
			launcher_util_log("info", f"Process {PID} not running")
		return False
	except PermissionError:
		if verbose:
			launcher_util_log("info", f"Process {PID} not visible")
	return True


# Function: launcher_process_PID_clear PIDFILE
# Remove PID file.
def launcher_process_PID_clear(pidfile: PIDFile) -> None:
	"""Remove PID file if it exists."""
	pidfile.path.unlink(missing_ok=True)


# Function: launcher_process_signal PID SIGNAL
# Send signal to process.
def launcher_process_signal(PID: int, sig: int) -> bool:
	"""Send signal to process. Returns False if the process is already gone."""
	try:
		os.kill(PID, sig)
		return True
	except ProcessLookupError:
		return False


# Function: launcher_process_wait PIDFILE TIMEOUT INTERVAL
# Wait for the pidfile process to exit, polling every INTERVAL seconds.
def launcher_process_wait(pidfile: PIDFile, timeout: float, interval: float) -> bool:
	"""Wait for process to exit. Returns True if exited, False on timeout."""
	deadline = time.monotonic() + timeout
	while launcher_process_PID_alive(pidfile):
		if time.monotonic() >= deadline:
			return False
		time.sleep(interval)
	return True


# Function: launcher_process_terminate PIDFILE PID SIGNAL TIMEOUT INTERVAL
# Signal PID, wait for it to exit and clear the pidfile.
def launcher_process_terminate(
	pidfile: PIDFile, PID: Optional[int], sig: int, timeout: float, interval: float
) -> Optional[Result]:
	"""Signal and reap. Returns a failure result, or None once the process is gone."""
	if PID is not None:
		try:
			delivered = launcher_process_signal(PID, sig)
		except PermissionError:
			return Result(
				Status.GENERIC_ERROR, f"Cannot signal process {PID}: permission denied"
			)
		except OSError as e:
			return Result(
				Status.GENERIC_ERROR, f"Cannot signal process {PID}: {e.strerror or e}"
			)
		if delivered and not launcher_process_wait(pidfile, timeout, interval):
			return Result(
				Status.TIMEOUT,
				f"Timed out waiting for process {PID} to exit after {timeout:g}s",
			)
	launcher_process_PID_clear(pidfile)
	return None


# Function: launcher_process_PID_file OPTIONS
# PID file handle for the resolved options.
def launcher_process_PID_file(options: Options) -> PIDFile:
	"""Return the PID file for options."""
	return PIDFile(options.pid_file, verbose=options.verbose)


# Function: launcher_process_cmd INVOCATION
# Child command line: command + args + -D properties + original argv.
def launcher_process_cmd(invocation: Invocation) -> list[str]:
	"""Build the child command line."""
	options = invocation.options
	cmd = [options.command] + list(options.args)
	cmd += [f"-D{k}={v}" for k, v in options.system_properties.items()]
	return cmd + list(invocation.argv)


# Function: launcher_process_env OPTIONS
# Child environment: inherited + configured + resolved launcher paths.
def launcher_process_env(options: Options) -> dict[str, str]:
	"""Build the child environment."""
	env = os.environ.copy()
	env.update(options.environment)
	env.update(
		{
			"LAUNCHER_INSTALL_PATH": str(options.install_path),
			"LAUNCHER_DATA_DIR": str(options.data_dir),
			"LAUNCHER_PID_FILE": str(options.pid_file),
			"LAUNCHER_LOG_FILE": str(options.log_path),
			"LAUNCHER_LOG_LEVELS_FILE": str(options.log_levels_path),
			"LAUNCHER_NODE_CONFIG": str(options.node_properties_path),
			"LAUNCHER_JVM_CONFIG": str(options.jvm_config_path),
			"LAUNCHER_CONFIG": str(options.config_path),
		}
	)
	return env


# Function: launcher_process_exec CMD ENV
# Replace the current process with CMD.
def launcher_process_exec(cmd: list[str], env: dict[str, str]) -> NoReturn:
	"""Replace the current process image with the child command."""
	sys.stdout.flush()
	sys.stderr.flush()
	try:
		os.execvpe(cmd[0], cmd, env)
	except OSError as e:
		raise CommandError(
			Status.GENERIC_ERROR, f"Failed to launch {cmd[0]}: {e.strerror or e}"
		) from e


# -----------------------------------------------------------------------------
#
# COMMANDS
#
# -----------------------------------------------------------------------------


# Function: launcher_cmd_start INVOCATION LAUNCH
# Hand over to the child process. Does not return when LAUNCH execs.
def launcher_cmd_start(
	invocation: Invocation, launch: Launch = launcher_process_exec
) -> Result:
	"""Start the child process."""
	cmd = launcher_process_cmd(invocation)
	launcher_util_log("debug", f"Executing: {shlex.join(cmd)}")
	launch(cmd, launcher_process_env(invocation.options))
	return Result(Status.SUCCESS)


# Function: launcher_cmd_status INVOCATION LAUNCH
# The child reports its own status.
def launcher_cmd_status(
	invocation: Invocation, launch: Launch = launcher_process_exec
) -> Result:
	"""Report status through the child process."""
	return launcher_cmd_start(invocation, launch)


# Function: launcher_cmd_stop INVOCATION [LAUNCH]
# Stop gracefully and wait for exit.
def launcher_cmd_stop(
	invocation: Invocation, launch: Optional[Launch] = None
) -> Result:
	"""Stop the running process."""
	options = invocation.options
	pidfile = launcher_process_PID_file(options)

	PID = launcher_process_PID_get(pidfile)
	if PID is None or not launcher_process_is_running(PID, pidfile.verbose):
		launcher_process_PID_clear(pidfile)
		return Result(Status.SUCCESS, f"Stopped {PID}" if PID else "Stopped")

	sig = launcher_util_parse_signal(options.stop_signal)
	launcher_util_log("debug", f"Sending {options.stop_signal} to {PID}")
	failure = launcher_process_terminate(
		pidfile, PID, sig, options.stop_timeout, options.poll_interval
	)
	if failure:
		return failure
	return Result(Status.SUCCESS, f"Stopped {PID}")


# Function: launcher_cmd_kill INVOCATION [LAUNCH]
# Force kill and wait for exit.
def launcher_cmd_kill(
	invocation: Invocation, launch: Optional[Launch] = None
) -> Result:
	"""Kill the running process."""
	options = invocation.options
	pidfile = launcher_process_PID_file(options)

	PID = launcher_process_PID_get(pidfile)
	if PID is None or not launcher_process_is_running(PID, pidfile.verbose):
		launcher_process_PID_clear(pidfile)
		return Result(Status.SUCCESS, "Not running")

	launcher_util_log("debug", f"Sending KILL to {PID}")
	failure = launcher_process_terminate(
		pidfile, PID, signal.SIGKILL, options.kill_timeout, options.poll_interval
	)
	if failure:
		return failure
	return Result(Status.SUCCESS, f"Killed {PID}")


# Function: launcher_cmd_restart INVOCATION LAUNCH
# Stop, then start with the same options.
def launcher_cmd_restart(
	invocation: Invocation, launch: Launch = launcher_process_exec
) -> Result:
	"""Restart the process (stop + start)."""
	result = launcher_cmd_stop(invocation)
	if result.status != Status.SUCCESS:
		return result
	return launcher_cmd_start(invocation, launch)


LAUNCHER_COMMANDS: dict[Verb, Callable[[Invocation, Launch], Result]] = {
	Verb.START: launcher_cmd_start,
	Verb.STOP: launcher_cmd_stop,
	Verb.RESTART: launcher_cmd_restart,
	Verb.KILL: launcher_cmd_kill,
	Verb.STATUS: launcher_cmd_status,
}

# -----------------------------------------------------------------------------
#
# CLI
#
# -----------------------------------------------------------------------------


class LauncherArgumentParser(argparse.ArgumentParser):
	"""ArgumentParser that reports errors as invalid arguments."""

	def error(self, message: str) -> NoReturn:
		"""Print usage and raise instead of exiting."""
		self.print_usage(sys.stderr)
		raise CommandError(Status.INVALID_ARGS, f"{self.prog}: error: {message}")


# Function: launcher_CLI_build_parser
# Build argument parser.
def launcher_CLI_build_parser() -> LauncherArgumentParser:
	"""Build the argument parser."""
	parser = LauncherArgumentParser(
		prog="launcher",
		usage="%(prog)s [options] <command>",
		description="Commands:\n  " + "\n  ".join(v.value for v in Verb),
		formatter_class=argparse.RawDescriptionHelpFormatter,
		add_help=False,
	)
	parser.add_argument("command", nargs="*", help=argparse.SUPPRESS)
	parser.add_argument(
		"-h", "--help", action="store_true", help="Display this screen"
	)
	parser.add_argument(
		"--version", action="version", version=f"launcher {VERSION}"
	)
	parser.add_argument("-v", "--verbose", action="store_true", help="Run verbosely")
	parser.add_argument(
		"-q", "--quiet", action="store_true", help="Suppress non-error output"
	)
	parser.add_argument(
		"--no-color", action="store_true", help="Disable colored output"
	)
	parser.add_argument(
		"--node-config",
		metavar="FILE",
		help="Defaults to INSTALL_PATH/etc/node.properties",
	)
	parser.add_argument(
		"--jvm-config", metavar="FILE", help="Defaults to INSTALL_PATH/etc/jvm.config"
	)
	parser.add_argument(
		"--config",
		metavar="FILE",
		help="Defaults to INSTALL_PATH/etc/config.properties",
	)
	parser.add_argument("--data", metavar="DIR", help="Defaults to INSTALL_PATH")
	parser.add_argument(
		"--pid-file", metavar="FILE", help="Defaults to DATA_DIR/var/run/launcher.pid"
	)
	parser.add_argument(
		"--log-file", metavar="FILE", help="Defaults to DATA_DIR/var/log/launcher.log"
	)
	parser.add_argument(
		"--log-levels-file",
		metavar="FILE",
		help="Defaults to INSTALL_PATH/etc/log.properties",
	)
	parser.add_argument(
		"--launcher-config",
		metavar="FILE",
		help="Defaults to INSTALL_PATH/etc/launcher.toml",
	)
	parser.add_argument(
		"-D",
		dest="properties",
		action="append",
		metavar="<name>=<value>",
		help="Sets a system property",
	)
	return parser


# Function: launcher_CLI_verb PARSER COMMANDS
# Validate the positional arguments and return the verb.
def launcher_CLI_verb(parser: argparse.ArgumentParser, commands: list[str]) -> Verb:
	"""Return the single requested verb."""
	if len(commands) != 1:
		parser.print_help()
		print()
		raise CommandError(
			Status.INVALID_ARGS, f"Expected a single command, got '{' '.join(commands)}'"
		)
	try:
		return Verb(commands[0])
	except ValueError:
		parser.print_help()
		print()
		raise CommandError(
			Status.UNSUPPORTED, f"Unsupported command: {commands[0]}"
		) from None


# Function: launcher_CLI_dispatch INVOCATION LAUNCH
# Run the verb handler, print its message and return the exit code.
def launcher_CLI_dispatch(
	invocation: Invocation, launch: Launch = launcher_process_exec
) -> int:
	"""Dispatch to the command handler."""
	handler = LAUNCHER_COMMANDS[invocation.verb]
	try:
		result = handler(invocation, launch)
	except CommandError as e:
		return launcher_CLI_fail(e)
	if result.message is not None:
		print(result.message)
	return int(result.status)


# Function: launcher_CLI_fail ERROR
# Report a command error and return its exit code.
def launcher_CLI_fail(error: CommandError) -> int:
	"""Print a command error and return its code."""
	print(error.message)
	if _verbose:
		print(error.code.name.lower())
	return int(error.code)


# -----------------------------------------------------------------------------
#
# MAIN
#
# -----------------------------------------------------------------------------


# Function: launcher_main
# Main entry point.
def launcher_main(
	argv: Optional[list[str]] = None, launch: Launch = launcher_process_exec
) -> int:
	"""Main entry point."""
	global _verbose, _quiet, _no_color

	argv = list(sys.argv[1:] if argv is None else argv)
	parser = launcher_CLI_build_parser()
	try:
		args = parser.parse_args(argv)

		_verbose = args.verbose
		_quiet = args.quiet
		_no_color = args.no_color or LAUNCHER_NO_COLOR

		if args.help:
			parser.print_help()
			return int(Status.INVALID_ARGS)

		verb = launcher_CLI_verb(parser, args.command)
		options = launcher_config_resolve(args)
	except CommandError as e:
		return launcher_CLI_fail(e)

	if options.verbose:
		print("\n".join(launcher_config_dump(options)))

	invocation = Invocation(verb=verb, options=options, argv=tuple(argv))
	return launcher_CLI_dispatch(invocation, launch)


if __name__ == "__main__":
	sys.exit(launcher_main())

# EOF
