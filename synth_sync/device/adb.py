"""
Thin wrapper around the `adb` command-line tool.

The bridge is synchronous; async code calls it through `asyncio.to_thread`.
"""

import logging
import socket
import subprocess
from typing import List, Optional, Sequence

from synth_sync.exceptions import DeviceError, TransferError
from synth_sync.models.device import Device

log = logging.getLogger(__name__)


def parse_devices_output(output: str) -> List[Device]:
    """
    Parses the output of `adb devices -l`.

    Only devices in the 'device' state are returned; 'offline' and
    'unauthorized' entries are skipped.
    """
    devices = []
    for line in output.splitlines():
        if line.startswith("List of devices") or not line.strip():
            continue

        fields = line.split()
        if len(fields) < 2 or fields[1] != "device":
            continue

        model = "(unknown)"
        for field in fields[2:]:
            if field.startswith("model:"):
                model = field[len("model:") :]
                break
        devices.append(Device(serial=fields[0], model=model))
    return devices


def parse_ls_output(output: str) -> List[str]:
    """Splits `ls` output into filenames, dropping blank lines."""
    return [line.rstrip("\r") for line in output.split("\n") if line.strip()]


class AdbBridge:
    """
    Runs adb commands, optionally bound to one device serial.

    A bridge bound to a serial is the single owner of that device connection;
    transfers through it happen one at a time.
    """

    def __init__(
        self, serial: Optional[str] = None, adb_path: str = "adb", port: int = 5037
    ):
        self.serial = serial
        self.adb_path = adb_path
        self.port = port

    def for_device(self, serial: str) -> "AdbBridge":
        """Returns a bridge bound to the given device."""
        return AdbBridge(serial=serial, adb_path=self.adb_path, port=self.port)

    def _command(self, *args: str) -> List[str]:
        cmd = [self.adb_path]
        if self.serial:
            cmd += ["-s", self.serial]
        return cmd + list(args)

    def _run(self, args: Sequence[str]) -> subprocess.CompletedProcess:
        log.debug(f"Running: {' '.join(args)}")
        try:
            return subprocess.run(args, capture_output=True, text=True)
        except FileNotFoundError as e:
            raise DeviceError(
                f"'{self.adb_path}' was not found. Install Android platform-tools "
                "or set adb_path in the configuration."
            ) from e

    def is_server_running(self) -> bool:
        """Checks whether the adb server is accepting connections locally."""
        try:
            with socket.create_connection(("127.0.0.1", self.port), timeout=1):
                return True
        except OSError:
            return False

    def start_server(self) -> None:
        """Starts the adb server. A failure is logged, not raised."""
        result = self._run([self.adb_path, "start-server"])
        output = (result.stdout + result.stderr).strip()
        if result.returncode != 0:
            log.error(f"[red]Failed to start ADB server:[/red] {output}")
            return
        log.info("ADB server started.")
        if output:
            log.debug(f"adb start-server output:\n{output}")

    def ensure_server(self) -> None:
        """Starts the adb server unless it is already running."""
        if self.is_server_running():
            log.info("ADB server is already running.")
        else:
            self.start_server()

    def list_devices(self) -> List[Device]:
        """Lists connected devices that are ready for use."""
        result = self._run([self.adb_path, "devices", "-l"])
        if result.returncode != 0:
            raise DeviceError(
                f"'adb devices' failed with exit code {result.returncode}: "
                f"{result.stderr.strip()}"
            )
        return parse_devices_output(result.stdout)

    def list_folder(self, path: str) -> List[str]:
        """Lists the entries of a folder on the bound device."""
        result = self._run(self._command("shell", "ls", path))
        if result.returncode != 0:
            raise DeviceError(
                f"Error listing folder {path}: "
                f"{(result.stderr or result.stdout).strip()}"
            )
        return parse_ls_output(result.stdout)

    def push(self, local_path: str, remote_dir: str) -> None:
        """Copies a local file into a directory on the bound device."""
        result = self._run(self._command("push", local_path, remote_dir))
        if result.returncode != 0:
            raise TransferError(
                f"adb push failed with exit code {result.returncode}\n"
                f"Output: {(result.stdout + result.stderr).strip()}"
            )
