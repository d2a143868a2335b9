"""Tests for adb output parsing and command handling."""

from __future__ import annotations

import subprocess

import pytest

from synth_sync.device import adb
from synth_sync.device.adb import AdbBridge, parse_devices_output, parse_ls_output
from synth_sync.exceptions import DeviceError, TransferError
from synth_sync.models.device import Device

DEVICES_OUTPUT = """List of devices attached
1WMHH000000000       device usb:1-1 product:hollywood model:Quest_2 device:hollywood transport_id:3
emulator-5554        offline
R58M00000000         unauthorized usb:1-2 transport_id:4
192.168.1.20:5555    device product:eureka transport_id:5

"""


class Recorder:
    def __init__(self, returncode=0, stdout="", stderr=""):
        self.calls = []
        self.result = subprocess.CompletedProcess([], returncode, stdout, stderr)

    def __call__(self, args, **kwargs):
        self.calls.append(list(args))
        return self.result


def test_parse_devices_keeps_ready_devices_only():
    assert parse_devices_output(DEVICES_OUTPUT) == [
        Device(serial="1WMHH000000000", model="Quest_2"),
        Device(serial="192.168.1.20:5555", model="(unknown)"),
    ]


def test_parse_ls_drops_blank_lines_and_carriage_returns():
    output = "a.synth\r\nb b.synth\n\n  \nc.synth\n"
    assert parse_ls_output(output) == ["a.synth", "b b.synth", "c.synth"]


def test_list_folder_runs_ls_on_bound_device(monkeypatch):
    recorder = Recorder(stdout="x.synth\ny.synth\n")
    monkeypatch.setattr(adb.subprocess, "run", recorder)

    files = AdbBridge(serial="ABC").list_folder("/sdcard/Songs/")

    assert files == ["x.synth", "y.synth"]
    assert recorder.calls == [["adb", "-s", "ABC", "shell", "ls", "/sdcard/Songs/"]]


def test_list_folder_failure_raises_device_error(monkeypatch):
    monkeypatch.setattr(
        adb.subprocess, "run", Recorder(returncode=1, stderr="No such file or directory")
    )

    with pytest.raises(DeviceError, match="No such file"):
        AdbBridge(serial="ABC").list_folder("/missing/")


def test_push_failure_raises_transfer_error_with_output(monkeypatch):
    monkeypatch.setattr(
        adb.subprocess, "run", Recorder(returncode=1, stderr="device offline")
    )

    with pytest.raises(TransferError, match="device offline"):
        AdbBridge(serial="ABC").push("/tmp/a.synth", "/sdcard/Songs/")


def test_push_uses_serial_and_remote_dir(monkeypatch):
    recorder = Recorder()
    monkeypatch.setattr(adb.subprocess, "run", recorder)

    AdbBridge(adb_path="/opt/adb").for_device("XYZ").push("/tmp/a.synth", "/sdcard/S/")

    assert recorder.calls == [["/opt/adb", "-s", "XYZ", "push", "/tmp/a.synth", "/sdcard/S/"]]


def test_list_devices_failure_raises_device_error(monkeypatch):
    monkeypatch.setattr(adb.subprocess, "run", Recorder(returncode=1, stderr="boom"))

    with pytest.raises(DeviceError):
        AdbBridge().list_devices()


def test_missing_adb_executable_raises_device_error(monkeypatch):
    def missing(args, **kwargs):
        raise FileNotFoundError(args[0])

    monkeypatch.setattr(adb.subprocess, "run", missing)

    with pytest.raises(DeviceError, match="not found"):
        AdbBridge(adb_path="no-such-adb").list_devices()


def test_ensure_server_skips_start_when_running(monkeypatch):
    recorder = Recorder()
    monkeypatch.setattr(adb.subprocess, "run", recorder)
    bridge = AdbBridge()
    monkeypatch.setattr(bridge, "is_server_running", lambda: True)

    bridge.ensure_server()

    assert recorder.calls == []


def test_ensure_server_starts_server_when_down(monkeypatch):
    recorder = Recorder(stdout="* daemon started successfully")
    monkeypatch.setattr(adb.subprocess, "run", recorder)
    bridge = AdbBridge()
    monkeypatch.setattr(bridge, "is_server_running", lambda: False)

    bridge.ensure_server()

    assert recorder.calls == [["adb", "start-server"]]


def test_is_server_running_false_when_port_closed():
    assert AdbBridge(port=1).is_server_running() is False
