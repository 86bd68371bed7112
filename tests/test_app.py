import pytest
import app
from domain.camera_info import CameraInfo
from utils import realsense_grabber


@pytest.fixture
def no_devices(monkeypatch):
    monkeypatch.setattr(realsense_grabber, "detect_realsense_cameras", lambda: [])


def test_help_exits_zero_without_touching_devices(monkeypatch, capsys):
    def fail():
        raise AssertionError("device enumeration during --help")

    monkeypatch.setattr(realsense_grabber, "detect_realsense_cameras", fail)
    for flag in ("--help", "-h"):
        with pytest.raises(SystemExit) as exc:
            app.main([flag])
        assert exc.value.code == 0
    out = capsys.readouterr().out
    assert "--xyz" in out
    assert "Keyboard commands" in out


def test_list_without_devices_prints_none(no_devices, capsys):
    assert app.main(["--list"]) == 0
    assert capsys.readouterr().out.strip() == "Connected devices: none"


def test_list_prints_index_and_serial(monkeypatch, capsys):
    cameras = [CameraInfo(1, "231400041-03"), CameraInfo(2, "817612070540")]
    monkeypatch.setattr(realsense_grabber, "detect_realsense_cameras", lambda: cameras)
    assert app.main(["-l"]) == 0
    out = capsys.readouterr().out
    assert out == "Connected devices: \n  #1  231400041-03\n  #2  817612070540\n"


def test_missing_device_exits_with_failure(no_devices):
    assert app.main(["#3"]) == 1
    assert app.main(["--xyz"]) == 1


def test_arguments():
    args = app.parse_args(["--xyz", "#2"])
    assert args.xyz is True
    assert args.device_id == "#2"
    assert app.parse_args([]).device_id == ""


def test_list_when_enumeration_fails_prints_none(monkeypatch, capsys):
    def broken():
        raise RuntimeError("failed to set power state")

    monkeypatch.setattr(realsense_grabber, "detect_realsense_cameras", broken)
    assert app.main(["--list"]) == 0
    assert capsys.readouterr().out.strip() == "Connected devices: none"
