import sys
from pathlib import Path
from unittest.mock import MagicMock, patch

import psutil
import requests

SCRIPTS = Path(__file__).resolve().parents[2] / "scripts"
if str(SCRIPTS) not in sys.path:
    sys.path.insert(0, str(SCRIPTS))

import stop  # noqa: E402
import utils  # noqa: E402


class TestHttpOk:
    """起動確認のテスト"""

    def test_success(self) -> None:
        with patch("requests.get", return_value=MagicMock(status_code=200)):
            assert utils.http_ok("http://127.0.0.1:5578/status") is True

    def test_server_error(self) -> None:
        with patch("requests.get", return_value=MagicMock(status_code=503)):
            assert utils.http_ok("http://127.0.0.1:5578/status") is False

    def test_connection_refused(self) -> None:
        with patch("requests.get", side_effect=requests.ConnectionError()):
            assert utils.http_ok("http://127.0.0.1:5578/status") is False

    def test_non_http_url(self) -> None:
        assert utils.http_ok("file:///etc/passwd") is False


class TestStopByPidFile:
    """停止スクリプトのテスト"""

    def test_missing_pid_file(self, tmp_path: Path) -> None:
        assert stop.stop_by_pid_file(tmp_path / "none.pid") is False

    def test_terminates_recorded_process(self, tmp_path: Path) -> None:
        # Given: PIDファイルが存在する
        pid_file = tmp_path / "daemon.pid"
        pid_file.write_text("4242", encoding="ascii")
        proc = MagicMock()

        # When
        with patch("psutil.Process", return_value=proc) as process:
            stopped = stop.stop_by_pid_file(pid_file)

        # Then
        assert stopped is True
        process.assert_called_once_with(4242)
        proc.terminate.assert_called_once()
        assert not pid_file.exists()

    def test_stale_pid_file(self, tmp_path: Path) -> None:
        pid_file = tmp_path / "daemon.pid"
        pid_file.write_text("4242", encoding="ascii")
        with patch("psutil.Process", side_effect=psutil.NoSuchProcess(4242)):
            assert stop.stop_by_pid_file(pid_file) is False
        assert not pid_file.exists()
