import json
import socket
import threading
from pathlib import Path

import pytest

from dtc_uplink import cli


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch):
    monkeypatch.setattr(cli, "configure_logging", lambda *args, **kwargs: None)


def _write(tmp_path: Path, data: dict) -> Path:
    path = tmp_path / "avionics.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def _config(tmp_path: Path, port: int) -> Path:
    path = tmp_path / "dtc-uplink.cfg"
    path.write_text(f"[simulator]\ncommand_port = {port}\n", encoding="utf-8")
    return path


def _closed_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


WAYPOINTS = {"stpt": [{"lat": 41.5, "lon": 42.0, "alt": 100}]}


def test_compile_prints_wire_string(tmp_path: Path, capsys):
    path = _write(tmp_path, WAYPOINTS)

    code = cli.main(["-c", str(tmp_path / "missing.cfg"), "compile", str(path)])

    assert code == cli.EXIT_OK
    output = capsys.readouterr().out.strip()
    assert output.startswith('[{"marker": "<upload_prog>"}')
    assert output.endswith('{"marker": ""}]')
    records = json.loads(output)
    assert all(record.get("device") == "17" for record in records[1:-1] if "code" in record)
    assert sum(1 for record in records if "marker" in record) == 2


def test_compile_uses_file_airframe(tmp_path: Path, capsys):
    path = _write(tmp_path, {"airframe": "a10c", "wypt": [{"lat": 1.0, "lon": 2.0}]})

    assert cli.main(["-c", str(tmp_path / "missing.cfg"), "compile", str(path)]) == 0

    output = capsys.readouterr().out
    assert '"device": "9"' in output


def test_compile_rejects_out_of_range_values(tmp_path: Path):
    path = _write(tmp_path, {"cmds": {"chaff": [{"bq": "500"}]}})

    assert cli.main(["-c", str(tmp_path / "missing.cfg"), "compile", str(path)]) == cli.EXIT_ERROR


def test_compile_reports_unreadable_file(tmp_path: Path):
    path = tmp_path / "avionics.json"
    path.write_text("[1, 2", encoding="utf-8")

    assert cli.main(["-c", str(tmp_path / "missing.cfg"), "compile", str(path)]) == cli.EXIT_ERROR
    assert cli.main(["-c", str(tmp_path / "missing.cfg"), "compile", str(tmp_path / "nope.json")]) == cli.EXIT_ERROR


def test_forced_upload_to_closed_port_is_not_sent(tmp_path: Path):
    path = _write(tmp_path, WAYPOINTS)
    config = _config(tmp_path, _closed_port())

    assert cli.main(["-c", str(config), "upload", "--force", str(path)]) == cli.EXIT_NOT_SENT


def test_forced_upload_reaches_listener(tmp_path: Path):
    path = _write(tmp_path, WAYPOINTS)
    server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    server.bind(("127.0.0.1", 0))
    server.listen(1)
    received: list[bytes] = []

    def accept() -> None:
        connection, _ = server.accept()
        with connection:
            chunks = []
            while True:
                chunk = connection.recv(65536)
                if not chunk:
                    break
                chunks.append(chunk)
            received.append(b"".join(chunks))

    worker = threading.Thread(target=accept, daemon=True)
    worker.start()
    try:
        config = _config(tmp_path, server.getsockname()[1])
        code = cli.main(["-c", str(config), "upload", "--force", str(path)])
        worker.join(timeout=5)
    finally:
        server.close()

    assert code == cli.EXIT_OK
    assert received and received[0].endswith(b"]\n")
    assert received[0].startswith(b'[{"marker": "<upload_prog>"}')


def test_show_config(tmp_path: Path, capsys):
    config = _config(tmp_path, 43001)

    assert cli.main(["-c", str(config), "show-config"]) == 0

    output = capsys.readouterr().out
    assert "[simulator]" in output
    assert "command_port = 43001" in output
