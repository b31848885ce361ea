from pathlib import Path

from dtc_uplink import constants
from dtc_uplink.config import load_config, save_config
from dtc_uplink.core import UploadFeedback


def test_load_config_defaults(tmp_path: Path) -> None:
    config_path = tmp_path / "dtc-uplink.cfg"
    config = load_config(config_path)

    assert config.path == config_path
    assert config.simulator.host == constants.DEFAULT_SIMULATOR_HOST
    assert config.simulator.command_port == 42001
    assert config.simulator.capture_port == 42002
    assert config.simulator.telemetry_port == 42003
    assert config.simulator.connect_timeout_seconds == 2.0
    assert config.simulator.availability_timeout_seconds == 10.0
    assert config.upload.delay_scale == 1.0
    assert config.upload.feedback is UploadFeedback.NONE
    assert config.upload.base_delay("f16c") == constants.DEFAULT_BASE_DELAY_MS
    assert config.upload.base_delay("unknown") == constants.DEFAULT_BASE_DELAY_MS
    assert config.navpoints.starting_number == 1
    assert config.navpoints.max_capture_points == 0
    assert config.logging.level == "INFO"
    assert config.logging.log_network is False
    assert config.health.enabled is False


def test_load_config_overrides_defaults(tmp_path: Path) -> None:
    config_path = tmp_path / "dtc-uplink.cfg"
    config_path.write_text(
        """
[simulator]
host = 192.168.1.20
command_port = 43001
connect_timeout_seconds = 0

[upload]
delay_scale = 0.5
feedback = lights
delay_a10c = 350

[navpoints]
starting_number = 0
max_capture_points = 20

[health]
enabled = true
port = 8090
        """.strip()
        + "\n",
        encoding="utf-8",
    )

    config = load_config(config_path)

    assert config.simulator.host == "192.168.1.20"
    assert config.simulator.command_port == 43001
    assert config.simulator.connect_timeout_seconds == 0.1
    assert config.upload.delay_scale == 0.5
    assert config.upload.feedback is UploadFeedback.LIGHTS
    assert config.upload.base_delay("a10c") == 350
    assert config.upload.base_delay("f16c") == constants.DEFAULT_BASE_DELAY_MS
    assert config.navpoints.starting_number == 1
    assert config.navpoints.max_capture_points == 20
    assert config.health.enabled is True
    assert config.health.port == 8090


def test_load_config_sanitises_upload_section(tmp_path: Path) -> None:
    config_path = tmp_path / "dtc-uplink.cfg"
    config_path.write_text(
        "[upload]\ndelay_scale = fast\nfeedback = fireworks\n", encoding="utf-8"
    )

    config = load_config(config_path)

    assert config.upload.delay_scale == 1.0
    assert config.upload.feedback is UploadFeedback.NONE


def test_load_config_clamps_delay_scale(tmp_path: Path) -> None:
    config_path = tmp_path / "dtc-uplink.cfg"
    config_path.write_text("[upload]\ndelay_scale = 50\n", encoding="utf-8")

    assert load_config(config_path).upload.delay_scale == 10.0

    config_path.write_text("[upload]\ndelay_scale = 0.01\n", encoding="utf-8")

    assert load_config(config_path).upload.delay_scale == 0.1


def test_save_config_round_trips(tmp_path: Path) -> None:
    config_path = tmp_path / "nested" / "dtc-uplink.cfg"
    config = load_config(config_path)
    config.raw.set("upload", "delay_scale", "2.5")

    save_config(config)

    assert config_path.exists()
    assert load_config(config_path).upload.delay_scale == 2.5
