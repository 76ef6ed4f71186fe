import pytest

from somana_agent.config import (
    Config,
    HostRegistrationConfig,
    load_config,
    save_config,
)


def test_missing_file_gives_defaults(tmp_path):
    config = load_config(tmp_path / "absent.yaml")
    assert config.host_registration.somana_url == "http://localhost:8081"
    assert config.host_registration.host_id == ""


def test_partial_file_keeps_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text('host_registration:\n  host_id: "12"\n', encoding="utf-8")
    config = load_config(path)
    assert config.host_registration.host_id == "12"
    assert config.host_registration.somana_url == "http://localhost:8081"


def test_numeric_host_id_read_as_string(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("host_registration:\n  host_id: 42\n", encoding="utf-8")
    assert load_config(path).host_registration.host_id == "42"


def test_save_and_load_round_trip(tmp_path):
    path = tmp_path / "nested" / "dir" / "config.yaml"
    original = Config(HostRegistrationConfig(somana_url="http://somana.example.com:9000", host_id="5"))
    save_config(original, path)
    assert path.exists()
    assert load_config(path) == original


def test_to_dict_layout():
    config = Config()
    assert config.to_dict() == {
        "host_registration": {"somana_url": "http://localhost:8081", "host_id": ""}
    }


def test_empty_file_is_an_error(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("", encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(path)


def test_non_mapping_file_is_an_error(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(path)


def test_invalid_section_is_an_error(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("host_registration:\n  somana_url: [1, 2]\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(path)