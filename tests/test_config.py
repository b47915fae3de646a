"""Tests for configuration loading and validation."""

import os

import pytest
import yaml

from codon_structure.exceptions import ConfigError
from codon_structure.utils.config_loader import (
    create_example_config,
    expand_paths,
    get_default_config,
    load_config,
    merge_configs,
    validate_config,
    validate_file_paths,
)


def _write(path, data):
    path.write_text(yaml.safe_dump(data))
    return str(path)


class TestLoadConfig:
    def test_partial_config_is_filled_with_defaults(self, tmp_path):
        path = _write(tmp_path / "c.yaml", {"genes": "g.txt", "analysis": {"radius": 8}})
        config = load_config(path)
        assert config["analysis"]["radius"] == 8
        assert config["analysis"]["frame_policy"] == "warn"
        assert config["source"]["type"] == "local"

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError):
            load_config(str(tmp_path / "missing.yaml"))

    def test_bad_yaml(self, tmp_path):
        path = tmp_path / "c.yaml"
        path.write_text("genes: [unclosed\n")
        with pytest.raises(ConfigError):
            load_config(str(path))

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "c.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigError):
            load_config(str(path))

    def test_example_config_round_trip(self, tmp_path):
        path = tmp_path / "sub" / "example.yaml"
        create_example_config(str(path))
        assert load_config(str(path)) == get_default_config()


class TestValidateConfig:
    def test_defaults_are_valid(self):
        validate_config(get_default_config())

    @pytest.mark.parametrize("override", [
        {"analysis": {"frame_policy": "ignore"}},
        {"analysis": {"radius": -1}},
        {"analysis": {"radius": "wide"}},
        {"source": {"type": "ftp"}},
        {"source": {"cache_size": -5}},
        {"source": {"timeout": 0}},
        {"source": {"domain_classification": "pfam"}},
        {"source": {"data_dir": None}},
        {"weights": {"species": None, "table": None}},
        {"figure_format": "gif"},
    ])
    def test_invalid_values(self, override):
        config = merge_configs(get_default_config(), override)
        with pytest.raises(ConfigError):
            validate_config(config)

    def test_remote_source_needs_no_data_dir(self):
        config = merge_configs(get_default_config(), {"source": {"type": "remote", "data_dir": None}})
        validate_config(config)

    def test_missing_key(self):
        config = get_default_config()
        del config["genes"]
        with pytest.raises(ConfigError, match="genes"):
            validate_config(config)


def test_merge_configs_does_not_mutate_base():
    base = get_default_config()
    merged = merge_configs(base, {"source": {"type": "remote"}})
    assert merged["source"]["type"] == "remote"
    assert merged["source"]["cache_size"] == 256
    assert base["source"]["type"] == "local"


def test_expand_paths(tmp_path):
    config = merge_configs(get_default_config(), {"weights": {"table": "my.codons"}})
    expanded = expand_paths(config, str(tmp_path))
    assert expanded["genes"] == os.path.join(str(tmp_path), "genes.txt")
    assert expanded["weights"]["table"] == os.path.join(str(tmp_path), "my.codons")
    assert expanded["source"]["data_dir"] == os.path.join(str(tmp_path), "data")
    assert config["genes"] == "genes.txt"


def test_validate_file_paths(tmp_path):
    (tmp_path / "genes.txt").write_text("g1\n")
    config = expand_paths(get_default_config(), str(tmp_path))
    missing = validate_file_paths(config)
    assert missing == [os.path.join(str(tmp_path), "data")]
