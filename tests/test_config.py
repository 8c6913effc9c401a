from pathlib import Path

import pytest

from config import ProverConfig, SystemConfig, load_config, save_config


class TestConfig:

    def test_defaults(self):
        config = SystemConfig()
        assert config.prover_config.curve == "bn254"
        assert config.prover_config.max_choice == 3
        assert config.prover_config.validate_keys_on_load
        assert config.log_dir == Path("logs")

    def test_debug_mode_forces_debug_level(self):
        assert SystemConfig(enable_debug_mode=True).log_level == "DEBUG"

    def test_unsupported_curve(self):
        with pytest.raises(ValueError):
            ProverConfig(curve="bls12-381")

    def test_max_choice_must_be_positive(self):
        with pytest.raises(ValueError):
            ProverConfig(max_choice=0)

    def test_yaml_round_trip(self, tmp_path):
        path = tmp_path / "config.yaml"
        original = SystemConfig(
            prover_config=ProverConfig(max_choice=7, verify_after_prove=True),
            log_dir=tmp_path / "logs",
            log_level="WARNING")
        save_config(original, path)

        loaded = load_config(path)
        assert loaded.prover_config.max_choice == 7
        assert loaded.prover_config.verify_after_prove
        assert loaded.log_dir == tmp_path / "logs"
        assert loaded.log_level == "WARNING"

    def test_missing_file_uses_defaults(self, tmp_path):
        loaded = load_config(tmp_path / "absent.yaml")
        assert loaded.prover_config.max_choice == 3

    @pytest.mark.parametrize("content", ["prover: [unclosed", "- a\n- b\n"])
    def test_invalid_file_uses_defaults(self, tmp_path, content):
        path = tmp_path / "config.yaml"
        path.write_text(content)
        loaded = load_config(path)
        assert loaded.prover_config.max_choice == 3
