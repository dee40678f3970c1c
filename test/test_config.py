# Author: PB
# Date: 2026-10-19
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ---
# test/test_config.py

"""Tests for options resolution and the toml config file."""

from pathlib import Path

import pytest

from s5_client.config import (
    DEFAULT_TUS_RETRY_DELAYS,
    TUS_CHUNK_SIZE,
    ClientConfig,
    DownloadOptions,
    MetadataOptions,
    UploadOptions,
    _deep_merge,
    _load_api_key,
    load_config,
)
from s5_client.errors import InvalidArgument


class TestUploadOptionsDefaults:
    def test_defaults(self):
        opts = UploadOptions()
        assert opts.endpoint_upload == "/s5/upload"
        assert opts.endpoint_directory_upload == "/s5/upload/directory"
        assert opts.endpoint_large_upload == "/s5/upload/tus"
        assert opts.chunk_size_multiplier == 3
        assert opts.large_file_size == TUS_CHUNK_SIZE
        assert opts.num_parallel_uploads == 2
        assert opts.stagger_percent == 50
        assert opts.retry_delays == DEFAULT_TUS_RETRY_DELAYS

    def test_chunk_size_constant(self):
        assert TUS_CHUNK_SIZE == 41943040

    def test_other_defaults(self):
        assert DownloadOptions().endpoint_download == "/"
        assert DownloadOptions().subdomain is False
        assert MetadataOptions().endpoint_get_metadata == "/s5/metadata"


class TestResolve:
    def test_layers_merge_left_to_right(self):
        opts = UploadOptions.resolve(
            {"num_parallel_uploads": 4, "custom_filename": "client.txt"},
            {"custom_filename": "call.txt"},
        )
        assert opts.num_parallel_uploads == 4
        assert opts.custom_filename == "call.txt"
        assert opts.chunk_size_multiplier == 3

    def test_client_layer_ignores_other_options(self):
        opts = UploadOptions.resolve({"subdomain": True, "s5_api_key": "k"}, None)
        assert opts.s5_api_key == "k"
        assert not hasattr(opts, "subdomain")

    def test_call_layer_rejects_unknown(self):
        with pytest.raises(InvalidArgument, match="Unknown option 'subdomain'"):
            UploadOptions.resolve({}, {"subdomain": True})

    def test_explicit_none_disables_stagger(self):
        opts = UploadOptions.resolve({"stagger_percent": 20}, {"stagger_percent": None})
        assert opts.stagger_percent is None

    def test_resolve_returns_new_frozen_value(self):
        opts = UploadOptions.resolve()
        with pytest.raises(Exception):
            opts.num_parallel_uploads = 5

    def test_retry_delays_list_becomes_tuple(self):
        opts = UploadOptions.resolve(None, {"retry_delays": [0, 100]})
        assert opts.retry_delays == (0, 100)


class TestUploadOptionsValidate:
    def test_defaults_valid(self):
        UploadOptions().validate()

    @pytest.mark.parametrize("overrides", [
        {"num_parallel_uploads": 0},
        {"chunk_size_multiplier": 0},
        {"large_file_size": 0},
        {"stagger_percent": 101},
        {"stagger_percent": -1},
        {"retry_delays": (0, -5)},
        {"retry_delays": ("soon",)},
    ])
    def test_invalid(self, overrides):
        with pytest.raises(InvalidArgument):
            UploadOptions(**overrides).validate()

    def test_stagger_none_is_valid(self):
        UploadOptions(stagger_percent=None).validate()


class TestClientConfig:
    def test_custom_options(self):
        config = ClientConfig(
            portal_url="https://p.example",
            s5_api_key="secret",
            upload={"num_parallel_uploads": 3},
            download={"subdomain": True},
        )
        assert config.custom_options() == {
            "s5_api_key": "secret",
            "num_parallel_uploads": 3,
            "subdomain": True,
        }

    def test_validate_ok(self):
        config = ClientConfig(portal_url="https://p.example", s5_api_key="k")
        assert config.validate() == ([], [])

    def test_validate_unknown_options(self):
        config = ClientConfig(upload={"bogus": 1}, download={"also_bogus": 2})
        errors, warnings = config.validate()
        assert "unknown upload option 'bogus'" in errors
        assert "unknown download option 'also_bogus'" in errors
        assert "no portal api key configured" in warnings

    @pytest.mark.parametrize("value", [0, -2, 1.5, "4"])
    def test_validate_bad_parallel_uploads(self, value):
        errors, _ = ClientConfig(upload={"num_parallel_uploads": value}).validate()
        assert errors == [f"num_parallel_uploads must be an integer >= 1, was '{value}'"]

    def test_validate_bad_stagger_with_unknown_option(self):
        errors, _ = ClientConfig(upload={"stagger_percent": 150, "bogus": 1}).validate()
        assert errors == [
            "unknown upload option 'bogus'",
            "stagger_percent must be between 0 and 100, was '150'",
        ]


class TestDeepMerge:
    def test_sections_merge(self):
        base = {"portal": {"url": "https://a", "user_agent": "x"}, "upload": {"a": 1}}
        override = {"portal": {"url": "https://b"}}
        merged = _deep_merge(base, override)
        assert merged["portal"] == {"url": "https://b", "user_agent": "x"}
        assert merged["upload"] == {"a": 1}

    def test_non_dict_replaced(self):
        assert _deep_merge({"a": 1}, {"a": 2}) == {"a": 2}


class TestLoadApiKey:
    def test_reads_key(self, tmp_path):
        key_file = tmp_path / "key"
        key_file.write_text("  abc123\n")
        assert _load_api_key(key_file) == "abc123"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            _load_api_key(tmp_path / "nope")

    def test_empty_file(self, tmp_path):
        key_file = tmp_path / "key"
        key_file.write_text("\n")
        with pytest.raises(ValueError, match="empty"):
            _load_api_key(key_file)


class TestLoadConfig:
    def test_full_config(self, tmp_path):
        key_file = tmp_path / "api_key"
        key_file.write_text("secret\n")
        common = tmp_path / "common.toml"
        common.write_text(
            '[portal]\n'
            'url = "https://common.example"\n'
            'user_agent = "s5-test"\n'
        )
        config_file = tmp_path / "config.toml"
        config_file.write_text(
            '[portal]\n'
            'url = "https://s5.example"\n'
            f'api_key_file = "{key_file}"\n'
            '\n'
            '[upload]\n'
            'num_parallel_uploads = 4\n'
            'stagger_percent = 25\n'
            'retry_delays = [0, 1000]\n'
            '\n'
            '[download]\n'
            'subdomain = true\n'
        )

        config = load_config(common_path=common, config_path=config_file)

        assert config.portal_url == "https://s5.example"
        assert config.custom_user_agent == "s5-test"
        assert config.s5_api_key == "secret"
        assert config.upload == {
            "num_parallel_uploads": 4,
            "stagger_percent": 25,
            "retry_delays": [0, 1000],
        }
        assert config.download == {"subdomain": True}

    def test_common_is_optional(self, tmp_path):
        config_file = tmp_path / "config.toml"
        config_file.write_text('[portal]\nurl = "https://s5.example"\n')
        config = load_config(common_path=tmp_path / "missing.toml", config_path=config_file)
        assert config.portal_url == "https://s5.example"
        assert config.s5_api_key == ""
        assert config.api_key == ""

    def test_basic_auth_key_file(self, tmp_path):
        key_file = tmp_path / "basic_auth_key"
        key_file.write_text("hunter2\n")
        config_file = tmp_path / "config.toml"
        config_file.write_text(f'[portal]\nbasic_auth_key_file = "{key_file}"\n')

        config = load_config(common_path=tmp_path / "a.toml", config_path=config_file)

        assert config.api_key == "hunter2"
        assert config.s5_api_key == ""
        assert config.custom_options() == {"api_key": "hunter2"}

    def test_missing_config_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="Config file not found"):
            load_config(common_path=tmp_path / "a.toml", config_path=tmp_path / "b.toml")

    def test_default_portal(self, tmp_path):
        config_file = tmp_path / "config.toml"
        config_file.write_text("")
        config = load_config(common_path=tmp_path / "a.toml", config_path=config_file)
        assert config.portal_url == "https://localhost:5522"
