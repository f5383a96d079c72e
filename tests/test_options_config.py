"""
Tests for conversion options and hsline.yaml loading.
"""

import textwrap

import pytest

from hsline.config import CONFIG_FILE, find_config, load_options
from hsline.errors import ConfigError
from hsline.types import ConvertOptions


def write(path, text):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(text).lstrip(), encoding="utf-8")
    return path


class TestConvertOptions:

    def test_defaults(self):
        options = ConvertOptions()

        assert options.allow_parent_scope is False
        assert options.strict is False
        assert options.default_alias == "item"

    def test_from_dict(self):
        options = ConvertOptions.from_dict({"strict": True, "default_alias": "entry"})

        assert options.strict is True
        assert options.allow_parent_scope is False
        assert options.default_alias == "entry"
        assert ConvertOptions.from_dict(options.to_dict()) == options

    def test_unknown_key(self):
        with pytest.raises(ConfigError, match="Unknown option"):
            ConvertOptions.from_dict({"stirct": True})

    def test_wrong_type(self):
        with pytest.raises(ConfigError, match="expected bool"):
            ConvertOptions.from_dict({"strict": 1})

    def test_invalid_alias(self):
        with pytest.raises(ConfigError, match="default_alias"):
            ConvertOptions(default_alias="not valid")


class TestLoadOptions:

    def test_none_gives_defaults(self):
        assert load_options(None) == ConvertOptions()

    def test_missing_file_gives_defaults(self, tmp_path):
        assert load_options(tmp_path / CONFIG_FILE) == ConvertOptions()

    def test_load_yaml(self, tmp_path):
        path = write(tmp_path / CONFIG_FILE, """
            allow_parent_scope: true
            strict: true
        """)

        options = load_options(path)

        assert options.allow_parent_scope is True
        assert options.strict is True

    def test_empty_file_gives_defaults(self, tmp_path):
        path = write(tmp_path / CONFIG_FILE, "")

        assert load_options(path) == ConvertOptions()

    def test_invalid_yaml(self, tmp_path):
        path = write(tmp_path / CONFIG_FILE, "strict: [\n")

        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_options(path)

    def test_non_mapping(self, tmp_path):
        path = write(tmp_path / CONFIG_FILE, "- strict\n")

        with pytest.raises(ConfigError, match="must be a mapping"):
            load_options(path)


class TestFindConfig:

    def test_found_in_parent_directory(self, tmp_path):
        config = write(tmp_path / CONFIG_FILE, "strict: true\n")
        nested = tmp_path / "theme" / "sections"
        nested.mkdir(parents=True)

        assert find_config(nested) == config.resolve()

    def test_start_may_be_a_file(self, tmp_path):
        config = write(tmp_path / CONFIG_FILE, "strict: true\n")
        template = write(tmp_path / "card.hbs", "{{title}}")

        assert find_config(template) == config.resolve()
