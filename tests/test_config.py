import json

import pytest

from ngtranslate_extract.exceptions import ConfigError
from ngtranslate_extract.utils.config import ConfigManager, MarkupSettings


def test_missing_file_uses_defaults(tmp_path):
    config = ConfigManager(str(tmp_path / "missing.json"))
    assert config.load_config() is False
    assert config.markup_settings == MarkupSettings()
    assert config.script_settings.service_name == "$translate"
    assert config.output_settings.asset_name == "translations.js"


def test_load_partial_sections(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({
        "script": {"service_name": "translator"},
        "output": {"workers": 1, "indent": 2},
    }), encoding="utf-8")

    config = ConfigManager(str(path))
    assert config.load_config() is True
    assert config.script_settings.service_name == "translator"
    assert config.script_settings.register_object == "i18n"
    assert config.output_settings.workers == 1
    assert config.output_settings.indent == 2


def test_save_and_reload(tmp_path):
    path = tmp_path / "nested" / "config.json"
    config = ConfigManager(str(path))
    config.markup_settings.suppress_attribute = "no-dynamic-check"
    assert config.save_config()

    reloaded = ConfigManager(str(path))
    reloaded.load_config()
    assert reloaded.to_dict() == config.to_dict()


@pytest.mark.parametrize("content", [
    '{"markup": {"unknown_marker": "x"}}',
    '{"plugins": {}}',
    '{"output": []}',
    '[1, 2]',
    '{broken',
])
def test_invalid_config_raises(tmp_path, content):
    path = tmp_path / "config.json"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(ConfigError):
        ConfigManager(str(path)).load_config()
