import pytest

import keal.config as config_module
from keal.config import (
    Config,
    FrontendConfig,
    Override,
    config,
    init_config,
    parse_bool,
    parse_float,
    parse_list,
)


class RecordingFrontend(FrontendConfig):
    def __init__(self, claimed):
        self.claimed = tuple(claimed)
        self.fields = []

    def sections(self):
        return self.claimed

    def add_field(self, name, value):
        self.fields.append((name, value))


def test_parse_bool():
    assert parse_bool("true") is True
    assert parse_bool("false") is False
    with pytest.raises(ValueError, match="invalid boolean"):
        parse_bool("True")


def test_parse_float():
    assert parse_float("1.5") == 1.5
    with pytest.raises(ValueError, match="couldn't parse number"):
        parse_float("abc")
    with pytest.raises(ValueError):
        parse_float(" 1.5")
    with pytest.raises(ValueError):
        parse_float("1_0")


def test_parse_list_keeps_items_as_written():
    assert parse_list("a, b,c") == ["a", " b", "c"]
    assert parse_list("solo") == ["solo"]


def test_keal_section_fields():
    cfg = Config()
    cfg.add_from_string(
        FrontendConfig(),
        "[keal]\nfont = Mono\nfont_size = 1.5\nicon_theme = A,B\n"
        "usage_frequency = true\nterminal_path = term\n"
        "placeholder_text = search\ndefault_plugins = app,ls\nunknown = x\n",
    )
    assert cfg.font == "Mono"
    assert cfg.font_size == 1.5
    assert cfg.icon_theme == ["A", "B"]
    assert cfg.usage_frequency is True
    assert cfg.terminal_path == "term"
    assert cfg.placeholder_text == "search"
    assert cfg.default_plugins == ["app", "ls"]


def test_bad_field_keeps_value_and_reports(capsys):
    cfg = Config(font_size=1.5)
    cfg.add_from_string(FrontendConfig(), "[keal]\nfont_size = big\nusage_frequency = yes\n")
    assert cfg.font_size == 1.5
    assert cfg.usage_frequency is False
    err = capsys.readouterr().err
    assert "error with field `font_size`: couldn't parse number: `big`" in err
    assert "error with field `usage_frequency`: invalid boolean: `yes`" in err


def test_frontend_receives_claimed_sections():
    frontend = RecordingFrontend(["keal", "colors"])
    cfg = Config()
    cfg.add_from_string(frontend, "[keal]\nfont = Mono\n[colors]\ntext = ffffff\n")
    assert cfg.font == "Mono"
    assert frontend.fields == [("font", "Mono"), ("text", "ffffff")]


def test_plugin_overrides_and_configs(capsys):
    cfg = Config()
    cfg.add_from_string(
        FrontendConfig(),
        "[Session Manager.plugin]\nprefix = s\ncomment = bye\nother = 1\n"
        "[Session Manager.config]\nreboot = my-reboot\n"
        "[foo.bar]\nx = 1\n"
        "[nodot]\ny = 2\n",
    )
    assert cfg.plugin_overrides == {
        "Session Manager": Override(prefix="s", icon=None, comment="bye")
    }
    assert cfg.plugin_configs == {"Session Manager": {"reboot": "my-reboot"}}
    err = capsys.readouterr().err
    assert "unknown plugin configuration kind: `foo.bar`" in err
    assert "nodot" not in err


def test_later_text_overrides_earlier():
    cfg = Config()
    frontend = FrontendConfig()
    cfg.add_from_string(frontend, "[keal]\nfont = A\nterminal_path = t\n")
    cfg.add_from_string(frontend, "[keal]\nfont = B\n")
    assert cfg.font == "B"
    assert cfg.terminal_path == "t"


def test_load_reads_user_file(monkeypatch, tmp_path):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    (tmp_path / "keal").mkdir()
    (tmp_path / "keal" / "config.ini").write_text(
        "[keal]\nplaceholder_text = type here\n", encoding="utf-8"
    )
    cfg = Config.load(FrontendConfig())
    assert cfg.placeholder_text == "type here"


def test_load_without_file(monkeypatch, tmp_path):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    assert Config.load(FrontendConfig()) == Config()


def test_load_without_home(monkeypatch):
    monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
    monkeypatch.delenv("HOME", raising=False)
    assert Config.load(FrontendConfig()) == Config()


def test_config_before_init(monkeypatch):
    monkeypatch.setattr(config_module, "_current", None)
    with pytest.raises(RuntimeError):
        config()


def test_init_config_once(monkeypatch, tmp_path):
    monkeypatch.setattr(config_module, "_current", None)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    (tmp_path / "keal").mkdir()
    path = tmp_path / "keal" / "config.ini"
    path.write_text("[keal]\nfont = First\n", encoding="utf-8")
    first = init_config(FrontendConfig())
    path.write_text("[keal]\nfont = Second\n", encoding="utf-8")
    second = init_config(FrontendConfig())
    assert second is first
    assert config().font == "First"