import json

from gamelauncher import create_app
from gamelauncher.utils import host_platform


def test_unknown_platform_setting_falls_back_to_host(tmp_path):
    (tmp_path / "settings.json").write_text(json.dumps({"platform": "amiga"}), encoding="utf-8")
    app = create_app(str(tmp_path))
    assert app.extensions["prober"].platform == host_platform()
    assert app.extensions["supervisor"].resolver.platform == host_platform()


def test_non_string_platform_setting(tmp_path):
    (tmp_path / "settings.json").write_text(json.dumps({"platform": 7}), encoding="utf-8")
    app = create_app(str(tmp_path))
    assert app.extensions["prober"].platform == host_platform()


def test_platform_setting_is_honoured(tmp_path):
    (tmp_path / "settings.json").write_text(json.dumps({"platform": "Windows"}), encoding="utf-8")
    app = create_app(str(tmp_path))
    assert app.extensions["prober"].platform == "windows"
