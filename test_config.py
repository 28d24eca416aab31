from omni_mount.config import DEFAULT_USER_AGENT, Settings


def _clear(monkeypatch):
    for key in (
        "OMNI_MOUNT_CONFIG",
        "OMNI_MOUNT_DEFAULT_DIR",
        "OMNI_MOUNT_USER_AGENT",
        "OMNI_MOUNT_FETCH_TIMEOUT",
        "OMNI_MOUNT_DASHBOARD",
    ):
        monkeypatch.delenv(key, raising=False)


def test_defaults_are_relative_to_cwd(monkeypatch, tmp_path):
    _clear(monkeypatch)

    settings = Settings.from_env(cwd=tmp_path)

    assert settings.config_path == tmp_path.resolve() / "config.json"
    assert settings.default_dir == tmp_path.resolve() / "test-resources"
    assert settings.user_agent == DEFAULT_USER_AGENT
    assert settings.fetch_timeout is None
    assert settings.dashboard is True


def test_environment_overrides(monkeypatch, tmp_path):
    _clear(monkeypatch)
    monkeypatch.setenv("OMNI_MOUNT_CONFIG", str(tmp_path / "state" / "mounts.json"))
    monkeypatch.setenv("OMNI_MOUNT_DEFAULT_DIR", str(tmp_path / "notes"))
    monkeypatch.setenv("OMNI_MOUNT_USER_AGENT", "tests/1.0")
    monkeypatch.setenv("OMNI_MOUNT_FETCH_TIMEOUT", "2.5")
    monkeypatch.setenv("OMNI_MOUNT_DASHBOARD", "off")

    settings = Settings.from_env(cwd=tmp_path)

    assert settings.config_path == (tmp_path / "state" / "mounts.json").resolve()
    assert settings.default_dir == (tmp_path / "notes").resolve()
    assert settings.user_agent == "tests/1.0"
    assert settings.fetch_timeout == 2.5
    assert settings.dashboard is False


def test_invalid_timeout_means_no_timeout(monkeypatch, tmp_path):
    _clear(monkeypatch)
    for raw in ("soon", "-1", "0", " "):
        monkeypatch.setenv("OMNI_MOUNT_FETCH_TIMEOUT", raw)
        assert Settings.from_env(cwd=tmp_path).fetch_timeout is None
