from pathlib import Path

import pytest

from sitegen.application.catalog_factory import build_catalog
from sitegen.application.config_loader import ConfigLoadError, load_config
from sitegen.application.config_models import SitegenConfig
from sitegen.domain.errors import ConfigurationError


def _write_config(root: Path, text: str) -> Path:
    path = root / ".sitegen" / "config.yml"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture
def dirs(tmp_path: Path) -> tuple[Path, Path]:
    project_root = tmp_path / "project"
    user_home = tmp_path / "user"
    project_root.mkdir()
    user_home.mkdir()
    return project_root, user_home


class TestLoadConfig:
    def test_defaults_when_no_files(self, dirs) -> None:
        project_root, user_home = dirs

        cfg = load_config(project_root=project_root, user_home=user_home)

        assert cfg.providers is None
        assert cfg.session.connect_timeout == 10.0
        assert cfg.session.response_timeout == 300.0
        assert cfg.session.max_tokens == 4000

    def test_project_overrides_user(self, dirs) -> None:
        project_root, user_home = dirs
        _write_config(user_home, "session:\n  temperature: 0.2\n  max_tokens: 100\n")
        _write_config(project_root, "session:\n  max_tokens: 2000\n")

        cfg = load_config(project_root=project_root, user_home=user_home)

        assert cfg.session.temperature == 0.2
        assert cfg.session.max_tokens == 2000

    def test_empty_file_is_ignored(self, dirs) -> None:
        project_root, user_home = dirs
        _write_config(project_root, "")

        assert load_config(project_root=project_root, user_home=user_home).providers is None

    def test_malformed_yaml(self, dirs) -> None:
        project_root, user_home = dirs
        path = _write_config(project_root, "session: [unclosed\n")

        with pytest.raises(ConfigLoadError, match="Malformed YAML") as exc_info:
            load_config(project_root=project_root, user_home=user_home)

        assert exc_info.value.path == path

    def test_root_must_be_mapping(self, dirs) -> None:
        project_root, user_home = dirs
        _write_config(project_root, "- a\n- b\n")

        with pytest.raises(ConfigLoadError, match="must be a mapping"):
            load_config(project_root=project_root, user_home=user_home)

    def test_unknown_key_rejected(self, dirs) -> None:
        project_root, user_home = dirs
        _write_config(project_root, "sesion:\n  max_tokens: 5\n")

        with pytest.raises(ConfigLoadError, match="Invalid configuration"):
            load_config(project_root=project_root, user_home=user_home)

    def test_non_positive_timeout_rejected(self, dirs) -> None:
        project_root, user_home = dirs
        _write_config(project_root, "session:\n  response_timeout: 0\n")

        with pytest.raises(ConfigLoadError):
            load_config(project_root=project_root, user_home=user_home)


class TestBuildCatalog:
    def test_builtin_catalog_when_unconfigured(self) -> None:
        catalog = build_catalog(SitegenConfig())

        assert catalog.names() == ["openrouter", "routeway", "megallm", "agentrouter"]

    def test_configured_providers_replace_builtins(self, dirs) -> None:
        project_root, user_home = dirs
        _write_config(
            project_root,
            """
providers:
  - name: local
    weight: 2
    credential_ref: LOCAL_KEY
    base_url: http://localhost:8080/v1/
    default_model: tiny
  - name: backup
    weight: 1
    credential_ref: BACKUP_KEY
    auth_header_name: X-API-Key
    base_url: https://backup.test/v1
    default_model: big
""",
        )

        catalog = build_catalog(load_config(project_root=project_root, user_home=user_home))

        assert catalog.names() == ["local", "backup"]
        assert catalog.get("local").base_url == "http://localhost:8080/v1"
        assert catalog.get("backup").auth_header_name == "X-API-Key"

    def test_empty_provider_list_is_configuration_error(self) -> None:
        with pytest.raises(ConfigurationError):
            build_catalog(SitegenConfig(providers=[]))
