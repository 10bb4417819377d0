from pathlib import Path

import pytest

from sitegen.domain.models.provider_descriptor import ProviderDescriptor
from sitegen.domain.providers.catalog import ProviderCatalog

PROVIDER_ENV_VARS = (
    "OPENROUTER_API_KEY",
    "ROUTEWAY_API_KEY",
    "MEGALLM_API_KEY",
    "AGENTROUTER_API_KEY",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep developer machine keys and config out of tests.

    If a test needs a key, it should set it explicitly via monkeypatch.
    """
    for var in PROVIDER_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))


@pytest.fixture
def results_root(tmp_path: Path) -> Path:
    """Isolated results root; tests must not write into .sitegen/results."""
    return tmp_path / "results"


def make_provider(name: str, weight: float, **overrides) -> ProviderDescriptor:
    fields = {
        "name": name,
        "weight": weight,
        "credential_ref": f"{name.upper()}_KEY",
        "base_url": f"https://{name}.example.test/v1",
        "default_model": f"{name}-model",
    }
    fields.update(overrides)
    return ProviderDescriptor(**fields)


@pytest.fixture
def abcd_catalog() -> ProviderCatalog:
    """A=0.4, B=0.3, C=0.2, D=0.1 in declared order."""
    return ProviderCatalog(
        [
            make_provider("A", 0.4),
            make_provider("B", 0.3),
            make_provider("C", 0.2),
            make_provider("D", 0.1),
        ]
    )


@pytest.fixture
def provider_factory():
    return make_provider
