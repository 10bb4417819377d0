import pytest

from sitegen.domain.errors import ConfigurationError
from sitegen.domain.models.provider_descriptor import ProviderDescriptor
from sitegen.domain.providers.catalog import ProviderCatalog


class TestProviderCatalogConstruction:
    def test_empty_catalog_is_configuration_error(self) -> None:
        with pytest.raises(ConfigurationError, match="at least one provider"):
            ProviderCatalog([])

    def test_duplicate_names_rejected(self, provider_factory) -> None:
        with pytest.raises(ConfigurationError, match="Duplicate provider name"):
            ProviderCatalog([provider_factory("A", 0.5), provider_factory("A", 0.2)])

    def test_keeps_declared_order(self, abcd_catalog: ProviderCatalog) -> None:
        assert abcd_catalog.names() == ["A", "B", "C", "D"]
        assert [p.name for p in abcd_catalog] == ["A", "B", "C", "D"]
        assert len(abcd_catalog) == 4

    def test_total_weight(self, abcd_catalog: ProviderCatalog) -> None:
        assert abcd_catalog.total_weight == pytest.approx(1.0)

    def test_get_and_contains(self, abcd_catalog: ProviderCatalog) -> None:
        assert abcd_catalog.get("C").weight == 0.2
        assert abcd_catalog.get("Z") is None
        assert "B" in abcd_catalog
        assert "Z" not in abcd_catalog


class TestFromDicts:
    def test_invalid_entry_wrapped_as_configuration_error(self) -> None:
        entries = [
            {
                "name": "bad",
                "weight": 0,
                "credential_ref": "BAD_KEY",
                "base_url": "https://bad.test",
                "default_model": "m",
            }
        ]
        with pytest.raises(ConfigurationError, match="Invalid provider entry bad"):
            ProviderCatalog.from_dicts(entries)

    def test_unknown_field_rejected(self) -> None:
        entries = [
            {
                "name": "x",
                "weight": 1,
                "credential_ref": "X_KEY",
                "base_url": "https://x.test",
                "default_model": "m",
                "api_key": "secret",
            }
        ]
        with pytest.raises(ConfigurationError):
            ProviderCatalog.from_dicts(entries)


class TestDefaultCatalog:
    def test_builtin_gateways(self) -> None:
        catalog = ProviderCatalog.default()

        assert catalog.names() == ["openrouter", "routeway", "megallm", "agentrouter"]
        assert [p.weight for p in catalog] == [0.4, 0.3, 0.2, 0.1]

    def test_agentrouter_uses_api_key_header(self) -> None:
        catalog = ProviderCatalog.default()

        assert catalog.get("agentrouter").auth_header_name == "X-API-Key"
        assert catalog.get("openrouter").auth_header_name == "Authorization"
        assert catalog.get("openrouter").credential_ref == "OPENROUTER_API_KEY"


class TestProviderDescriptor:
    def test_is_immutable(self, provider_factory) -> None:
        p = provider_factory("A", 0.4)
        with pytest.raises(Exception):
            p.weight = 0.9  # type: ignore[misc]

    @pytest.mark.parametrize("weight", [0, -0.1, float("inf"), float("nan")])
    def test_weight_must_be_finite_positive(self, provider_factory, weight: float) -> None:
        with pytest.raises(ValueError):
            provider_factory("A", weight)

    def test_base_url_trailing_slash_stripped(self, provider_factory) -> None:
        p = provider_factory("A", 1, base_url="https://a.test/v1/")
        assert p.base_url == "https://a.test/v1"

    def test_blank_name_rejected(self) -> None:
        with pytest.raises(ValueError):
            ProviderDescriptor(
                name="  ",
                weight=1,
                credential_ref="K",
                base_url="https://a.test",
                default_model="m",
            )
