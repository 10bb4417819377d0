"""Tests for weighted primary selection and deterministic fallback."""

import random
from collections import Counter

import pytest

from sitegen.domain.errors import ConfigurationError
from sitegen.domain.providers.catalog import ProviderCatalog
from sitegen.domain.providers.random_source import SequenceRandom
from sitegen.domain.providers.selector import ProviderSelector


class TestPickWeighted:
    @pytest.mark.parametrize(
        "draw,expected",
        [
            (0.0, "A"),
            (0.39, "A"),
            (0.41, "B"),
            (0.65, "B"),
            (0.75, "C"),
            (0.89, "C"),
            (0.95, "D"),
            (0.999, "D"),
        ],
    )
    def test_draw_maps_to_cumulative_band(
        self, abcd_catalog: ProviderCatalog, draw: float, expected: str
    ) -> None:
        selector = ProviderSelector(SequenceRandom([draw]))

        assert selector.pick_weighted(abcd_catalog).name == expected

    def test_distribution_converges_to_weights(self, abcd_catalog: ProviderCatalog) -> None:
        selector = ProviderSelector(random.Random(1234))
        n = 20_000

        counts = Counter(selector.pick_weighted(abcd_catalog).name for _ in range(n))

        for provider in abcd_catalog:
            assert counts[provider.name] / n == pytest.approx(provider.weight, abs=0.02)

    def test_weights_need_not_sum_to_one(self, provider_factory) -> None:
        catalog = ProviderCatalog([provider_factory("X", 3), provider_factory("Y", 1)])
        selector = ProviderSelector(SequenceRandom([0.74, 0.76]))

        assert selector.pick_weighted(catalog).name == "X"
        assert selector.pick_weighted(catalog).name == "Y"

    def test_single_provider_always_picked(self, provider_factory) -> None:
        catalog = ProviderCatalog([provider_factory("only", 0.7)])
        selector = ProviderSelector(SequenceRandom([0.0, 0.5, 0.999]))

        assert [selector.pick_weighted(catalog).name for _ in range(3)] == ["only"] * 3

    def test_float_drift_resolves_to_first_entry(self, provider_factory) -> None:
        class OverOne:
            def random(self) -> float:
                return 1.0

        catalog = ProviderCatalog([provider_factory("A", 0.1), provider_factory("B", 0.2)])

        assert ProviderSelector(OverOne()).pick_weighted(catalog).name == "A"

    def test_empty_catalog_is_configuration_error(self) -> None:
        class EmptyCatalog:
            def __iter__(self):
                return iter(())

        with pytest.raises(ConfigurationError):
            ProviderSelector(SequenceRandom([0.5])).pick_weighted(EmptyCatalog())  # type: ignore[arg-type]


class TestFallbackOrder:
    def test_excludes_failed_and_sorts_by_weight(self, abcd_catalog: ProviderCatalog) -> None:
        order = ProviderSelector.fallback_order(abcd_catalog, "B")

        assert [p.name for p in order] == ["A", "C", "D"]

    def test_sorts_regardless_of_declared_order(self, provider_factory) -> None:
        catalog = ProviderCatalog(
            [provider_factory("low", 0.1), provider_factory("high", 0.6), provider_factory("mid", 0.3)]
        )

        order = ProviderSelector.fallback_order(catalog, "none")

        assert [p.name for p in order] == ["high", "mid", "low"]

    def test_ties_keep_declared_order(self, provider_factory) -> None:
        catalog = ProviderCatalog(
            [
                provider_factory("P", 0.2),
                provider_factory("Q", 0.5),
                provider_factory("R", 0.2),
                provider_factory("S", 0.2),
            ]
        )

        order = ProviderSelector.fallback_order(catalog, "Q")

        assert [p.name for p in order] == ["P", "R", "S"]

    def test_single_provider_catalog_has_no_fallback(self, provider_factory) -> None:
        catalog = ProviderCatalog([provider_factory("only", 1)])

        assert ProviderSelector.fallback_order(catalog, "only") == []

    def test_is_idempotent(self, abcd_catalog: ProviderCatalog) -> None:
        first = ProviderSelector.fallback_order(abcd_catalog, "A")
        second = ProviderSelector.fallback_order(abcd_catalog, "A")

        assert first == second
        assert [p.name for p in first] == ["B", "C", "D"]


class TestNextProvider:
    def test_head_of_fallback_order(self, abcd_catalog: ProviderCatalog) -> None:
        selector = ProviderSelector(SequenceRandom([]))

        assert selector.next_provider(abcd_catalog, "A").name == "B"
        assert selector.next_provider(abcd_catalog, "C").name == "A"

    def test_weighted_pick_when_nothing_failed(self, abcd_catalog: ProviderCatalog) -> None:
        selector = ProviderSelector(SequenceRandom([0.8]))

        assert selector.next_provider(abcd_catalog, None).name == "C"

    def test_single_provider_repicks(self, provider_factory) -> None:
        catalog = ProviderCatalog([provider_factory("only", 1)])
        selector = ProviderSelector(SequenceRandom([0.3]))

        assert selector.next_provider(catalog, "only").name == "only"

    def test_skips_already_tried_providers(self, abcd_catalog: ProviderCatalog) -> None:
        selector = ProviderSelector(SequenceRandom([]))

        assert selector.next_provider(abcd_catalog, "B", tried={"A", "B"}).name == "C"
        assert selector.next_provider(abcd_catalog, "C", tried={"A", "B", "C"}).name == "D"

    def test_repicks_by_weight_once_all_tried(self, abcd_catalog: ProviderCatalog) -> None:
        selector = ProviderSelector(SequenceRandom([0.5]))

        assert selector.next_provider(abcd_catalog, "D", tried={"A", "B", "C", "D"}).name == "B"
