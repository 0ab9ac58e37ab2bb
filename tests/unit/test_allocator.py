"""Unit tests for the deposit allocator."""

from collections import defaultdict
from decimal import Decimal

import pytest

from src.core.models import RiskTier, YieldRouterConfig
from src.engine.allocator import YieldAllocator
from src.engine.scorer import OpportunityScorer


@pytest.fixture
def allocator() -> YieldAllocator:
    return YieldAllocator()


class TestGuards:
    """Degenerate inputs return the zero result."""

    def test_empty_catalog(self, allocator):
        result = allocator.allocate([], Decimal("1000"), 5, YieldRouterConfig())

        assert result.opportunities == []
        assert result.total_apy == 0
        assert result.weighted_apy == 0
        assert result.diversification_score == 0
        assert result.risk_score == 2

    @pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-100")])
    def test_non_positive_amount(self, allocator, sample_opportunities, amount):
        result = allocator.allocate(sample_opportunities, amount)
        assert result.is_empty
        assert result.risk_score == 2

    @pytest.mark.parametrize("max_positions", [0, -1])
    def test_non_positive_max_positions(self, allocator, sample_opportunities, max_positions):
        result = allocator.allocate(sample_opportunities, Decimal("1000"), max_positions)
        assert result.is_empty


class TestSplit:
    """Tests for the geometric split."""

    def test_position_share(self):
        assert YieldAllocator.position_share(0) == Decimal("0.35")
        assert YieldAllocator.position_share(1) == Decimal("0.2625")
        assert YieldAllocator.position_share(2) == Decimal("0.196875")

    def test_position_share_capped_by_max_allocation(self):
        assert YieldAllocator.position_share(0, Decimal("0.2")) == Decimal("0.2")
        assert YieldAllocator.position_share(2, Decimal("0.2")) == Decimal("0.196875")

    def test_three_chains(self, allocator, opportunity_factory):
        ranked = [
            opportunity_factory("a", apy="20", risk=RiskTier.LOW, chain="arbitrum"),
            opportunity_factory("b", apy="10", risk=RiskTier.MEDIUM, chain="base"),
            opportunity_factory("c", apy="5", risk=RiskTier.LOW, chain="optimism"),
        ]
        result = allocator.allocate(ranked, Decimal("1000"))

        assert [o.allocated_amount for o in result.opportunities] == [
            Decimal("350"), Decimal("262.5"), Decimal("196.875"),
        ]
        assert result.allocated_percent == Decimal("0.809375")
        assert result.unallocated_amount == Decimal("190.625")
        assert result.unallocated_percent == Decimal("0.190625")
        assert result.total_apy == Decimal("20")
        assert result.weighted_apy == Decimal("20") * Decimal("0.35") + Decimal("10") * Decimal("0.2625") + Decimal("5") * Decimal("0.196875")
        assert result.diversification_score == Decimal("100")
        assert result.risk_score == pytest.approx(Decimal(4) / Decimal(3))

    def test_input_not_mutated(self, allocator, opportunity_factory):
        ranked = [opportunity_factory("a", chain="arbitrum")]
        allocator.allocate(ranked, Decimal("1000"))

        assert ranked[0].allocation_percent is None
        assert ranked[0].allocated_amount is None

    def test_max_positions(self, allocator, opportunity_factory):
        chains = ["arbitrum", "base", "optimism", "polygon"]
        ranked = [opportunity_factory(f"o{i}", chain=chains[i % 4]) for i in range(10)]

        result = allocator.allocate(ranked, Decimal("1000"), max_positions=3)
        assert len(result.opportunities) == 3

    def test_five_positions_clamped_to_remainder(self, allocator, opportunity_factory):
        chains = ["arbitrum", "base", "optimism", "polygon", "ethereum"]
        ranked = [
            opportunity_factory(f"o{i}", risk=RiskTier.LOW, chain=chain)
            for i, chain in enumerate(chains)
        ]
        result = allocator.allocate(ranked, Decimal("1000"), max_positions=5)

        # 35 + 26.25 + 19.6875 + 14.765625 leaves 4.296875% for the fifth
        assert [o.allocation_percent for o in result.opportunities] == [
            Decimal("0.35"), Decimal("0.2625"), Decimal("0.196875"),
            Decimal("0.14765625"), Decimal("0.04296875"),
        ]
        assert result.allocated_percent == Decimal("1")
        assert result.allocated_amount == Decimal("1000")
        assert result.unallocated_percent == 0
        assert result.unallocated_amount == 0

    def test_four_chains_default_positions(self, allocator, opportunity_factory):
        chains = ["arbitrum", "base", "optimism", "polygon"]
        ranked = [opportunity_factory(f"o{i}", chain=chains[i % 4]) for i in range(8)]

        result = allocator.allocate(ranked, Decimal("1000"))

        assert len(result.opportunities) == 5
        assert result.allocated_percent <= 1
        assert result.allocated_amount <= result.total_amount
        assert result.unallocated_amount == result.total_amount * result.unallocated_percent
        assert result.unallocated_percent >= 0

    def test_stops_once_fully_allocated(self, allocator, opportunity_factory):
        chains = ["arbitrum", "base", "optimism", "polygon", "ethereum", "bsc", "fantom"]
        ranked = [opportunity_factory(f"o{i}", chain=chain) for i, chain in enumerate(chains)]

        result = allocator.allocate(ranked, Decimal("1000"), max_positions=7)

        assert len(result.opportunities) == 5
        assert result.allocated_percent == Decimal("1")

    def test_max_allocation_from_config(self, allocator, opportunity_factory):
        ranked = [
            opportunity_factory("a", chain="arbitrum"),
            opportunity_factory("b", chain="base"),
        ]
        config = YieldRouterConfig(max_allocation=Decimal("0.2"))
        result = allocator.allocate(ranked, Decimal("1000"), config=config)

        assert [o.allocation_percent for o in result.opportunities] == [Decimal("0.2"), Decimal("0.2")]


class TestCaps:
    """Chain and high-risk caps."""

    def test_chain_cap_skips_to_next_chain(self, allocator, opportunity_factory):
        ranked = [
            opportunity_factory("arb-1", chain="arbitrum"),
            opportunity_factory("arb-2", chain="arbitrum"),
            opportunity_factory("base-1", chain="base"),
        ]
        result = allocator.allocate(ranked, Decimal("1000"))

        assert [o.id for o in result.opportunities] == ["arb-1", "base-1"]
        assert result.opportunities[1].allocated_amount == Decimal("262.5")
        assert result.diversification_score == pytest.approx(Decimal(200) / Decimal(3))

    def test_single_chain_catalog(self, allocator, opportunity_factory):
        ranked = [opportunity_factory(f"arb-{i}", chain="arbitrum") for i in range(5)]
        result = allocator.allocate(ranked, Decimal("1000"))

        assert len(result.opportunities) == 1
        assert result.unallocated_amount == Decimal("650")

    def test_high_risk_cap(self, allocator, opportunity_factory):
        ranked = [
            opportunity_factory("degen-1", risk=RiskTier.HIGH, chain="arbitrum"),
            opportunity_factory("safe-1", risk=RiskTier.LOW, chain="base"),
            opportunity_factory("degen-2", risk=RiskTier.HIGH, chain="optimism"),
            opportunity_factory("degen-3", risk=RiskTier.HIGH, chain="polygon"),
        ]
        result = allocator.allocate(ranked, Decimal("1000"))

        # 35% exceeds the 30% high-risk cap; 26.25% fits, a second one would not
        assert [o.id for o in result.opportunities] == ["safe-1", "degen-2"]

    def test_only_high_risk_allocates_nothing_at_first_slot(self, allocator, opportunity_factory):
        ranked = [opportunity_factory("degen", risk=RiskTier.HIGH)]
        result = allocator.allocate(ranked, Decimal("1000"))

        assert result.is_empty
        assert result.risk_score == 2

    def test_invariants_hold_on_random_catalogs(self, allocator, rng, catalog_factory):
        for _ in range(50):
            catalog = catalog_factory(rng, int(rng.integers(1, 30)))
            ranked = OpportunityScorer.rank(catalog, RiskTier.HIGH)
            total = Decimal(f"{rng.uniform(1, 1_000_000):.2f}")

            result = allocator.allocate(ranked, total, max_positions=int(rng.integers(1, 8)))

            assert result.allocated_percent <= 1
            by_chain = defaultdict(Decimal)
            high_risk = Decimal("0")
            for opp in result.opportunities:
                by_chain[opp.chain] += opp.allocated_amount
                if opp.risk == RiskTier.HIGH:
                    high_risk += opp.allocated_amount
            assert all(amount <= total * Decimal("0.5") for amount in by_chain.values())
            assert high_risk <= total * Decimal("0.3")
            assert 0 <= result.diversification_score <= 100
            assert 1 <= result.risk_score <= 3
