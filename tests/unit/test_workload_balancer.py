"""
Unit Tests for WorkloadBalancer
"""
import pytest
from unittest.mock import AsyncMock, MagicMock

from app.domain.models.assignment import WorkforceSnapshot
from app.domain.models.lead import Lead
from app.domain.models.telecaller import Telecaller, TelecallerWorkload
from app.domain.services.assignment_service import AssignmentService
from app.domain.services.workforce_snapshot import WorkforceSnapshotProvider
from app.domain.services.workload_balancer import WorkloadBalancer
from app.infrastructure.storage.memory_store import InMemoryLeadStore


def telecaller(name: str) -> Telecaller:
    return Telecaller(id=f"user-{name}", email=f"{name}@example.com")


def give(store: InMemoryLeadStore, name: str, count: int, status: str = "new", prefix: str = "") -> None:
    for i in range(count):
        store.add_lead(Lead(
            id=f"{prefix or name}-{status}-{i}",
            status=status,
            telecaller=f"{name}@example.com",
            assigned_by="auto-roundRobin",
        ))


def build_balancer(store: InMemoryLeadStore, **kwargs) -> WorkloadBalancer:
    provider = WorkforceSnapshotProvider(store)
    service = AssignmentService(store, provider)
    return WorkloadBalancer(store, provider, service, **kwargs)


def load_of(store: InMemoryLeadStore, name: str) -> int:
    return sum(
        1 for lead in store.all_leads()
        if lead.telecaller == f"{name}@example.com"
        and lead.status in ("new", "follow-up", "interested")
    )


class TestBalanceWorkload:
    """Tests for balance_workload"""

    @pytest.mark.asyncio
    async def test_moves_from_overloaded_to_underloaded(self):
        """A:10, B:1 -> avg 5, B is filled up to 5"""
        store = InMemoryLeadStore(telecallers=[telecaller("a"), telecaller("b")])
        give(store, "a", 10)
        give(store, "b", 1)

        result = await build_balancer(store).balance_workload()

        assert result.redistributed == 4
        assert result.average_workload == 5
        assert load_of(store, "a") == 6
        assert load_of(store, "b") == 5

    @pytest.mark.asyncio
    async def test_moved_leads_are_tagged_system_balance(self):
        store = InMemoryLeadStore(telecallers=[telecaller("a"), telecaller("b")])
        give(store, "a", 10)
        give(store, "b", 1)

        await build_balancer(store).balance_workload()

        moved = [store.get_lead(lead_id) for lead_id in store.writes]
        assert moved
        for lead in moved:
            assert lead.telecaller == "b@example.com"
            assert lead.assigned_by == "system-balance"
            assert lead.reassigned_by == "system-balance"

    @pytest.mark.asyncio
    async def test_never_moves_interested_leads(self):
        store = InMemoryLeadStore(telecallers=[telecaller("a"), telecaller("b")])
        give(store, "a", 8, status="interested")
        give(store, "a", 2, status="follow-up")
        give(store, "b", 1)

        result = await build_balancer(store).balance_workload()

        assert result.redistributed == 2
        for lead in store.all_leads():
            if lead.status == "interested":
                assert lead.telecaller == "a@example.com"

    @pytest.mark.asyncio
    async def test_within_margin_is_a_no_op(self):
        """Two telecallers 4 apart sit inside the +/-2 band"""
        store = InMemoryLeadStore(telecallers=[telecaller("a"), telecaller("b")])
        give(store, "a", 6)
        give(store, "b", 2)

        result = await build_balancer(store).balance_workload()

        assert result.redistributed == 0
        assert store.writes == []

    @pytest.mark.asyncio
    async def test_overloaded_without_underloaded_is_a_no_op(self):
        store = InMemoryLeadStore(telecallers=[telecaller("a"), telecaller("b"), telecaller("c")])
        give(store, "a", 9)
        give(store, "b", 3)
        give(store, "c", 3)

        result = await build_balancer(store).balance_workload()

        assert result.redistributed == 0

    @pytest.mark.asyncio
    async def test_fills_underloaded_in_order(self):
        store = InMemoryLeadStore(
            telecallers=[telecaller("a"), telecaller("b"), telecaller("c")]
        )
        give(store, "a", 12)

        result = await build_balancer(store).balance_workload()

        assert result.redistributed == 8
        assert load_of(store, "b") == 4
        assert load_of(store, "c") == 4
        assert load_of(store, "a") == 4

    @pytest.mark.asyncio
    async def test_custom_margin(self):
        store = InMemoryLeadStore(telecallers=[telecaller("a"), telecaller("b")])
        give(store, "a", 6)
        give(store, "b", 2)

        result = await build_balancer(store, margin=1).balance_workload()

        assert result.redistributed == 2
        assert load_of(store, "b") == 4

    @pytest.mark.asyncio
    async def test_no_telecallers_is_a_no_op(self):
        store = InMemoryLeadStore()

        result = await build_balancer(store).balance_workload()

        assert result.redistributed == 0

    @pytest.mark.asyncio
    async def test_unreadable_roster_is_a_no_op(self):
        store = InMemoryLeadStore(telecallers=[telecaller("a"), telecaller("b")])
        give(store, "a", 10)
        store.fail_reads = True

        result = await build_balancer(store).balance_workload()

        assert result.redistributed == 0

    @pytest.mark.asyncio
    async def test_write_errors_propagate(self):
        store = InMemoryLeadStore(telecallers=[telecaller("a"), telecaller("b")])
        give(store, "a", 10)
        store.fail_writes_for = {"a-new-0"}

        with pytest.raises(ConnectionError):
            await build_balancer(store).balance_workload()

    @pytest.mark.asyncio
    async def test_single_pass_by_default(self):
        store = InMemoryLeadStore(telecallers=[telecaller("a"), telecaller("b")])
        give(store, "a", 10)
        give(store, "b", 1)

        result = await build_balancer(store).balance_workload()

        assert result.passes == 1


class TestFixedPointBalancing:
    """Tests for iterate_to_fixed_point"""

    @pytest.mark.asyncio
    async def test_stops_when_a_pass_moves_nothing(self):
        store = InMemoryLeadStore(telecallers=[telecaller("a"), telecaller("b")])
        give(store, "a", 10)
        give(store, "b", 1)

        result = await build_balancer(store, iterate_to_fixed_point=True).balance_workload()

        assert result.redistributed == 4
        assert result.passes == 2

    @pytest.mark.asyncio
    async def test_stops_at_max_passes(self):
        heavy = TelecallerWorkload(id="user-a", email="a@example.com", active_leads=10)
        idle = TelecallerWorkload(id="user-b", email="b@example.com", active_leads=0)

        provider = MagicMock()
        provider.take_snapshot = AsyncMock(
            return_value=WorkforceSnapshot(telecallers=(heavy, idle))
        )
        store = MagicMock()
        store.list_leads_for_telecaller = AsyncMock(
            return_value=[Lead(id=f"lead-{i}", telecaller="a@example.com") for i in range(5)]
        )
        service = MagicMock()
        service.reassign = AsyncMock()

        balancer = WorkloadBalancer(
            store, provider, service,
            iterate_to_fixed_point=True,
            max_passes=3
        )
        result = await balancer.balance_workload()

        assert result.passes == 3
        assert result.redistributed == 15
        assert service.reassign.await_count == 15
