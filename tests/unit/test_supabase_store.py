"""
Tests for SupabaseLeadStore
Supabase query chains are mocked with MagicMock
"""
import pytest
from unittest.mock import MagicMock

from app.domain.interfaces.lead_store import LeadNotFoundError
from app.domain.models.telecaller import Telecaller
from app.infrastructure.storage.factory import LeadStoreFactory
from app.infrastructure.storage.memory_store import InMemoryLeadStore
from app.infrastructure.storage.supabase_store import SupabaseLeadStore


TELECALLER = Telecaller(id="user-1", email="a@example.com", role="employee")


class TestListEligibleTelecallers:

    @pytest.mark.asyncio
    async def test_filters_by_role_and_status(self):
        mock_supabase = MagicMock()
        chain = mock_supabase.table.return_value.select.return_value.in_.return_value.eq.return_value
        chain.execute.return_value.data = [
            {"id": 1, "email": "a@example.com", "name": None, "role": "employee", "status": "active"},
            {"id": 2, "email": "m@example.com", "name": "Mia", "role": "manager", "status": "active"},
        ]

        store = SupabaseLeadStore(mock_supabase)
        telecallers = await store.list_eligible_telecallers(("employee", "manager"))

        mock_supabase.table.assert_called_with("users")
        mock_supabase.table.return_value.select.return_value.in_.assert_called_with(
            "role", ["employee", "manager"]
        )
        mock_supabase.table.return_value.select.return_value.in_.return_value.eq.assert_called_with(
            "status", "active"
        )
        assert [t.id for t in telecallers] == ["1", "2"]
        assert telecallers[0].name == "a@example.com"
        assert telecallers[1].name == "Mia"

    @pytest.mark.asyncio
    async def test_no_rows(self):
        mock_supabase = MagicMock()
        chain = mock_supabase.table.return_value.select.return_value.in_.return_value.eq.return_value
        chain.execute.return_value.data = None

        store = SupabaseLeadStore(mock_supabase)

        assert await store.list_eligible_telecallers(("employee",)) == []


class TestCountOpenLeads:

    @pytest.mark.asyncio
    async def test_uses_exact_count(self):
        mock_supabase = MagicMock()
        select = mock_supabase.table.return_value.select
        select.return_value.eq.return_value.in_.return_value.execute.return_value.count = 4

        store = SupabaseLeadStore(mock_supabase)
        count = await store.count_open_leads(TELECALLER, ["new", "follow-up"])

        assert count == 4
        select.assert_called_with("id", count="exact")
        select.return_value.eq.assert_called_with("telecaller", "a@example.com")

    @pytest.mark.asyncio
    async def test_falls_back_to_row_count(self):
        mock_supabase = MagicMock()
        execute = mock_supabase.table.return_value.select.return_value.eq.return_value.in_.return_value.execute
        execute.return_value.count = None
        execute.return_value.data = [{"id": "l1"}, {"id": "l2"}]

        store = SupabaseLeadStore(mock_supabase)

        assert await store.count_open_leads(TELECALLER, ["new"]) == 2


class TestGetLeads:

    @pytest.mark.asyncio
    async def test_fetches_by_ids(self):
        mock_supabase = MagicMock()
        in_ = mock_supabase.table.return_value.select.return_value.in_
        in_.return_value.execute.return_value.data = [
            {"id": "l1", "status": "new", "priority": "HIGH", "source": "referral", "extra": "x"},
        ]

        store = SupabaseLeadStore(mock_supabase)
        leads = await store.get_leads(["l1", "missing"])

        in_.assert_called_with("id", ["l1", "missing"])
        assert len(leads) == 1
        assert leads[0].priority == "high"
        assert leads[0].source == "referral"

    @pytest.mark.asyncio
    async def test_empty_ids_skip_query(self):
        mock_supabase = MagicMock()
        store = SupabaseLeadStore(mock_supabase)

        assert await store.get_leads([]) == []
        mock_supabase.table.assert_not_called()


class TestListLeads:

    @pytest.mark.asyncio
    async def test_leads_for_telecaller_with_limit(self):
        mock_supabase = MagicMock()
        order = mock_supabase.table.return_value.select.return_value.eq.return_value.in_.return_value.order
        order.return_value.limit.return_value.execute.return_value.data = [{"id": "l1"}]

        store = SupabaseLeadStore(mock_supabase)
        leads = await store.list_leads_for_telecaller(TELECALLER, ["new"], limit=3)

        order.assert_called_with("created_at")
        order.return_value.limit.assert_called_with(3)
        assert [lead.id for lead in leads] == ["l1"]

    @pytest.mark.asyncio
    async def test_unassigned_leads(self):
        mock_supabase = MagicMock()
        is_ = mock_supabase.table.return_value.select.return_value.is_
        is_.return_value.order.return_value.execute.return_value.data = [{"id": "l9"}]

        store = SupabaseLeadStore(mock_supabase)
        leads = await store.list_unassigned_leads()

        is_.assert_called_with("telecaller", "null")
        assert leads[0].id == "l9"
        assert leads[0].telecaller is None


class TestUpdateAssignment:

    @pytest.mark.asyncio
    async def test_writes_assignment_fields(self):
        mock_supabase = MagicMock()
        update = mock_supabase.table.return_value.update
        update.return_value.eq.return_value.execute.return_value.data = [{"id": "l1"}]

        store = SupabaseLeadStore(mock_supabase)
        await store.update_assignment("l1", "a@example.com", "manual", reassigned_by="admin")

        payload = update.call_args[0][0]
        assert payload["telecaller"] == "a@example.com"
        assert payload["assigned_by"] == "manual"
        assert payload["reassigned_by"] == "admin"
        assert payload["assigned_at"] == payload["updated_at"]
        update.return_value.eq.assert_called_with("id", "l1")

    @pytest.mark.asyncio
    async def test_auto_assignment_omits_reassigned_by(self):
        mock_supabase = MagicMock()
        update = mock_supabase.table.return_value.update
        update.return_value.eq.return_value.execute.return_value.data = [{"id": "l1"}]

        store = SupabaseLeadStore(mock_supabase)
        await store.update_assignment("l1", "a@example.com", "auto-roundRobin")

        assert "reassigned_by" not in update.call_args[0][0]

    @pytest.mark.asyncio
    async def test_missing_lead_raises(self):
        mock_supabase = MagicMock()
        update = mock_supabase.table.return_value.update
        update.return_value.eq.return_value.execute.return_value.data = []

        store = SupabaseLeadStore(mock_supabase)

        with pytest.raises(LeadNotFoundError) as exc_info:
            await store.update_assignment("ghost", "a@example.com", "manual")

        assert exc_info.value.lead_id == "ghost"


class TestLeadStoreFactory:

    def test_backends_registered(self):
        assert set(LeadStoreFactory.list_backends()) >= {"memory", "supabase"}

    def test_create_memory(self):
        assert isinstance(LeadStoreFactory.create("memory"), InMemoryLeadStore)

    def test_create_supabase(self):
        store = LeadStoreFactory.create("supabase", supabase=MagicMock())
        assert isinstance(store, SupabaseLeadStore)
        assert store.name == "supabase"

    def test_unknown_backend(self):
        with pytest.raises(ValueError) as exc_info:
            LeadStoreFactory.create("firestore")

        assert "Unknown lead store backend" in str(exc_info.value)
