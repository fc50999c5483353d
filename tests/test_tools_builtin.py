"""Tests for builtin executors — store-backed lookups and side-effect tools."""
from datetime import datetime, timedelta
from unittest.mock import AsyncMock, patch

import httpx
import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from agent_tools.config import settings
from agent_tools.tools.errors import (
    UpstreamUnavailableError, MissingCredentialError, MalformedDataError,
)
from agent_tools.tools.registry import ToolCategory, get_executor

from conftest import TENANT


async def _seed(factory, *rows):
    async with factory() as s:
        s.add_all(rows)
        await s.commit()


# ──────────────────────────────────────────────────────────
# Registration
# ──────────────────────────────────────────────────────────

class TestRegistration:
    def test_every_category_registered(self):
        for category in ToolCategory:
            assert get_executor(category) is not None, category

    def test_side_effect_flags(self):
        flagged = {c for c in ToolCategory if get_executor(c).side_effects}
        assert flagged == {ToolCategory.DELEGATE, ToolCategory.NOTIFY, ToolCategory.SOCIAL}

    def test_descriptions(self):
        from agent_tools.tools.registry import tool_descriptions
        text = tool_descriptions()
        assert text.splitlines()[0].startswith("- subscription:")
        assert "(performs actions)" in text


# ──────────────────────────────────────────────────────────
# Subscription / team / ledger
# ──────────────────────────────────────────────────────────

class TestSubscription:
    @pytest.mark.asyncio
    async def test_summary(self, db):
        from agent_tools.models import Tenant, TenantMember, Integration, LedgerEntry
        from agent_tools.tools.builtin.subscription import subscription_info
        await _seed(
            db,
            Tenant(id=TENANT, slug="acme", name="Acme Inc", created_at=datetime(2025, 1, 2)),
            TenantMember(tenant_id=TENANT, user_id="u1", role="owner"),
            TenantMember(tenant_id=TENANT, user_id="u2", role="member"),
            Integration(tenant_id=TENANT, provider="google", connected=True),
            Integration(tenant_id=TENANT, provider="slack", connected=False),
            LedgerEntry(tenant_id=TENANT, category="token_spend", amount_cents=150),
            LedgerEntry(tenant_id=TENANT, category="token_spend", amount_cents=50),
            LedgerEntry(tenant_id=TENANT, category="refund", amount_cents=-999),
        )
        text = await subscription_info(TENANT, "what plan are we on")
        assert "Account: Acme Inc" in text
        assert "Account slug: acme" in text
        assert "Member since: 2025-01-02" in text
        assert "Team seats used: 2" in text
        assert "Connected platforms: google" in text
        assert "2.0000 USD" in text

    @pytest.mark.asyncio
    async def test_unknown_tenant_falls_back_to_id(self, db):
        from agent_tools.tools.builtin.subscription import subscription_info
        text = await subscription_info("ghost", "billing")
        assert "Account: ghost" in text
        assert "Connected platforms: none" in text


class TestTeam:
    @pytest.mark.asyncio
    async def test_roster(self, db):
        from agent_tools.models import TenantMember
        from agent_tools.tools.builtin.team import team_members
        await _seed(
            db,
            TenantMember(tenant_id=TENANT, user_id="u1", role="owner", created_at=datetime(2025, 1, 1)),
            TenantMember(tenant_id=TENANT, user_id="u2", role="admin", created_at=datetime(2025, 2, 1)),
            TenantMember(tenant_id="other", user_id="u9", role="admin"),
        )
        text = await team_members(TENANT, "who are the team members")
        assert text.startswith("Team members (2):")
        assert text.index("u1") < text.index("u2")
        assert "u9" not in text

    @pytest.mark.asyncio
    async def test_role_filter(self, db):
        from agent_tools.models import TenantMember
        from agent_tools.tools.builtin.team import team_members
        await _seed(
            db,
            TenantMember(tenant_id=TENANT, user_id="u1", role="owner"),
            TenantMember(tenant_id=TENANT, user_id="u2", role="admin"),
        )
        text = await team_members(TENANT, "who has admin access")
        assert "u2" in text and "u1" not in text

    @pytest.mark.asyncio
    async def test_empty(self, db):
        from agent_tools.tools.builtin.team import team_members
        assert await team_members(TENANT, "team members") == "No team members found for this account."


class TestLedger:
    @pytest.mark.asyncio
    async def test_recent_entries(self, db):
        from agent_tools.models import LedgerEntry
        from agent_tools.tools.builtin.ledger import ledger_entries
        now = datetime.utcnow()
        await _seed(db, *[
            LedgerEntry(tenant_id=TENANT, category="token_spend", amount_cents=100,
                        description=f"run {i}", occurred_at=now - timedelta(hours=i))
            for i in range(12)
        ])
        text = await ledger_entries(TENANT, "show spend")
        assert text.startswith("Last 10 ledger entries (total 10.00 USD):")
        assert "run 0" in text and "run 11" not in text

    @pytest.mark.asyncio
    async def test_empty(self, db):
        from agent_tools.tools.builtin.ledger import ledger_entries
        assert await ledger_entries(TENANT, "") == "No ledger entries recorded for this account."


# ──────────────────────────────────────────────────────────
# Knowledge / calendar / crm / memory
# ──────────────────────────────────────────────────────────

class TestKnowledge:
    @pytest.mark.asyncio
    async def test_ranked_search(self, db):
        from agent_tools.models import KbDocument
        from agent_tools.tools.builtin.knowledge import search_knowledge
        await _seed(
            db,
            KbDocument(tenant_id=TENANT, slug="a", title="Connecting Slack", body="Open integrations and pick Slack."),
            KbDocument(tenant_id=TENANT, slug="b", title="Billing FAQ", body="Invoices are monthly. Slack is not billed."),
            KbDocument(tenant_id=TENANT, slug="c", title="Dashboard tour", body="Widgets and charts."),
        )
        text = await search_knowledge(TENANT, "how do I connect slack")
        assert text.startswith("Found 2 relevant docs:")
        assert text.index("Connecting Slack") < text.index("Billing FAQ")
        assert "Dashboard tour" not in text

    @pytest.mark.asyncio
    async def test_no_match(self, db):
        from agent_tools.tools.builtin.knowledge import search_knowledge
        text = await search_knowledge(TENANT, "how do I configure sso")
        assert text.startswith("No matching documentation found")

    def test_terms_drop_stop_words(self):
        from agent_tools.tools.builtin.knowledge import _terms
        assert _terms("How do I set up the Slack integration?") == ["set", "slack", "integration"]


class TestCalendar:
    def test_window_today(self):
        from agent_tools.tools.builtin.calendar import event_window
        now = datetime(2026, 3, 4, 15, 0)  # Wednesday
        start, end, label = event_window("meetings today", now)
        assert (start, end, label) == (datetime(2026, 3, 4), datetime(2026, 3, 5), "today")

    def test_window_tomorrow(self):
        from agent_tools.tools.builtin.calendar import event_window
        start, end, _ = event_window("anything tomorrow?", datetime(2026, 3, 4, 15, 0))
        assert (start, end) == (datetime(2026, 3, 5), datetime(2026, 3, 6))

    def test_window_next_week(self):
        from agent_tools.tools.builtin.calendar import event_window
        start, end, _ = event_window("schedule next week", datetime(2026, 3, 4, 15, 0))
        assert start == datetime(2026, 3, 9)  # Monday
        assert end == datetime(2026, 3, 16)

    def test_window_default(self):
        from agent_tools.tools.builtin.calendar import event_window
        now = datetime(2026, 3, 4, 15, 0)
        assert event_window("calendar", now) == (now, now + timedelta(days=7), "the next 7 days")

    @pytest.mark.asyncio
    async def test_events_in_window(self, db):
        from agent_tools.models import CalendarEvent
        from agent_tools.tools.builtin.calendar import calendar_events
        now = datetime.utcnow()
        await _seed(
            db,
            CalendarEvent(tenant_id=TENANT, title="Later", starts_at=now + timedelta(days=2)),
            CalendarEvent(tenant_id=TENANT, title="Sooner", location="Room 4",
                          starts_at=now + timedelta(hours=3), ends_at=now + timedelta(hours=4)),
            CalendarEvent(tenant_id=TENANT, title="Far away", starts_at=now + timedelta(days=30)),
            CalendarEvent(tenant_id="other", title="Not ours", starts_at=now + timedelta(days=1)),
        )
        text = await calendar_events(TENANT, "what's on my calendar")
        assert text.startswith("Events for the next 7 days (2):")
        assert text.index("Sooner @ Room 4") < text.index("Later")
        assert "Far away" not in text and "Not ours" not in text


class TestCrm:
    def test_contact_name(self):
        from agent_tools.tools.builtin.crm import contact_name
        assert contact_name("any contacts named Smith?") == "Smith"
        assert contact_name("lead called Jane Doe") == "Jane Doe"
        assert contact_name("list leads") == ""

    @pytest.mark.asyncio
    async def test_recent_when_no_name(self, db):
        from agent_tools.models import Contact
        from agent_tools.tools.builtin.crm import crm_contacts
        await _seed(
            db,
            Contact(tenant_id=TENANT, name="Old Lead", created_at=datetime(2024, 1, 1)),
            Contact(tenant_id=TENANT, name="New Lead", company="Acme", stage="prospect",
                    created_at=datetime(2026, 1, 1)),
        )
        text = await crm_contacts(TENANT, "show my leads")
        assert text.startswith("Contacts (2):")
        assert text.index("New Lead") < text.index("Old Lead")
        assert "company: Acme | stage: prospect" in text

    @pytest.mark.asyncio
    async def test_empty(self, db):
        from agent_tools.tools.builtin.crm import crm_contacts
        assert await crm_contacts(TENANT, "crm") == "No contacts recorded for this account."


class TestMemory:
    @pytest.mark.asyncio
    async def test_recent_turns_oldest_first(self, db):
        from agent_tools.models import AgentMemory
        from agent_tools.tools.builtin.memory import agent_memory
        base = datetime(2026, 3, 1, 12, 0)
        await _seed(db, *[
            AgentMemory(tenant_id=TENANT, agent_id="helper", role="user" if i % 2 == 0 else "assistant",
                        content=f"turn {i}", created_at=base + timedelta(minutes=i))
            for i in range(12)
        ], AgentMemory(tenant_id=TENANT, agent_id="other", role="user", content="foreign"))
        text = await agent_memory(TENANT, "remember", "helper")
        assert text.startswith("Recent conversation (10 turns")
        assert "turn 1\n" not in text
        assert text.index("turn 2") < text.index("turn 11")
        assert "foreign" not in text

    @pytest.mark.asyncio
    async def test_empty(self, db):
        from agent_tools.tools.builtin.memory import agent_memory
        text = await agent_memory(TENANT, "remember", "helper")
        assert text == "No earlier conversation recorded for this agent."


class TestStoreErrors:
    @pytest.mark.asyncio
    async def test_sqlalchemy_error_mapped(self):
        from agent_tools.tools.builtin.ledger import ledger_entries

        class BrokenSession:
            async def __aenter__(self):
                raise OperationalError("SELECT 1", {}, Exception("database is locked"))

            async def __aexit__(self, *exc):
                return False

        with patch("agent_tools.database.async_session_factory", lambda: BrokenSession()):
            with pytest.raises(UpstreamUnavailableError, match="ledger store unavailable"):
                await ledger_entries(TENANT, "spend")


# ──────────────────────────────────────────────────────────
# Side-effect tools
# ──────────────────────────────────────────────────────────

class TestDelegate:
    def test_target(self):
        from agent_tools.tools.builtin.delegate import delegation_target
        assert delegation_target("delegate the invoice review to Tina") == "tina"
        assert delegation_target("hand this off to the ops team") == "ops"
        assert delegation_target("have sam handle the follow-up") == "sam"
        assert delegation_target("create a task to call back") == ""

    @pytest.mark.asyncio
    async def test_records_task(self, db):
        from agent_tools.models import DelegatedTask
        from agent_tools.tools.builtin.delegate import delegate_task
        text = await delegate_task(TENANT, "delegate the invoice review to Tina", "orchestrator")
        assert text.startswith("Task #1 delegated to tina (status: queued)")

        async with db() as s:
            rows = (await s.execute(select(DelegatedTask))).scalars().all()
        assert len(rows) == 1
        assert rows[0].tenant_id == TENANT
        assert rows[0].from_agent == "orchestrator"
        assert rows[0].to_agent == "tina"


class TestNotify:
    @pytest.mark.asyncio
    async def test_not_configured(self):
        from agent_tools.tools.builtin.notify import send_notification
        with patch.object(settings, "notify_webhook_url", ""):
            with pytest.raises(MissingCredentialError):
                await send_notification(TENANT, "notify the team")

    @pytest.mark.asyncio
    async def test_sends(self):
        from agent_tools.tools.builtin.notify import send_notification
        with patch.object(settings, "notify_webhook_url", "https://hooks.example.com/n"), \
             patch("agent_tools.tools.builtin.notify.post_json", new_callable=AsyncMock,
                   return_value={"id": "m-42"}) as post:
            text = await send_notification(TENANT, "notify the team", "scheduler")
        assert text == "Notification sent (ref m-42)."
        post.assert_awaited_once_with(
            "https://hooks.example.com/n",
            {"context_id": TENANT, "agent_id": "scheduler", "text": "notify the team"},
        )


class TestSocial:
    def test_target_platform(self):
        from agent_tools.tools.builtin.social import target_platform
        assert target_platform("post the launch on LinkedIn") == "linkedin"
        assert target_platform("share this to x") == "twitter"
        assert target_platform("draft a tweet about pricing") == "twitter"
        assert target_platform("social media post about the tax deadline") == ""

    @pytest.mark.asyncio
    async def test_no_platform(self):
        from agent_tools.tools.builtin.social import publish_post
        text = await publish_post(TENANT, "write a social media post")
        assert text.startswith("No target platform recognised")

    @pytest.mark.asyncio
    async def test_not_configured(self):
        from agent_tools.tools.builtin.social import publish_post
        with patch.object(settings, "social_webhook_url", ""):
            with pytest.raises(MissingCredentialError):
                await publish_post(TENANT, "post the update on reddit")

    @pytest.mark.asyncio
    async def test_publishes(self):
        from agent_tools.tools.builtin.social import publish_post
        with patch.object(settings, "social_webhook_url", "https://publish.example.com"), \
             patch.object(settings, "social_webhook_token", "tok-123"), \
             patch("agent_tools.tools.builtin.social.post_json", new_callable=AsyncMock,
                   return_value={"status": "published", "url": "https://linkedin.com/p/1"}) as post:
            text = await publish_post(TENANT, "post the launch on linkedin", "outreach")
        assert text == "Post published on linkedin: https://linkedin.com/p/1"
        assert post.await_args.kwargs["token"] == "tok-123"
        assert post.await_args.args[1]["platform"] == "linkedin"


# ──────────────────────────────────────────────────────────
# Webhook helper
# ──────────────────────────────────────────────────────────

def _mock_client(handler):
    real_client = httpx.AsyncClient

    def factory(**kwargs):
        return real_client(transport=httpx.MockTransport(handler), **kwargs)
    return factory


class TestPostJson:
    @pytest.mark.asyncio
    async def test_success_with_token(self):
        from agent_tools.tools.builtin._common import post_json
        seen = {}

        def handler(request):
            seen["auth"] = request.headers.get("Authorization")
            return httpx.Response(200, json={"id": "x1"})

        with patch("agent_tools.tools.builtin._common.httpx.AsyncClient", _mock_client(handler)):
            data = await post_json("https://hook.test/a", {"k": "v"}, token="abc")
        assert data == {"id": "x1"}
        assert seen["auth"] == "Bearer abc"

    @pytest.mark.asyncio
    async def test_empty_body(self):
        from agent_tools.tools.builtin._common import post_json
        with patch("agent_tools.tools.builtin._common.httpx.AsyncClient",
                   _mock_client(lambda r: httpx.Response(204))):
            assert await post_json("https://hook.test/a", {}) == {}

    @pytest.mark.asyncio
    async def test_server_error(self):
        from agent_tools.tools.builtin._common import post_json
        with patch("agent_tools.tools.builtin._common.httpx.AsyncClient",
                   _mock_client(lambda r: httpx.Response(503))):
            with pytest.raises(UpstreamUnavailableError, match="503"):
                await post_json("https://hook.test/a", {})

    @pytest.mark.asyncio
    async def test_auth_error(self):
        from agent_tools.tools.builtin._common import post_json
        with patch("agent_tools.tools.builtin._common.httpx.AsyncClient",
                   _mock_client(lambda r: httpx.Response(401))):
            with pytest.raises(MissingCredentialError):
                await post_json("https://hook.test/a", {})

    @pytest.mark.asyncio
    async def test_network_error(self):
        from agent_tools.tools.builtin._common import post_json

        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with patch("agent_tools.tools.builtin._common.httpx.AsyncClient", _mock_client(handler)):
            with pytest.raises(UpstreamUnavailableError, match="ConnectError"):
                await post_json("https://hook.test/a", {})

    @pytest.mark.asyncio
    async def test_non_json(self):
        from agent_tools.tools.builtin._common import post_json
        with patch("agent_tools.tools.builtin._common.httpx.AsyncClient",
                   _mock_client(lambda r: httpx.Response(200, text="ok"))):
            with pytest.raises(MalformedDataError):
                await post_json("https://hook.test/a", {})
