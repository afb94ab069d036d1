import pytest

from career_agent.models import ConfirmationLevel, ToolCall, ToolFailure, ToolSuccess
from career_agent.registry import ToolRegistry
from career_agent.tools import STATUSES, JobStore, build_job_tools


@pytest.fixture
def store():
    store = JobStore()
    store.add("Acme Corp", "Backend Engineer", "Applied")
    store.add("Globex", "Platform Engineer", "Interviewing")
    store.add("Acme Labs", "Data Scientist", "Interested")
    return store


@pytest.fixture
def registry(store):
    return ToolRegistry(build_job_tools(store))


def job_id(store, company):
    return next(job.id for job in store.all() if job.company == company)


async def call(registry, name, **args):
    return await registry.execute(ToolCall(id="t", name=name, input=args))


# ---------------------------------------------------------------------------
# Catalog and policy
# ---------------------------------------------------------------------------


def test_catalog_lists_every_tool(registry):
    names = [d.name for d in registry.render_catalog()]
    assert names == ["search_jobs", "get_job_details", "get_job_stats", "add_note", "update_job_status", "delete_job"]


def test_confirmation_policy_for_job_tools(registry):
    level = ConfirmationLevel.DESTRUCTIVE_ONLY
    assert not registry.needs_confirmation("search_jobs", level)
    assert not registry.needs_confirmation("add_note", level)
    assert registry.needs_confirmation("update_job_status", level)
    assert registry.needs_confirmation("delete_job", level)
    assert registry.needs_confirmation("add_note", ConfirmationLevel.WRITE_ONLY)


def test_confirmation_messages(registry, store):
    acme = job_id(store, "Acme Corp")
    assert registry.confirmation_message("delete_job", {"job_id": acme}) == (
        'Permanently delete "Acme Corp - Backend Engineer" (Applied)? This cannot be undone.'
    )
    assert registry.confirmation_message("delete_job", {"job_id": "nope"}) == "Delete this job? This cannot be undone."
    assert registry.confirmation_message("update_job_status", {"job_id": acme, "new_status": "Offer"}) == (
        'Move "Acme Corp - Backend Engineer" from Applied to Offer?'
    )


# ---------------------------------------------------------------------------
# Read tools
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_search_jobs_by_query(registry):
    result = await call(registry, "search_jobs", query="acme")
    assert isinstance(result, ToolSuccess)
    assert [job["company"] for job in result.data] == ["Acme Corp", "Acme Labs"]


@pytest.mark.asyncio
async def test_search_jobs_filters_and_limit(registry):
    result = await call(registry, "search_jobs", status="interviewing")
    assert [job["company"] for job in result.data] == ["Globex"]

    result = await call(registry, "search_jobs", company="acme", limit=1)
    assert [job["company"] for job in result.data] == ["Acme Corp"]


@pytest.mark.asyncio
async def test_search_jobs_limit_bounds(registry):
    result = await call(registry, "search_jobs", limit=0)
    assert result.data == []

    result = await call(registry, "search_jobs", limit=-1)
    assert result.data == []

    result = await call(registry, "search_jobs")
    assert len(result.data) == 3


@pytest.mark.asyncio
async def test_get_job_details(registry, store):
    acme = job_id(store, "Acme Corp")
    result = await call(registry, "get_job_details", job_id=acme)
    assert result.data["title"] == "Backend Engineer"
    assert result.data["notes"] == []

    missing = await call(registry, "get_job_details", job_id="nope")
    assert missing == ToolFailure(error="Job not found with ID: nope")


@pytest.mark.asyncio
async def test_get_job_stats(registry):
    result = await call(registry, "get_job_stats")
    assert result.data["total"] == 3
    assert result.data["by_status"]["Applied"] == 1
    assert result.data["by_status"]["Offer"] == 0
    assert list(result.data["by_status"]) == STATUSES


# ---------------------------------------------------------------------------
# Write tools
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_add_note(registry, store):
    acme = job_id(store, "Acme Corp")
    result = await call(registry, "add_note", job_id=acme, content="x" * 150)

    assert result.success
    assert result.data["content_preview"] == "x" * 100 + "..."
    assert store.get(acme).notes[0].content == "x" * 150


@pytest.mark.asyncio
async def test_update_job_status_normalises_case(registry, store):
    acme = job_id(store, "Acme Corp")
    result = await call(registry, "update_job_status", job_id=acme, new_status="interviewing")

    assert result.data == {"job_id": acme, "previous_status": "Applied", "new_status": "Interviewing"}
    assert store.get(acme).status == "Interviewing"


@pytest.mark.asyncio
async def test_update_job_status_rejects_unknown_status(registry, store):
    acme = job_id(store, "Acme Corp")
    result = await call(registry, "update_job_status", job_id=acme, new_status="Ghosted")

    assert isinstance(result, ToolFailure)
    assert result.error.startswith('Invalid status "Ghosted"')
    assert store.get(acme).status == "Applied"


@pytest.mark.asyncio
async def test_delete_job(registry, store):
    globex = job_id(store, "Globex")
    result = await call(registry, "delete_job", job_id=globex)

    assert result.data["company"] == "Globex"
    assert store.get(globex) is None

    again = await call(registry, "delete_job", job_id=globex)
    assert again == ToolFailure(error=f"Job not found with ID: {globex}")


@pytest.mark.asyncio
async def test_write_tool_requires_fields(registry):
    result = await call(registry, "add_note", content="orphan")
    assert isinstance(result, ToolFailure)
    assert result.error.startswith("Invalid input: ")
