# tools.py
# Job-tracker tools exposed to the agent.
#
# JobStore is a deliberately small in-memory store; the tools only depend on
# its methods, so a persistent store can replace it without touching them.
# build_job_tools() returns Tool definitions ready for ToolRegistry.

import uuid
from collections import Counter
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field

from career_agent.models import ToolCategory, ToolFailure, ToolResult, ToolSuccess
from career_agent.registry import ProgressCallback, Tool
from career_agent.schema import InputSchema, Param

STATUSES = ["Interested", "Applied", "Screening", "Interviewing", "Offer", "Rejected", "Withdrawn"]


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return uuid.uuid4().hex[:12]


class Note(BaseModel):
    id: str = Field(default_factory=_new_id)
    content: str
    created_at: datetime = Field(default_factory=_now)


class Job(BaseModel):
    id: str = Field(default_factory=_new_id)
    company: str
    title: str
    status: str = "Interested"
    date_added: datetime = Field(default_factory=_now)
    notes: list[Note] = Field(default_factory=list)

    def label(self) -> str:
        return f"{self.company} - {self.title}"


class JobStore:
    """In-memory collection of jobs, in insertion order."""

    def __init__(self, jobs: list[Job] | None = None) -> None:
        self._jobs: dict[str, Job] = {job.id: job for job in jobs or []}

    def add(self, company: str, title: str, status: str = "Interested") -> Job:
        job = Job(company=company, title=title, status=status)
        self._jobs[job.id] = job
        return job

    def get(self, job_id: str) -> Job | None:
        return self._jobs.get(job_id)

    def all(self) -> list[Job]:
        return list(self._jobs.values())

    def delete(self, job_id: str) -> Job | None:
        return self._jobs.pop(job_id, None)


def _summary(job: Job) -> dict[str, Any]:
    return {
        "id": job.id,
        "company": job.company,
        "title": job.title,
        "status": job.status,
        "date_added": job.date_added.isoformat(),
    }


def _not_found(job_id: str) -> ToolFailure:
    return ToolFailure(error=f"Job not found with ID: {job_id}")


def _match_status(name: str) -> str | None:
    for status in STATUSES:
        if status.lower() == name.strip().lower():
            return status
    return None


def build_job_tools(store: JobStore) -> list[Tool]:
    """Create the job tools bound to ``store``."""

    # ------------------------------------------------------------------
    # Read tools
    # ------------------------------------------------------------------

    def search_jobs(args: dict[str, Any], on_progress: ProgressCallback | None = None) -> ToolResult:
        results = store.all()
        if args.get("query"):
            query = args["query"].lower()
            results = [j for j in results if query in j.company.lower() or query in j.title.lower()]
        if args.get("status"):
            status = args["status"].lower()
            results = [j for j in results if j.status.lower() == status]
        if args.get("company"):
            company = args["company"].lower()
            results = [j for j in results if company in j.company.lower()]
        limit = args.get("limit")
        limit = 10 if limit is None else max(limit, 0)
        return ToolSuccess(data=[_summary(j) for j in results[:limit]])

    def get_job_details(args: dict[str, Any], on_progress: ProgressCallback | None = None) -> ToolResult:
        job = store.get(args["job_id"])
        if job is None:
            return _not_found(args["job_id"])
        return ToolSuccess(data=job.model_dump(mode="json"))

    def get_job_stats(args: dict[str, Any], on_progress: ProgressCallback | None = None) -> ToolResult:
        jobs = store.all()
        by_status = Counter(job.status for job in jobs)
        return ToolSuccess(
            data={
                "total": len(jobs),
                "by_status": {status: by_status.get(status, 0) for status in STATUSES},
            }
        )

    # ------------------------------------------------------------------
    # Write tools
    # ------------------------------------------------------------------

    def add_note(args: dict[str, Any], on_progress: ProgressCallback | None = None) -> ToolResult:
        job = store.get(args["job_id"])
        if job is None:
            return _not_found(args["job_id"])
        note = Note(content=args["content"])
        job.notes.append(note)
        preview = note.content[:100] + ("..." if len(note.content) > 100 else "")
        return ToolSuccess(
            data={"note_id": note.id, "job_id": job.id, "company": job.company, "content_preview": preview},
            description=f"Added a note to {job.label()}",
        )

    def update_job_status(args: dict[str, Any], on_progress: ProgressCallback | None = None) -> ToolResult:
        job = store.get(args["job_id"])
        if job is None:
            return _not_found(args["job_id"])
        new_status = _match_status(args["new_status"])
        if new_status is None:
            return ToolFailure(
                error=f'Invalid status "{args["new_status"]}". Valid statuses are: {", ".join(STATUSES)}'
            )
        previous, job.status = job.status, new_status
        return ToolSuccess(
            data={"job_id": job.id, "previous_status": previous, "new_status": new_status},
            description=f"Moved {job.label()} to {new_status}",
        )

    def confirm_status(args: dict[str, Any]) -> str:
        job = store.get(args.get("job_id", ""))
        if job is None:
            return f'Move job to "{args.get("new_status")}"?'
        return f'Move "{job.label()}" from {job.status} to {args.get("new_status")}?'

    def delete_job(args: dict[str, Any], on_progress: ProgressCallback | None = None) -> ToolResult:
        job = store.delete(args["job_id"])
        if job is None:
            return _not_found(args["job_id"])
        return ToolSuccess(
            data={"deleted_job_id": job.id, "company": job.company, "title": job.title, "status": job.status},
            description=f"Deleted {job.label()}",
        )

    def confirm_delete(args: dict[str, Any]) -> str:
        job = store.get(args.get("job_id", ""))
        if job is None:
            return "Delete this job? This cannot be undone."
        return f'Permanently delete "{job.label()}" ({job.status})? This cannot be undone.'

    job_id = Param(type="string", description="The ID of the job")

    return [
        Tool(
            name="search_jobs",
            description="Search saved jobs by company name, job title, or status.",
            category=ToolCategory.READ,
            input_schema=InputSchema(
                {
                    "query": Param(description="Text to match against company or title", required=False),
                    "status": Param(description='Filter by status (e.g. "Applied")', required=False),
                    "company": Param(description="Filter by company name (partial match)", required=False),
                    "limit": Param(type="integer", description="Maximum results", required=False, default=10),
                }
            ),
            execute=search_jobs,
        ),
        Tool(
            name="get_job_details",
            description="Get full details of one job, including its notes.",
            category=ToolCategory.READ,
            input_schema=InputSchema({"job_id": job_id}),
            execute=get_job_details,
        ),
        Tool(
            name="get_job_stats",
            description="Count jobs in total and per status.",
            category=ToolCategory.READ,
            input_schema=InputSchema(),
            execute=get_job_stats,
        ),
        Tool(
            name="add_note",
            description="Add a markdown note to a job. Low-risk write operation.",
            category=ToolCategory.WRITE,
            input_schema=InputSchema(
                {"job_id": job_id, "content": Param(description="The note content (supports markdown)")}
            ),
            execute=add_note,
        ),
        Tool(
            name="update_job_status",
            description='Move a job to a new pipeline status (e.g. from "Applied" to "Interviewing").',
            category=ToolCategory.WRITE,
            input_schema=InputSchema(
                {"job_id": job_id, "new_status": Param(description="The new status")}
            ),
            execute=update_job_status,
            requires_confirmation=True,
            confirmation_message=confirm_status,
        ),
        Tool(
            name="delete_job",
            description="Permanently delete a job and its notes. DESTRUCTIVE and cannot be undone.",
            category=ToolCategory.WRITE,
            input_schema=InputSchema({"job_id": job_id}),
            execute=delete_job,
            requires_confirmation=True,
            confirmation_message=confirm_delete,
        ),
    ]
