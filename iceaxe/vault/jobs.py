"""
vault/jobs.py - Reuse or start remote retrieval jobs
Retrieval jobs take hours, so an existing matching job is preferred
over starting a duplicate one
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import List, Optional
import logging

from .models import JobAction, JobParameters, JobRecord

logger = logging.getLogger(__name__)


class JobOutcome(Enum):
    """Result kinds of job resolution"""
    EXISTING = "existing"  # Matching jobs found, nothing started
    PENDING = "pending"  # Matching job still running, poll later
    INITIATED = "initiated"  # New job started


@dataclass
class JobRequest:
    """What the caller needs a job for"""
    vault_name: str
    action: JobAction
    archive_id: Optional[str] = None
    filename: Optional[str] = None
    completed_only: bool = False
    prefer_existing: bool = True
    tier: Optional[str] = None


@dataclass
class JobDecision:
    outcome: JobOutcome
    jobs: List[JobRecord] = field(default_factory=list)
    job_id: Optional[str] = None


def matches_request(job: JobRecord, request: JobRequest) -> bool:
    """Action, vault, archive/filename and completion filter"""
    if job.action is not request.action or job.vault_name != request.vault_name:
        return False

    if request.action is JobAction.ARCHIVE_RETRIEVAL and (request.archive_id or request.filename):
        by_archive = request.archive_id is not None and job.archive_id == request.archive_id
        by_filename = request.filename is not None and job.description == request.filename
        if not (by_archive or by_filename):
            return False

    return job.completed or not request.completed_only


def newest_first(jobs: List[JobRecord]) -> List[JobRecord]:
    return sorted(jobs, key=lambda job: job.completion_date or '', reverse=True)


def filter_jobs(jobs: List[JobRecord], request: JobRequest) -> List[JobRecord]:
    """Jobs satisfying request, most recently completed first"""
    return newest_first([job for job in jobs if matches_request(job, request)])


async def resolve_job(client, account_id: str, request: JobRequest) -> JobDecision:
    """
    Decide between existing jobs and a new one
    With prefer_existing unset the job list is not consulted at all
    """
    if request.prefer_existing:
        jobs = await client.list_jobs(account_id, request.vault_name)

        matching = filter_jobs(jobs, request)
        logger.debug(f"resolve_job/{request.action.value} matching jobs {matching}")
        if matching:
            logger.info(f"Found existing {request.action.value} job for {request.vault_name}")
            return JobDecision(outcome=JobOutcome.EXISTING, jobs=matching)

        if request.completed_only:
            pending = [
                job for job in filter_jobs(jobs, replace(request, completed_only=False))
                if not job.completed
            ]
            if pending:
                logger.info(f"{request.action.value} job for {request.vault_name} "
                            f"still in progress: {pending[0].job_id}")
                return JobDecision(outcome=JobOutcome.PENDING, jobs=pending)

    if request.action is JobAction.ARCHIVE_RETRIEVAL and not request.archive_id:
        raise ValueError("Archive retrieval requires an archive id")

    parameters = JobParameters(
        action=request.action,
        archive_id=request.archive_id,
        description=request.filename,
        tier=request.tier
    )
    logger.info(f"Initiating new {request.action.value} job for {request.vault_name}")
    job_id = await client.initiate_job(account_id, request.vault_name, parameters)

    return JobDecision(outcome=JobOutcome.INITIATED, job_id=job_id)
