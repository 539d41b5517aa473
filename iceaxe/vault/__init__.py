from .models import (
    ArchiveItem, ArchiveMeta, Inventory, JobAction, JobOutput, JobParameters,
    JobRecord, MultipartUpload, Vault, META_VERSION
)
from .client import GlacierClient
from .jobs import JobDecision, JobOutcome, JobRequest, filter_jobs, resolve_job
from .manager import VaultManager

__all__ = [
    'ArchiveItem',
    'ArchiveMeta',
    'Inventory',
    'JobAction',
    'JobOutput',
    'JobParameters',
    'JobRecord',
    'MultipartUpload',
    'Vault',
    'META_VERSION',
    'GlacierClient',
    'JobDecision',
    'JobOutcome',
    'JobRequest',
    'filter_jobs',
    'resolve_job',
    'VaultManager'
]
