"""Pytest configuration and fixtures"""

from collections import Counter
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import pytest

from iceaxe.errors import RemoteFailure
from iceaxe.transfer.treehash import compute_checksums
from iceaxe.vault.models import JobOutput, JobParameters, JobRecord, MultipartUpload, Vault
from tests.helpers import SAMPLE_CONTENT


class FakeGlacierClient:
    """In-memory remote vault API recording every call"""

    def __init__(self):
        self.vaults: List[Vault] = []
        self.jobs: List[JobRecord] = []
        self.uploads: List[MultipartUpload] = []
        self.job_outputs: Dict[str, bytes] = {}
        self.accept_ranges: Optional[str] = 'bytes'

        self.parts: Dict[str, Dict[int, bytes]] = {}
        self.part_ranges: List[Tuple[int, int]] = []
        self.output_ranges: List[Optional[Tuple[int, int]]] = []
        self.completed_uploads: List[dict] = []
        self.initiated_jobs: List[JobParameters] = []
        self.initiated_uploads: List[dict] = []
        self.deleted: List[str] = []

        self.fail_on: Dict[str, int] = {}
        self.counts: Counter = Counter()

    def _record(self, operation: str):
        self.counts[operation] += 1
        if self.fail_on.get(operation) == self.counts[operation]:
            raise RemoteFailure(operation, RuntimeError("injected failure"))

    async def list_vaults(self, account_id):
        self._record('list_vaults')
        return list(self.vaults)

    async def list_jobs(self, account_id, vault_name):
        self._record('list_jobs')
        return list(self.jobs)

    async def initiate_job(self, account_id, vault_name, parameters):
        self._record('initiate_job')
        self.initiated_jobs.append(parameters)
        return f"job-{len(self.initiated_jobs)}"

    async def get_job_output(self, account_id, vault_name, job_id, byte_range=None):
        self._record('get_job_output')
        self.output_ranges.append(byte_range)
        body = self.job_outputs[job_id]
        if byte_range is not None:
            body = body[byte_range[0]:byte_range[1]]
        return JobOutput(body=body, accept_ranges=self.accept_ranges)

    async def list_multipart_uploads(self, account_id, vault_name):
        self._record('list_multipart_uploads')
        return list(self.uploads)

    async def initiate_multipart_upload(self, account_id, vault_name, part_size, description):
        self._record('initiate_multipart_upload')
        self.initiated_uploads.append({'part_size': part_size, 'description': description})
        return f"upload-{len(self.initiated_uploads)}"

    async def upload_part(self, account_id, vault_name, upload_id, start, end, body, checksum=None):
        self._record('upload_part')
        assert checksum == compute_checksums(body).tree_hash
        self.parts.setdefault(upload_id, {})[start] = body
        self.part_ranges.append((start, end))

    async def complete_multipart_upload(self, account_id, vault_name, upload_id, checksum, archive_size):
        self._record('complete_multipart_upload')
        self.completed_uploads.append({
            'upload_id': upload_id,
            'checksum': checksum,
            'archive_size': archive_size
        })
        return f"archive-{upload_id}"

    async def delete_archive(self, account_id, vault_name, archive_id):
        self._record('delete_archive')
        self.deleted.append(archive_id)

    def assembled(self, upload_id: str) -> bytes:
        parts = self.parts.get(upload_id, {})
        return b''.join(parts[start] for start in sorted(parts))


@pytest.fixture
def fake_client():
    return FakeGlacierClient()


@pytest.fixture
def sample_file(tmp_path) -> Path:
    """Small file with known content"""
    path = tmp_path / 'sample.bin'
    path.write_bytes(SAMPLE_CONTENT)
    return path


@pytest.fixture
def payload_103() -> bytes:
    return bytes(range(103))


@pytest.fixture
def status_log():
    """Listener collecting every pushed status"""
    class StatusLog(list):
        def __call__(self, status):
            self.append(status)
    return StatusLog()
