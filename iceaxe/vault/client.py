"""Async adapter over the boto3 Glacier client"""

import asyncio
import functools
from typing import Any, Callable, Dict, List, Optional, Tuple
import logging

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from ..errors import RemoteFailure
from ..transfer.treehash import Checksums, compute_checksums
from .models import JobAction, JobOutput, JobParameters, JobRecord, MultipartUpload, Vault

logger = logging.getLogger(__name__)


def vault_name_from_arn(arn: Optional[str]) -> Optional[str]:
    """arn:aws:glacier:region:account:vaults/name -> name"""
    if not arn:
        return None
    return arn.split('/')[-1]


def part_range(start: int, end: int) -> str:
    """Range header of a part upload, end exclusive"""
    return f"bytes {start}-{end - 1}/*"


def output_range(start: int, end: int) -> str:
    """Range header of a job output request, end exclusive"""
    return f"bytes={start}-{end - 1}"


class GlacierClient:
    """
    Remote vault API.
    Blocking boto3 calls run in the default executor; every service
    error surfaces as RemoteFailure naming the operation.
    """

    def __init__(
        self,
        region: str,
        endpoint_url: Optional[str] = None,
        max_attempts: int = 3,
        aws_access_key_id: Optional[str] = None,
        aws_secret_access_key: Optional[str] = None,
        aws_session_token: Optional[str] = None,
    ):
        kwargs: Dict[str, Any] = {
            "config": Config(
                region_name=region,
                retries={"max_attempts": max_attempts, "mode": "standard"},
            ),
        }
        if aws_access_key_id and aws_secret_access_key:
            kwargs["aws_access_key_id"] = aws_access_key_id
            kwargs["aws_secret_access_key"] = aws_secret_access_key
        if aws_session_token:
            kwargs["aws_session_token"] = aws_session_token
        if endpoint_url:
            kwargs["endpoint_url"] = endpoint_url

        self._client = boto3.client("glacier", **kwargs)

    async def _call(self, operation: str, func: Callable, **params) -> Any:
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(None, functools.partial(func, **params))
        except (BotoCoreError, ClientError) as e:
            logger.error(f"GlacierClient.{operation} failed: {e}")
            raise RemoteFailure(operation, e) from e

    def _collect(self, paginator_name: str, result_key: str, **params) -> List[Dict]:
        paginator = self._client.get_paginator(paginator_name)
        items: List[Dict] = []
        for page in paginator.paginate(**params):
            items.extend(page.get(result_key, []))
        return items

    async def list_vaults(self, account_id: str) -> List[Vault]:
        vaults = await self._call(
            "list_vaults", self._collect,
            paginator_name="list_vaults", result_key="VaultList", accountId=account_id
        )
        logger.debug(f"vaults {vaults}")
        return [
            Vault(
                name=v["VaultName"],
                arn=v.get("VaultARN"),
                archive_count=v.get("NumberOfArchives") or 0,
                size_bytes=v.get("SizeInBytes") or 0,
                created_at=v.get("CreationDate"),
                last_inventory_at=v.get("LastInventoryDate"),
            )
            for v in vaults
        ]

    async def list_jobs(self, account_id: str, vault_name: str) -> List[JobRecord]:
        jobs = await self._call(
            "list_jobs", self._collect,
            paginator_name="list_jobs", result_key="JobList", accountId=account_id, vaultName=vault_name
        )
        records = []
        for job in jobs:
            try:
                action = JobAction(job.get("Action"))
            except ValueError:
                logger.debug(f"Skipping job {job.get('JobId')} with action {job.get('Action')}")
                continue
            records.append(JobRecord(
                job_id=job["JobId"],
                action=action,
                vault_name=vault_name_from_arn(job.get("VaultARN")) or vault_name,
                archive_id=job.get("ArchiveId"),
                description=job.get("JobDescription"),
                completed=bool(job.get("Completed")),
                completion_date=job.get("CompletionDate"),
                archive_size=job.get("ArchiveSizeInBytes"),
            ))
        return records

    async def initiate_job(self, account_id: str, vault_name: str,
                           parameters: JobParameters) -> str:
        job_parameters = {"Type": parameters.action.job_type}
        if parameters.archive_id:
            job_parameters["ArchiveId"] = parameters.archive_id
        if parameters.description:
            job_parameters["Description"] = parameters.description
        if parameters.tier:
            job_parameters["Tier"] = parameters.tier

        response = await self._call(
            "initiate_job", self._client.initiate_job,
            accountId=account_id, vaultName=vault_name, jobParameters=job_parameters
        )
        return response["jobId"]

    def _read_job_output(self, **params) -> Dict:
        response = self._client.get_job_output(**params)
        body = response.get("body")
        if body is not None and hasattr(body, "read"):
            response["body"] = body.read()
        return response

    async def get_job_output(self, account_id: str, vault_name: str, job_id: str,
                             byte_range: Optional[Tuple[int, int]] = None) -> JobOutput:
        params = {"accountId": account_id, "vaultName": vault_name, "jobId": job_id}
        if byte_range is not None:
            params["range"] = output_range(*byte_range)

        response = await self._call("get_job_output", self._read_job_output, **params)
        return JobOutput(
            body=response.get("body") or b"",
            accept_ranges=response.get("acceptRanges"),
            content_range=response.get("contentRange"),
            checksum=response.get("checksum"),
        )

    async def list_multipart_uploads(self, account_id: str, vault_name: str) -> List[MultipartUpload]:
        uploads = await self._call(
            "list_multipart_uploads", self._collect,
            paginator_name="list_multipart_uploads", result_key="UploadsList",
            accountId=account_id, vaultName=vault_name
        )
        return [
            MultipartUpload(
                upload_id=u["MultipartUploadId"],
                part_size=u.get("PartSizeInBytes") or 0,
                description=u.get("ArchiveDescription"),
                created_at=u.get("CreationDate"),
                vault_arn=u.get("VaultARN"),
            )
            for u in uploads
        ]

    async def initiate_multipart_upload(self, account_id: str, vault_name: str,
                                        part_size: int, description: str) -> str:
        response = await self._call(
            "initiate_multipart_upload", self._client.initiate_multipart_upload,
            accountId=account_id, vaultName=vault_name,
            partSize=str(part_size), archiveDescription=description
        )
        return response["uploadId"]

    async def upload_part(self, account_id: str, vault_name: str, upload_id: str,
                          start: int, end: int, body: bytes,
                          checksum: Optional[str] = None):
        params = {
            "accountId": account_id,
            "vaultName": vault_name,
            "uploadId": upload_id,
            "range": part_range(start, end),
            "body": body,
        }
        if checksum:
            params["checksum"] = checksum
        await self._call("upload_part", self._client.upload_multipart_part, **params)

    async def complete_multipart_upload(self, account_id: str, vault_name: str, upload_id: str,
                                        checksum: str, archive_size: int) -> Optional[str]:
        response = await self._call(
            "complete_multipart_upload", self._client.complete_multipart_upload,
            accountId=account_id, vaultName=vault_name, uploadId=upload_id,
            checksum=checksum, archiveSize=str(archive_size)
        )
        return response.get("archiveId")

    async def delete_archive(self, account_id: str, vault_name: str, archive_id: str):
        await self._call(
            "delete_archive", self._client.delete_archive,
            accountId=account_id, vaultName=vault_name, archiveId=archive_id
        )

    def compute_checksums(self, data: bytes) -> Checksums:
        return compute_checksums(data)
