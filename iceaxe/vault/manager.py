"""High level vault operations"""

import json
from pathlib import Path
from typing import List, Optional
import logging

from ..config import IceAxeConfig
from ..errors import RemoteFailure
from ..transfer.controller import ProcessController
from ..transfer.downloader import DownloadSource, FileDownloader
from ..transfer.uploader import FileUploader, UploadDestination
from .client import GlacierClient
from .jobs import JobDecision, JobOutcome, JobRequest, filter_jobs, resolve_job
from .models import ArchiveItem, ArchiveMeta, Inventory, JobAction, JobRecord, MultipartUpload, Vault

logger = logging.getLogger(__name__)


class VaultManager:
    """
    Entry point for vault listing, uploads, retrieval jobs and downloads
    Transfers return a ProcessController right away and run in the background
    """

    def __init__(self, config: IceAxeConfig, client=None):
        self.config = config
        self.account_id = config.account_id
        self.chunk_size = config.chunk_size

        if client is not None:
            self.client = client
        else:
            self.client = GlacierClient(
                region=config.region,
                endpoint_url=config.endpoint_url,
                max_attempts=config.max_attempts
            )

    async def get_vaults(self) -> List[Vault]:
        return await self.client.list_vaults(self.account_id)

    async def list_multipart_uploads(self, vault_name: str) -> List[MultipartUpload]:
        return await self.client.list_multipart_uploads(self.account_id, vault_name)

    async def get_multipart_upload(self, vault_name: str, filename: str) -> MultipartUpload:
        """In-progress upload for filename, or a new one"""
        uploads = await self.list_multipart_uploads(vault_name)
        matching = [u for u in uploads if ArchiveMeta.matches(u.description, filename)]

        if len(matching) > 1:
            logger.error(f"More than one multipart upload with filename: {filename}")

        if matching:
            logger.info(f"Resuming multipart upload {matching[0].upload_id} for {filename}")
            return matching[0]

        description = ArchiveMeta(filename=filename).to_description()
        upload_id = await self.client.initiate_multipart_upload(
            self.account_id, vault_name, self.chunk_size, description
        )
        logger.info(f"Initiated multipart upload {upload_id} for {filename}")

        return MultipartUpload(upload_id=upload_id, part_size=self.chunk_size, description=description)

    async def upload_file(self, path: Path, filename: str, vault_name: str,
                          position: int = 0) -> ProcessController:
        """Upload path/filename as an archive, resuming at chunk position"""
        upload = await self.get_multipart_upload(vault_name, filename)
        chunk_size = upload.part_size or self.chunk_size
        if chunk_size != self.chunk_size:
            logger.warning(f"Using part size {chunk_size} of existing upload {upload.upload_id}")

        uploader = FileUploader(
            Path(path) / filename,
            UploadDestination(
                account_id=self.account_id,
                vault_name=vault_name,
                upload_id=upload.upload_id,
                chunk_size=chunk_size
            ),
            self.client
        )
        uploader.seek(position)
        return await uploader.upload()

    async def get_or_initiate_inventory_job(self, vault_name: str, completed_only: bool = True,
                                            prefer_existing: bool = True) -> JobDecision:
        return await resolve_job(self.client, self.account_id, JobRequest(
            vault_name=vault_name,
            action=JobAction.INVENTORY_RETRIEVAL,
            completed_only=completed_only,
            prefer_existing=prefer_existing
        ))

    async def get_retrieval_jobs(self, vault_name: str, archive_id: Optional[str] = None,
                                 filename: Optional[str] = None,
                                 completed_only: bool = False) -> List[JobRecord]:
        """Matching archive retrieval jobs; never starts one"""
        jobs = await self.client.list_jobs(self.account_id, vault_name)
        matching = filter_jobs(jobs, JobRequest(
            vault_name=vault_name,
            action=JobAction.ARCHIVE_RETRIEVAL,
            archive_id=archive_id,
            filename=filename,
            completed_only=completed_only
        ))
        logger.debug(f"get_retrieval_jobs {matching}")
        return matching

    async def get_or_initiate_retrieval_job(self, vault_name: str, archive_id: str,
                                            filename: Optional[str] = None,
                                            completed_only: bool = True,
                                            prefer_existing: bool = True) -> JobDecision:
        return await resolve_job(self.client, self.account_id, JobRequest(
            vault_name=vault_name,
            action=JobAction.ARCHIVE_RETRIEVAL,
            archive_id=archive_id,
            filename=filename,
            completed_only=completed_only,
            prefer_existing=prefer_existing,
            tier=self.config.retrieval_tier
        ))

    async def get_inventory(self, vault_name: str) -> Optional[Inventory]:
        """
        Inventory from the latest completed inventory job
        Returns None while a job is pending or was just started
        """
        decision = await self.get_or_initiate_inventory_job(vault_name)
        if decision.outcome is not JobOutcome.EXISTING:
            logger.warning(f"No completed inventory jobs found for {vault_name}")
            return None

        latest = decision.jobs[0]
        logger.debug(f"get_inventory: latest job {latest}")

        output = await self.client.get_job_output(self.account_id, vault_name, latest.job_id)
        try:
            report = json.loads(output.body.decode('utf-8'))
            if not isinstance(report, dict):
                raise ValueError(f"Inventory report is not an object: {type(report).__name__}")
            return Inventory.from_report(report)
        except (UnicodeDecodeError, ValueError, KeyError, TypeError) as e:
            logger.error(f"Invalid inventory report from job {latest.job_id}: {e!r}")
            raise RemoteFailure("get_inventory", e) from e

    async def download_archive(self, job_id: str, vault_name: str, destination_file: Path,
                               archive_size: Optional[int] = None,
                               position: int = 0) -> ProcessController:
        downloader = FileDownloader(
            DownloadSource(
                account_id=self.account_id,
                vault_name=vault_name,
                job_id=job_id,
                destination_file=Path(destination_file),
                chunk_size=self.chunk_size,
                archive_size=archive_size
            ),
            self.client
        )
        downloader.seek(position)
        return await downloader.download()

    async def delete_archive(self, vault_name: str, archive_id: str):
        await self.client.delete_archive(self.account_id, vault_name, archive_id)
        logger.info(f"Deleted archive {archive_id} from {vault_name}")

    async def find_archives(self, vault_name: str, filename: str) -> Optional[List[ArchiveItem]]:
        """Archives whose metadata names filename, None without an inventory"""
        inventory = await self.get_inventory(vault_name)
        if inventory is None:
            return None
        return inventory.find_by_filename(filename)
