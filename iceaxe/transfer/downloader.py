"""Chunked download of a retrieval job output"""

import asyncio
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional
import logging

import aiofiles

from ..errors import OutOfRange, TransferFailure
from .controller import ProcessController, TransferStatus
from .slicer import Slicer

logger = logging.getLogger(__name__)


@dataclass
class DownloadSource:
    """Completed retrieval job and where its output goes"""
    account_id: str
    vault_name: str
    job_id: str
    destination_file: Path
    chunk_size: int
    archive_size: Optional[int] = None


class FileDownloader:
    """
    Writes a job output to a local file in byte-range requests.
    Without a known archive size the whole output is fetched in
    one request instead.
    """

    def __init__(self, source: DownloadSource, client):
        self.source = source
        self.client = client
        self.start_position = 0

    def seek(self, position: int):
        """Resume from chunk ordinal position"""
        self.start_position = position

    async def download(self) -> ProcessController:
        """Schedule the download and return its controller immediately"""
        if self.source.archive_size is None:
            if self.start_position != 0:
                raise OutOfRange(self.start_position, 0)
            controller = ProcessController(TransferStatus(current_offset=0, max_position=1))
            controller.attach(asyncio.ensure_future(self._run_whole(controller)))
            return controller

        slicer = Slicer.create(self.source.archive_size, self.source.chunk_size)
        slicer.seek(self.start_position)
        self._check_resume_target(min(self.start_position * slicer.chunk_size, slicer.total_size))

        controller = ProcessController(TransferStatus(
            current_offset=self.start_position,
            max_position=slicer.total_chunks,
            bytes_transferred=min(self.start_position * slicer.chunk_size, slicer.total_size)
        ))
        controller.attach(asyncio.ensure_future(self._run_chunked(slicer, controller)))
        return controller

    def _check_resume_target(self, resume_offset: int):
        """Bytes before the resume offset must already be on disk"""
        if resume_offset == 0:
            return

        destination = Path(self.source.destination_file)
        if not destination.exists():
            raise TransferFailure(f"Cannot resume download into missing file {destination}")

        size = destination.stat().st_size
        if size < resume_offset:
            raise TransferFailure(
                f"Cannot resume download at byte {resume_offset}: {destination} has only {size} bytes"
            )

    async def _run_chunked(self, slicer: Slicer, controller: ProcessController):
        job_id = self.source.job_id
        destination = Path(self.source.destination_file)
        resume_offset = min(self.start_position * slicer.chunk_size, slicer.total_size)

        mode = 'r+b' if resume_offset > 0 else 'wb'

        try:
            async with aiofiles.open(destination, mode) as f:
                if resume_offset > 0:
                    await f.seek(resume_offset)
                    await f.truncate()

                for descriptor in slicer.chunks():
                    if controller.abort_requested:
                        logger.warning(f"File download has been aborted jobId={job_id}")
                        await controller.push_status(replace(controller.status(), aborted=True))
                        return

                    logger.info(f"FileDownloader.download {descriptor.start}-{descriptor.end}, "
                                f"position={descriptor.position}")
                    output = await self.client.get_job_output(
                        self.source.account_id, self.source.vault_name, job_id,
                        byte_range=(descriptor.start, descriptor.end)
                    )
                    await f.write(output.body)

                    await controller.push_status(controller.status().advance(
                        descriptor.position + 1, descriptor.end
                    ))

            logger.info(f"FileDownloader.completed {slicer.total_size} bytes, jobId={job_id}")
            await controller.push_status(replace(
                controller.status(),
                current_offset=slicer.total_chunks,
                bytes_transferred=slicer.total_size,
                completed=True
            ))

        except asyncio.CancelledError:
            logger.warning(f"File download cancelled jobId={job_id}")
            await controller.push_status(replace(controller.status(), aborted=True, error="cancelled"))
            raise

        except Exception as e:
            logger.error(f"FileDownloader.download failed: {e}")
            await controller.push_status(replace(controller.status(), failed=True, error=str(e)))
            raise TransferFailure("Failed to download archive", e) from e

    async def _run_whole(self, controller: ProcessController):
        job_id = self.source.job_id

        try:
            if controller.abort_requested:
                logger.warning(f"File download has been aborted jobId={job_id}")
                await controller.push_status(replace(controller.status(), aborted=True))
                return

            output = await self.client.get_job_output(
                self.source.account_id, self.source.vault_name, job_id
            )
            if not output.accept_ranges:
                logger.debug(f"Job output of {job_id} does not signal byte-range support")

            async with aiofiles.open(self.source.destination_file, 'wb') as f:
                await f.write(output.body)

            logger.info(f"FileDownloader.completed {len(output.body)} bytes, jobId={job_id}")
            await controller.push_status(replace(
                controller.status(),
                current_offset=1,
                bytes_transferred=len(output.body),
                completed=True
            ))

        except asyncio.CancelledError:
            logger.warning(f"File download cancelled jobId={job_id}")
            await controller.push_status(replace(controller.status(), aborted=True, error="cancelled"))
            raise

        except Exception as e:
            logger.error(f"FileDownloader.download failed: {e}")
            await controller.push_status(replace(controller.status(), failed=True, error=str(e)))
            raise TransferFailure("Failed to download archive", e) from e
