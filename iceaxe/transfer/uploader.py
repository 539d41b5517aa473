"""Chunked multipart upload of a local file"""

import asyncio
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional
import logging

from ..errors import OutOfRange, TransferFailure
from .controller import ProcessController, TransferStatus
from .slicer import Slicer, file_slicer
from .treehash import TreeHashAccumulator, compute_checksums

logger = logging.getLogger(__name__)


@dataclass
class UploadDestination:
    """Multipart upload the file is sent to"""
    account_id: str
    vault_name: str
    upload_id: str
    chunk_size: int


class FileUploader:
    """
    Uploads a file part by part in the background.
    Parts before the resume position are hashed but not sent again,
    so the final tree hash always covers the whole file. Each part
    contributes its own 1 MiB-leaf tree hash to the reduction.
    """

    def __init__(self, filepath: Path, destination: UploadDestination, client):
        self.filepath = Path(filepath)
        self.destination = destination
        self.client = client
        self.start_position = 0
        self.archive_id: Optional[str] = None

    def seek(self, position: int):
        """Resume from chunk ordinal position"""
        self.start_position = position

    async def upload(self) -> ProcessController:
        """Schedule the upload and return its controller immediately"""
        slicer = file_slicer(self.filepath, self.destination.chunk_size)
        if self.start_position < 0 or self.start_position > slicer.total_chunks:
            raise OutOfRange(self.start_position, slicer.total_chunks)

        controller = ProcessController(TransferStatus(
            current_offset=self.start_position,
            max_position=slicer.total_chunks,
            bytes_transferred=min(self.start_position * slicer.chunk_size, slicer.total_size)
        ))
        controller.attach(asyncio.ensure_future(self._run(slicer, controller)))
        return controller

    async def _run(self, slicer: Slicer, controller: ProcessController):
        account_id = self.destination.account_id
        vault_name = self.destination.vault_name
        upload_id = self.destination.upload_id
        hashes = TreeHashAccumulator()

        try:
            async for chunk in slicer.read_chunks():
                checksums = compute_checksums(chunk.data)
                hashes.add(checksums.tree_hash)

                if chunk.position >= self.start_position:
                    if controller.abort_requested:
                        logger.warning(f"File upload has been aborted uploadId={upload_id}")
                        await controller.push_status(replace(controller.status(), aborted=True))
                        return

                    logger.info(f"FileUploader.upload {chunk.start}-{chunk.end}, "
                                f"position={chunk.position}, bytes: {len(chunk.data)}")
                    await self.client.upload_part(
                        account_id, vault_name, upload_id,
                        chunk.start, chunk.end, chunk.data,
                        checksum=checksums.tree_hash
                    )

                status = controller.status()
                await controller.push_status(status.advance(
                    max(chunk.position + 1, status.current_offset),
                    max(chunk.end, status.bytes_transferred)
                ))

            checksum = hashes.tree_hash
            logger.info(f"FileUploader.upload/finish {checksum}")

            self.archive_id = await self.client.complete_multipart_upload(
                account_id, vault_name, upload_id, checksum, slicer.total_size
            )
            logger.info(f"FileUploader.completed {slicer.total_size} bytes, archiveId={self.archive_id}")

            await controller.push_status(replace(
                controller.status(),
                current_offset=slicer.total_chunks,
                bytes_transferred=slicer.total_size,
                completed=True
            ))

        except asyncio.CancelledError:
            logger.warning(f"File upload cancelled uploadId={upload_id}")
            await controller.push_status(replace(controller.status(), aborted=True, error="cancelled"))
            raise

        except Exception as e:
            logger.error(f"FileUploader.upload failed: {e}")
            await controller.push_status(replace(controller.status(), failed=True, error=str(e)))
            raise TransferFailure("Failed to upload file", e) from e
