"""Vault, archive and job records"""

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional
import logging

from ..errors import UnsupportedMetadata

logger = logging.getLogger(__name__)

# Archive description format version
META_VERSION = 1


class JobAction(Enum):
    """Remote job kinds, valued as the service names them"""
    INVENTORY_RETRIEVAL = "InventoryRetrieval"
    ARCHIVE_RETRIEVAL = "ArchiveRetrieval"

    @property
    def job_type(self) -> str:
        """Type string used when initiating a job"""
        if self is JobAction.INVENTORY_RETRIEVAL:
            return "inventory-retrieval"
        return "archive-retrieval"


@dataclass
class Vault:
    name: str
    arn: Optional[str] = None
    archive_count: int = 0
    size_bytes: int = 0
    created_at: Optional[str] = None
    last_inventory_at: Optional[str] = None


@dataclass
class MultipartUpload:
    upload_id: str
    part_size: int = 0
    description: Optional[str] = None
    created_at: Optional[str] = None
    vault_arn: Optional[str] = None


@dataclass
class JobRecord:
    """Remote job as reported by the job listing"""
    job_id: str
    action: JobAction
    vault_name: str
    archive_id: Optional[str] = None
    description: Optional[str] = None
    completed: bool = False
    completion_date: Optional[str] = None
    archive_size: Optional[int] = None


@dataclass
class JobParameters:
    """Parameters of a job to initiate"""
    action: JobAction
    archive_id: Optional[str] = None
    description: Optional[str] = None
    tier: Optional[str] = None


@dataclass
class JobOutput:
    body: bytes
    accept_ranges: Optional[str] = None
    content_range: Optional[str] = None
    checksum: Optional[str] = None


@dataclass(frozen=True)
class ArchiveMeta:
    """Metadata stored in the archive description"""
    filename: str
    version: int = META_VERSION

    def to_description(self) -> str:
        return json.dumps({'filename': self.filename, 'version': self.version})

    @classmethod
    def parse_description(cls, value: Optional[str]) -> 'ArchiveMeta':
        """
        Parse an archive description
        Raises UnsupportedMetadata for invalid JSON or missing fields
        """
        if value is None:
            raise UnsupportedMetadata(value)

        try:
            parsed = json.loads(value)
        except (TypeError, ValueError) as e:
            raise UnsupportedMetadata(value, e)

        if not isinstance(parsed, dict):
            raise UnsupportedMetadata(value)

        filename = parsed.get('filename')
        version = parsed.get('version')
        if not isinstance(filename, str) or not filename:
            raise UnsupportedMetadata(value)
        if not isinstance(version, int) or isinstance(version, bool):
            raise UnsupportedMetadata(value)

        return cls(filename=filename, version=version)

    @classmethod
    def matches(cls, description: Optional[str], filename: str) -> bool:
        """True if the description carries metadata for filename"""
        try:
            meta = cls.parse_description(description)
        except UnsupportedMetadata:
            logger.debug(f"Failed to parse archive description: {description}")
            return False
        return meta.filename == filename


@dataclass
class ArchiveItem:
    archive_id: str
    size: int
    creation_date: Optional[str] = None
    description: Optional[str] = None
    tree_hash: Optional[str] = None


@dataclass
class Inventory:
    inventory_date: Optional[str]
    archives: List[ArchiveItem] = field(default_factory=list)
    vault_arn: Optional[str] = None

    @classmethod
    def from_report(cls, report: Dict[str, Any]) -> 'Inventory':
        """Build from the inventory retrieval JSON report"""
        return cls(
            inventory_date=report.get('InventoryDate'),
            vault_arn=report.get('VaultARN'),
            archives=[
                ArchiveItem(
                    archive_id=item['ArchiveId'],
                    size=item.get('Size', 0),
                    creation_date=item.get('CreationDate'),
                    description=item.get('ArchiveDescription'),
                    tree_hash=item.get('SHA256TreeHash')
                )
                for item in report.get('ArchiveList', [])
            ]
        )

    def find_by_filename(self, filename: str) -> List[ArchiveItem]:
        return [
            item for item in self.archives
            if ArchiveMeta.matches(item.description, filename)
        ]
