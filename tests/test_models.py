"""Tests for archive metadata and inventory records"""

import json

import pytest

from iceaxe.errors import UnsupportedMetadata
from iceaxe.vault.models import ArchiveMeta, Inventory, JobAction, META_VERSION


class TestArchiveMeta:
    """Description string format"""

    def test_round_trip(self):
        meta = ArchiveMeta(filename='photos.tar')
        parsed = ArchiveMeta.parse_description(meta.to_description())
        assert parsed == meta
        assert parsed.version == META_VERSION

    def test_wire_format(self):
        description = ArchiveMeta(filename='photos.tar').to_description()
        assert json.loads(description) == {'filename': 'photos.tar', 'version': 1}

    def test_future_version_parses(self):
        parsed = ArchiveMeta.parse_description('{"filename": "a.bin", "version": 7, "extra": true}')
        assert parsed == ArchiveMeta(filename='a.bin', version=7)

    @pytest.mark.parametrize("description", [
        None,
        'not json',
        '[1, 2]',
        '{"filename": "a.bin"}',
        '{"version": 1}',
        '{"filename": "", "version": 1}',
    ])
    def test_unsupported(self, description):
        with pytest.raises(UnsupportedMetadata):
            ArchiveMeta.parse_description(description)

    def test_matches(self):
        description = ArchiveMeta(filename='a.bin').to_description()
        assert ArchiveMeta.matches(description, 'a.bin')
        assert not ArchiveMeta.matches(description, 'b.bin')
        assert not ArchiveMeta.matches('garbage', 'a.bin')
        assert not ArchiveMeta.matches(None, 'a.bin')


class TestInventory:
    """Inventory report parsing"""

    REPORT = {
        'VaultARN': 'arn:aws:glacier:ca-central-1:7777777777777777:vaults/test-vault',
        'InventoryDate': '2020-05-12T00:00:00Z',
        'ArchiveList': [
            {
                'ArchiveId': 'archive-1',
                'ArchiveDescription': '{"filename": "a.bin", "version": 1}',
                'CreationDate': '2020-05-11T16:13:06Z',
                'Size': 103,
                'SHA256TreeHash': 'abc'
            },
            {
                'ArchiveId': 'archive-2',
                'ArchiveDescription': 'uploaded by another tool',
                'CreationDate': '2020-05-11T16:14:06Z',
                'Size': 10,
                'SHA256TreeHash': 'def'
            },
        ]
    }

    def test_from_report(self):
        inventory = Inventory.from_report(self.REPORT)
        assert inventory.inventory_date == '2020-05-12T00:00:00Z'
        assert [a.archive_id for a in inventory.archives] == ['archive-1', 'archive-2']
        assert inventory.archives[0].size == 103

    def test_find_by_filename(self):
        inventory = Inventory.from_report(self.REPORT)
        assert [a.archive_id for a in inventory.find_by_filename('a.bin')] == ['archive-1']
        assert inventory.find_by_filename('uploaded by another tool') == []

    def test_empty_report(self):
        assert Inventory.from_report({'InventoryDate': 'x', 'ArchiveList': []}).archives == []


def test_job_types():
    assert JobAction.INVENTORY_RETRIEVAL.job_type == 'inventory-retrieval'
    assert JobAction.ARCHIVE_RETRIEVAL.job_type == 'archive-retrieval'
