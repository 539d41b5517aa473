import asyncio
import argparse
import logging
import sys
from pathlib import Path

from iceaxe.config import load_config
from iceaxe.errors import IceAxeError
from iceaxe.transfer.controller import ProcessController, TransferStatus
from iceaxe.vault.jobs import JobOutcome
from iceaxe.vault.manager import VaultManager

logger = logging.getLogger(__name__)


def setup_logging():
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler('iceaxe.log')
        ]
    )


def print_progress(status: TransferStatus):
    """Status listener printing transfer progress"""
    state = 'completed' if status.completed else 'aborted' if status.aborted else \
        'failed' if status.failed else 'running'
    print(f"[{state}] chunk {status.current_offset}/{status.max_position}, "
          f"{status.bytes_transferred} bytes")


async def follow(controller: ProcessController) -> TransferStatus:
    """Wait for a transfer; Ctrl+C aborts it at the next chunk boundary"""
    controller.add_status_listener(print_progress)
    try:
        return await asyncio.shield(controller.wait())
    except asyncio.CancelledError:
        logger.info("Abort requested, finishing current chunk")
        controller.abort()
        return await controller.wait()


async def run_vaults(manager: VaultManager, args):
    """List vaults"""
    for vault in await manager.get_vaults():
        print(f"{vault.name}\tarchives={vault.archive_count}\tsize={vault.size_bytes}"
              f"\tlast_inventory={vault.last_inventory_at or '-'}")


async def run_upload(manager: VaultManager, args):
    """Upload a file"""
    path = Path(args.path)
    logger.info(f"Uploading {path} to {args.vault}")
    controller = await manager.upload_file(path.parent, path.name, args.vault, position=args.position)
    status = await follow(controller)
    if status.aborted:
        logger.warning(f"Upload aborted at chunk {status.current_offset}, resume with --position")


async def run_uploads(manager: VaultManager, args):
    """List in-progress multipart uploads"""
    for upload in await manager.list_multipart_uploads(args.vault):
        print(f"{upload.upload_id}\tpart_size={upload.part_size}\t{upload.description or ''}")


async def run_inventory(manager: VaultManager, args):
    """Print vault inventory"""
    inventory = await manager.get_inventory(args.vault)
    if inventory is None:
        print("Inventory not available yet, try again later")
        return

    print(f"Inventory date: {inventory.inventory_date}")
    for item in inventory.archives:
        print(f"{item.archive_id}\t{item.size}\t{item.creation_date}\t{item.description or ''}")


async def run_retrieve(manager: VaultManager, args):
    """Find or start an archive retrieval job"""
    archive_id = args.archive_id
    if archive_id is None:
        archives = await manager.find_archives(args.vault, args.filename)
        if archives is None:
            print("Inventory not available yet, try again later")
            return
        if not archives:
            print(f"No archive found for {args.filename}")
            return
        archive_id = archives[0].archive_id

    decision = await manager.get_or_initiate_retrieval_job(
        args.vault, archive_id, filename=args.filename,
        completed_only=True, prefer_existing=not args.new_job
    )

    if decision.outcome is JobOutcome.EXISTING:
        job = decision.jobs[0]
        print(f"Job {job.job_id} ready, size={job.archive_size}")
    elif decision.outcome is JobOutcome.PENDING:
        print(f"Job {decision.jobs[0].job_id} still in progress, try again later")
    else:
        print(f"Started job {decision.job_id}")


async def run_jobs(manager: VaultManager, args):
    """List archive retrieval jobs"""
    for job in await manager.get_retrieval_jobs(args.vault):
        print(f"{job.job_id}\t{job.archive_id}\tcompleted={job.completed}\t{job.description or ''}")


async def run_download(manager: VaultManager, args):
    """Download a retrieval job output"""
    controller = await manager.download_archive(
        args.job_id, args.vault, Path(args.output),
        archive_size=args.size, position=args.position
    )
    status = await follow(controller)
    if status.aborted:
        logger.warning(f"Download aborted at chunk {status.current_offset}, resume with --position")


async def run_delete(manager: VaultManager, args):
    """Delete an archive"""
    await manager.delete_archive(args.vault, args.archive_id)


COMMANDS = {
    'vaults': run_vaults,
    'upload': run_upload,
    'uploads': run_uploads,
    'inventory': run_inventory,
    'retrieve': run_retrieve,
    'jobs': run_jobs,
    'download': run_download,
    'delete': run_delete,
}


def create_parser():
    """Create argument parser"""
    parser = argparse.ArgumentParser(
        description='IceAxe - archival transfer to cold-storage vaults',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Upload a file, resuming at chunk 12
  iceaxe upload ./backup.tar --vault photos --position 12

  # Start or reuse a retrieval job
  iceaxe retrieve --vault photos --filename backup.tar

  # Download a completed job
  iceaxe download --vault photos --job-id JOB --output backup.tar --size 104857600
        """
    )

    # Common arguments
    parser.add_argument('--config', help='YAML configuration file')
    parser.add_argument('--region', help='Service region')
    parser.add_argument('--account-id', help="Account id (default: '-')")
    parser.add_argument('--chunk-size', type=int, help='Chunk size in bytes (default: 1048576)')
    parser.add_argument('--debug', action='store_true', help='Enable debug logging')
    parser.add_argument('--quiet', action='store_true', help='Minimal output')

    commands = parser.add_subparsers(dest='command', required=True)

    commands.add_parser('vaults', help='List vaults')

    upload = commands.add_parser('upload', help='Upload a file')
    upload.add_argument('path', help='File to upload')
    upload.add_argument('--vault', required=True)
    upload.add_argument('--position', type=int, default=0, help='Chunk to resume from')

    uploads = commands.add_parser('uploads', help='List in-progress uploads')
    uploads.add_argument('--vault', required=True)

    inventory = commands.add_parser('inventory', help='Show vault inventory')
    inventory.add_argument('--vault', required=True)

    retrieve = commands.add_parser('retrieve', help='Find or start a retrieval job')
    retrieve.add_argument('--vault', required=True)
    target = retrieve.add_mutually_exclusive_group(required=True)
    target.add_argument('--archive-id')
    target.add_argument('--filename')
    retrieve.add_argument('--new-job', action='store_true', help='Always start a new job')

    jobs = commands.add_parser('jobs', help='List retrieval jobs')
    jobs.add_argument('--vault', required=True)

    download = commands.add_parser('download', help='Download a retrieval job output')
    download.add_argument('--vault', required=True)
    download.add_argument('--job-id', required=True)
    download.add_argument('--output', required=True, help='Destination file')
    download.add_argument('--size', type=int, help='Archive size, enables chunked download')
    download.add_argument('--position', type=int, default=0, help='Chunk to resume from')

    delete = commands.add_parser('delete', help='Delete an archive')
    delete.add_argument('--vault', required=True)
    delete.add_argument('--archive-id', required=True)

    return parser


async def run(args):
    """Route to the selected command"""
    config = load_config(Path(args.config) if args.config else None).merged({
        'region': args.region,
        'account_id': args.account_id,
        'chunk_size': args.chunk_size,
    })
    logging.getLogger().setLevel(config.log_level.upper())

    # Adjust logging level
    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)
    elif args.quiet:
        logging.getLogger().setLevel(logging.WARNING)

    manager = VaultManager(config)
    await COMMANDS[args.command](manager, args)


def main():
    """Main entry point"""
    setup_logging()
    parser = create_parser()
    args = parser.parse_args()

    try:
        asyncio.run(run(args))
    except KeyboardInterrupt:
        logger.info("\nShutdown requested by user")
    except IceAxeError as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == '__main__':
    main()
