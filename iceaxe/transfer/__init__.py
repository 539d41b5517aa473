from .slicer import Slicer, Chunk, ChunkDescriptor, ChunkReader, file_reader, file_slicer
from .treehash import Checksums, TreeHashAccumulator, compute_checksums, linear_hash, reduce_tree
from .controller import ProcessController, TransferStatus, StatusListener
from .uploader import FileUploader, UploadDestination
from .downloader import FileDownloader, DownloadSource

__all__ = [
    'Slicer',
    'Chunk',
    'ChunkDescriptor',
    'ChunkReader',
    'file_reader',
    'file_slicer',
    'Checksums',
    'TreeHashAccumulator',
    'compute_checksums',
    'linear_hash',
    'reduce_tree',
    'ProcessController',
    'TransferStatus',
    'StatusListener',
    'FileUploader',
    'UploadDestination',
    'FileDownloader',
    'DownloadSource'
]
