"""Chunk boundary calculation over a byte range"""

from dataclasses import dataclass
from pathlib import Path
from typing import AsyncIterator, Awaitable, Callable, Iterator, Optional
import logging

import aiofiles

from ..errors import OutOfRange

logger = logging.getLogger(__name__)

# Reads the half-open byte range [start, end) of some source
ChunkReader = Callable[[int, int], Awaitable[bytes]]


@dataclass(frozen=True)
class ChunkDescriptor:
    """Half-open byte range [start, end) and its ordinal"""
    start: int
    end: int
    position: int

    @property
    def size(self) -> int:
        return self.end - self.start


@dataclass(frozen=True)
class Chunk:
    """Chunk descriptor with its payload"""
    descriptor: ChunkDescriptor
    data: bytes

    @property
    def start(self) -> int:
        return self.descriptor.start

    @property
    def end(self) -> int:
        return self.descriptor.end

    @property
    def position(self) -> int:
        return self.descriptor.position


class Slicer:
    """
    Partitions total_size bytes into chunk_size windows.
    The sequence produced by chunks() resumes from the current position
    and stays exhausted until seek() is called again.
    """

    def __init__(self, total_size: int, chunk_size: int,
                 reader: Optional[ChunkReader] = None):
        if total_size < 0:
            raise ValueError(f"Total size must not be negative: {total_size}")
        if chunk_size < 1:
            raise ValueError(f"Chunk size must be positive: {chunk_size}")

        self.total_size = total_size
        self.chunk_size = chunk_size
        self.total_chunks = -(-total_size // chunk_size)
        self.position = 0
        self._reader = reader

    @classmethod
    def create(cls, total_size: int, chunk_size: int,
               reader: Optional[ChunkReader] = None) -> 'Slicer':
        return cls(total_size, chunk_size, reader)

    def seek(self, position: int):
        """Set the next chunk ordinal, 0 <= position <= total_chunks"""
        if position < 0 or position > self.total_chunks:
            raise OutOfRange(position, self.total_chunks)
        self.position = position

    def descriptor(self, position: int) -> ChunkDescriptor:
        start = position * self.chunk_size
        if position + 1 == self.total_chunks:
            end = self.total_size
        else:
            end = start + self.chunk_size
        return ChunkDescriptor(start=start, end=end, position=position)

    def chunks(self) -> Iterator[ChunkDescriptor]:
        while self.position < self.total_chunks:
            descriptor = self.descriptor(self.position)
            logger.debug(f"Slicer.next {descriptor.start}-{descriptor.end}, position={descriptor.position}")
            self.position += 1
            yield descriptor

    async def read_chunks(self) -> AsyncIterator[Chunk]:
        """Same sequence as chunks(), each item carrying its payload"""
        if self._reader is None:
            raise ValueError("Slicer has no chunk reader")

        for descriptor in self.chunks():
            data = await self._reader(descriptor.start, descriptor.end)
            yield Chunk(descriptor=descriptor, data=data)


def file_reader(path: Path) -> ChunkReader:
    """Chunk reader over a local file"""
    async def read(start: int, end: int) -> bytes:
        async with aiofiles.open(path, 'rb') as f:
            await f.seek(start)
            return await f.read(end - start)

    return read


def file_slicer(path: Path, chunk_size: int) -> Slicer:
    """Slicer over the current contents of a local file"""
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"File {path} not found")

    return Slicer(path.stat().st_size, chunk_size, file_reader(path))
