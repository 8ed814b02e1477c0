from __future__ import annotations

"""
FileSystem Infrastructure Layer.

Declares the OS primitives consumed by nodes as explicit operation tables.
Each table maps an operation name to the callable that performs it, so a
FileSystem can be built over the real disk, over aiofiles, or over any
recording/faulting substitute in tests.
"""

import os
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, List

import aiofiles
import aiofiles.os

# -----------------------------------------------------------------------------
# OPERATION TABLES
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class FsOperations:
    """
    Blocking OS primitives, one per node operation.

    Attributes:
        stat: path -> os.stat_result
        list_dir: path -> entry names
        read_file: path -> bytes
        write_file: (path, bytes) -> None, truncating
        append_file: (path, bytes) -> None
        make_dirs: path -> None, creating missing ancestors
    """
    stat: Callable[[str], os.stat_result]
    list_dir: Callable[[str], List[str]]
    read_file: Callable[[str], bytes]
    write_file: Callable[[str, bytes], Any]
    append_file: Callable[[str, bytes], Any]
    make_dirs: Callable[[str], Any]


@dataclass(frozen=True)
class AsyncFsOperations:
    """Suspending OS primitives, mirroring FsOperations."""
    stat: Callable[[str], Awaitable[os.stat_result]]
    list_dir: Callable[[str], Awaitable[List[str]]]
    read_file: Callable[[str], Awaitable[bytes]]
    write_file: Callable[[str, bytes], Awaitable[Any]]
    append_file: Callable[[str, bytes], Awaitable[Any]]
    make_dirs: Callable[[str], Awaitable[Any]]


# -----------------------------------------------------------------------------
# BLOCKING IMPLEMENTATION
# -----------------------------------------------------------------------------

def _read_file(path: str) -> bytes:
    with open(path, "rb") as f:
        return f.read()


def _write_file(path: str, data: bytes) -> None:
    with open(path, "wb") as f:
        f.write(data)


def _append_file(path: str, data: bytes) -> None:
    with open(path, "ab") as f:
        f.write(data)


def _make_dirs(path: str) -> None:
    os.makedirs(path, exist_ok=True)


def default_operations() -> FsOperations:
    """Return the table backed by the os module and builtin open()."""
    return FsOperations(
        stat=os.stat,
        list_dir=os.listdir,
        read_file=_read_file,
        write_file=_write_file,
        append_file=_append_file,
        make_dirs=_make_dirs,
    )


# -----------------------------------------------------------------------------
# ASYNC IMPLEMENTATION (aiofiles)
# -----------------------------------------------------------------------------

async def _stat_async(path: str) -> os.stat_result:
    return await aiofiles.os.stat(path)


async def _list_dir_async(path: str) -> List[str]:
    entries: List[str] = await aiofiles.os.listdir(path)
    return entries


async def _read_file_async(path: str) -> bytes:
    async with aiofiles.open(path, mode="rb") as f:
        content: bytes = await f.read()
        return content


async def _write_file_async(path: str, data: bytes) -> None:
    async with aiofiles.open(path, mode="wb") as f:
        await f.write(data)


async def _append_file_async(path: str, data: bytes) -> None:
    async with aiofiles.open(path, mode="ab") as f:
        await f.write(data)


async def _make_dirs_async(path: str) -> None:
    await aiofiles.os.makedirs(path, exist_ok=True)


def default_async_operations() -> AsyncFsOperations:
    """Return the table backed by aiofiles."""
    return AsyncFsOperations(
        stat=_stat_async,
        list_dir=_list_dir_async,
        read_file=_read_file_async,
        write_file=_write_file_async,
        append_file=_append_file_async,
        make_dirs=_make_dirs_async,
    )
