# model.py
import asyncio
import logging
import os
import zipfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

import aiofiles
import aiofiles.os
import aiofiles.tempfile
import httpx

from .errors import ProvisioningFailed
from .logger import LOGGER_NAME

MODEL_NAME = "vosk-model-small-en-us-0.15"
MODEL_URL = f"https://alphacephei.com/vosk/models/{MODEL_NAME}.zip"
MODEL_DIR = Path.home() / ".rektCaptcha" / "models"
MODEL_DOWNLOAD_TIMEOUT = 300

# A model directory counts as installed only when all of these exist.
REQUIRED_FILES = (
    "am/final.mdl",
    "graph/HCLr.fst",
    "graph/Gr.fst",
    "ivector/final.dubm",
)

logger = logging.getLogger(LOGGER_NAME)


@dataclass(frozen=True)
class ModelDescriptor:
    """
    Where a Vosk model comes from and where it lives once unpacked.

    `source` is an http(s) URL or a path to a local zip archive. The model
    files are unpacked into `cache_dir / name`, dropping whatever folder wraps
    them inside the archive. `name` defaults to the archive's file name
    without extension.
    """
    source: str = MODEL_URL
    cache_dir: Path = MODEL_DIR
    name: str = field(default="")

    def __post_init__(self):
        object.__setattr__(self, "cache_dir", Path(self.cache_dir))
        if not self.name:
            object.__setattr__(self, "name", archive_stem(self.source))

    @property
    def path(self) -> Path:
        return self.cache_dir / self.name

    @property
    def is_remote(self) -> bool:
        return urlparse(self.source).scheme in ("http", "https")

    def is_ready(self) -> bool:
        return all((self.path / required).exists() for required in REQUIRED_FILES)


def archive_stem(source: str) -> str:
    """'https://host/models/foo-0.15.zip' -> 'foo-0.15'"""
    basename = os.path.basename(urlparse(source).path) or os.path.basename(source)
    stem, _ = os.path.splitext(basename)
    return stem or MODEL_NAME


async def _fetch_archive(descriptor: ModelDescriptor, client: Optional[httpx.AsyncClient]) -> bytes:
    if not descriptor.is_remote:
        async with aiofiles.open(descriptor.source, "rb") as f:
            return await f.read()

    if client is None:
        async with httpx.AsyncClient(timeout=MODEL_DOWNLOAD_TIMEOUT, follow_redirects=True) as own_client:
            return await _fetch_archive(descriptor, own_client)

    response = await client.get(descriptor.source)
    response.raise_for_status()
    return response.content


def _model_root(names) -> str:
    """
    Folder inside the archive that holds the model files, "" when they sit at
    the archive root.
    """
    marker = REQUIRED_FILES[0]
    for name in names:
        if name == marker or name.endswith("/" + marker):
            return name[: -len(marker)]
    return ""


def _extract(archive_path: str, target_dir: Path) -> None:
    """Unpacks the model files straight into `target_dir`, whatever folder wraps them."""
    with zipfile.ZipFile(archive_path) as archive:
        root = _model_root(archive.namelist())
        for info in archive.infolist():
            if not info.filename.startswith(root) or info.filename == root:
                continue
            info.filename = info.filename[len(root):]
            archive.extract(info, target_dir)


async def _unpack(archive: bytes, target_dir: Path) -> None:
    archive_path = None
    try:
        async with aiofiles.tempfile.NamedTemporaryFile("wb", suffix=".zip", dir=target_dir, delete=False) as f:
            archive_path = f.name
            await f.write(archive)
        await asyncio.to_thread(_extract, archive_path, target_dir)
    finally:
        if archive_path is not None:
            try:
                await aiofiles.os.remove(archive_path)
            except OSError as e:
                logger.warning(f"Could not remove temporary archive {archive_path}: {e}")


async def ensure_model(descriptor: ModelDescriptor, client: Optional[httpx.AsyncClient] = None) -> Path:
    """
    Makes sure the model described by `descriptor` is unpacked on disk and
    returns its directory.

    Returns immediately, without touching the network, when the model is
    already there. Any failure is raised as ProvisioningFailed; nothing is
    remembered about it, so the next call simply tries again.
    """
    if descriptor.is_ready():
        logger.debug("Model already exists, skipping download.")
        return descriptor.path

    logger.info(f"Downloading Vosk model from {descriptor.source}...")
    try:
        await aiofiles.os.makedirs(descriptor.cache_dir, exist_ok=True)
        archive = await _fetch_archive(descriptor, client)
        await aiofiles.os.makedirs(descriptor.path, exist_ok=True)
        await _unpack(archive, descriptor.path)
    except Exception as e:
        raise ProvisioningFailed(f"Could not provision model from {descriptor.source}: {e}") from e

    if not descriptor.is_ready():
        raise ProvisioningFailed(f"Archive {descriptor.source} did not contain a usable model at {descriptor.path}")

    logger.info("Model extracted.")
    return descriptor.path
