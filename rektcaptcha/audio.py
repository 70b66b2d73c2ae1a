# audio.py
import asyncio
import contextlib
import logging
import os
import tempfile

import pydub

from .logger import LOGGER_NAME

CHANNELS = 1
SAMPLE_RATE = 16000

logger = logging.getLogger(LOGGER_NAME)


def _convert(input_path: str, output_path: str, input_codec: str) -> None:
    segment = pydub.AudioSegment.from_file(input_path, format=input_codec)
    # Passing parameters makes pydub hand the export to ffmpeg.
    segment.export(
        output_path,
        format="wav",
        parameters=["-ac", str(CHANNELS), "-ar", str(SAMPLE_RATE)],
    )


def _remove(path: str) -> None:
    with contextlib.suppress(FileNotFoundError):
        os.unlink(path)


def _reserve(stack: contextlib.ExitStack, suffix: str):
    temp_file = tempfile.NamedTemporaryFile(mode="wb", delete=False, suffix=suffix)
    stack.callback(_remove, temp_file.name)
    return temp_file


def transcode_sync(buffer: bytes, input_codec: str) -> bytes:
    """
    Converts `buffer` (encoded as `input_codec`) to a 16kHz mono PCM WAV.

    Each temp file is removed on its own once created, even when creating the
    other one or removing it fails.
    """
    with contextlib.ExitStack() as stack:
        input_file = _reserve(stack, f".{input_codec}")
        with input_file:
            input_file.write(buffer)
        output_file = _reserve(stack, ".wav")
        output_file.close()

        logger.debug(f"Converting audio buffer from {input_codec} to 16kHz mono WAV...")
        _convert(input_file.name, output_file.name, input_codec)

        with open(output_file.name, "rb") as f:
            waveform = f.read()
        logger.debug("Audio processing complete.")
        return waveform


async def transcode(buffer: bytes, input_codec: str = "mp3") -> bytes:
    # ffmpeg runs to completion once started, cancelling the await does not stop it.
    return await asyncio.to_thread(transcode_sync, buffer, input_codec)
