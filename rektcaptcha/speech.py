# speech.py
import io
import json
import logging
import wave
from pathlib import Path
from typing import Iterator, Union

import vosk

from .audio import SAMPLE_RATE
from .errors import UnsupportedAudioFormat
from .logger import LOGGER_NAME

CHUNK_FRAMES = 4000

logger = logging.getLogger(LOGGER_NAME)


def _open_waveform(waveform: bytes) -> wave.Wave_read:
    try:
        reader = wave.open(io.BytesIO(waveform), "rb")
    except (wave.Error, EOFError) as e:
        raise UnsupportedAudioFormat(f"Could not read WAV header: {e}") from e

    if reader.getnchannels() != 1 or reader.getcomptype() != "NONE" or reader.getsampwidth() != 2:
        channels = reader.getnchannels()
        reader.close()
        raise UnsupportedAudioFormat(
            f"Audio must be WAV format with Mono channel and 16-bit PCM samples (got {channels} channels)"
        )
    if reader.getframerate() != SAMPLE_RATE:
        rate = reader.getframerate()
        reader.close()
        raise UnsupportedAudioFormat(f"Audio must be sampled at {SAMPLE_RATE} Hz (got {rate} Hz)")
    return reader


def _frames(reader: wave.Wave_read, chunk_frames: int) -> Iterator[bytes]:
    while True:
        data = reader.readframes(chunk_frames)
        if not data:
            return
        yield data


def transcribe(waveform: bytes, model_path: Union[str, Path], chunk_frames: int = CHUNK_FRAMES) -> str:
    """
    Runs a single streaming recognition pass over a 16kHz mono 16-bit PCM WAV.

    Chunks are fed to the recognizer until it reports a complete utterance, in
    which case the rest of the input is ignored, or until the input runs out,
    in which case the recognizer's final result is used. Silence yields "".

    Raises:
        UnsupportedAudioFormat: the header is not 16kHz mono 16-bit PCM. Nothing is
            fed to the recognizer in that case.
    """
    reader = _open_waveform(waveform)
    vosk.SetLogLevel(0 if logger.isEnabledFor(logging.DEBUG) else -1)

    with reader:
        model = vosk.Model(str(model_path))
        recognizer = vosk.KaldiRecognizer(model, SAMPLE_RATE)
        try:
            for chunk in _frames(reader, chunk_frames):
                if recognizer.AcceptWaveform(chunk):
                    logger.debug("Recognizer reported a complete utterance before end of input.")
                    result = recognizer.Result()
                    break
            else:
                result = recognizer.FinalResult()
        finally:
            del recognizer, model

    return json.loads(result).get("text", "").strip()
