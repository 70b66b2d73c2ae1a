# solver.py

import asyncio
import logging
from pathlib import Path
from typing import Any, Optional

import httpx

from . import automation
from .audio import transcode
from .errors import (
    AudioDownloadFailed,
    ChallengeFrameNotFound,
    ChallengeNotFound,
    ElementNotFound,
    FrameNotFound,
)
from .logger import setup_logger
from .model import MODEL_DIR, MODEL_URL, ModelDescriptor, ensure_model
from .speech import transcribe

DEFAULT_TIMEOUT = 15000
# Time the audio element needs to attach after switching to the audio challenge.
SETTLE_DELAY = 2.0
HTTP_TIMEOUT = 30


class RektCaptcha:
    """
    Solves reCAPTCHA challenges through the audio variant, transcribing the clip
    offline with a Vosk model.

    Works with either a Playwright or a pyppeteer page; which one is worked out
    from the object itself. The page belongs to the caller and is never closed.
    """
    # Selectors for various reCAPTCHA elements
    _IFRAME_WIDGET_SELECTOR = "iframe[src*='recaptcha']"
    _IFRAME_CHALLENGE_SELECTOR = "iframe[src*='https://www.google.com/recaptcha/api2/bframe']"
    _CHECKBOX_SELECTOR = '#recaptcha-anchor'
    _AUDIO_BUTTON_SELECTOR = '#recaptcha-audio-button'
    _AUDIO_SOURCE_SELECTOR = '#audio-source'
    _AUDIO_RESPONSE_INPUT_SELECTOR = '#audio-response'
    _VERIFY_BUTTON_SELECTOR = '#recaptcha-verify-button'

    AUDIO_CODEC = "mp3"

    def __init__(
        self,
        page: Any,
        timeout: float = DEFAULT_TIMEOUT,
        model: str = MODEL_URL,
        *,
        model_dir: Path = MODEL_DIR,
        settle_delay: float = SETTLE_DELAY,
        http_timeout: float = HTTP_TIMEOUT,
        verbose: bool = False,
    ):
        """
        Initializes the solver.

        Args:
            page: The Playwright or pyppeteer Page object where the CAPTCHA is located.
            timeout: Milliseconds to wait for every element lookup.
            model: URL or local zip archive of the Vosk model.
            model_dir: Directory the model archive gets unpacked into.
            settle_delay: Seconds to wait after switching to the audio challenge.
            http_timeout: Timeout in seconds for downloading the audio clip.
            verbose: If True, enables detailed logging.
        """
        self.page = page
        self.timeout = timeout
        self.settle_delay = settle_delay
        self.http_timeout = http_timeout
        self.verbose = verbose
        self.logger = setup_logger(verbose)
        self.model = ModelDescriptor(source=model, cache_dir=model_dir)

        self._warmup: Optional[asyncio.Task] = None
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            # Constructed outside a running event loop, the model is fetched on first use.
            self.logger.debug("No running event loop, deferring model download.")
        else:
            self._warmup = asyncio.create_task(self._warm_up_model())

    async def _warm_up_model(self):
        try:
            await ensure_model(self.model)
            self.logger.info("Vosk model is ready for use.")
        except Exception as e:
            self.logger.warning(f"Background model download failed, retrying before transcription: {e}")

    async def solve(self) -> None:
        """
        Main method to orchestrate the solving of the reCAPTCHA.

        Returns normally once the answer has been submitted, or when no audio
        challenge is present. Raises a RektCaptchaError subclass (or the
        audio conversion error) when a required step fails.
        """
        self.logger.info("Solving reCAPTCHA.")
        try:
            challenge_frame = await self._enter_challenge()
            await self._solve_audio_challenge(challenge_frame)
        except Exception as e:
            self.logger.error(f"Failed to solve audio challenge: {e}", exc_info=self.verbose)
            raise

    async def _enter_challenge(self) -> Any:
        widget = await automation.wait_for_element(self.page, self._IFRAME_WIDGET_SELECTOR, self.timeout)
        if widget is None:
            raise ElementNotFound("reCAPTCHA iframe not found")

        widget_frame = await automation.descend_into_frame(widget)
        if widget_frame is None:
            raise FrameNotFound("reCAPTCHA content frame not found")

        checkbox = await automation.wait_for_element(widget_frame, self._CHECKBOX_SELECTOR, self.timeout)
        if checkbox is not None:
            self.logger.info("Clicking the reCAPTCHA checkbox...")
            await automation.click(checkbox)

        challenge = await automation.wait_for_element(self.page, self._IFRAME_CHALLENGE_SELECTOR, self.timeout)
        if challenge is None:
            raise ChallengeNotFound("Challenge iframe not found.")

        challenge_frame = await automation.descend_into_frame(challenge)
        if challenge_frame is None:
            raise ChallengeFrameNotFound("Could not retrieve content frame from challenge iframe.")
        return challenge_frame

    async def _solve_audio_challenge(self, frame: Any) -> None:
        audio_btn = await automation.wait_for_element(frame, self._AUDIO_BUTTON_SELECTOR, self.timeout)
        if audio_btn is not None:
            self.logger.info("Switching to audio challenge...")
            await automation.click(audio_btn)

        self.logger.info("Waiting for audio challenge...")
        await asyncio.sleep(self.settle_delay)

        audio_src = await automation.read_attribute(frame, self._AUDIO_SOURCE_SELECTOR, "src")
        self.logger.info(f"Audio source: {audio_src}")
        if not audio_src:
            self.logger.info("No audio challenge present, nothing to submit.")
            return

        transcribed_text = await self._process_audio_challenge(audio_src)
        self.logger.info(f"Transcription result: '{transcribed_text}'")

        response_input = await automation.wait_for_element(frame, self._AUDIO_RESPONSE_INPUT_SELECTOR, self.timeout)
        if response_input is not None:
            await automation.fill_or_type(response_input, transcribed_text)

        verify_btn = await automation.wait_for_element(frame, self._VERIFY_BUTTON_SELECTOR, self.timeout)
        if verify_btn is not None:
            await automation.click(verify_btn)

    async def _download_audio(self, audio_src: str) -> bytes:
        self.logger.info("Downloading audio challenge...")
        async with httpx.AsyncClient(timeout=self.http_timeout, follow_redirects=True) as client:
            response = await client.get(audio_src)
        if not response.is_success:
            raise AudioDownloadFailed(audio_src, response.status_code, response.reason_phrase)
        return response.content

    async def _process_audio_challenge(self, audio_src: str) -> str:
        audio_bytes = await self._download_audio(audio_src)
        waveform = await transcode(audio_bytes, self.AUDIO_CODEC)

        if self._warmup is not None and not self._warmup.done():
            await self._warmup
        model_path = await ensure_model(self.model)

        return await asyncio.to_thread(transcribe, waveform, model_path)
