"""
Shared fixtures: fake Playwright and pyppeteer objects, WAV builders and a
ready-made model directory.

The fakes only carry the methods of the library they imitate, so the backend
detection sees them the same way it would see the real objects.
"""
import io
import wave
import zipfile
from pathlib import Path
from typing import Optional
from unittest.mock import patch

import httpx
import pytest
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from pyppeteer.errors import TimeoutError as PyppeteerTimeoutError

from rektcaptcha.model import MODEL_NAME, REQUIRED_FILES
from rektcaptcha.solver import RektCaptcha

AUDIO_URL = "https://www.google.com/recaptcha/api2/payload/audio.mp3?p=abc"


# --- Playwright-shaped fakes ---

class FakePlaywrightElement:
    def __init__(self, frame=None, attributes: Optional[dict] = None):
        self.frame = frame
        self.attributes = attributes or {}
        self.value = ""
        self.clicks = 0

    async def content_frame(self):
        return self.frame

    async def get_attribute(self, name):
        return self.attributes.get(name)

    async def fill(self, text):
        self.value = text

    async def click(self):
        self.clicks += 1


class FakePlaywrightFrame:
    def __init__(self, elements: Optional[dict] = None):
        self.elements = dict(elements or {})
        self.waits = []

    async def wait_for_selector(self, selector, timeout=None):
        self.waits.append((selector, timeout))
        if selector in self.elements:
            return self.elements[selector]
        raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded.")

    async def query_selector(self, selector):
        return self.elements.get(selector)


# --- pyppeteer-shaped fakes ---

class FakePuppeteerElement:
    def __init__(self, frame=None, attributes: Optional[dict] = None):
        self.frame = frame
        self.attributes = attributes or {}
        self.value = ""
        self.clicks = 0

    async def contentFrame(self):
        return self.frame

    async def type(self, text):
        self.value += text

    async def click(self):
        self.clicks += 1


class FakePuppeteerFrame:
    def __init__(self, elements: Optional[dict] = None):
        self.elements = dict(elements or {})
        self.waits = []

    async def waitForSelector(self, selector, timeout=None):
        self.waits.append((selector, timeout))
        if selector in self.elements:
            return self.elements[selector]
        raise PyppeteerTimeoutError(f"Waiting for selector \"{selector}\" failed: timeout {timeout}ms exceeds.")

    async def querySelector(self, selector):
        return self.elements.get(selector)

    async def evaluate(self, page_function, element, name):
        return element.attributes.get(name)


FAKES = {
    "playwright": (FakePlaywrightFrame, FakePlaywrightElement),
    "puppeteer": (FakePuppeteerFrame, FakePuppeteerElement),
}


class ChallengePage:
    """A fake page with the two reCAPTCHA iframes wired up."""

    def __init__(
        self,
        backend: str,
        *,
        widget: bool = True,
        widget_frame: bool = True,
        checkbox: bool = True,
        challenge: bool = True,
        challenge_frame: bool = True,
        audio_button: bool = True,
        audio_src: Optional[str] = AUDIO_URL,
        response_field: bool = True,
        verify_button: bool = True,
    ):
        frame_cls, element_cls = FAKES[backend]

        self.checkbox = element_cls()
        self.audio_button = element_cls()
        self.response_field = element_cls()
        self.verify_button = element_cls()

        self.widget_frame = frame_cls()
        if checkbox:
            self.widget_frame.elements[RektCaptcha._CHECKBOX_SELECTOR] = self.checkbox

        self.challenge_frame = frame_cls()
        if audio_button:
            self.challenge_frame.elements[RektCaptcha._AUDIO_BUTTON_SELECTOR] = self.audio_button
        if audio_src is not None:
            self.challenge_frame.elements[RektCaptcha._AUDIO_SOURCE_SELECTOR] = element_cls(attributes={"src": audio_src})
        if response_field:
            self.challenge_frame.elements[RektCaptcha._AUDIO_RESPONSE_INPUT_SELECTOR] = self.response_field
        if verify_button:
            self.challenge_frame.elements[RektCaptcha._VERIFY_BUTTON_SELECTOR] = self.verify_button

        self.page = frame_cls()
        if widget:
            self.page.elements[RektCaptcha._IFRAME_WIDGET_SELECTOR] = element_cls(
                frame=self.widget_frame if widget_frame else None
            )
        if challenge:
            self.page.elements[RektCaptcha._IFRAME_CHALLENGE_SELECTOR] = element_cls(
                frame=self.challenge_frame if challenge_frame else None
            )


@pytest.fixture(params=sorted(FAKES))
def backend(request) -> str:
    return request.param


# --- audio helpers ---

def make_wav(channels: int = 1, rate: int = 16000, sampwidth: int = 2, frames: int = 16000) -> bytes:
    buffer = io.BytesIO()
    with wave.open(buffer, "wb") as wf:
        wf.setnchannels(channels)
        wf.setsampwidth(sampwidth)
        wf.setframerate(rate)
        wf.writeframes(b"\x00" * frames * channels * sampwidth)
    return buffer.getvalue()


# --- model helpers ---

def make_model_archive(name: str = MODEL_NAME, files=REQUIRED_FILES) -> bytes:
    """An empty `name` puts the model files at the archive root."""
    prefix = f"{name}/" if name else ""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        for required in files:
            archive.writestr(f"{prefix}{required}", b"model data")
        archive.writestr(f"{prefix}README", b"Vosk model")
    return buffer.getvalue()


@pytest.fixture
def model_dir(tmp_path: Path) -> Path:
    """A cache directory that already holds an installed model."""
    cache_dir = tmp_path / "models"
    for required in REQUIRED_FILES:
        target = cache_dir / MODEL_NAME / required
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(b"model data")
    return cache_dir


# --- network helpers ---

class RecordingTransport(httpx.MockTransport):
    def __init__(self, status_code: int = 200, content: bytes = b"ID3 fake mp3"):
        self.requests = []
        self.status_code = status_code
        self.content = content
        super().__init__(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, content=self.content)


@pytest.fixture
def http_transport():
    """Routes every httpx.AsyncClient created during the test through a recording transport."""
    transport = RecordingTransport()
    real_client = httpx.AsyncClient

    def client_factory(*args, **kwargs):
        return real_client(*args, transport=transport, **kwargs)

    with patch("httpx.AsyncClient", side_effect=client_factory):
        yield transport
