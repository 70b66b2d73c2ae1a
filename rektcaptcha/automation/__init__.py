"""
Uniform access to Playwright and pyppeteer objects.

The solver only talks to the functions below. Each call inspects the object it
is given and dispatches to the matching backend, so callers never declare which
library they use. Objects matching neither backend get `NullBackend`, whose
operations return None instead of raising.
"""
from typing import Any, Optional

from .base import AutomationBackend, NullBackend
from .playwright_backend import PlaywrightBackend
from .puppeteer_backend import PuppeteerBackend

# Detection order matters only for objects carrying both signatures.
BACKENDS = (PlaywrightBackend(), PuppeteerBackend())
NULL_BACKEND = NullBackend()


def backend_for(obj: Any) -> AutomationBackend:
    for backend in BACKENDS:
        if backend.matches(obj):
            return backend
    return NULL_BACKEND


async def wait_for_element(context: Any, selector: str, timeout: float) -> Optional[Any]:
    return await backend_for(context).wait_for_element(context, selector, timeout)


async def descend_into_frame(element: Any) -> Optional[Any]:
    return await backend_for(element).descend_into_frame(element)


async def read_attribute(context: Any, selector: str, name: str) -> Optional[str]:
    return await backend_for(context).read_attribute(context, selector, name)


async def fill_or_type(element: Any, text: str) -> None:
    await backend_for(element).fill_or_type(element, text)


async def click(element: Any) -> None:
    await backend_for(element).click(element)


__all__ = [
    "AutomationBackend",
    "NullBackend",
    "PlaywrightBackend",
    "PuppeteerBackend",
    "backend_for",
    "wait_for_element",
    "descend_into_frame",
    "read_attribute",
    "fill_or_type",
    "click",
]
