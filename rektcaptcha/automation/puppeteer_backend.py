from typing import Any, Optional

from pyppeteer.errors import TimeoutError as PyppeteerTimeoutError

from .base import AutomationBackend

# pyppeteer element handles have no getAttribute of their own.
_GET_ATTRIBUTE_JS = "(el, name) => el.getAttribute(name)"


class PuppeteerBackend(AutomationBackend):
    """pyppeteer keeps Puppeteer's camelCase API, which is what we detect it by."""
    name = "puppeteer"
    MARKERS = ("waitForSelector", "contentFrame", "querySelector")

    async def wait_for_element(self, context: Any, selector: str, timeout: float) -> Optional[Any]:
        try:
            return await context.waitForSelector(selector, timeout=timeout)
        except PyppeteerTimeoutError:
            return None

    async def descend_into_frame(self, element: Any) -> Optional[Any]:
        return await element.contentFrame()

    async def read_attribute(self, context: Any, selector: str, name: str) -> Optional[str]:
        element = await context.querySelector(selector)
        if element is None:
            return None
        return await context.evaluate(_GET_ATTRIBUTE_JS, element, name)

    async def fill_or_type(self, element: Any, text: str) -> None:
        await element.type(text)

    async def click(self, element: Any) -> None:
        await element.click()
