from typing import Any, Optional

from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from .base import AutomationBackend


class PlaywrightBackend(AutomationBackend):
    name = "playwright"
    MARKERS = ("wait_for_selector", "content_frame", "query_selector")

    async def wait_for_element(self, context: Any, selector: str, timeout: float) -> Optional[Any]:
        try:
            return await context.wait_for_selector(selector, timeout=timeout)
        except PlaywrightTimeoutError:
            return None

    async def descend_into_frame(self, element: Any) -> Optional[Any]:
        return await element.content_frame()

    async def read_attribute(self, context: Any, selector: str, name: str) -> Optional[str]:
        element = await context.query_selector(selector)
        if element is None:
            return None
        return await element.get_attribute(name)

    async def fill_or_type(self, element: Any, text: str) -> None:
        await element.fill(text)

    async def click(self, element: Any) -> None:
        await element.click()
