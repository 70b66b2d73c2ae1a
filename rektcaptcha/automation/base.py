from abc import ABC, abstractmethod
from typing import Any, Optional


class AutomationBackend(ABC):
    """
    The operations the solver needs from a browser automation library.

    Contexts are pages or frames, elements are element handles. Every method is
    a coroutine so Playwright and pyppeteer objects can be driven the same way.
    """
    name = "abstract"
    # Attribute names whose presence identifies an object of this backend.
    MARKERS: tuple = ()

    def matches(self, obj: Any) -> bool:
        return any(callable(getattr(obj, marker, None)) for marker in self.MARKERS)

    @abstractmethod
    async def wait_for_element(self, context: Any, selector: str, timeout: float) -> Optional[Any]:
        """Returns None when the selector does not match within `timeout` milliseconds."""

    @abstractmethod
    async def descend_into_frame(self, element: Any) -> Optional[Any]:
        """Returns the document hosted by an iframe element, None if it has none (yet)."""

    @abstractmethod
    async def read_attribute(self, context: Any, selector: str, name: str) -> Optional[str]:
        ...

    @abstractmethod
    async def fill_or_type(self, element: Any, text: str) -> None:
        ...

    @abstractmethod
    async def click(self, element: Any) -> None:
        ...


class NullBackend(AutomationBackend):
    """Used for objects that look like neither backend. Nothing here raises."""
    name = "null"

    def matches(self, obj: Any) -> bool:
        return False

    async def wait_for_element(self, context, selector, timeout):
        return None

    async def descend_into_frame(self, element):
        return None

    async def read_attribute(self, context, selector, name):
        return None

    async def fill_or_type(self, element, text):
        return None

    async def click(self, element):
        return None
