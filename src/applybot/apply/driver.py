"""Document driver abstraction for the apply engine.

The engine only ever talks to a ``Driver``: look elements up inside a scope,
read them, click/type/upload, and wait for selectors. Element handles are
opaque to everything above this module.

@file driver.py
@description Driver ABC plus the Playwright implementation and the
             persistent browser session used by the CLI.
"""

from __future__ import annotations

import functools
import logging
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator, Awaitable, Callable, TypeVar

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from playwright.async_api import async_playwright

from applybot.errors import DriverError, DriverTimeout

logger = logging.getLogger(__name__)

# Opaque element handle. Only the driver that produced it may interpret it.
Locator = Any

T = TypeVar("T")

BROWSER_ARGS: tuple[str, ...] = (
    "--start-maximized",
    "--no-sandbox",
    "--disable-blink-features=AutomationControlled",
)


class Driver(ABC):
    """Primitive document capabilities consumed by the apply engine.

    ``scope=None`` means the whole document.
    """

    @abstractmethod
    async def navigate(self, url: str) -> None: ...

    @abstractmethod
    async def current_url(self) -> str: ...

    @abstractmethod
    async def find_one(self, scope: Locator | None, selector: str) -> Locator | None: ...

    @abstractmethod
    async def find_all(self, scope: Locator | None, selector: str) -> list[Locator]: ...

    @abstractmethod
    async def click(self, locator: Locator, click_count: int = 1) -> None: ...

    @abstractmethod
    async def type(self, locator: Locator, text: str, delay: float = 0) -> None:
        """Type text into the element. delay is per keystroke, in seconds."""

    @abstractmethod
    async def select_option(self, select: Locator, option: Locator) -> None: ...

    @abstractmethod
    async def upload_file(self, locator: Locator, path: Path) -> None: ...

    @abstractmethod
    async def press(self, key: str) -> None: ...

    @abstractmethod
    async def read_text(self, locator: Locator) -> str: ...

    @abstractmethod
    async def read_attribute(self, locator: Locator, name: str) -> str | None:
        """Attribute value, "" for a bare boolean attribute, None when absent."""

    @abstractmethod
    async def wait_for(self, selector: str, timeout: float) -> Locator:
        """Wait until selector is visible. Raises DriverTimeout after timeout seconds."""

    @abstractmethod
    async def scroll_into_view(self, locator: Locator) -> None: ...


def _translate_errors(fn: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
    """Re-raise Playwright failures as DriverError so callers see one taxonomy."""

    @functools.wraps(fn)
    async def wrapper(*args: Any, **kwargs: Any) -> T:
        try:
            return await fn(*args, **kwargs)
        except PlaywrightError as e:
            raise DriverError(f"{fn.__name__} failed: {e}") from e

    return wrapper


class PlaywrightDriver(Driver):
    """Driver backed by a single Playwright page (one exclusive session)."""

    def __init__(self, page: Page) -> None:
        self.page = page

    @_translate_errors
    async def navigate(self, url: str) -> None:
        logger.debug("Navigating to %s", url)
        await self.page.goto(url, wait_until="domcontentloaded")

    async def current_url(self) -> str:
        return self.page.url

    @_translate_errors
    async def find_one(self, scope, selector):
        return await (scope or self.page).query_selector(selector)

    @_translate_errors
    async def find_all(self, scope, selector):
        return await (scope or self.page).query_selector_all(selector)

    @_translate_errors
    async def click(self, locator, click_count=1):
        await locator.click(click_count=click_count)

    @_translate_errors
    async def type(self, locator, text, delay=0):
        await locator.type(text, delay=delay * 1000)

    @_translate_errors
    async def select_option(self, select, option):
        await select.select_option(element=option)

    @_translate_errors
    async def upload_file(self, locator, path):
        await locator.set_input_files(str(path))

    @_translate_errors
    async def press(self, key):
        await self.page.keyboard.press(key)

    @_translate_errors
    async def read_text(self, locator):
        return (await locator.inner_text()).strip()

    @_translate_errors
    async def read_attribute(self, locator, name):
        return await locator.get_attribute(name)

    async def wait_for(self, selector, timeout):
        try:
            return await self.page.wait_for_selector(selector, state="visible", timeout=timeout * 1000)
        except PlaywrightTimeoutError as e:
            raise DriverTimeout(selector, timeout) from e
        except PlaywrightError as e:
            raise DriverError(f"wait_for failed: {e}") from e

    @_translate_errors
    async def scroll_into_view(self, locator):
        await locator.scroll_into_view_if_needed()


@asynccontextmanager
async def browser_session(
    profile_dir: Path,
    headless: bool = False,
    executable_path: str | None = None,
) -> AsyncIterator[PlaywrightDriver]:
    """Launch a persistent Chromium profile and yield a driver on its first page.

    The browser is closed on exit however the block ends, cookies stay in
    ``profile_dir`` for the next run.
    """
    profile_dir.mkdir(parents=True, exist_ok=True)
    async with async_playwright() as pw:
        context = await pw.chromium.launch_persistent_context(
            user_data_dir=str(profile_dir),
            headless=headless,
            executable_path=executable_path,
            args=list(BROWSER_ARGS),
            no_viewport=True,
        )
        try:
            page = context.pages[0] if context.pages else await context.new_page()
            yield PlaywrightDriver(page)
        finally:
            logger.info("Closing browser session")
            await context.close()
