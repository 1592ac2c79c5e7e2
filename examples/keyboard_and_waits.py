"""
Example: type into a search box with an action chain, then wait for results.

Usage:
  W3CDRIVER_SERVER_URL=http://localhost:4444 python examples/keyboard_and_waits.py
"""

import asyncio
import os

from w3cdriver import By, DesiredCapabilities, DriverConfig, Keys, WaitTimeoutError, WebDriverSession
from w3cdriver import conditions


async def main() -> None:
    config = DriverConfig.from_env(wait_timeout_s=15)
    caps = DesiredCapabilities.firefox()
    caps.set_headless()

    async with WebDriverSession.from_config(config, capabilities=caps) as session:
        await session.set_timeouts(page_load_ms=30_000)
        await session.get(os.environ.get("SEARCH_URL", "https://duckduckgo.com"))

        box = await session.wait().until(conditions.element_clickable(By.NAME, "q"))

        # One PerformActions command: click, type, select all, retype, submit.
        chain = session.action_chain()
        chain.click(box).send_keys("webdriver")
        chain.key_down(Keys.CONTROL).send_keys("a").key_up(Keys.CONTROL)
        chain.send_keys("w3c webdriver", Keys.ENTER)
        await chain.perform()

        try:
            await session.wait().until(conditions.title_contains("webdriver"))
        except WaitTimeoutError as e:
            print(f"results did not load: {e}")
            return

        results = await session.wait().until(conditions.elements_located(By.CSS_SELECTOR, "article h2"))
        for result in results[:5]:
            print(await result.text())

        await session.release_actions()


if __name__ == "__main__":
    asyncio.run(main())
