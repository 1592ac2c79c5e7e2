"""
Example: open a page, read it, and take a screenshot.

Start a driver first, e.g.:
  chromedriver --port=4444

Usage:
  W3CDRIVER_SERVER_URL=http://localhost:4444 python examples/basic_navigation.py
"""

import asyncio
import logging
import os

from w3cdriver import By, DesiredCapabilities, DriverConfig, WebDriverSession


async def main() -> None:
    logging.basicConfig(level=logging.INFO)

    caps = DesiredCapabilities.chrome()
    if os.environ.get("HEADLESS", "1").strip() not in {"0", "false", "False"}:
        caps.set_headless()

    session = WebDriverSession.from_config(DriverConfig.from_env(), capabilities=caps)
    async with session:
        await session.get(os.environ.get("START_URL", "https://example.com"))
        print(f"title: {await session.title()}")
        print(f"url:   {await session.current_url()}")

        heading = await session.find_element(By.TAG_NAME, "h1")
        print(f"h1:    {await heading.text()}")

        for link in await session.find_elements(By.CSS_SELECTOR, "a[href]"):
            print(f"link:  {await link.get_attribute('href')}")

        path = await session.save_screenshot("example.png")
        print(f"screenshot saved to {path}")


if __name__ == "__main__":
    asyncio.run(main())
