# __main__.py
import argparse
import asyncio
import sys
from pathlib import Path
from typing import Optional

from playwright.async_api import async_playwright
import pyppeteer

from .errors import RektCaptchaError
from .logger import setup_logger
from .model import MODEL_DIR, MODEL_URL
from .solver import DEFAULT_TIMEOUT, RektCaptcha

NAVIGATION_TIMEOUT = 60_000


async def run_playwright(args: argparse.Namespace) -> None:
    async with async_playwright() as p:
        browser = await p.chromium.launch(headless=args.headless)
        try:
            page = await browser.new_page()
            page.set_default_timeout(NAVIGATION_TIMEOUT)
            solver = RektCaptcha(page, args.timeout, args.model, model_dir=args.model_dir, verbose=args.verbose)
            await page.goto(args.url)
            await solver.solve()
            if args.screenshot:
                await page.screenshot(path=str(args.screenshot))
        finally:
            await browser.close()


async def run_puppeteer(args: argparse.Namespace) -> None:
    browser = await pyppeteer.launch(headless=args.headless)
    try:
        page = await browser.newPage()
        page.setDefaultNavigationTimeout(NAVIGATION_TIMEOUT)
        solver = RektCaptcha(page, args.timeout, args.model, model_dir=args.model_dir, verbose=args.verbose)
        await page.goto(args.url)
        await solver.solve()
        if args.screenshot:
            await page.screenshot({"path": str(args.screenshot)})
    finally:
        await browser.close()


RUNNERS = {
    "playwright": run_playwright,
    "puppeteer": run_puppeteer,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="rektcaptcha", description="Solve the audio reCAPTCHA on a page.")
    parser.add_argument("url", help="Page hosting the reCAPTCHA widget")
    parser.add_argument("--backend", choices=sorted(RUNNERS), default="playwright", help="Browser automation library to drive")
    parser.add_argument("--headless", action="store_true", help="Run in headless mode")
    parser.add_argument("--timeout", type=int, default=DEFAULT_TIMEOUT, help="Milliseconds to wait for each element")
    parser.add_argument("--model", default=MODEL_URL, help="URL or local zip archive of the Vosk model")
    parser.add_argument("--model-dir", type=Path, default=MODEL_DIR, help="Directory the model is unpacked into")
    parser.add_argument("--screenshot", type=Path, default=None, help="Save a screenshot here after solving")
    parser.add_argument("--verbose", action="store_true", help="Enable detailed logging")
    return parser


def main(argv: Optional[list] = None) -> int:
    args = build_parser().parse_args(argv)
    logger = setup_logger(args.verbose)

    try:
        asyncio.run(RUNNERS[args.backend](args))
    except RektCaptchaError as e:
        logger.critical(f"❌ Couldn't solve Captcha: {e}")
        return 1

    logger.info("Captcha solving process completed.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
