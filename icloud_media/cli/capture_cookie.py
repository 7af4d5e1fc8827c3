#!/usr/bin/env python3
"""
Capture an authenticated iCloud cookie header for the cookie credential.

Opens a browser window at the iCloud web portal, waits while you log in
(including any two-factor prompt), then prints the session cookies as a
single ``Cookie: Name=Value; Name=Value`` line.

Environment variables:
    ICLOUD_LOGIN_URL      URL to open for login (default: https://www.icloud.com/)
    ICLOUD_COOKIE_DOMAIN  Domain substring to keep (default: icloud.com)
    PRINT_COOKIE_JSON     Set to "true" to also print the captured cookies as JSON
"""
import argparse
import json
import logging
import os
import sys
from typing import Callable, Dict, List, Optional

from rich.console import Console
from selenium import webdriver
from selenium.common.exceptions import WebDriverException
from selenium.webdriver.chrome.options import Options
from selenium.webdriver.chrome.service import Service
from webdriver_manager.chrome import ChromeDriverManager

logger = logging.getLogger(__name__)

console = Console(stderr=True)

DEFAULT_LOGIN_URL = "https://www.icloud.com/"
DEFAULT_COOKIE_DOMAIN = "icloud.com"


def filter_cookies(cookies: List[Dict], domain_filter: str) -> List[Dict]:
    """Keep cookies whose domain contains ``domain_filter``."""
    return [
        cookie for cookie in cookies
        if cookie.get('domain') and domain_filter in cookie['domain']
    ]


def format_cookie_header(cookies: List[Dict]) -> str:
    """Join cookies as ``Name=Value; Name=Value``."""
    return '; '.join(f"{cookie['name']}={cookie['value']}" for cookie in cookies)


def create_driver() -> webdriver.Chrome:
    """Start a visible Chrome window for manual login."""
    chrome_options = Options()
    chrome_options.add_argument('--window-size=1280,900')
    chrome_options.add_argument('--disable-blink-features=AutomationControlled')
    chrome_options.add_experimental_option("excludeSwitches", ["enable-automation"])

    # Prefer webdriver-manager (automatic ChromeDriver management)
    try:
        service = Service(ChromeDriverManager().install())
        driver = webdriver.Chrome(service=service, options=chrome_options)
        logger.info("ChromeDriver configured via webdriver-manager")
    except Exception as e:
        logger.warning(f"webdriver-manager failed: {e}, trying system ChromeDriver")
        driver = webdriver.Chrome(options=chrome_options)
    return driver


def capture_cookies(login_url: str,
                    driver_factory: Callable[[], webdriver.Chrome] = create_driver,
                    wait_for_login: Callable[[str], str] = input) -> List[Dict]:
    """
    Open ``login_url``, wait for the user, and return every browser cookie.

    Args:
        login_url: Page to open for login
        driver_factory: Creates the WebDriver
        wait_for_login: Blocks until the user confirms login (default: input)

    Returns:
        Cookies as returned by ``driver.get_cookies()``
    """
    driver = driver_factory()
    try:
        console.print(f"Opening browser at {login_url}")
        driver.get(login_url)
        console.print(
            "Log in to iCloud in the opened browser window. When your session is active, "
            "return here and press Enter to capture cookies."
        )
        wait_for_login("Press Enter here to capture cookies... ")
        return driver.get_cookies()
    finally:
        driver.quit()


def main(argv: Optional[List[str]] = None,
         driver_factory: Callable[[], webdriver.Chrome] = create_driver,
         wait_for_login: Callable[[str], str] = input) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        prog='icloud-media-cookie',
        description='Capture an authenticated iCloud Cookie header from a browser login'
    )
    parser.add_argument(
        '--login-url',
        default=os.getenv('ICLOUD_LOGIN_URL') or DEFAULT_LOGIN_URL,
        help=f'URL to open for login (default: $ICLOUD_LOGIN_URL or {DEFAULT_LOGIN_URL})'
    )
    parser.add_argument(
        '--domain',
        default=os.getenv('ICLOUD_COOKIE_DOMAIN') or DEFAULT_COOKIE_DOMAIN,
        help=f'Domain substring to keep (default: $ICLOUD_COOKIE_DOMAIN or {DEFAULT_COOKIE_DOMAIN})'
    )
    args = parser.parse_args(argv)

    try:
        cookies = capture_cookies(args.login_url, driver_factory, wait_for_login)
    except WebDriverException as e:
        console.print(f"[red]Failed to start the browser: {e.msg or e}[/red]")
        console.print("Install Google Chrome, or a ChromeDriver matching your browser, and re-run.")
        return 1
    except (EOFError, KeyboardInterrupt):
        console.print("[yellow]Cookie capture cancelled.[/yellow]")
        return 1

    matching = filter_cookies(cookies, args.domain)
    if not matching:
        console.print(f'[red]No cookies found matching domain filter "{args.domain}".[/red]')
        return 1

    console.print("\nCopy this single header line into the iCloud cookie credential (ICLOUD_COOKIE):\n")
    print(f"Cookie: {format_cookie_header(matching)}")

    if os.getenv('PRINT_COOKIE_JSON') == 'true':
        console.print("\nCaptured cookies (JSON):\n")
        print(json.dumps(matching, indent=2))

    return 0


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    sys.exit(main())
