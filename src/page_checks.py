"""Security, performance and accessibility checks usable from any test."""

import json
import time
from pathlib import Path

from axe_playwright_python.async_playwright import Axe


SENSITIVE_URL_PARTS = ("password", "token", "secret", "api_key", "session")


class AccessibilityViolations(AssertionError):
    def __init__(self, violations: list[dict]):
        self.violations = violations
        ids = ", ".join(v.get("id", "?") for v in violations)
        super().__init__(f"Accessibility violations found ({len(violations)}): {ids}\n{json.dumps(violations, indent=2)}")


def check_https(page) -> bool:
    return page.url.startswith("https://")


def check_no_sensitive_data_in_url(page) -> bool:
    url = page.url.lower()
    return not any(part in url for part in SENSITIVE_URL_PARTS)


async def attempt_unauthorized_access(page, url: str) -> int:
    """HTTP status of a direct navigation, or 0 when it failed outright."""
    try:
        response = await page.goto(url)
    except Exception:
        return 0
    return response.status if response else 0


async def check_xss_escaped(page, input_selector: str, payload: str) -> bool:
    await page.fill(input_selector, payload)
    content = await page.content()
    return f"<script>{payload}</script>" not in content and f"javascript:{payload}" not in content


async def measure_page_load(page) -> dict:
    return await page.evaluate(
        """() => {
            const t = performance.timing;
            const nav = performance.getEntriesByType('navigation')[0];
            return {
                load_time: t.loadEventEnd - t.navigationStart,
                dom_content_loaded: t.domContentLoadedEventEnd - t.navigationStart,
                first_paint: nav ? nav.fetchStart : null,
                first_contentful_paint: nav ? nav.domContentLoadedEventStart : null,
            };
        }"""
    )


async def wait_for_network_idle(page, timeout_ms: int = 5000) -> None:
    await page.wait_for_load_state("networkidle", timeout=timeout_ms)


async def measure_upload_time(page, upload_selector: str, file_path: Path) -> float:
    """Seconds from handing the file to the input until the network is idle."""
    start = time.monotonic()
    await page.set_input_files(upload_selector, str(file_path))
    await page.wait_for_load_state("networkidle")
    return time.monotonic() - start


async def check_accessibility(page, tags: list[str] | None = None, excludes: list[str] | None = None) -> None:
    options = {"runOnly": {"type": "tag", "values": tags or ["wcag2a", "wcag2aa", "wcag21aa"]}}
    context = {"exclude": [[sel] for sel in excludes]} if excludes else None
    results = await Axe().run(page, context=context, options=options)
    violations = results.response.get("violations", [])
    if violations:
        raise AccessibilityViolations(violations)
