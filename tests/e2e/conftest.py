"""
Fixtures for the live suite.

Every test gets its own browser, context and page. Tests that need an
authenticated session request ``login`` (a callable) or ``authed_page``.
Failures keep a full-page screenshot, the Playwright trace and the video
under ``E2E_ARTIFACTS_DIR``.
"""
import shutil
from pathlib import Path

import pytest
import pytest_asyncio
from playwright.async_api import async_playwright

from e2e_config import load_settings
from locator_resolver import build_element_inventory
from login_flow import SessionEstablisher
from ui_actions import capture_failure


ASSETS_DIR = Path(__file__).parent / "assets"


@pytest.hookimpl(tryfirst=True, hookwrapper=True)
def pytest_runtest_makereport(item, call):
    """Store test results for use in fixtures."""
    outcome = yield
    rep = outcome.get_result()
    setattr(item, f"rep_{rep.when}", rep)


def pytest_collection_modifyitems(config, items):
    settings = load_settings()
    skip_live = pytest.mark.skip(reason="Live E2E tests are skipped by default; set E2E_LIVE=1 to run")
    for item in items:
        if "tests/e2e" not in item.nodeid.replace("\\", "/"):
            continue
        item.add_marker(pytest.mark.live)
        if not settings.live:
            item.add_marker(skip_live)


def _failed(request) -> bool:
    rep = getattr(request.node, "rep_call", None)
    return bool(rep and rep.failed)


@pytest.fixture(scope="session")
def settings():
    return load_settings()


@pytest.fixture
def sample_pdf() -> Path:
    return ASSETS_DIR / "sample.pdf"


@pytest_asyncio.fixture
async def browser(settings):
    launch = {"headless": settings.headless}
    if settings.slow_mo:
        launch["slow_mo"] = settings.slow_mo
    if settings.browser_channel:
        launch["channel"] = settings.browser_channel
    async with async_playwright() as p:
        browser = await p.chromium.launch(**launch)
        yield browser
        await browser.close()


@pytest_asyncio.fixture
async def context(browser, settings, request):
    video_dir = settings.artifacts_dir / "videos" / request.node.name
    context = await browser.new_context(
        base_url=settings.base_url,
        viewport={"width": 1366, "height": 900},
        accept_downloads=True,
        record_video_dir=str(video_dir),
    )
    context.set_default_timeout(30000)
    await context.tracing.start(screenshots=True, snapshots=True, sources=True)
    yield context

    if _failed(request):
        trace_path = settings.artifacts_dir / "traces" / f"{request.node.name}.zip"
        trace_path.parent.mkdir(parents=True, exist_ok=True)
        await context.tracing.stop(path=str(trace_path))
        print(f"✖ Trace saved: {trace_path}")
    else:
        await context.tracing.stop()
    await context.close()
    if not _failed(request):
        # Videos are only kept for failures
        shutil.rmtree(video_dir, ignore_errors=True)


@pytest_asyncio.fixture
async def page(context, settings, request):
    page = await context.new_page()
    yield page
    if _failed(request) and not page.is_closed():
        shot = await capture_failure(page, settings.artifacts_dir / "screenshots", request.node.name)
        if shot:
            print(f"✖ Screenshot saved: {shot}")
        if settings.verbose:
            inventory = await build_element_inventory(page, limit=50)
            print(f"→ Element inventory at {page.url}: {inventory}")


@pytest.fixture
def login(context, page, settings):
    """Callable that runs the session establisher for this test's context."""
    async def _login():
        return await SessionEstablisher(settings, verbose=settings.verbose).establish(context, page)
    return _login


@pytest_asyncio.fixture
async def authed_page(login, page):
    await login()
    return page
