import pytest
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from page_checks import measure_page_load, measure_upload_time, wait_for_network_idle
from ui_actions import open_feature


pytestmark = pytest.mark.asyncio

LOGIN_LOAD_BUDGET_MS = 10000


@pytest.mark.functional
async def test_login_page_load_time(page, settings):
    await page.goto(settings.url("/login"), wait_until="load")
    metrics = await measure_page_load(page)
    print(f"→ Login page timings: {metrics}")

    assert metrics["dom_content_loaded"] >= 0
    assert metrics["load_time"] < LOGIN_LOAD_BUDGET_MS, f"Login page took {metrics['load_time']}ms to load"


@pytest.mark.functional
async def test_upload_time(authed_page, settings, sample_pdf):
    page = authed_page
    await open_feature(page, settings, "/files")
    if await page.locator('input[type="file"]').count() == 0:
        pytest.skip("No file input on the files page")

    try:
        seconds = await measure_upload_time(page, 'input[type="file"]', sample_pdf)
    except PlaywrightTimeoutError:
        # The files page keeps polling, so networkidle may never come
        pytest.skip("Network never went idle after the upload")
    print(f"✓ sample.pdf uploaded in {seconds:.1f}s")
    try:
        await wait_for_network_idle(page, 5000)
    except PlaywrightTimeoutError:
        print("⚠️ Network still busy after the upload")
