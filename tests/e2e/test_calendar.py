import re

import pytest

from locator_resolver import first_visible, is_visible_quiet, visible_within
import ui_selectors as S
from ui_actions import click_confirm, dialog_scope, expect_success, fill_first, open_feature, unique_title


pytestmark = pytest.mark.asyncio


async def click_date_cell(page) -> bool:
    """Click the first visible cell that holds just a day number."""
    cells = page.locator(S.DATE_CELLS)
    for i in range(min(await cells.count(), 40)):
        cell = cells.nth(i)
        if not await is_visible_quiet(cell):
            continue
        text = ((await cell.text_content()) or "").strip()
        if re.fullmatch(r"\d+", text) and int(text) > 0:
            await cell.click(force=True)
            return True
    return False


@pytest.mark.critical
async def test_view_calendar(authed_page, settings):
    page = authed_page
    await open_feature(page, settings, "/calendar")

    grid = await first_visible(page, S.CALENDAR, 5000, verbose=settings.verbose)
    if grid is None:
        assert await visible_within(page.locator(S.DATE_CELLS).first, 3000), f"No calendar grid or date cells (url={page.url})"


@pytest.mark.critical
async def test_add_event(authed_page, settings):
    page = authed_page
    await open_feature(page, settings, "/calendar")
    title = unique_title("Test Event")

    new_event = await first_visible(page, S.NEW_EVENT, 5000, verbose=settings.verbose)
    if new_event is not None:
        await new_event.click()
    else:
        print("→ No New Event button, clicking a date cell instead")
        assert await click_date_cell(page), "Neither a New Event button nor a date cell to click"
    await page.wait_for_timeout(2000)

    scope = await dialog_scope(page, 5000)
    assert await fill_first(scope, S.EVENT_TITLE, title, 3000, verbose=settings.verbose), "Event form not found"
    description = scope.locator("textarea").first
    if await is_visible_quiet(description, 1000):
        await description.fill("Test event description")

    assert await click_confirm(scope, ['button:has-text("Create Event")', *S.SAVE], verbose=settings.verbose), "Create Event button not found"
    await page.wait_for_timeout(3000)

    assert await expect_success(page, title), f"Event {title!r} not confirmed by title, content or toast"
