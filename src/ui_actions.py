"""Feature steps shared by the live tests.

Every step tolerates markup drift: specific selectors first, then a
bounded keyword scan, and outcomes are accepted from several UI shapes.
"""

import re
import time
from pathlib import Path

from e2e_config import Settings
from locator_resolver import (
    any_signal,
    first_visible,
    is_enabled,
    is_visible_quiet,
    maybe_dismiss_cookie_banner,
    scan_for_keywords,
    text_includes,
    visible_within,
)
from reporting import screenshot_slug
import ui_selectors as S


def unique_title(prefix: str) -> str:
    return f"{prefix} {int(time.time() * 1000)}"


async def open_feature(page, settings: Settings, path: str, settle_ms: int = 3000) -> None:
    """Navigate to a feature route; the app polls continuously so networkidle is not used."""
    await page.goto(settings.url(path), wait_until="domcontentloaded")
    await page.wait_for_timeout(settle_ms)
    await maybe_dismiss_cookie_banner(page, verbose=settings.verbose)


async def page_text(page) -> str:
    try:
        return (await page.text_content("body")) or ""
    except Exception:
        return ""


async def page_text_contains(page, *needles: str) -> bool:
    body = (await page_text(page)).lower()
    return any(n.lower() in body for n in needles)


async def find_action_button(page, selectors: list[str], keyword_groups: list[tuple[str, ...]], timeout_ms: int = 3000, verbose: bool = False):
    btn = await first_visible(page, selectors, timeout_ms, verbose=verbose)
    if btn is None:
        if verbose:
            print("→ Specific selectors missed, scanning buttons and links")
        btn = await scan_for_keywords(page, keyword_groups, cap=50, verbose=verbose)
    return btn


async def dialog_scope(page, timeout_ms: int = 3000):
    """The open modal if one is showing, otherwise the page itself."""
    modal = page.locator(S.MODAL).first
    if await visible_within(modal, timeout_ms):
        return modal
    return page


async def fill_first(scope, selectors: list[str], value: str, timeout_ms: int = 2000, verbose: bool = False) -> bool:
    field = await first_visible(scope, selectors, timeout_ms, predicate=is_enabled)
    if field is None:
        return False
    await field.fill(value)
    if verbose:
        print(f"→ Filled {value!r}")
    return True


async def click_confirm(scope, selectors: list[str] = S.SAVE, words: tuple[str, ...] = ("create", "save"), timeout_ms: int = 3000, verbose: bool = False) -> bool:
    btn = await first_visible(scope, selectors, timeout_ms, predicate=text_includes(*words))
    if btn is None:
        return False
    await btn.click()
    if verbose:
        print(f"→ Clicked {'/'.join(words)} button")
    return True


async def wait_closed(locator, timeout_ms: int = 10000) -> bool:
    try:
        await locator.wait_for(state="hidden", timeout=timeout_ms)
        return True
    except Exception:
        return False


async def open_create_dialog(page, selectors: list[str], keyword_groups: list[tuple[str, ...]], verbose: bool = False):
    """Click a create/new control and return the scope its form lives in, or None."""
    btn = await find_action_button(page, selectors, keyword_groups, verbose=verbose)
    if btn is None:
        return None
    await btn.scroll_into_view_if_needed()
    await btn.click()
    await page.wait_for_timeout(1000)
    return await dialog_scope(page)


async def expect_success(page, title: str, item_selector: str = "[data-testid], [class*='item'], [class*='card']", timeout_ms: int = 5000) -> bool:
    """Created ``title`` shows up as text, inside a list item, or a success toast appears."""
    return await any_signal(
        visible_within(page.get_by_text(title, exact=False).first, timeout_ms),
        visible_within(page.locator(item_selector).filter(has_text=title).first, timeout_ms),
        visible_within(page.locator(S.SEL["toast"]).first, timeout_ms),
        visible_within(page.get_by_text(re.compile(r"created|success|saved", re.I)).first, timeout_ms),
        page_text_contains(page, title),
    )


async def error_visible(page, timeout_ms: int = 2000) -> bool:
    return await any_signal(
        visible_within(page.locator(S.ERROR_ALERT).first, timeout_ms),
        visible_within(page.get_by_text(re.compile(r"invalid|error|incorrect|failed", re.I)).first, timeout_ms),
    )


async def upload_file(page, file_path: Path, verbose: bool = False) -> bool:
    """Hand ``file_path`` to the upload control, clicking through a button if needed."""
    control = await first_visible(page, S.UPLOAD, 2000)
    file_input = page.locator('input[type="file"]').first
    if control is not None:
        try:
            is_file_input = await control.evaluate("el => el.type === 'file'")
        except Exception:
            is_file_input = False
        if not is_file_input:
            async with page.expect_file_chooser(timeout=5000) as fc_info:
                await control.click()
            chooser = await fc_info.value
            await chooser.set_files(str(file_path))
            if verbose:
                print(f"→ Uploaded {file_path.name} via file chooser")
            return True
        file_input = control
    try:
        # Hidden inputs still accept files
        await file_input.set_input_files(str(file_path), timeout=5000)
    except Exception as e:
        if verbose:
            print(f"✖ No upload control accepted the file: {e}")
        return False
    if verbose:
        print(f"→ Uploaded {file_path.name}")
    return True


async def find_search_input(page, verbose: bool = False):
    async def looks_like_search(loc) -> bool:
        if not await is_enabled(loc):
            return False
        hints = " ".join([
            (await loc.get_attribute("placeholder")) or "",
            (await loc.get_attribute("aria-label")) or "",
            (await loc.get_attribute("type")) or "",
            (await loc.get_attribute("data-testid")) or "",
        ]).lower()
        return any(h in hints for h in ("search", "file", "document"))

    return await first_visible(page, S.SEARCH, 3000, predicate=looks_like_search, verbose=verbose)


async def dismiss_active_meeting(page, verbose: bool = False) -> bool:
    """End a leftover meeting if the 'Active Meeting Found' modal blocks the page."""
    banner = page.get_by_text("Active Meeting Found").first
    if not await visible_within(banner, 3000):
        return False
    end = await first_visible(page, S.END_MEETING, 2000)
    if end is None:
        print("⚠️ Active meeting modal without an End button")
        return False
    await end.click()
    await wait_closed(banner, 5000)
    if verbose:
        print("→ Ended leftover active meeting")
    return True


async def first_list_item(page, selectors: list[str], exclude: tuple[str, ...] = (), cap: int = 10):
    """First visible, non-empty item matching the cascade, skipping labels in ``exclude``."""
    for sel in selectors:
        items = page.locator(sel)
        try:
            count = await items.count()
        except Exception:
            continue
        for i in range(min(count, cap)):
            item = items.nth(i)
            if not await is_visible_quiet(item):
                continue
            text = ((await item.text_content()) or "").strip().lower()
            if text and not any(x in text for x in exclude):
                return item
    return None


async def delete_item(page, item, verbose: bool = False) -> bool:
    """Delete one row/card through its own delete icon and any confirmation dialog."""
    await item.hover()
    icon = await first_visible(item, S.DELETE_ICON, 1500)
    if icon is None:
        icon = await scan_for_keywords(item, [("delete",), ("remove",), ("trash",)], cap=20)
    if icon is None:
        return False
    await icon.click()
    await page.wait_for_timeout(1000)
    scope = await dialog_scope(page, 2000)
    if not await click_confirm(scope, S.CONFIRM, ("delete", "confirm", "yes", "ok"), 2000):
        if verbose:
            print("→ No confirmation step after delete")
    return True


async def item_action(page, item, selectors: list[str], keyword_groups: list[tuple[str, ...]], timeout_ms: int = 2000, verbose: bool = False):
    """A control on one row/card, else anywhere on the page, else by keyword scan."""
    if item is not None:
        await item.hover()
        btn = await first_visible(item, selectors, timeout_ms, verbose=verbose)
        if btn is not None:
            return btn
    return await find_action_button(page, selectors, keyword_groups, timeout_ms, verbose=verbose)


async def close_modal(page, attempts: int = 3) -> bool:
    """Close whatever dialog is open; True once none is showing."""
    modal = page.locator(S.MODAL).first
    if not await is_visible_quiet(modal, 1000):
        return True
    close = await first_visible(page, S.CLOSE_MODAL, 500)
    if close is not None:
        await close.click()
        await page.wait_for_timeout(500)
    for _ in range(attempts):
        if not await is_visible_quiet(modal):
            return True
        await page.keyboard.press("Escape")
        await page.wait_for_timeout(500)
    return not await is_visible_quiet(modal)


async def enter_meeting(page, item=None, verbose: bool = False) -> bool:
    """Start or join a meeting and get past the pre-join device dialog.

    True when meeting media or the meeting room shows up.
    """
    start = await item_action(page, item, S.START_MEETING, [("start",), ("join",)], verbose=verbose)
    if start is None:
        return False
    await start.click()
    await page.wait_for_timeout(3000)
    device_dialog = page.locator(S.MODAL).filter(has_text="Join").first
    if await visible_within(device_dialog, 3000):
        join = await first_visible(device_dialog, S.JOIN_FROM_DEVICE_DIALOG, 2000)
        if join is not None:
            await join.click()
            await page.wait_for_timeout(3000)
            if verbose:
                print("→ Joined from the device dialog")
    return await any_signal(
        visible_within(page.locator(S.IN_MEETING).first, 5000),
        visible_within(page.locator(S.MEETING_ITEMS).first, 5000),
    )


async def capture_failure(page, directory: Path, name: str) -> Path | None:
    directory.mkdir(parents=True, exist_ok=True)
    shot = directory / f"{screenshot_slug(name)}.png"
    try:
        await page.screenshot(path=str(shot), full_page=True)
    except Exception as e:
        print(f"⚠️ Could not save failure screenshot: {e}")
        return None
    return shot
