import asyncio
from typing import Awaitable, Callable, NamedTuple

from ui_selectors import COOKIE_BANNER, INTERACTIVE


class LocatorNotFound(Exception):
    """No candidate selector produced a visible element within the budget."""

    def __init__(self, selectors: list[str], timeout_ms: int, detail: str = ""):
        self.selectors = list(selectors)
        self.timeout_ms = timeout_ms
        msg = f"Selectors not found in any frame within {timeout_ms}ms: {', '.join(self.selectors) or '(none)'}"
        if detail:
            msg += f" ({detail})"
        super().__init__(msg)


class LocatorMatch(NamedTuple):
    selector: str
    frame: object
    locator: object


def _now() -> float:
    return asyncio.get_running_loop().time()


def _frames_in_order(page) -> list:
    main = page.main_frame
    return [main] + [fr for fr in page.frames if fr is not main]


async def is_visible_quiet(locator, timeout_ms: int = 200) -> bool:
    try:
        return bool(await locator.is_visible(timeout=timeout_ms))
    except Exception:
        return False


async def resolve_any(page, selectors: list[str], timeout_ms: int = 5000, probe_ms: int = 200, verbose: bool = False) -> LocatorMatch:
    """Return the first visible match across the main frame and child frames.

    Rounds repeat until ``timeout_ms`` elapses. Inside a round each selector
    is tried against the main frame, then every child frame in document
    order, and the first visible hit returns immediately. At least one round
    always runs.
    """
    deadline = _now() + timeout_ms / 1000
    last_error: Exception | None = None
    while True:
        for selector in selectors:
            for fr in _frames_in_order(page):
                try:
                    loc = fr.locator(selector).first
                    if await loc.is_visible(timeout=probe_ms):
                        if verbose:
                            where = "main frame" if fr is page.main_frame else f"frame {fr.url}"
                            print(f"✓ Resolved {selector} in {where}")
                        return LocatorMatch(selector, fr, loc)
                except Exception as e:
                    last_error = e
        remaining = deadline - _now()
        if remaining <= 0:
            break
        await page.wait_for_timeout(min(250, remaining * 1000))
    if verbose:
        print(f"✖ None of {len(selectors)} selector(s) resolved within {timeout_ms}ms")
    detail = str(last_error).splitlines()[0] if last_error else ""
    raise LocatorNotFound(selectors, timeout_ms, detail) from last_error


async def wait_for_any(page, selectors: list[str], timeout_ms: int = 5000, verbose: bool = False) -> str:
    match = await resolve_any(page, selectors, timeout_ms, verbose=verbose)
    return match.selector


async def first_visible(
    scope,
    selectors: list[str],
    timeout_ms: int = 3000,
    predicate: Callable[[object], Awaitable[bool]] | None = None,
    verbose: bool = False,
):
    """Cascade over ``selectors`` within one scope; None when nothing matches.

    ``scope`` is anything with ``.locator()``: a page, a frame, or a dialog
    locator. ``predicate`` is an extra async check a candidate must pass
    (enabled, text contains ...).
    """
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout_ms / 1000
    while True:
        for selector in selectors:
            try:
                loc = scope.locator(selector).first
                if not await is_visible_quiet(loc):
                    continue
                if predicate is not None and not await predicate(loc):
                    continue
                if verbose:
                    print(f"✓ Found {selector}")
                return loc
            except Exception:
                continue
        remaining = deadline - loop.time()
        if remaining <= 0:
            return None
        await asyncio.sleep(min(0.25, remaining))


async def is_enabled(loc) -> bool:
    try:
        return bool(await loc.is_enabled())
    except Exception:
        return False


def text_includes(*words: str) -> Callable[[object], Awaitable[bool]]:
    """Predicate: element is enabled and its text contains any of ``words``."""
    async def check(loc) -> bool:
        if not await is_enabled(loc):
            return False
        text = (await _safe_text(loc)).lower()
        return any(w.lower() in text for w in words)
    return check


async def _safe_text(loc) -> str:
    try:
        return (await loc.text_content()) or ""
    except Exception:
        return ""


async def _safe_attr(loc, name: str) -> str:
    try:
        return (await loc.get_attribute(name)) or ""
    except Exception:
        return ""


async def element_label(loc) -> str:
    """Visible text, aria-label and title of an element, lower-cased."""
    parts = [await _safe_text(loc), await _safe_attr(loc, "aria-label"), await _safe_attr(loc, "title")]
    return " ".join(p.strip() for p in parts if p).lower()


async def scan_for_keywords(
    scope,
    keyword_groups: list[tuple[str, ...]],
    selector: str = INTERACTIVE,
    cap: int = 50,
    exclude: tuple[str, ...] = (),
    verbose: bool = False,
):
    """Bounded scan of interactive elements for a keyword match.

    Each group matches when all of its words occur in the element's label.
    Earlier groups win over later ones; at most ``cap`` elements are read.
    """
    try:
        elements = scope.locator(selector)
        count = await elements.count()
    except Exception:
        return None
    if verbose:
        print(f"→ Scanning {min(count, cap)} of {count} element(s) for {keyword_groups}")
    best = None
    best_rank = len(keyword_groups)
    for i in range(min(count, cap)):
        el = elements.nth(i)
        if not await is_visible_quiet(el):
            continue
        label = await element_label(el)
        if not label or any(x in label for x in exclude):
            continue
        for rank, group in enumerate(keyword_groups[:best_rank]):
            if all(w.lower() in label for w in group):
                best, best_rank = el, rank
                break
        if best_rank == 0:
            break
    if verbose and best is not None:
        print(f"✓ Keyword scan matched group {keyword_groups[best_rank]}")
    return best


async def any_signal(*checks: Awaitable[bool]) -> bool:
    """True as soon as one alternative success signal reports True."""
    tasks = [asyncio.ensure_future(c) for c in checks]
    try:
        for fut in asyncio.as_completed(tasks):
            try:
                if await fut:
                    return True
            except Exception:
                continue
        return False
    finally:
        for t in tasks:
            if not t.done():
                t.cancel()


async def visible_within(locator, timeout_ms: int) -> bool:
    """Wait up to ``timeout_ms`` for the locator to be visible."""
    try:
        await locator.wait_for(state="visible", timeout=timeout_ms)
        return True
    except Exception:
        return False


async def maybe_dismiss_cookie_banner(page, verbose: bool = False) -> bool:
    for c in COOKIE_BANNER:
        btn = page.locator(c).first
        if await is_visible_quiet(btn):
            try:
                await btn.click()
            except Exception:
                return False
            if verbose:
                print(f"→ Dismissed cookie banner via {c}")
            return True
    return False


async def build_element_inventory(page, limit: int = 200) -> dict:
    """Collect lightweight element inventory to tell UI drift from regressions."""
    inventory: dict[str, list] = {
        "testids": [],
        "aria_labels": [],
        "buttons": [],
        "links": [],
    }

    async def collect(selector: str, key: str, attr: str | None = None):
        try:
            els = await page.query_selector_all(selector)
        except Exception:
            return
        for el in els[:limit]:
            try:
                v = await el.get_attribute(attr) if attr else (await el.inner_text()).strip()
            except Exception:
                continue
            if v and v not in inventory[key]:
                inventory[key].append(v)

    await collect("[data-testid]", "testids", "data-testid")
    await collect("[aria-label]", "aria_labels", "aria-label")
    await collect("button, [role='button']", "buttons")
    await collect("a[href], [role='link']", "links")
    return inventory
