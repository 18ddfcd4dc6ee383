import pyotp

from e2e_config import Settings
from locator_resolver import LocatorNotFound, is_visible_quiet, resolve_any
from ui_selectors import OTP_NUMERIC_FALLBACK, OTP_SINGLE_FIELD, OTP_SPLIT_FIELDS, OTP_SUBMIT


def resolve_otp_code(settings: Settings) -> str | None:
    if settings.otp_secret:
        return pyotp.TOTP(settings.otp_secret).now()
    return settings.otp_code or None


async def _fill_split_fields(page, code: str, field_timeout_ms: int, digit_delay_ms: int, verbose: bool) -> bool:
    for sel in OTP_SPLIT_FIELDS:
        fields = page.locator(sel)
        try:
            count = await fields.count()
        except Exception:
            continue
        if count == 0:
            continue
        first = fields.first
        if not await is_visible_quiet(first, field_timeout_ms):
            continue
        if count >= len(code):
            # One box per digit
            for i, ch in enumerate(code):
                await fields.nth(i).type(ch)
                await page.wait_for_timeout(digit_delay_ms)
        else:
            # Single box that advances focus on each keystroke
            for ch in code:
                await first.type(ch)
                await page.wait_for_timeout(digit_delay_ms)
        if verbose:
            print(f"✓ OTP typed into split fields via {sel}")
        return True
    return False


async def enter_otp_code(page, code: str, timeouts, verbose: bool = False) -> bool:
    """Type ``code`` into whichever OTP input shape the screen shows."""
    await page.wait_for_timeout(timeouts.otp_settle)
    try:
        match = await resolve_any(page, OTP_SINGLE_FIELD, timeouts.otp_field)
    except LocatorNotFound:
        match = None
    if match is not None:
        await match.locator.fill(code)
        if verbose:
            print(f"✓ OTP filled via {match.selector}")
        return True

    if verbose:
        print("→ No combined OTP field, trying per-digit fields")
    if await _fill_split_fields(page, code, timeouts.probe, timeouts.otp_digit_delay, verbose):
        return True

    numeric = page.locator(OTP_NUMERIC_FALLBACK).first
    if await is_visible_quiet(numeric, timeouts.otp_field):
        await numeric.fill(code)
        if verbose:
            print("✓ OTP filled into a generic text input")
        return True
    return False


async def submit_otp(page, timeouts, verbose: bool = False) -> None:
    try:
        match = await resolve_any(page, OTP_SUBMIT, timeouts.otp_field)
    except LocatorNotFound:
        match = None
    if match is not None:
        await match.locator.click()
        if verbose:
            print(f"→ Submitted OTP via {match.selector}")
    else:
        await page.keyboard.press("Enter")
        if verbose:
            print("→ Submitted OTP with Enter")
    await page.wait_for_timeout(timeouts.otp_after_submit)
