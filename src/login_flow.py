"""Session establishment: saved-session reuse, credential login and OTP.

The flow is an explicit state machine. Each handler performs one stage
against the live page and returns a signal; ``next_state`` maps the pair to
the following state. Fatal outcomes are raised as ``LoginError``
subclasses carrying what was tried, so a test aborts with a diagnosis
rather than continuing unauthenticated.
"""

import asyncio
import re
from dataclasses import dataclass
from enum import Enum
from urllib.parse import urlparse

from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from e2e_config import Settings
from locator_resolver import (
    LocatorNotFound,
    is_visible_quiet,
    maybe_dismiss_cookie_banner,
    resolve_any,
    wait_for_any,
)
from otp import enter_otp_code, resolve_otp_code, submit_otp
from session_store import SnapshotError, apply_snapshot, load_snapshot, save_snapshot
from ui_selectors import (
    OTP_SCREEN_HINT,
    candidate_login_paths,
    email_candidates,
    password_candidates,
    submit_candidates,
)


AUTHENTICATED_PATH = re.compile(r"/(dashboard|upload)(/|$)")
LOGIN_URL = re.compile(r"/(login|signin|sign-in|sign_in)\b", re.I)
VERIFY_BUTTON_NAME = re.compile(r"verify", re.I)
PROTECTED_PATH = "/upload"


def is_authenticated_url(url: str) -> bool:
    # Only the path counts; a login route carrying ?redirect=/dashboard is not a session
    if not url or is_login_surface(url):
        return False
    return bool(AUTHENTICATED_PATH.match(urlparse(url).path))


def is_login_surface(url: str) -> bool:
    return bool(LOGIN_URL.search(url or ""))


class LoginError(Exception):
    """Login could not be completed; the test must not proceed."""


class MissingCredentials(LoginError):
    pass


class LoginFormNotFound(LoginError):
    pass


class LoginOutcomeTimeout(LoginError):
    pass


class OtpEntryFailed(LoginError):
    pass


class PostLoginTimeout(LoginError):
    pass


class LoginState(Enum):
    INIT = "init"
    CHECK_SAVED = "check_saved"
    INTERACTIVE = "interactive"
    LOCATE_FORM = "locate_form"
    SUBMIT = "submit"
    AWAIT_OUTCOME = "await_outcome"
    OTP_REQUIRED = "otp_required"
    FINAL_WAIT = "final_wait"
    AUTHENTICATED = "authenticated"


TRANSITIONS = {
    (LoginState.INIT, "reuse"): LoginState.CHECK_SAVED,
    (LoginState.INIT, "interactive"): LoginState.INTERACTIVE,
    (LoginState.INIT, "fresh"): LoginState.LOCATE_FORM,
    (LoginState.CHECK_SAVED, "valid"): LoginState.AUTHENTICATED,
    (LoginState.CHECK_SAVED, "invalid"): LoginState.INIT,
    (LoginState.INTERACTIVE, "arrived"): LoginState.AUTHENTICATED,
    (LoginState.LOCATE_FORM, "found"): LoginState.SUBMIT,
    (LoginState.SUBMIT, "submitted"): LoginState.AWAIT_OUTCOME,
    (LoginState.AWAIT_OUTCOME, "dashboard"): LoginState.FINAL_WAIT,
    (LoginState.AWAIT_OUTCOME, "otp"): LoginState.OTP_REQUIRED,
    (LoginState.OTP_REQUIRED, "entered"): LoginState.FINAL_WAIT,
    (LoginState.FINAL_WAIT, "arrived"): LoginState.AUTHENTICATED,
}


def next_state(state: LoginState, signal: str) -> LoginState:
    try:
        return TRANSITIONS[(state, signal)]
    except KeyError:
        raise ValueError(f"No transition from {state.name} on {signal!r}") from None


@dataclass(frozen=True)
class LoginTimeouts:
    """Budgets in milliseconds for every wait in the flow."""

    probe: int = 200
    poll: int = 250
    saved_settle: int = 2000
    probe_deadline: int = 8000
    email_probe: int = 5000
    form_field: int = 3000
    outcome: int = 20000
    otp_settle: int = 2000
    otp_field: int = 13000
    otp_digit_delay: int = 200
    otp_after_submit: int = 3000
    manual_otp: int = 300000
    interactive: int = 300000
    prefill: int = 20000
    final_wait: int = 180000


async def navigate_to_login(page, settings: Settings, timeouts: LoginTimeouts = LoginTimeouts(), verbose: bool = False) -> str:
    """Open the first candidate route that shows an email field.

    Returns the path that worked; raises LoginFormNotFound naming every
    path tried and the base URL.
    """
    paths = candidate_login_paths(settings)
    emails = email_candidates(settings)
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeouts.probe_deadline / 1000

    for path in paths:
        if loop.time() > deadline:
            if verbose:
                print(f"⚠️ Login probe deadline reached before {path}")
            break
        if await _probe_login_path(page, settings, path, emails, timeouts, verbose):
            return path

    if verbose:
        print("→ No candidate login path worked, trying the home page")
    if await _probe_login_path(page, settings, "/", emails, timeouts, verbose):
        return "/"

    raise LoginFormNotFound(
        f"Login form not found. Tried paths {', '.join(paths)} on base URL {settings.base_url}. "
        "Set E2E_BASE_URL or E2E_LOGIN_PATH if your app uses a different host or route."
    )


async def _probe_login_path(page, settings: Settings, path: str, emails: list[str], timeouts: LoginTimeouts, verbose: bool) -> bool:
    try:
        await page.goto(settings.url(path))
    except Exception as e:
        if verbose:
            print(f"→ Navigation to {path} failed: {e}")
        return False
    await maybe_dismiss_cookie_banner(page, verbose=verbose)
    try:
        await wait_for_any(page, emails, timeouts.email_probe)
    except LocatorNotFound:
        if verbose:
            print(f"→ No email field at {path}")
        return False
    if verbose:
        print(f"✓ Login form located at {path}")
    return True


async def fill_login_form(page, settings: Settings, email: str, password: str, timeouts: LoginTimeouts = LoginTimeouts(), verbose: bool = False) -> None:
    email_match = await resolve_any(page, email_candidates(settings), timeouts.form_field)
    password_match = await resolve_any(page, password_candidates(settings), timeouts.form_field)
    await email_match.locator.fill(email)
    await password_match.locator.fill(password)
    submit_match = await resolve_any(page, submit_candidates(settings), timeouts.form_field)
    await submit_match.locator.click()
    if verbose:
        print(f"→ Submitted credentials via {submit_match.selector}")


async def stabilize_and_prefill_login(page, settings: Settings, timeouts: LoginTimeouts = LoginTimeouts()) -> None:
    """Keep the credential fields filled while the login page settles.

    Some login pages re-render after load and wipe typed values, so this
    re-fills until both fields have held a value once or the budget ends.
    """
    loop = asyncio.get_running_loop()
    until = loop.time() + timeouts.prefill / 1000
    filled_email = filled_password = False
    while loop.time() < until and not (filled_email and filled_password):
        await maybe_dismiss_cookie_banner(page)
        try:
            em = await resolve_any(page, email_candidates(settings), 2000)
            if (await em.locator.input_value()) != settings.email:
                await em.locator.fill(settings.email)
            filled_email = True
        except Exception:
            pass
        try:
            pw = await resolve_any(page, password_candidates(settings), 2000)
            if not await pw.locator.input_value():
                await pw.locator.fill(settings.password)
            filled_password = True
        except Exception:
            pass
        await page.wait_for_timeout(300)


async def _wait_for_authenticated_url(page, timeout_ms: int, error: type[LoginError], what: str) -> None:
    try:
        await page.wait_for_url(is_authenticated_url, timeout=timeout_ms)
    except PlaywrightTimeoutError as e:
        raise error(f"{what} did not reach /dashboard or /upload within {timeout_ms // 1000}s (url={page.url})") from e


class SessionEstablisher:
    """Produce an authenticated browsing context before a test body runs."""

    def __init__(self, settings: Settings, timeouts: LoginTimeouts = LoginTimeouts(), verbose: bool = False):
        self.settings = settings
        self.timeouts = timeouts
        self.verbose = verbose
        self.fresh_login = False
        self.history: list[LoginState] = []
        self._saved_checked = False
        self._handlers = {
            LoginState.INIT: self._init,
            LoginState.CHECK_SAVED: self._check_saved,
            LoginState.INTERACTIVE: self._interactive,
            LoginState.LOCATE_FORM: self._locate_form,
            LoginState.SUBMIT: self._submit,
            LoginState.AWAIT_OUTCOME: self._await_outcome,
            LoginState.OTP_REQUIRED: self._otp_required,
            LoginState.FINAL_WAIT: self._final_wait,
        }

    def _log(self, msg: str) -> None:
        if self.verbose:
            print(msg)

    async def establish(self, context, page) -> LoginState:
        self._context = context
        self._page = page
        state = LoginState.INIT
        while state is not LoginState.AUTHENTICATED:
            self.history.append(state)
            signal = await self._handlers[state]()
            state = next_state(state, signal)
        self.history.append(state)

        if self.fresh_login and self.settings.use_saved_state:
            await save_snapshot(context, self.settings.storage_state_path, verbose=self.verbose)
        self._log("✓ Authenticated")
        return state

    async def _init(self) -> str:
        snapshot_path = self.settings.storage_state_path
        if self.settings.use_saved_state and not self._saved_checked and snapshot_path.exists():
            return "reuse"
        if self.settings.interactive_login:
            return "interactive"
        return "fresh"

    async def _check_saved(self) -> str:
        self._saved_checked = True
        page = self._page
        try:
            snapshot = load_snapshot(self.settings.storage_state_path)
            await apply_snapshot(self._context, snapshot)
            await page.goto(self.settings.url(PROTECTED_PATH), wait_until="domcontentloaded")
            await page.wait_for_timeout(self.timeouts.saved_settle)
        except SnapshotError as e:
            print(f"⚠️ {e}, logging in fresh")
            return "invalid"
        except Exception as e:
            print(f"⚠️ Error loading saved state, logging in fresh: {e}")
            return "invalid"
        if is_login_surface(page.url):
            print("⚠️ Saved authentication state expired, logging in again")
            return "invalid"
        self._log("✓ Saved authentication state is valid, skipping login")
        return "valid"

    async def _interactive(self) -> str:
        page = self._page
        await navigate_to_login(page, self.settings, self.timeouts, self.verbose)
        await stabilize_and_prefill_login(page, self.settings, self.timeouts)
        print("→ Waiting for interactive login in the browser window")
        await page.pause()
        await _wait_for_authenticated_url(page, self.timeouts.interactive, PostLoginTimeout, "Interactive login")
        self.fresh_login = True
        return "arrived"

    async def _locate_form(self) -> str:
        missing = self.settings.missing_credentials()
        if missing:
            raise MissingCredentials(
                f"Missing required environment variables: {', '.join(missing)}. Please set these before running tests."
            )
        await navigate_to_login(self._page, self.settings, self.timeouts, self.verbose)
        return "found"

    async def _submit(self) -> str:
        try:
            await fill_login_form(self._page, self.settings, self.settings.email, self.settings.password, self.timeouts, self.verbose)
        except LocatorNotFound as e:
            raise LoginFormNotFound(f"Login form incomplete at {self._page.url}: {e}") from e
        self.fresh_login = True
        return "submitted"

    async def _otp_screen_visible(self) -> bool:
        page = self._page
        if await is_visible_quiet(page.locator(OTP_SCREEN_HINT).first, self.timeouts.probe):
            return True
        return await is_visible_quiet(page.get_by_role("button", name=VERIFY_BUTTON_NAME).first, self.timeouts.probe)

    async def _await_outcome(self) -> str:
        page = self._page
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.timeouts.outcome / 1000
        while loop.time() < deadline:
            if is_authenticated_url(page.url):
                self._log("✓ Reached dashboard without verification")
                return "dashboard"
            if await self._otp_screen_visible():
                self._log("→ Verification code required")
                return "otp"
            await page.wait_for_timeout(self.timeouts.poll)
        raise LoginOutcomeTimeout(
            f"Neither the dashboard nor a verification screen appeared within {self.timeouts.outcome // 1000}s "
            f"after submitting credentials (url={page.url})"
        )

    async def _otp_required(self) -> str:
        page = self._page
        if self.settings.otp_mode == "manual":
            print("→ Enter the verification code in the browser window")
            await _wait_for_authenticated_url(page, self.timeouts.manual_otp, PostLoginTimeout, "Manual verification")
            return "entered"

        code = resolve_otp_code(self.settings)
        if not code:
            raise OtpEntryFailed(
                "Verification required. Set E2E_OTP_MODE=code with E2E_OTP_CODE or E2E_OTP_SECRET, "
                "or E2E_OTP_MODE=manual to enter the code yourself."
            )
        if not await enter_otp_code(page, code, self.timeouts, self.verbose):
            raise OtpEntryFailed(f"No verification code field accepted the code (url={page.url})")
        await submit_otp(page, self.timeouts, self.verbose)
        return "entered"

    async def _final_wait(self) -> str:
        await _wait_for_authenticated_url(self._page, self.timeouts.final_wait, PostLoginTimeout, "Post-login navigation")
        return "arrived"
