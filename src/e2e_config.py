import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from dotenv import load_dotenv


DEFAULT_BASE_URL = "https://app.grabdocs.com"
OTP_MODES = ("code", "manual")


def _getenv_bool(env: Mapping[str, str], name: str, default: bool) -> bool:
    v = (env.get(name) or str(default)).strip().lower()
    return v in ("1", "true", "yes", "y", "on")


def _getenv_int(env: Mapping[str, str], name: str) -> int | None:
    raw = (env.get(name) or "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


@dataclass(frozen=True)
class Settings:
    base_url: str = DEFAULT_BASE_URL
    slow_mo: int | None = None

    # login form discovery
    login_path: str = ""
    email_selector: str = ""
    password_selector: str = ""
    submit_selector: str = ""

    # credentials
    email: str = ""
    password: str = ""
    otp_mode: str = "code"
    otp_code: str = ""
    otp_secret: str = ""

    # session reuse
    use_saved_state: bool = True
    interactive_login: bool = False
    storage_state_path: Path = Path(".auth/storage-state.json")

    # browser
    headless: bool = True
    browser_channel: str = ""
    artifacts_dir: Path = Path("test-results")
    verbose: bool = False
    live: bool = False

    def url(self, path: str = "/") -> str:
        if path.startswith("http://") or path.startswith("https://"):
            return path
        return self.base_url.rstrip("/") + "/" + path.lstrip("/")

    def missing_credentials(self) -> list[str]:
        missing = []
        if not self.email:
            missing.append("E2E_EMAIL")
        if not self.password:
            missing.append("E2E_PASSWORD")
        return missing


def load_settings(env: Mapping[str, str] | None = None) -> Settings:
    """Build Settings from environment variables.

    When ``env`` is None the process environment is used, after merging a
    ``.env`` file from the working directory (existing variables win).
    """
    if env is None:
        env_path = Path.cwd() / ".env"
        if env_path.exists():
            load_dotenv(dotenv_path=env_path)
        else:
            load_dotenv()
        env = os.environ

    otp_mode = (env.get("E2E_OTP_MODE") or "code").strip().lower()
    if otp_mode not in OTP_MODES:
        raise ValueError(f"E2E_OTP_MODE must be one of {', '.join(OTP_MODES)}, got {otp_mode!r}")

    return Settings(
        base_url=(env.get("E2E_BASE_URL") or DEFAULT_BASE_URL).strip(),
        slow_mo=_getenv_int(env, "E2E_SLOWMO"),
        login_path=(env.get("E2E_LOGIN_PATH") or "").strip(),
        email_selector=(env.get("E2E_LOGIN_EMAIL_SELECTOR") or "").strip(),
        password_selector=(env.get("E2E_LOGIN_PASSWORD_SELECTOR") or "").strip(),
        submit_selector=(env.get("E2E_LOGIN_SUBMIT_SELECTOR") or "").strip(),
        email=env.get("E2E_EMAIL") or "",
        password=env.get("E2E_PASSWORD") or "",
        otp_mode=otp_mode,
        otp_code=(env.get("E2E_OTP_CODE") or "").strip(),
        otp_secret=(env.get("E2E_OTP_SECRET") or "").strip(),
        use_saved_state=_getenv_bool(env, "E2E_USE_SAVED_STATE", True),
        interactive_login=_getenv_bool(env, "E2E_INTERACTIVE_LOGIN", False),
        storage_state_path=Path(env.get("E2E_STORAGE_STATE") or ".auth/storage-state.json"),
        headless=_getenv_bool(env, "E2E_HEADLESS", True),
        browser_channel=(env.get("E2E_BROWSER_CHANNEL") or "").strip(),
        artifacts_dir=Path(env.get("E2E_ARTIFACTS_DIR") or "test-results"),
        verbose=_getenv_bool(env, "E2E_VERBOSE", False),
        live=_getenv_bool(env, "E2E_LIVE", False),
    )
