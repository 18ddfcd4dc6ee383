"""Ordered selector candidates per UI intent, most specific first."""

from e2e_config import Settings


LOGIN_PATHS = [
    "/login",
    "/auth/login",
    "/signin",
    "/auth/sign-in",
    "/users/sign_in",
]

# Known data-testid hooks in the application
SEL = {
    "email": '[data-testid="login-email"]',
    "password": '[data-testid="login-password"]',
    "submit": '[data-testid="login-submit"]',
    "logout": '[data-testid="logout"]',
    "upload_btn": '[data-testid="upload-btn"]',
    "upload_input": 'input[type="file"]',
    "toast": '[data-testid="toast-success"]',
    "search_input": '[data-testid="search-input"]',
    "doc_card": '[data-testid="doc-card"]',
    "viewer": '[data-testid="viewer"]',
    "download": '[data-testid="download"]',
    "kebab": '[data-testid="doc-kebab"]',
    "delete": '[data-testid="doc-delete"]',
    "confirm_delete": '[data-testid="confirm-delete"]',
}


def sanitize_selectors(candidates: list[str]) -> list[str]:
    # A value containing '@' or a space is almost always an email or a label
    # pasted where a selector was expected.
    seen: list[str] = []
    for c in candidates:
        if not c or "@" in c or " " in c:
            continue
        if c not in seen:
            seen.append(c)
    return seen


def candidate_login_paths(settings: Settings) -> list[str]:
    paths = []
    for p in [settings.login_path, *LOGIN_PATHS]:
        if p and p not in paths:
            paths.append(p)
    return paths


def email_candidates(settings: Settings) -> list[str]:
    return sanitize_selectors([
        settings.email_selector,
        SEL["email"],
        'input[type="email"]',
        'input[name="email"]',
        "#email",
        'input[autocomplete="username"]',
    ])


def password_candidates(settings: Settings) -> list[str]:
    return sanitize_selectors([
        settings.password_selector,
        SEL["password"],
        'input[type="password"]',
        'input[name="password"]',
        "#password",
        'input[autocomplete="current-password"]',
    ])


def submit_candidates(settings: Settings) -> list[str]:
    # Text-engine selectors contain spaces, so they bypass sanitize on purpose.
    base = sanitize_selectors([
        settings.submit_selector,
        '[data-testid="login-submit"]',
        'button[type="submit"]',
    ])
    return base + [
        'button:has-text("Sign in")',
        'button:has-text("Log in")',
        'button:has-text("Continue")',
        '[role="button"]:has-text("Sign in")',
    ]


OTP_SINGLE_FIELD = [
    'input[name="code"]',
    'input[autocomplete="one-time-code"]',
    'input[data-testid="otp-code"]',
    'input[type="text"][maxlength="6"]',
    'input[type="text"][maxlength="8"]',
    'input[placeholder*="code" i]',
    'input[placeholder*="verification" i]',
    'input[inputmode="numeric"]',
]

OTP_SPLIT_FIELDS = [
    'input[name^="digit"]',
    'input[name^="otp"]',
    'input[data-testid^="otp-"]',
    'input[maxlength="1"]',
]

OTP_SUBMIT = [
    'button:has-text("Verify")',
    'button:has-text("Continue")',
    'button:has-text("Confirm")',
    '[data-testid="otp-submit"]',
]

OTP_SCREEN_HINT = 'input[name="code"], input[autocomplete="one-time-code"]'

OTP_NUMERIC_FALLBACK = 'input[type="text"], input[type="number"]'

COOKIE_BANNER = [
    '[data-testid="cookie-accept"]',
    "#onetrust-accept-btn-handler",
    'button:has-text("Accept")',
    'button:has-text("I agree")',
    'button:has-text("Got it")',
]

ERROR_ALERT = '[role="alert"], [data-testid*="toast"], [class*="error"], [class*="alert"]'

MODAL = '[role="dialog"], [class*="modal"], [class*="dialog"], .fixed.inset-0'

CLOSE_MODAL = [
    'button:has-text("Close")',
    'button[aria-label*="close" i]',
    'button[aria-label*="cancel" i]',
    'button:has-text("Cancel")',
]

INTERACTIVE = 'button, a[href], [role="button"]'

# Documents
UPLOAD = [
    'input[type="file"]',
    '[data-testid*="upload"]',
    '[class*="upload"]',
    'button:has-text("Upload")',
    'button:has-text("Choose file")',
]

SEARCH = [
    SEL["search_input"],
    '[data-testid*="search"]',
    'input[placeholder*="search" i]',
    'input[placeholder*="file" i]',
    'input[placeholder*="document" i]',
    'input[type="search"]',
    'input[aria-label*="search" i]',
    'input[type="text"][placeholder]',
]

DOCUMENT_ITEMS = [
    SEL["doc_card"],
    '[data-testid*="document"]',
    '[data-testid*="file"]',
    '[class*="document"]',
    '[class*="file-card"]',
    '[class*="doc-card"]',
    'a[href*="/files/"]',
    'a[href*="/document/"]',
]

EMPTY_STATE = '[class*="empty"], [class*="no-results"]'

PREVIEW = [
    SEL["viewer"],
    '[class*="preview"]',
    '[class*="viewer"]',
    "iframe",
    "embed",
    "canvas",
]

OPEN_BUTTON = [
    'button:has-text("Open")',
    'a:has-text("Open")',
    '[aria-label*="open" i]',
    '[title*="open" i]',
]

DOWNLOAD = [
    SEL["download"],
    'button:has-text("Download")',
    '[aria-label*="download" i]',
    '[title*="download" i]',
]

SEND_FILE = [
    'button:has-text("Send")',
    'button[title*="send" i]',
    '[aria-label*="send" i]',
    '[data-testid*="send"]',
]

LOCAL_FILE = [
    'button:has-text("Local")',
    'button[title*="local" i]',
    '[aria-label*="local" i]',
    '[data-testid*="local"]',
]

RENAME = [
    'button:has-text("Rename")',
    'button[title*="rename" i]',
    '[aria-label*="rename" i]',
    '[data-testid*="rename"]',
]

RENAME_INPUT = [
    '[role="dialog"] input[type="text"]',
    'input[value*="sample"]',
    'input[value*=".pdf"]',
    'input[type="text"]',
]

SHARE_RESULT = 'input[value*="http"], [role="dialog"]'

# Calendar
CALENDAR = [
    '[data-testid*="calendar"]',
    '[class*="calendar"]',
    '[class*="calendar-grid"]',
    '[class*="calendar-view"]',
    'table[class*="calendar"]',
    '[role="grid"]',
]

DATE_CELLS = 'td, [role="gridcell"], [class*="day"]'

NEW_EVENT = [
    'button:has-text("+ New Event")',
    'button:has-text("New Event")',
    'button:has-text("Create Event")',
    '[data-testid*="new-event"]',
    '[data-testid*="create-event"]',
    'button:has-text("Add")',
]

EVENT_TITLE = [
    'input[placeholder*="Team Meeting" i]',
    'input[placeholder*="Event Title" i]',
    'input[placeholder*="title" i]',
    'input[name*="title"]',
    'input[name*="eventTitle"]',
    'input[type="text"]',
]

SAVE = [
    'button:has-text("Create")',
    'button:has-text("Save")',
    'button[type="submit"]',
    '[data-testid*="create"]',
    '[data-testid*="save"]',
]

# Links
CREATE_LINK = [
    'button:has-text("Create Link")',
    'button:has-text("New Link")',
    'button:has-text("Add Link")',
    'a:has-text("Create Link")',
    '[data-testid*="create-link"]',
    '[data-testid*="new-link"]',
    '[aria-label*="create link" i]',
]

LINK_URL = [
    'input[name*="url"]',
    'input[name*="link"]',
    'input[type="url"]',
    'input[placeholder*="url" i]',
    'input[placeholder*="https://" i]',
    'input[type="text"]',
]

NAME_FIELD = [
    'input[name*="title"]',
    'input[name*="name"]',
    'input[placeholder*="title" i]',
    'input[placeholder*="name" i]',
]

# Workspaces
CREATE_WORKSPACE = [
    'button:has-text("Create Workspace")',
    'button:has-text("New Workspace")',
    'button:has-text("Add Workspace")',
    'a:has-text("Create Workspace")',
    '[data-testid*="create-workspace"]',
    '[aria-label*="create workspace" i]',
]

WORKSPACE_NAME = [
    'input[name*="name"]',
    'input[name*="workspace"]',
    'input[placeholder*="name" i]',
    'input[placeholder*="workspace" i]',
    'input[type="text"]',
]

# Forms
TEMPLATES = [
    '[data-testid*="template"]',
    '[class*="template-card"]',
    '[class*="template-item"]',
    '[class*="form-template"]',
    '[class*="template"]',
]

GRID_ITEMS = 'div[class*="grid"] > div, div[class*="grid"] > button, div[class*="grid"] > a'

CREATE_FORM = [
    'button:has-text("Create Form")',
    'button:has-text("Use Template")',
    'button:has-text("Use this template")',
    '[data-testid*="create-form"]',
]

# Chat
CHAT_INPUT = [
    'textarea[placeholder*="Ask" i]',
    'input[placeholder*="Ask" i]',
    'textarea[placeholder*="message" i]',
    'input[placeholder*="message" i]',
    'textarea[placeholder*="chat" i]',
    'input[placeholder*="chat" i]',
    'textarea[placeholder*="Type" i]',
    'input[placeholder*="Type" i]',
    "textarea",
    '[contenteditable="true"]',
    '[role="textbox"]',
]

CHAT_RESPONSE = '[class*="response"], [class*="message"], [class*="chat"], [class*="assistant"], [class*="bot"]'

HISTORY_ICON = [
    '[data-testid*="history"]',
    '[aria-label*="history" i]',
    'button[title*="history" i]',
    'button:has(svg[aria-label*="history" i])',
    '[class*="history-icon"]',
    'button:has-text("History")',
]

CONVERSATIONS = [
    '[data-testid*="conversation"]',
    '[data-testid*="chat-item"]',
    '[class*="conversation"]',
    '[class*="chat-item"]',
    '[class*="history-item"]',
    'a[href*="/chat/"]',
    '[role="listitem"]',
]

EXPORT = [
    'button:has-text("Export")',
    'button:has-text("Download")',
    '[data-testid*="export"]',
    'a:has-text("Export")',
]

DELETE_ICON = [
    'button[aria-label*="delete" i]',
    'button[title*="delete" i]',
    'button[aria-label*="remove" i]',
    'button:has-text("Delete")',
    'button:has-text("Remove")',
    '[data-testid*="delete"]',
    '[data-testid*="remove"]',
    '[class*="delete-icon"]',
    '[class*="trash-icon"]',
    'button:has(svg[class*="trash"])',
]

CONFIRM = [
    SEL["confirm_delete"],
    'button:has-text("Delete")',
    'button:has-text("Confirm")',
    'button:has-text("Yes")',
    'button:has-text("OK")',
]

# Meetings
CREATE_MEETING = [
    'button:has-text("Create Meeting")',
    'button:has-text("Create a Meeting")',
    'button:has-text("New Meeting")',
    'a:has-text("Create Meeting")',
    '[data-testid*="create-meeting"]',
    '[data-testid*="new-meeting"]',
    '[aria-label*="create meeting" i]',
]

MEETING_TITLE = [
    'input[name*="title"]',
    'input[name*="name"]',
    'input[placeholder*="meeting" i]',
    'input[placeholder*="title" i]',
]

MEETING_ITEMS = '[data-testid*="meeting"], [class*="meeting"]'

END_MEETING = [
    'button:has-text("End Meeting")',
    'button:has-text("End")',
    '[data-testid*="end-meeting"]',
    'button[aria-label*="end meeting" i]',
]

JOIN_MEETING = [
    'button:has-text("Join Meeting")',
    'button:has-text("Join a Meeting")',
    'button:has-text("Join")',
    '[data-testid*="join-meeting"]',
]

MEETING_ID = [
    'input[name*="meeting" i]',
    'input[placeholder*="meeting id" i]',
    'input[placeholder*="meeting" i]',
    'input[type="text"]',
]

MEETING_PASSCODE = [
    'input[name*="pass" i]',
    'input[placeholder*="passcode" i]',
    'input[placeholder*="password" i]',
    'input[type="password"]',
]

SCHEDULE_MEETING = [
    'button:has-text("Schedule Meeting")',
    'button:has-text("Schedule")',
    '[data-testid*="schedule"]',
    '[aria-label*="schedule" i]',
]

MEETING_DATE = [
    'input[type="date"]',
    'input[type="datetime-local"]',
    'input[name*="date"]',
    'input[placeholder*="date" i]',
]

MEETING_TIME = [
    'input[type="time"]',
    'input[name*="time"]',
    'input[placeholder*="time" i]',
]

START_MEETING = [
    'button[aria-label*="start" i]',
    'button[title*="start" i]',
    'button:has(svg[aria-label*="start" i])',
    'button:has-text("Start Meeting")',
    'button:has-text("Start")',
    '[data-testid*="start"]',
    '[class*="start-icon"]',
    'button:has(svg[class*="play"])',
]

INVITE_ICON = [
    'button[aria-label*="invite" i]',
    'button[aria-label*="mail" i]',
    'button[title*="invite" i]',
    'button:has(svg[aria-label*="mail" i])',
    'button:has-text("Invite")',
    '[data-testid*="invite"]',
    '[data-testid*="mail"]',
    '[class*="mail-icon"]',
    'button:has(svg[class*="envelope"])',
]

INVITE_EMAIL = [
    'input[type="email"]',
    'input[name*="email"]',
    'input[name*="participant"]',
    'input[placeholder*="email" i]',
    'input[placeholder*="invite" i]',
]

ADD_PARTICIPANT = [
    'button:has-text("Add")',
    'button[aria-label*="add" i]',
    '[data-testid*="add"]',
]

SEND_INVITE = [
    'button:has-text("Send Invite")',
    'button:has-text("Send")',
    'button:has-text("Invite")',
    'button[type="submit"]',
    '[data-testid*="send"]',
]

EDIT_ICON = [
    'button[aria-label*="edit" i]',
    'button[title*="edit" i]',
    'button:has-text("Edit")',
    'button:has-text("Update")',
    '[data-testid*="edit"]',
    '[class*="pencil-icon"]',
    'button:has(svg[class*="pencil"])',
]

UPDATE = [
    'button:has-text("Save Changes")',
    'button:has-text("Update Meeting")',
    'button:has-text("Save")',
    'button:has-text("Update")',
    'button[type="submit"]',
]

LEAVE_MEETING = [
    'button:has-text("Leave Meeting")',
    'button:has-text("Leave")',
    'button[aria-label*="leave" i]',
    '[data-testid*="leave"]',
]

# Pre-join device dialog and in-meeting controls
JOIN_FROM_DEVICE_DIALOG = [
    'button:has-text("Join Meeting")',
    'button:has-text("Join")',
    'button:has-text("Continue")',
    'button:has-text("Start")',
]

IN_MEETING = 'video, audio, [class*="conference"], [class*="video"]'

VIDEO_TOGGLE = [
    'button[aria-label*="video" i]',
    'button[aria-label*="camera" i]',
    'button[title*="video" i]',
    'button[title*="camera" i]',
    '[data-testid*="video"]',
    '[data-testid*="camera"]',
]

MEETING_CHAT_BUTTON = [
    'button[aria-label*="chat" i]',
    'button[title*="chat" i]',
    'button:has-text("Chat")',
    '[data-testid*="chat"]',
]

MEETING_CHAT_INPUT = [
    'input[placeholder*="message" i]',
    'textarea[placeholder*="message" i]',
    'input[placeholder*="chat" i]',
    'textarea[placeholder*="chat" i]',
    '[contenteditable="true"]',
    '[role="textbox"]',
]

SEND_MESSAGE = [
    'button[aria-label*="send" i]',
    'button[title*="send" i]',
    'button:has-text("Send")',
    '[data-testid*="send"]',
]

# Analytics
ANALYTICS_DATA = [
    '[class*="chart"]',
    '[class*="graph"]',
    '[class*="metric"]',
    '[data-testid*="chart"]',
    "canvas, svg",
    "table",
    '[class*="analytics"]',
    '[class*="dashboard"]',
]

METRICS = '[class*="metric"], [class*="stat"], [class*="number"]'

NOT_FOUND_MARKERS = '[class*="404"], [class*="not-found"], [class*="error-404"]'
