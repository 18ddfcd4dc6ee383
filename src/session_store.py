import json
from pathlib import Path


class SnapshotError(Exception):
    """The saved storage snapshot is missing or unusable."""


# Restores localStorage for the snapshot's origins before any page script runs.
_LOCAL_STORAGE_SCRIPT = """
(origins => {
  const entry = origins.find(o => o.origin === window.location.origin);
  if (!entry) return;
  for (const item of entry.localStorage || []) {
    window.localStorage.setItem(item.name, item.value);
  }
})(%s);
"""


def load_snapshot(path: Path) -> dict:
    path = Path(path)
    if not path.exists():
        raise SnapshotError(f"No saved session at {path}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise SnapshotError(f"Unreadable session snapshot {path}: {e}") from e
    if not isinstance(data, dict) or not isinstance(data.get("cookies"), list):
        raise SnapshotError(f"Session snapshot {path} has no cookie list")
    return data


async def apply_snapshot(context, snapshot: dict) -> None:
    await context.add_cookies(snapshot.get("cookies") or [])
    origins = [o for o in snapshot.get("origins") or [] if o.get("localStorage")]
    if origins:
        await context.add_init_script(script=_LOCAL_STORAGE_SCRIPT % json.dumps(origins))


async def save_snapshot(context, path: Path, verbose: bool = False) -> bool:
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        await context.storage_state(path=str(path))
    except Exception as e:
        print(f"⚠️ Failed to save authentication state to {path}: {e}")
        return False
    if verbose:
        print(f"✓ Authentication state saved to {path}")
    return True
