"""Path utilities for ensuring directories exist."""
from navpage.app.config import get_settings

def ensure_dirs() -> None:
    settings = get_settings()
    dirs = [settings.log_path.parent]
    storage_path = settings.get_storage_path()
    if storage_path is not None:
        dirs.append(storage_path.parent)
    for d in dirs:
        d.mkdir(parents=True, exist_ok=True)
