"""
Runtime settings, read from environment variables.
"""
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

METADATA_STORES = ("file", "memory")


@dataclass(frozen=True)
class Settings:
    host: str = "0.0.0.0"
    port: int = 3000
    downloads_dir: Path = Path("downloads")
    clips_dir: Path = Path("clips")
    # Netscape-format cookies file for sites that demand a signed-in session
    cookies_file: Optional[Path] = None
    # 0 means no timeout
    job_timeout_seconds: float = 0.0
    log_level: str = "INFO"
    # "file" writes <id>_metadata.json, "memory" keeps records in this process
    metadata_store: str = "file"


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build Settings from the environment (PORT, HOST, DOWNLOADS_DIR, CLIPS_DIR,
    YT_COOKIES_FILE, JOB_TIMEOUT_SECONDS, LOG_LEVEL, METADATA_STORE).
    Relative directories are resolved against the current working directory.
    """
    env = os.environ if environ is None else environ
    cwd = Path.cwd()

    cookies = env.get("YT_COOKIES_FILE") or None
    timeout = float(env.get("JOB_TIMEOUT_SECONDS", "0") or 0)
    if timeout < 0:
        raise ValueError("JOB_TIMEOUT_SECONDS must be >= 0")
    store = env.get("METADATA_STORE", "file").lower()
    if store not in METADATA_STORES:
        raise ValueError(f"METADATA_STORE must be one of {', '.join(METADATA_STORES)}")

    return Settings(
        host=env.get("HOST", "0.0.0.0"),
        port=int(env.get("PORT", "3000")),
        downloads_dir=cwd / env.get("DOWNLOADS_DIR", "downloads"),
        clips_dir=cwd / env.get("CLIPS_DIR", "clips"),
        cookies_file=Path(cookies) if cookies else None,
        job_timeout_seconds=timeout,
        log_level=env.get("LOG_LEVEL", "INFO").upper(),
        metadata_store=store,
    )
