import os
from dataclasses import dataclass

from .errors import ConfigError


def _flag(value):
    return str(value).strip().lower() == "true"


# =========================================================
# ENV / CONFIG
# =========================================================
@dataclass
class BotConfig:
    pool_source: str = "jpg_files.txt"
    ledger_path: str = "past_posts.txt"
    lookup_table_path: str = "genus_lookup_table.csv"
    recent_window: int = 50  # number of past posts to remember
    max_filesize: int = 900000  # bytes; Bluesky caps image blobs at 1000000
    resized_dir: str = "Resized"
    post_delay: float = 3.0  # pause between the two language posts
    mail_params_path: str = None
    credit_handle: str = "nil-rahola.bsky.social"
    bluesky_handle: str = None
    bluesky_password: str = None
    bluesky_service: str = "https://bsky.social"
    gbif_api: str = "https://api.gbif.org/v1"
    timezone: str = "Europe/Paris"
    dry_run: bool = False
    post_log_path: str = "post_log.csv"
    error_log_path: str = "error_log.txt"

    @classmethod
    def from_env(cls, environ=None):
        env = os.environ if environ is None else environ
        defaults = cls()
        try:
            return cls(
                pool_source=env.get("TAXOBOT_POOL_SOURCE", defaults.pool_source),
                ledger_path=env.get("TAXOBOT_LEDGER", defaults.ledger_path),
                lookup_table_path=env.get("TAXOBOT_LOOKUP_TABLE", defaults.lookup_table_path),
                recent_window=int(env.get("TAXOBOT_RECENT_WINDOW", defaults.recent_window)),
                max_filesize=int(env.get("TAXOBOT_MAX_FILESIZE", defaults.max_filesize)),
                resized_dir=env.get("TAXOBOT_RESIZED_DIR", defaults.resized_dir),
                post_delay=float(env.get("TAXOBOT_POST_DELAY", defaults.post_delay)),
                mail_params_path=env.get("TAXOBOT_MAIL_PARAMS") or None,
                credit_handle=env.get("TAXOBOT_CREDIT_HANDLE", defaults.credit_handle),
                bluesky_handle=env.get("BLUESKY_HANDLE") or None,
                bluesky_password=env.get("BLUESKY_APP_PASSWORD") or None,
                bluesky_service=env.get("BLUESKY_SERVICE", defaults.bluesky_service),
                gbif_api=env.get("GBIF_API", defaults.gbif_api),
                timezone=env.get("TIMEZONE", defaults.timezone),
                dry_run=_flag(env.get("DRY_RUN", "false")),
                post_log_path=env.get("TAXOBOT_POST_LOG", defaults.post_log_path),
                error_log_path=env.get("TAXOBOT_ERROR_LOG", defaults.error_log_path),
            )
        except ValueError as e:
            raise ConfigError(f"Invalid numeric setting: {e}") from e

    def validate(self):
        if self.recent_window < 0:
            raise ConfigError("TAXOBOT_RECENT_WINDOW must be >= 0")
        if self.max_filesize <= 0:
            raise ConfigError("TAXOBOT_MAX_FILESIZE must be > 0")
        if (not self.bluesky_handle or not self.bluesky_password) and not self.dry_run:
            raise ConfigError("Bluesky secrets missing (BLUESKY_HANDLE / BLUESKY_APP_PASSWORD)")
        return self
