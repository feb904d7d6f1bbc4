import argparse
import sys

from taxobot import __version__
from taxobot.bluesky import BlueskyClient
from taxobot.bot import EXHAUSTED_STATUS, FAILED, RunResult, run
from taxobot.config import BotConfig
from taxobot.errors import TaxobotError
from taxobot.gbif import GbifClient
from taxobot.images import prepare_all
from taxobot.report import load_mail_params, log_error, log_post, send_report
from taxobot.taxonomy import load_lookup_table


# =========================================================
# COMMANDS
# =========================================================
def _report(config, result):
    if not config.mail_params_path or config.dry_run:
        return
    try:
        send_report(load_mail_params(config.mail_params_path), result)
    except (OSError, TaxobotError) as e:
        print(f"Report mail failed: {e}")
        log_error(config.error_log_path, config.timezone, e)


def cmd_post(config):
    print(f"Starting Bot. Dry Run: {config.dry_run}")

    try:
        table = load_lookup_table(config.lookup_table_path)
    except (OSError, TaxobotError) as e:
        print(f"Process failed: {e}")
        log_error(config.error_log_path, config.timezone, e)
        _report(config, RunResult(status=FAILED, stage="lookup_table", error=e))
        return 1

    enricher = GbifClient(config.gbif_api)
    publisher = None
    if not config.dry_run:
        publisher = BlueskyClient(
            config.bluesky_handle, config.bluesky_password, service=config.bluesky_service
        )

    result = run(config, table, enricher, publisher)

    if result.status == EXHAUSTED_STATUS:
        return 0

    status = result.status.upper() if result.ok else f"FAILED ({result.stage}): {result.error}"
    log_post(config.post_log_path, config.timezone, result.identifier, result.taxon, status)
    _report(config, result)

    if not result.ok:
        log_error(config.error_log_path, config.timezone, result.error)
        return 1

    print("Post successful.")
    return 0


def cmd_prepare(config):
    table = load_lookup_table(config.lookup_table_path)
    prepared, skipped, failed = prepare_all(config, table)
    print(f"Prepared {len(prepared)}, already resized {len(skipped)}, failed {len(failed)}.")
    return 1 if failed else 0


def build_parser():
    p = argparse.ArgumentParser(
        prog="taxobot",
        description="Post a weekly mosquito plate with GBIF details to Bluesky.",
    )
    p.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")
    p.add_argument(
        "command", nargs="?", default="post", choices=["post", "prepare"],
        help="post: publish one plate (default). prepare: resize every plate into the resized folder.",
    )
    p.add_argument(
        "--dry-run", action="store_true",
        help="Do not post to Bluesky or add to the post history. The run log and resized copies are still written.",
    )
    return p


# =========================================================
# MAIN
# =========================================================
def main(argv=None):
    args = build_parser().parse_args(argv)
    try:
        config = BotConfig.from_env()
        if args.dry_run:
            config.dry_run = True
        if args.command == "prepare":
            return cmd_prepare(config)
        return cmd_post(config.validate())
    except (OSError, TaxobotError) as e:
        print(f"Process failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
