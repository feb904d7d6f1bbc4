import csv
import os
import smtplib
import traceback
from dataclasses import dataclass
from datetime import datetime
from email.mime.text import MIMEText

import pytz

from .errors import ConfigError


# =========================================================
# RUN LOGS
# =========================================================
def log_post(path, timezone, identifier, taxon, status):
    exists = os.path.exists(path)
    with open(path, "a", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        if not exists:
            writer.writerow(["Date", "Time", "Image", "Taxon", "Status"])

        now = datetime.now(pytz.timezone(timezone))
        writer.writerow([
            now.strftime("%Y-%m-%d"),
            now.strftime("%H:%M:%S"),
            identifier,
            taxon,
            status,
        ])


def log_error(path, timezone, e):
    now = datetime.now(pytz.timezone(timezone)).strftime("%Y-%m-%d %H:%M:%S")
    with open(path, "a", encoding="utf-8") as f:
        f.write(f"[{now}] ERROR: {e}\n")
        traceback.print_exception(type(e), e, e.__traceback__, file=f)


# =========================================================
# MAIL REPORT
# =========================================================
@dataclass(frozen=True)
class MailParams:
    sender: str
    recipients: str
    server: str
    password: str


def load_mail_params(path):
    """Four lines: sender, recipient, SMTP server (host[:port]), password."""
    with open(path, encoding="utf-8") as f:
        lines = [line.strip() for line in f if line.strip()]
    if len(lines) < 4:
        raise ConfigError(f"{path}: expected sender, recipient, server and password lines")
    return MailParams(*lines[:4])


def build_report(params, result):
    if result.ok:
        subject = "Post valid"
        body = "Post valid\n\n" + "\n".join(ref.uri for ref in result.posts)
    else:
        subject = "Post error"
        body = f"Stage: {result.stage}\nImage: {result.identifier}\n\n{result.error}"

    msg = MIMEText(body, "plain", "utf-8")
    msg["From"] = params.sender
    msg["To"] = params.recipients
    msg["Subject"] = f"Report of taxobot: {subject}"
    return msg


def send_report(params, result, smtp_factory=smtplib.SMTP):
    host, _, port = params.server.partition(":")
    msg = build_report(params, result)
    with smtp_factory(host, int(port or 587), timeout=30) as smtp:
        smtp.starttls()
        smtp.login(params.sender, params.password)
        smtp.sendmail(params.sender, [params.recipients], msg.as_string())
