import re
from dataclasses import dataclass
from datetime import datetime

import pytz
import requests

from .errors import PublishError

URL_RE = re.compile(r"https?://[^\s]+")
TAG_RE = re.compile(r"(?:^|(?<=\s))#(\w+)")
MENTION_RE = re.compile(r"(?:^|(?<=\s))@([a-zA-Z0-9-]+(?:\.[a-zA-Z0-9-]+)+)")
TRAILING_PUNCT = ".,;:!?)"


@dataclass(frozen=True)
class PostRef:
    uri: str
    cid: str


def _byte_slice(text, start, end):
    return {
        "byteStart": len(text[:start].encode("utf-8")),
        "byteEnd": len(text[:end].encode("utf-8")),
    }


def _field(data, key, nsid):
    if key not in data:
        raise PublishError(f"{nsid} response has no {key!r}: {data!r}")
    return data[key]


def parse_facets(text, resolve_handle=None):
    """Build rich-text facets for links, hashtags and resolvable mentions.

    Offsets are UTF-8 byte positions, as the AT protocol requires.
    """
    facets = []

    for m in URL_RE.finditer(text):
        url = m.group(0).rstrip(TRAILING_PUNCT)
        facets.append({
            "index": _byte_slice(text, m.start(), m.start() + len(url)),
            "features": [{"$type": "app.bsky.richtext.facet#link", "uri": url}],
        })

    for m in TAG_RE.finditer(text):
        facets.append({
            "index": _byte_slice(text, m.start(), m.end()),
            "features": [{"$type": "app.bsky.richtext.facet#tag", "tag": m.group(1)}],
        })

    if resolve_handle is not None:
        for m in MENTION_RE.finditer(text):
            did = resolve_handle(m.group(1))
            if not did:
                continue
            facets.append({
                "index": _byte_slice(text, m.start(), m.end()),
                "features": [{"$type": "app.bsky.richtext.facet#mention", "did": did}],
            })

    return facets


class BlueskyClient:
    """Posts images with text to Bluesky through the XRPC HTTP API."""

    def __init__(self, handle, password, service="https://bsky.social", session=None, timeout=60):
        self.handle = handle
        self.password = password
        self.service = service.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout
        self.access_jwt = None
        self.did = None

    def _xrpc(self, method, nsid, **kwargs):
        headers = kwargs.pop("headers", {})
        if self.access_jwt:
            headers["Authorization"] = f"Bearer {self.access_jwt}"
        try:
            r = self.session.request(
                method, f"{self.service}/xrpc/{nsid}",
                headers=headers, timeout=self.timeout, **kwargs
            )
        except requests.RequestException as e:
            raise PublishError(f"{nsid} failed: {e}") from e
        if r.status_code != 200:
            raise PublishError(f"Bluesky Error {r.status_code} on {nsid}: {r.text}")
        try:
            data = r.json()
        except ValueError as e:
            raise PublishError(f"Invalid JSON from {nsid}: {e}") from e
        if not isinstance(data, dict):
            raise PublishError(f"Unexpected response from {nsid}: {data!r}")
        return data

    def login(self):
        data = self._xrpc(
            "POST", "com.atproto.server.createSession",
            json={"identifier": self.handle, "password": self.password},
        )
        self.access_jwt = _field(data, "accessJwt", "createSession")
        self.did = _field(data, "did", "createSession")
        return self.did

    def resolve_handle(self, handle):
        try:
            return self._xrpc(
                "GET", "com.atproto.identity.resolveHandle", params={"handle": handle}
            ).get("did")
        except PublishError:
            # Unknown handles stay plain text.
            return None

    def upload_image(self, image_bytes, mime_type="image/jpeg"):
        data = self._xrpc(
            "POST", "com.atproto.repo.uploadBlob",
            data=image_bytes, headers={"Content-Type": mime_type},
        )
        return _field(data, "blob", "uploadBlob")

    def post(self, text, image_bytes, alt_text, lang=None):
        if self.access_jwt is None:
            self.login()

        blob = self.upload_image(image_bytes)
        record = {
            "$type": "app.bsky.feed.post",
            "text": text,
            "createdAt": datetime.now(pytz.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ"),
            "embed": {
                "$type": "app.bsky.embed.images",
                "images": [{"alt": alt_text, "image": blob}],
            },
        }
        facets = parse_facets(text, self.resolve_handle)
        if facets:
            record["facets"] = facets
        if lang:
            record["langs"] = [lang]

        data = self._xrpc(
            "POST", "com.atproto.repo.createRecord",
            json={"repo": self.did, "collection": "app.bsky.feed.post", "record": record},
        )
        return PostRef(
            uri=_field(data, "uri", "createRecord"),
            cid=_field(data, "cid", "createRecord"),
        )
