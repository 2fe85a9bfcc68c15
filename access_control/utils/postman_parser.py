# access_control/utils/postman_parser.py
"""
Build a module template from a Postman (v2.x) collection.

Every top-level folder becomes a submodule named after the first URL path
segment of its requests; every non-GET request becomes an action named
``<method>:<path segments joined by ':'>`` where ``/:param`` placeholders
turn into ``[]``. For example ``DELETE {{baseUrl}}/account/:id`` becomes
``delete:account:[]``.
"""

import logging
import re
from typing import Any, Dict, List, Optional, Tuple

from ..schemas.template import TemplateModule, TemplateSubModule

logger = logging.getLogger(__name__)

BASE_URL = "{{baseUrl}}/"

_QUERY_RE = re.compile(r"\?.*")
_PLACEHOLDER_RE = re.compile(r"/:([^/]*?)(/|$)")
_NON_WORD_RE = re.compile(r"\W")
_SPACES_RE = re.compile(r"\s+")

_TITLE_PREFIXES = {
    "post": "Create",
    "put": "Update",
    "patch": "Modify",
    "delete": "Delete",
}


class PostmanParser:
    """Converts Postman collections into ``TemplateModule`` objects."""

    def __init__(self, use_description: bool = False):
        self.use_description = use_description

    def parse(self, collection: Dict[str, Any], module: str) -> TemplateModule:
        submodules: Dict[str, Dict[str, str]] = {}
        for folder in collection.get("item", []):
            requests = [
                entry["request"]
                for entry in folder.get("item", [])
                if isinstance(entry, dict) and isinstance(entry.get("request"), dict)
            ]
            submodule: Optional[str] = None
            actions: Dict[str, str] = {}
            for request in requests:
                if str(request.get("method", "GET")).upper() == "GET":
                    continue
                segment = self._first_segment(request)
                if segment is None:
                    logger.debug(f"[TEMPLATE] Skipping request without a path in module {module}")
                    continue
                submodule = submodule or segment
                name, title = self.parse_request(request)
                actions[name] = title
            if submodule is None:
                continue
            submodules.setdefault(submodule, {}).update(actions)

        return TemplateModule(
            name=module,
            submodules=[
                TemplateSubModule(name=name, actions=dict(sorted(actions.items())))
                for name, actions in submodules.items()
            ],
        )

    @staticmethod
    def _first_segment(request: Dict[str, Any]) -> Optional[str]:
        url = request.get("url")
        path: List[str] = []
        if isinstance(url, dict):
            path = [str(p) for p in url.get("path") or [] if p]
            if not path and url.get("raw"):
                path = _raw_url(url).split("/")
        elif isinstance(url, str):
            path = _strip_base(url).split("/")
        path = [p for p in path if p]
        return path[0] if path else None

    def parse_request(self, request: Dict[str, Any]) -> Tuple[str, str]:
        """Return ``(action name, title)`` for one request."""
        url = request.get("url")
        raw = _raw_url(url) if isinstance(url, dict) else _strip_base(str(url or ""))
        raw = _QUERY_RE.sub("", raw)
        raw = _PLACEHOLDER_RE.sub(":[]:", raw)
        raw = raw.rstrip(":").replace("/", ":")
        method = str(request.get("method", "")).lower()
        name = f"{method}:{raw}"

        description = request.get("description")
        if self.use_description and description:
            title = description if isinstance(description, str) else str(description)
        else:
            title = self.describe(method, raw)
        return name, title

    @staticmethod
    def describe(method: str, path: str) -> str:
        prefix = _TITLE_PREFIXES.get(method, "")
        suffix = _SPACES_RE.sub(" ", _NON_WORD_RE.sub(" ", path)).strip()
        return f"{prefix} {suffix}".strip()


def _strip_base(raw: str) -> str:
    return raw.replace(BASE_URL, "", 1)


def _raw_url(url: Dict[str, Any]) -> str:
    return _strip_base(str(url.get("raw", "")))
