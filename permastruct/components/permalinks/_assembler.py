"""
LinkAssembler - Joins resolved paths onto the site URL.

Also home to the trailing-slash normalizer every link goes through.

Key behaviors:
- Exactly one slash between base URL and path
- Slash policy only touches the path part (never ?query or #fragment)
- Normalization is idempotent
- Final URL runs through the user_trailingslashit chain, then the caller's
  named chain
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any
from urllib.parse import parse_qsl, urlencode

from permastruct.components.hooks import HooksPort


def _split_suffix(path: str) -> tuple[str, str]:
    """Split path into (path part, ?query/#fragment suffix)."""
    cut = len(path)
    for marker in ("?", "#"):
        index = path.find(marker)
        if index != -1:
            cut = min(cut, index)
    return path[:cut], path[cut:]


def trailingslashit(path: str) -> str:
    """Ensure exactly one trailing slash on the path part."""
    head, tail = _split_suffix(path)
    return head.rstrip("/") + "/" + tail


def untrailingslashit(path: str) -> str:
    """Strip all trailing slashes from the path part."""
    head, tail = _split_suffix(path)
    return head.rstrip("/") + tail


def normalize(path: str, site_policy: bool) -> str:
    """Apply the site trailing-slash policy."""
    if site_policy:
        return trailingslashit(path)
    return untrailingslashit(path)


def join_url(base_url: str, path: str) -> str:
    """Join base URL and path with a single separating slash."""
    return base_url.rstrip("/") + "/" + path.lstrip("/")


def _split_query(url: str) -> tuple[str, dict[str, str], str]:
    """
    Split url into path, query parameters and fragment.

    Valueless keys come back with an empty value, so a rebuilt "?preview"
    reads "?preview=". Repeated keys keep only their last value.
    """
    url, _, fragment = url.partition("#")
    path, _, query = url.partition("?")
    return path, dict(parse_qsl(query, keep_blank_values=True)), fragment


def _join_query(path: str, params: dict[str, str], fragment: str) -> str:
    url = path
    if params:
        url += "?" + urlencode(params)
    if fragment:
        url += "#" + fragment
    return url


def add_query_arg(url: str, params: Mapping[str, Any]) -> str:
    """Set query parameters on url; existing keys keep their position."""
    path, existing, fragment = _split_query(url)
    for key, value in params.items():
        existing[key] = str(value)
    return _join_query(path, existing, fragment)


def remove_query_arg(url: str, *keys: str) -> str:
    """Drop query parameters from url."""
    path, existing, fragment = _split_query(url)
    for key in keys:
        existing.pop(key, None)
    return _join_query(path, existing, fragment)


class LinkAssembler:
    """
    Link assembler.

    Owns the site's slash policy and base URL.
    """

    def __init__(
        self,
        hooks: HooksPort,
        base_url: str,
        use_trailing_slashes: bool = True,
    ) -> None:
        """Initialize assembler."""
        self._hooks = hooks
        self._base_url = base_url
        self._use_trailing_slashes = use_trailing_slashes

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def use_trailing_slashes(self) -> bool:
        return self._use_trailing_slashes

    def user_trailingslashit(self, path: str, archive_type: str = "") -> str:
        """Apply the slash policy, then let filters adjust per archive type."""
        normalized = normalize(path, self._use_trailing_slashes)
        return self._hooks.apply_filters("user_trailingslashit", normalized, archive_type)

    def home_url(self, path: str = "") -> str:
        """Site URL for a path, without slash normalization."""
        return join_url(self._base_url, path)

    def assemble(
        self,
        base_url: str | None,
        resolved_path: str,
        archive_type: str,
        hook: str | None = None,
        *hook_args: Any,
    ) -> str:
        """
        Build the final URL.

        base_url None means the site base URL. When hook is given the URL is
        passed through that chain with hook_args as extra context.
        """
        path = self.user_trailingslashit(resolved_path, archive_type)
        url = join_url(base_url or self._base_url, path)
        return self.finish(url, hook, *hook_args)

    def finish(self, url: str, hook: str | None, *hook_args: Any) -> str:
        """Run the caller's named chain over an already-built URL."""
        if hook is None:
            return url
        return self._hooks.apply_filters(hook, url, *hook_args)
