"""
Datastar request helpers

Datastar sends every client signal with each action, nested under the
entity namespace. These helpers lift one namespace's leaves into the query
string so ordinary FastHTML parameter binding can see them.
"""

import json
from typing import Any, List, Optional, Tuple

from datastar_py.starlette import read_signals
from starlette.requests import Request, QueryParams


async def is_datastar_request(request: Request) -> bool:
    """Check if the request is a Datastar request."""
    return "Datastar-Request" in request.headers


def _dig(d: Any, path: List[str]) -> Optional[dict]:
    """Walk `d` following path segments; return the subtree or None."""
    cur = d
    for seg in path:
        if not isinstance(cur, dict) or seg not in cur:
            return None
        cur = cur[seg]
    return cur if isinstance(cur, dict) else None


def _flatten_leaves(node: dict) -> List[Tuple[str, str]]:
    """Every leaf key/value pair, depth-first."""
    out: List[Tuple[str, str]] = []
    for k, v in node.items():
        if isinstance(v, dict):
            out.extend(_flatten_leaves(v))
        elif isinstance(v, bool):
            out.append((k, "true" if v else "false"))
        else:
            out.append((k, str(v)))
    return out


async def explode_datastar_params_in_request(request: Request, namespace: str) -> None:
    """
    Rewrite the query string of `request` in place.

      ?datastar={"<namespace>": {...}}   becomes
      ?datastar=...&<namespace>=<json>&<leaf>=<value>...

    `namespace` may be dotted ("Clock.display"). Leaves are appended after the
    existing params, and a missing namespace is ignored.
    """
    try:
        signals = await read_signals(request)
    except (ValueError, TypeError):
        return
    subtree = _dig(signals, namespace.split("."))
    if subtree is None:
        return

    pairs = request.query_params.multi_items()
    pairs.append((namespace, json.dumps(subtree)))
    pairs.extend(_flatten_leaves(subtree))
    new_qp = QueryParams(pairs)

    request.scope["query_string"] = str(new_qp).encode("latin-1")
    # Starlette caches the parsed params on the request
    request._query_params = new_qp  # type: ignore[attr-defined]
    if hasattr(request, "_url"):
        del request._url
