"""RugCheck Insider Networks API: wallet clusters and bundled supply.

Uses the free RugCheck endpoint `/tokens/{id}/insiders/graph`. The payload
has changed shape over time and arrives as one of:

- a flat array of insider records,
- ``{"insiders": [...], "clusters": [...]}`` (pre-clustered),
- ``{"nodes": [...], "edges": [...]}`` (graph, clustered here),
- ``{"holders": [...]}`` (legacy),

and anything else is treated as "no data". Every shape is normalized into
the same ``ClusterGraph``.

Cost: $0 (free API, no key needed).
Latency: ~1s.
"""

import time
from dataclasses import dataclass, field
from enum import Enum

import httpx
from loguru import logger

from holders_intel.parsers.api_usage import UsageRecorder, track_call

_BASE_URL = "https://api.rugcheck.xyz/v1"
_TIMEOUT = 10.0

TOP_INSIDERS_LIMIT = 10
HIGH_BUNDLING_PCT = 10.0
HIGH_INSIDER_PCT = 30.0
MAX_CLUSTERS_BEFORE_WARNING = 3


class PayloadShape(str, Enum):
    FLAT_ARRAY = "flat-array"
    INSIDERS_CLUSTERS = "insiders-clusters"
    GRAPH = "graph"
    HOLDERS = "holders"
    UNKNOWN = "unknown"


@dataclass
class InsiderWallet:
    """A wallet flagged by the insider source, with its share of supply."""

    wallet: str
    percentage: float
    insider_type: str = "insider"


@dataclass
class WalletCluster:
    """A group of linked wallets treated as one economic actor."""

    id: str
    member_addresses: list[str]
    total_percentage: float = 0.0
    cluster_type: str = "connected"  # "bundled", "connected", "suspicious"


@dataclass
class ClusterGraph:
    """Normalized insider network for one mint."""

    shape: PayloadShape = PayloadShape.UNKNOWN
    insiders: list[InsiderWallet] = field(default_factory=list)  # sorted, largest first
    clusters: list[WalletCluster] = field(default_factory=list)
    bundled_addresses: set[str] = field(default_factory=set)
    bundled_percentage: float = 0.0
    total_insider_percentage: float = 0.0
    warnings: list[str] = field(default_factory=list)
    fetch_time_ms: int = 0
    error: str | None = None

    @property
    def insider_count(self) -> int:
        return len(self.insiders)

    @property
    def has_insiders(self) -> bool:
        return bool(self.insiders)

    @property
    def top_insiders(self) -> list[InsiderWallet]:
        return self.insiders[:TOP_INSIDERS_LIMIT]

    @property
    def is_empty(self) -> bool:
        return not self.insiders and not self.clusters and not self.bundled_addresses

    @property
    def observed_addresses(self) -> set[str]:
        """Every address the insider source has seen transacting."""
        seen = {i.wallet for i in self.insiders} | set(self.bundled_addresses)
        for cluster in self.clusters:
            seen.update(cluster.member_addresses)
        return seen


async def get_insider_network(
    token_address: str,
    *,
    timeout: float = _TIMEOUT,
    recorder: UsageRecorder | None = None,
) -> ClusterGraph:
    """Fetch and normalize the insider graph for ``token_address``.

    Never raises for upstream problems: a 404 means the token is not indexed
    (empty graph, no error); any other failure returns an empty graph with
    ``error`` set.
    """
    url = f"{_BASE_URL}/tokens/{token_address}/insiders/graph"
    start = time.monotonic()

    try:
        async with httpx.AsyncClient(timeout=timeout) as client:
            async with track_call(recorder, "rugcheck", "insiders/graph", token_address) as trace:
                resp = await client.get(url, headers={"Accept": "application/json"})
                trace.status = resp.status_code

                if resp.status_code == 404:
                    logger.debug(f"[INSIDERS] No insider data for {token_address[:12]}")
                    return ClusterGraph(fetch_time_ms=_elapsed_ms(start))
                if resp.status_code != 200:
                    return ClusterGraph(
                        fetch_time_ms=_elapsed_ms(start),
                        error=f"RugCheck API returned {resp.status_code}",
                    )
                data = resp.json()

    except (httpx.HTTPError, ValueError) as e:
        logger.debug(f"[INSIDERS] Error for {token_address[:12]}: {type(e).__name__}: {e}")
        return ClusterGraph(
            fetch_time_ms=_elapsed_ms(start),
            error=str(e) or type(e).__name__,
        )

    result = parse_insider_graph(data)
    result.fetch_time_ms = _elapsed_ms(start)
    logger.debug(
        f"[INSIDERS] {token_address[:12]}: shape={result.shape.value} "
        f"insiders={result.insider_count} clusters={len(result.clusters)} "
        f"bundled={result.bundled_percentage:.1f}%"
    )
    return result


def detect_shape(data: object) -> PayloadShape:
    if isinstance(data, list):
        return PayloadShape.FLAT_ARRAY
    if not isinstance(data, dict):
        return PayloadShape.UNKNOWN
    if isinstance(data.get("insiders"), list):
        return PayloadShape.INSIDERS_CLUSTERS
    if isinstance(data.get("nodes"), list):
        return PayloadShape.GRAPH
    if isinstance(data.get("holders"), list):
        return PayloadShape.HOLDERS
    return PayloadShape.UNKNOWN


def parse_insider_graph(data: object) -> ClusterGraph:
    """Normalize any known payload shape into a ClusterGraph."""
    shape = detect_shape(data)
    result = ClusterGraph(shape=shape)

    raw_insiders: list = []
    raw_clusters: list = []

    if shape is PayloadShape.FLAT_ARRAY:
        raw_insiders = data
    elif shape is PayloadShape.INSIDERS_CLUSTERS:
        raw_insiders = data["insiders"]
        raw_clusters = data.get("clusters") if isinstance(data.get("clusters"), list) else []
    elif shape is PayloadShape.GRAPH:
        raw_insiders, raw_clusters = _normalize_graph(data, result.bundled_addresses)
    elif shape is PayloadShape.HOLDERS:
        raw_insiders = data["holders"]

    result.insiders = _parse_insiders(raw_insiders)
    result.total_insider_percentage = sum(i.percentage for i in result.insiders)
    result.clusters = _parse_clusters(raw_clusters, result.insiders)

    # Bundled = members of multi-wallet or "bundled" clusters + insiders typed as bundles
    bundled = result.bundled_addresses
    for cluster in result.clusters:
        if cluster.cluster_type == "bundled" or len(cluster.member_addresses) >= 2:
            bundled.update(cluster.member_addresses)
    for insider in result.insiders:
        if "bundle" in insider.insider_type.lower():
            bundled.add(insider.wallet)

    result.bundled_percentage = sum(i.percentage for i in result.insiders if i.wallet in bundled)
    result.warnings = _warnings(result)
    return result


def _normalize_graph(data: dict, bundled: set[str]) -> tuple[list[dict], list[dict]]:
    """Turn nodes/edges into insider records and connected-component clusters."""
    nodes = [n for n in data["nodes"] if isinstance(n, dict)]
    holding_nodes = [n for n in nodes if _holding(n) > 0]

    insiders = [
        {
            "wallet": _node_id(n),
            "percentage": _holding(n),
            "insiderType": "bundled" if n.get("participant") else (n.get("type") or n.get("label") or "insider"),
        }
        for n in holding_nodes
    ]

    clusters: list[dict] = []
    edges = data.get("edges", data.get("links"))
    if isinstance(edges, list):
        holding_ids = {_node_id(n) for n in holding_nodes if _node_id(n)}
        for index, members in enumerate(build_clusters_from_edges(edges, holding_ids)):
            clusters.append({"id": f"cluster-{index}", "wallets": members, "type": "connected"})

    for node in nodes:
        if node.get("participant") is True and _node_id(node):
            bundled.add(_node_id(node))

    return insiders, clusters


def build_clusters_from_edges(edges: list, holding_ids: set[str] | None = None) -> list[list[str]]:
    """Connected components (size >= 2) over an undirected edge list.

    Iterative depth-first search so adversarially deep graphs can't exhaust
    the stack. When ``holding_ids`` is given, edges touching no holder are
    dropped and only holders are kept as members (non-holders still connect).
    """
    adjacency: dict[str, set[str]] = {}
    for edge in edges:
        if not isinstance(edge, dict):
            continue
        source = edge.get("source") or edge.get("from")
        target = edge.get("target") or edge.get("to")
        if not isinstance(source, str) or not isinstance(target, str):
            continue
        if holding_ids is not None and source not in holding_ids and target not in holding_ids:
            continue
        adjacency.setdefault(source, set()).add(target)
        adjacency.setdefault(target, set()).add(source)

    visited: set[str] = set()
    components: list[list[str]] = []

    for start in adjacency:
        if start in visited:
            continue
        members: list[str] = []
        stack = [start]
        while stack:
            current = stack.pop()
            if current in visited:
                continue
            visited.add(current)
            if holding_ids is None or current in holding_ids:
                members.append(current)
            stack.extend(n for n in adjacency[current] if n not in visited)

        if len(members) >= 2:
            components.append(members)

    return components


def _parse_insiders(raw: list) -> list[InsiderWallet]:
    insiders: list[InsiderWallet] = []
    seen: set[str] = set()
    for item in raw:
        if not isinstance(item, dict):
            continue
        wallet = item.get("wallet") or item.get("address") or item.get("id")
        if not isinstance(wallet, str) or not wallet or wallet in seen:
            continue
        pct = _to_float(_first(item, ("percentage", "holding", "pct", "holdings")))
        if pct <= 0:
            continue
        insider_type = item.get("insiderType") or item.get("type") or item.get("label") or "insider"
        seen.add(wallet)
        insiders.append(InsiderWallet(wallet=wallet, percentage=pct, insider_type=str(insider_type)))

    insiders.sort(key=lambda i: i.percentage, reverse=True)
    return insiders


def _parse_clusters(raw: list, insiders: list[InsiderWallet]) -> list[WalletCluster]:
    pct_by_wallet = {i.wallet: i.percentage for i in insiders}
    clusters: list[WalletCluster] = []
    for index, item in enumerate(raw):
        if not isinstance(item, dict):
            continue
        members = item.get("wallets") if isinstance(item.get("wallets"), list) else item.get("members")
        members = [m for m in members if isinstance(m, str)] if isinstance(members, list) else []

        total = _first(item, ("percentage", "totalPercentage"))
        total_pct = _to_float(total) if total is not None else sum(pct_by_wallet.get(m, 0.0) for m in members)

        clusters.append(WalletCluster(
            id=str(item.get("id") or f"cluster-{index}"),
            member_addresses=members,
            total_percentage=total_pct,
            cluster_type=str(item.get("type") or item.get("clusterType") or "connected"),
        ))
    return clusters


def _warnings(result: ClusterGraph) -> list[str]:
    warnings: list[str] = []
    if result.bundled_percentage > HIGH_BUNDLING_PCT:
        warnings.append(f"High bundling: {result.bundled_percentage:.1f}% held by bundled wallets")
    if result.total_insider_percentage > HIGH_INSIDER_PCT:
        warnings.append(f"Insider concentration: {result.total_insider_percentage:.1f}% held by insiders")
    if len(result.clusters) > MAX_CLUSTERS_BEFORE_WARNING:
        warnings.append(f"Multiple wallet clusters detected ({len(result.clusters)} groups)")
    return warnings


def _node_id(node: dict) -> str:
    value = node.get("id") or node.get("wallet") or node.get("address") or ""
    return value if isinstance(value, str) else ""


def _holding(node: dict) -> float:
    return _to_float(_first(node, ("holdings", "percentage", "holding")))


def _first(item: dict, keys: tuple[str, ...]) -> object:
    """First truthy value among ``keys``."""
    for key in keys:
        value = item.get(key)
        if value:
            return value
    return None


def _to_float(value: object) -> float:
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    # NaN / inf from hostile payloads collapse to zero
    return number if number == number and abs(number) != float("inf") else 0.0


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)
