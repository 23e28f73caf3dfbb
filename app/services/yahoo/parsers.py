from __future__ import annotations
from typing import Any, Dict, Iterator, List, Optional

from app.schemas.team import TeamIdentity
from app.services.ranking.categories import Polarity, StatCategory

# Yahoo's JSON (and the XML->JSON variants of it) is inconsistent about
# "one thing" vs "many things": a collection may arrive as a list, as a dict
# keyed "0".."n" plus "count", or as the single object itself. Everything in
# this module flattens those shapes into plain lists/dicts so nothing
# downstream has to branch on shape.

# ---------------- Small utils ----------------
def as_list(node: Any) -> List[Any]:
    """None -> [], list -> list, {"0":..,"1":..,"count":n} -> ordered values, anything else -> [node]."""
    if node is None:
        return []
    if isinstance(node, list):
        return node
    if isinstance(node, dict):
        numeric = [k for k in node.keys() if str(k).isdigit()]
        if numeric and all(str(k).isdigit() or k == "count" for k in node.keys()):
            return [node[k] for k in sorted(numeric, key=lambda x: int(x))]
        return [node]
    return [node]


def _walk(node: Any) -> Iterator[Any]:
    """Yield every dict/list in a payload (Yahoo loves nesting)."""
    if isinstance(node, dict):
        yield node
        for v in node.values():
            yield from _walk(v)
    elif isinstance(node, list):
        yield node
        for x in node:
            yield from _walk(x)


def _first(node: Any, key: str) -> Any:
    for n in _walk(node):
        if isinstance(n, dict) and key in n:
            return n[key]
    return None


def flatten(node: Any) -> Dict[str, Any]:
    """
    Squash Yahoo's `[[{"team_key":..},{"name":..},[]], {"team_stats":..}]`
    style lists into one flat dict. Dicts pass through (copied).
    """
    out: Dict[str, Any] = {}
    if isinstance(node, dict):
        out.update(node)
    elif isinstance(node, list):
        for part in node:
            if isinstance(part, dict):
                out.update(part)
            elif isinstance(part, list):
                out.update(flatten(part))
    return out


def _maybe_int(v: Any) -> Optional[int]:
    try:
        s = str(v).strip()
        return int(s) if s else None
    except (TypeError, ValueError):
        return None


def parse_stat_value(raw: Any) -> Any:
    """Float when Yahoo sent a number (or numeric string), the raw value otherwise."""
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, (int, float)):
        return float(raw)
    if isinstance(raw, str):
        try:
            return float(raw.strip())
        except ValueError:
            return raw
    return raw


# ---------------- Teams ----------------
def _team_name(obj: dict) -> Optional[str]:
    nm = obj.get("name")
    if isinstance(nm, str):
        return nm
    if isinstance(nm, dict):
        return nm.get("full") or nm.get("name")
    return None


def _team_manager(obj: dict) -> Optional[str]:
    managers = obj.get("managers")
    for entry in as_list(managers):
        if not isinstance(entry, dict):
            continue
        # JSON: [{"manager": {...}}]; XML->JSON: {"manager": {...}} or {"manager": [{...}, ...]}
        for m in as_list(entry.get("manager", entry)):
            if isinstance(m, dict) and (m.get("nickname") or m.get("guid")):
                return m.get("nickname") or m.get("guid")
    return None


def _team_logo(obj: dict) -> Optional[str]:
    logos = obj.get("team_logos")
    for entry in as_list(logos):
        if not isinstance(entry, dict):
            continue
        for logo in as_list(entry.get("team_logo", entry)):
            if isinstance(logo, dict) and logo.get("url"):
                return str(logo["url"])
    return None


def parse_team_identity(team_node: Any) -> Optional[TeamIdentity]:
    obj = flatten(team_node)
    team_key = obj.get("team_key")
    name = _team_name(obj)
    if not team_key or not name:
        return None
    team_id = obj.get("team_id")
    return TeamIdentity(
        team_key=str(team_key),
        team_id=str(team_id) if team_id is not None else None,
        name=str(name),
        manager_name=_team_manager(obj),
        logo_url=_team_logo(obj),
    )


def parse_teams(payload: dict) -> List[TeamIdentity]:
    """
    Teams from /league/{key}/teams (or /standings). Order follows Yahoo's
    numeric keys; duplicates by team_key are dropped.
    """
    teams_node = _first(payload.get("fantasy_content", payload), "teams")
    out: List[TeamIdentity] = []
    seen: set[str] = set()
    for entry in as_list(teams_node):
        if not isinstance(entry, dict):
            continue
        # {"team": [...]} per entry, or XML->JSON {"team": [team, team]} / {"team": team}
        raw = entry.get("team", entry)
        candidates = [raw]
        if isinstance(raw, list) and raw and all(isinstance(x, dict) and "team_key" in x for x in raw):
            candidates = raw
        for cand in candidates:
            ident = parse_team_identity(cand)
            if ident and ident.team_key not in seen:
                seen.add(ident.team_key)
                out.append(ident)
    return out


# ---------------- Stats ----------------
def parse_stat_list(stats_node: Any) -> Dict[str, Any]:
    """
    {stat_id: value} from any of:
      [{"stat": {"stat_id": "7", "value": "14"}}, ...]
      {"stat": [{...}, {...}]}   /   {"stat": {...}}   (single stat)
      {"0": {"stat": {...}}, "count": 1}
    """
    items = as_list(stats_node.get("stat")) if isinstance(stats_node, dict) and "stat" in stats_node else as_list(stats_node)
    out: Dict[str, Any] = {}
    for item in items:
        node = item.get("stat", item) if isinstance(item, dict) else None
        for stat in as_list(node):
            if not isinstance(stat, dict) or stat.get("stat_id") is None:
                continue
            value = stat.get("value")
            if value is None:
                continue
            out[str(stat["stat_id"])] = parse_stat_value(value)
    return out


def parse_team_stats(payload: dict) -> Dict[str, Any]:
    """Stat mapping from /team/{key}/stats;type=week;week=N. Empty when Yahoo sent none."""
    team_stats = _first(payload.get("fantasy_content", payload), "team_stats")
    if not isinstance(team_stats, dict):
        return {}
    return parse_stat_list(team_stats.get("stats"))


# ---------------- Leagues ----------------
def parse_league_meta(payload: dict) -> Dict[str, Any]:
    """league_key, name, season, game_code, current_week... from /league/{key}/metadata."""
    league = _first(payload.get("fantasy_content", payload), "league")
    # JSON: [ {meta}, {sub-resource} ]; XML->JSON: {meta...}
    obj = flatten(league[0] if isinstance(league, list) and league else league)
    return {
        "league_key": obj.get("league_key"),
        "name": obj.get("name"),
        "season": str(obj["season"]) if obj.get("season") is not None else None,
        "game_code": obj.get("game_code"),
        "scoring_type": obj.get("scoring_type"),
        "current_week": _maybe_int(obj.get("current_week")),
        "start_week": _maybe_int(obj.get("start_week")),
        "end_week": _maybe_int(obj.get("end_week")),
    }


def parse_leagues(payload: dict) -> List[Dict[str, Any]]:
    """Every league object under users -> games -> leagues (or a top-level leagues collection)."""
    out: List[Dict[str, Any]] = []
    seen: set[str] = set()
    for node in _walk(payload.get("fantasy_content", payload)):
        if not isinstance(node, dict) or "leagues" not in node:
            continue
        for entry in as_list(node["leagues"]):
            if not isinstance(entry, dict) or "league" not in entry:
                continue
            league = entry["league"]
            core = league[0] if isinstance(league, list) and league and isinstance(league[0], dict) else league
            obj = flatten(core)
            key = obj.get("league_key")
            if not key or key in seen:
                continue
            seen.add(key)
            out.append({
                "league_key": str(key),
                "name": str(obj.get("name") or key),
                "season": str(obj.get("season") or ""),
                "game_code": str(obj.get("game_code") or ""),
                "scoring_type": obj.get("scoring_type"),
                "current_week": _maybe_int(obj.get("current_week")),
            })
    return out


def parse_stat_categories(payload: dict) -> List[StatCategory]:
    """
    Scoring categories from /league/{key}/settings.

    Yahoo's sort_order "1" means higher is better, "0" lower is better;
    display-only stats (H/AB, IP in most formats) come back neutral.
    """
    container = _first(payload.get("fantasy_content", payload), "stat_categories")
    if not isinstance(container, dict):
        return []
    out: List[StatCategory] = []
    for item in as_list(container.get("stats")):
        for node in as_list(item.get("stat", item) if isinstance(item, dict) else None):
            if not isinstance(node, dict) or node.get("stat_id") is None:
                continue
            display_only = str(node.get("is_only_display_stat", "0")) == "1"
            if display_only:
                polarity = Polarity.NEUTRAL
            elif str(node.get("sort_order", "1")) == "0":
                polarity = Polarity.LOWER
            else:
                polarity = Polarity.HIGHER
            name = node.get("display_name") or node.get("abbr") or node.get("name") or f"Stat_{node['stat_id']}"
            out.append(StatCategory(stat_id=str(node["stat_id"]), polarity=polarity, name=str(name)))
    return out


# ---------------- Users ----------------
def parse_user_profile(payload: dict) -> Dict[str, Optional[str]]:
    user = _first(payload.get("fantasy_content", payload), "user")
    obj = flatten(user)
    prof = obj.get("profile") if isinstance(obj.get("profile"), dict) else {}
    return {
        "guid": obj.get("guid"),
        "nickname": prof.get("nickname"),
        "image_url": prof.get("image_url") or prof.get("image_url_small"),
    }
