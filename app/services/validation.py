"""Per-route request validation, applied before any upstream call."""

from typing import Any, Callable, Mapping

from app.core.errors import InvalidEnum, InvalidParameter, MissingParameter

MEDIA_KINDS = ("movie", "tv")
TRENDING_KINDS = ("movie", "tv", "all")
TIME_WINDOWS = ("day", "week")

ValidatedParams = dict[str, Any]
Rule = Callable[[Mapping[str, Any]], ValidatedParams]


def _present(raw: Mapping[str, Any], field: str) -> str:
    value = raw.get(field)
    if value is None or not str(value).strip():
        raise MissingParameter(field)
    return str(value).strip()


def _positive_int(raw: Mapping[str, Any], field: str) -> int:
    value = _present(raw, field)
    try:
        number = int(value)
    except ValueError:
        raise InvalidParameter(field, "must be an integer") from None
    if number < 1:
        raise InvalidParameter(field, "must be a positive integer")
    return number


def _page(raw: Mapping[str, Any]) -> int:
    """Page number, defaulting to 1 when absent or not a positive integer."""
    try:
        page = int(str(raw.get("page", 1)).strip())
    except ValueError:
        return 1
    return page if page >= 1 else 1


def _choice(raw: Mapping[str, Any], field: str, allowed: tuple[str, ...]) -> str:
    value = raw.get(field)
    if value not in allowed:
        raise InvalidEnum(field, allowed)
    return value


def _list_rule(raw):
    return {"page": _page(raw)}


def _kind_rule(raw):
    return {"kind": _choice(raw, "kind", MEDIA_KINDS)}


def _id_rule(raw):
    return {"kind": _choice(raw, "kind", MEDIA_KINDS), "id": _positive_int(raw, "id")}


def _id_page_rule(raw):
    return {**_id_rule(raw), "page": _page(raw)}


def _search_rule(raw):
    return {"query": _present(raw, "query"), "page": _page(raw)}


def _discover_rule(raw):
    kind = _choice(raw, "kind", MEDIA_KINDS)
    return {"kind": kind, "genre": _positive_int(raw, "genre"), "page": _page(raw)}


def _trending_rule(raw):
    return {
        "kind": _choice(raw, "kind", TRENDING_KINDS),
        "time_window": _choice(raw, "time_window", TIME_WINDOWS),
        "page": _page(raw),
    }


RULES: dict[str, Rule] = {
    "home": _list_rule,
    "popular": _list_rule,
    "now_playing": _list_rule,
    "top_rated": _list_rule,
    "trending": _trending_rule,
    "search": _search_rule,
    "discover": _discover_rule,
    "genres": _kind_rule,
    "genre_preview": _kind_rule,
    "item": _id_rule,
    "detail": _id_rule,
    "credits": _id_rule,
    "similar": _id_page_rule,
    "videos": _id_rule,
}


def validate(route_name: str, raw_params: Mapping[str, Any]) -> ValidatedParams:
    """Validate raw request parameters for ``route_name``.

    Raises a ValidationError subclass on bad input.
    """
    try:
        rule = RULES[route_name]
    except KeyError:
        raise LookupError(f"No validation rules for route '{route_name}'") from None
    return rule(raw_params)
