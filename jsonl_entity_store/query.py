from __future__ import annotations
from typing import Any, Callable, Dict, Optional, Union

SIMPLE_OPS = {"$eq", "$ne", "$gt", "$gte", "$lt", "$lte"}
QUERY_OPS = SIMPLE_OPS | {"$in", "$nin", "$contains"}

Predicate = Callable[[Any], bool]
PredicateLike = Union[Predicate, Dict[str, Any]]

_MISSING = object()


def _get(obj: Any, key: str) -> Any:
    if isinstance(obj, dict):
        return obj.get(key, _MISSING)
    return getattr(obj, key, _MISSING)


def _is_op_dict(v: Any) -> bool:
    return isinstance(v, dict) and bool(v) and all(isinstance(k, str) and k.startswith("$") for k in v)


def _check_ops(q: Dict[str, Any]) -> None:
    for k, v in q.items():
        if k.startswith("$"):
            raise ValueError(f"unsupported top-level operator: {k}")
        if _is_op_dict(v):
            unknown = set(v) - QUERY_OPS
            if unknown:
                raise ValueError(f"unsupported operator(s) for '{k}': {sorted(unknown)}")
        elif isinstance(v, dict):
            _check_ops(v)


def _compare(val: Any, op: str, arg: Any) -> bool:
    if op == "$eq":
        return val == arg
    if op == "$ne":
        return val != arg
    if op == "$in":
        return val in arg
    if op == "$nin":
        return val not in arg
    if op == "$contains":
        if isinstance(val, list):
            return arg in val
        if isinstance(val, str):
            return str(arg) in val
        return False
    try:
        if op == "$gt":
            return val > arg
        if op == "$gte":
            return val >= arg
        if op == "$lt":
            return val < arg
        if op == "$lte":
            return val <= arg
    except TypeError:
        return False
    return False


def match_obj(obj: Any, q: Dict[str, Any]) -> bool:
    for k, v in q.items():
        val = _get(obj, k)
        if _is_op_dict(v):
            if val is _MISSING:
                val = None
            for op, arg in v.items():
                if not _compare(val, op, arg):
                    return False
        elif isinstance(v, dict):
            if val is _MISSING or val is None or isinstance(val, (str, int, float, bool, list)):
                return False
            if not match_obj(val, v):
                return False
        else:
            if val is _MISSING or val != v:
                return False
    return True


def compile_query(q: Optional[PredicateLike]) -> Optional[Predicate]:
    """
    Turn a query dict into a predicate; callables and None pass through.

    Supports:
      - equality on scalars: {"name": "Alice"}
      - nested objects: {"address": {"city": "Wien"}}
      - $eq/$ne/$gt/$gte/$lt/$lte/$in/$nin
      - $contains for lists (membership) and strings (substring)
    """
    if q is None or callable(q):
        return q
    if not isinstance(q, dict):
        raise TypeError(f"predicate must be callable or a query dict, got {type(q).__name__}")
    _check_ops(q)
    query = dict(q)
    return lambda entity: match_obj(entity, query)
