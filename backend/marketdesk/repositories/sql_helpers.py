"""
Small helpers shared by the repositories for building dynamic SQL
"""
import json
from typing import Any, Dict, Iterable, List, Optional, Tuple


def build_set_clause(fields: Dict[str, Any], allowed: Iterable[str]) -> Tuple[str, List[Any]]:
    """
    Build an UPDATE ... SET clause from the whitelisted keys of `fields`

    Column names are quoted (products and categories have a `desc` column).

    Dict values are stored as JSON text.

    Returns:
        Tuple of ("col_a = %s, col_b = %s", [value_a, value_b]); the clause is
        empty when no whitelisted key is present
    """
    columns = []
    params = []
    for column in allowed:
        if column in fields:
            value = fields[column]
            if isinstance(value, dict):
                value = json.dumps(value)
            columns.append(f'"{column}" = %s')
            params.append(value)
    return ", ".join(columns), params


def build_insert(fields: Dict[str, Any], allowed: Iterable[str]) -> Tuple[str, str, List[Any]]:
    """
    Build the column list and placeholders of an INSERT from whitelisted keys

    Returns:
        Tuple of ("col_a, col_b", "%s, %s", [value_a, value_b])
    """
    columns = []
    params = []
    for column in allowed:
        if column in fields:
            value = fields[column]
            if isinstance(value, dict):
                value = json.dumps(value)
            columns.append(f'"{column}"')
            params.append(value)
    return ", ".join(columns), ", ".join(["%s"] * len(columns)), params


def shop_scope(column: str, shop_ids: Optional[List[int]]) -> Tuple[Optional[str], List[Any]]:
    """
    Restrict a query to a set of shops

    None means no restriction (super admin); an empty list matches nothing.
    """
    if shop_ids is None:
        return None, []
    if not shop_ids:
        return "1=0", []
    return f"{column} = ANY(%s)", [list(shop_ids)]
