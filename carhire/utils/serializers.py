"""snake_case service documents -> camelCase JSON."""
from datetime import datetime, date
from typing import Optional

from carhire.utils.dates import to_iso


def _camel(key: str) -> str:
    head, *rest = key.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def serialize_value(v):
    if isinstance(v, (datetime, date)):
        return to_iso(v)
    if isinstance(v, dict):
        return serialize_doc(v)
    if isinstance(v, (list, tuple)):
        return [serialize_value(i) for i in v]
    return v


def serialize_doc(doc: Optional[dict], id_field: Optional[str] = None) -> Optional[dict]:
    """Camel-case every key; with ``id_field`` also expose that value as ``id``."""
    if doc is None:
        return None
    out = {_camel(k): serialize_value(v) for k, v in doc.items()}
    if id_field:
        out["id"] = doc.get(id_field)
    return out
