"""
Plan metadata parsing.

Plans carry an optional override mapping of assessment type id -> assessment
definition id. The structured `Plan.assessment_definitions` field is the
primary source; older plans embed the mapping in their free-text description
as `<!--PLAN_ASSESSMENT_DEFINITIONS:{...}-->`.

Both readers are defensive: missing or malformed content yields an empty
mapping and never raises.
"""
import json
import logging
import re
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

PLAN_MAPPING_PATTERN = re.compile(r"<!--PLAN_ASSESSMENT_DEFINITIONS:(.*?)-->", re.DOTALL)


def _clean_mapping(raw: Any) -> Dict[str, str]:
    """Keep only string-keyed, non-empty string/number values."""
    if not isinstance(raw, dict):
        return {}
    mapping = {}
    for type_id, definition_id in raw.items():
        if definition_id is None or isinstance(definition_id, (dict, list, bool)):
            continue
        value = str(definition_id).strip()
        if value:
            mapping[str(type_id)] = value
    return mapping


def parse_description_mapping(description: Optional[str]) -> Dict[str, str]:
    """
    Extract the override mapping embedded in a plan description.

    Args:
        description: Plan free-text description (may be None)

    Returns:
        Mapping of assessment type id -> definition id, empty when absent or malformed
    """
    if not description:
        return {}

    match = PLAN_MAPPING_PATTERN.search(description)
    if not match:
        return {}

    try:
        raw = json.loads(match.group(1))
    except (ValueError, TypeError) as e:
        logger.warning(f"Ignoring malformed plan assessment mapping: {e}")
        return {}

    return _clean_mapping(raw)


def resolve_override_mapping(
    structured: Optional[Dict[str, Any]],
    description: Optional[str],
) -> Dict[str, str]:
    """
    Return the plan's override mapping.

    The structured field wins whenever it holds a usable mapping; otherwise
    the description shim is consulted.
    """
    mapping = _clean_mapping(structured) if structured else {}
    if mapping:
        return mapping
    return parse_description_mapping(description)
