"""
Tolerant field extraction for UKG SOAP responses.

The UKG services return loosely structured XML whose namespace prefixes vary
between responses (``<b:EmployeeNumber>`` in one, ``<EmployeeNumber>`` in
another). Rather than parse a full DOM, fields are pulled out with
case-insensitive patterns that try a namespaced form first and a bare form
second:

    <b:Results>
      <b:EmployeeIdentifier i:type="EmployeeNumberIdentifier">
        <b:CompanyCode>BPML</b:CompanyCode>
        <b:EmployeeNumber>100624</b:EmployeeNumber>
      </b:EmployeeIdentifier>
    </b:Results>

    extract_field(xml, "companyCode")   -> "BPML"
    extract_block(xml, "Results")       -> "<b:EmployeeIdentifier ...> ... "

Limitations:
- Only the first occurrence in document order is returned.
- Matching is non-greedy between an open tag and the next close tag of the
  same name, so nested elements with the same name are not supported.
- A field whose element contains child markup is treated as absent.

None of these functions raise on malformed input; anything that cannot be
matched is reported as None (or an empty list).
"""
import re
import logging
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)

# Attributes are allowed on the open tag; self-closing tags never match.
_ATTRS = r"(?:\s[^>]*?)?(?<!/)"
_PREFIX = r"[A-Za-z_][\w.\-]*"

_LEAF_PATTERN = re.compile(
    rf"<(?:(?P<prefix>{_PREFIX}):)?(?P<name>[A-Za-z_][\w.\-]*){_ATTRS}>"
    rf"(?P<value>[^<]*)"
    rf"</(?(prefix)(?P=prefix):)(?P=name)>"
)


def capitalize_field(field_name: str) -> str:
    """Upper-case the first letter of a field name (``companyCode`` -> ``CompanyCode``)."""
    if not field_name:
        return ""
    return field_name[0].upper() + field_name[1:]


def _field_patterns(element: str) -> List["re.Pattern"]:
    name = re.escape(element)
    namespaced = re.compile(
        rf"<(?P<prefix>{_PREFIX}):{name}{_ATTRS}>(?P<value>[^<]*)</(?P=prefix):{name}>",
        re.IGNORECASE
    )
    bare = re.compile(
        rf"<{name}{_ATTRS}>(?P<value>[^<]*)</{name}>",
        re.IGNORECASE
    )
    return [namespaced, bare]


def _block_patterns(element: str) -> List["re.Pattern"]:
    name = re.escape(element)
    namespaced = re.compile(
        rf"<(?P<prefix>{_PREFIX}):{name}{_ATTRS}>(?P<value>.*?)</(?P=prefix):{name}>",
        re.IGNORECASE | re.DOTALL
    )
    bare = re.compile(
        rf"<{name}{_ATTRS}>(?P<value>.*?)</{name}>",
        re.IGNORECASE | re.DOTALL
    )
    return [namespaced, bare]


def extract_field(block: Optional[str], field_name: str) -> Optional[str]:
    """Return the trimmed text of the first ``field_name`` element in ``block``.

    The field name is capitalized and matched case-insensitively, first
    under any namespace prefix and then without one. Empty values are
    reported as None.

    Args:
        block: XML text to search
        field_name: Field name, e.g. "employeeNumber"

    Returns:
        The field value, or None if the field is absent
    """
    if not isinstance(block, str) or not field_name:
        return None

    for pattern in _field_patterns(capitalize_field(field_name)):
        match = pattern.search(block)
        if match:
            value = match.group("value").strip()
            return value or None
    return None


def extract_first_field(block: Optional[str], *field_names: str) -> Optional[str]:
    """Return the first non-empty value among synonym field names, tried in order."""
    for field_name in field_names:
        value = extract_field(block, field_name)
        if value:
            return value
    return None


def extract_block(text: Optional[str], element_name: str) -> Optional[str]:
    """Return the inner text of the first ``element_name`` element in ``text``.

    Uses the same namespaced-then-bare matching as :func:`extract_field`,
    capturing non-greedily across newlines.
    """
    if not isinstance(text, str) or not element_name:
        return None

    for pattern in _block_patterns(capitalize_field(element_name)):
        match = pattern.search(text)
        if match:
            return match.group("value")
    return None


def extract_all_blocks(text: Optional[str], element_name: str) -> List[str]:
    """Return the inner text of every ``element_name`` element, in document order.

    Namespaced and bare instances are returned interleaved as they appear.
    Matches do not overlap.
    """
    if not isinstance(text, str) or not element_name:
        return []

    name = re.escape(capitalize_field(element_name))
    pattern = re.compile(
        rf"<(?:(?P<prefix>{_PREFIX}):)?{name}{_ATTRS}>(?P<value>.*?)</(?(prefix)(?P=prefix):){name}>",
        re.IGNORECASE | re.DOTALL
    )
    return [match.group("value") for match in pattern.finditer(text)]


def extract_leaf_fields(block: Optional[str]) -> Dict[str, str]:
    """Return every simple text element in ``block`` keyed by local name.

    The first occurrence of each name wins; empty elements are skipped.
    Useful for surfacing fields the known-field lists do not cover.
    """
    if not isinstance(block, str):
        return {}

    fields: Dict[str, str] = {}
    for match in _LEAF_PATTERN.finditer(block):
        name = match.group("name")
        value = match.group("value").strip()
        if value and name not in fields:
            fields[name] = value
    return fields


def is_unsuccessful(result_block: Optional[str]) -> bool:
    """True when the block carries a Success flag that is not ``true``.

    A missing flag is not treated as failure.
    """
    success = extract_field(result_block, "success")
    return success is not None and success.lower() != "true"
