"""Splitting of SPDX license expressions into license identifiers.

NuGet packages declare licenses as SPDX expressions such as
``MIT OR Apache-2.0``. Only the individual identifiers matter for looking
up license texts, so expressions are split on their operators rather
than parsed into a tree: ``(MIT OR Apache-2.0) AND BSD-3-Clause`` yields
``["MIT", "Apache-2.0", "BSD-3-Clause"]`` and grouping is not preserved.
"""

import logging

from license_expression import get_spdx_licensing

logger = logging.getLogger(__name__)

OPERATORS = (" AND ", " OR ", " WITH ")

# Initialize SPDX licensing library for identifier checks
SPDX = get_spdx_licensing()


def _is_license_id(fragment: str) -> bool:
    if not fragment.strip():
        return False
    if any(token in fragment for token in (*OPERATORS, "(", ")")):
        return False
    return any(ch.isalnum() for ch in fragment)


def parse_license_expression(expression: str) -> list[str]:
    """Extract the license identifiers from an SPDX expression.

    Operators are matched case-sensitively and must be surrounded by
    spaces. If no fragment looks like an identifier, the whole trimmed
    expression is returned as the only identifier.

    Args:
        expression: SPDX expression, e.g. "MIT AND Apache-2.0".

    Returns:
        Identifiers in order of appearance; empty for blank input.
    """
    if not expression or not expression.strip():
        return []

    parts = [expression.strip()]
    for op in OPERATORS:
        split_parts = []
        for part in parts:
            split_parts.extend(p for p in part.split(op) if p)
        parts = split_parts

    license_ids = []
    for part in parts:
        clean_id = part.strip().strip("()").strip()
        if _is_license_id(clean_id):
            license_ids.append(clean_id)

    if not license_ids:
        return [expression.strip()]

    return license_ids


def unknown_license_ids(license_ids: list[str]) -> list[str]:
    """Return the identifiers that are not on the SPDX license list.

    Args:
        license_ids: Identifiers as returned by parse_license_expression.

    Returns:
        Identifiers the SPDX licensing table does not recognize.
    """
    unknown = []
    for license_id in license_ids:
        try:
            info = SPDX.validate(license_id)
        except Exception as e:
            logger.debug("Could not validate license id '%s': %s", license_id, e)
            unknown.append(license_id)
            continue
        if info.errors or info.invalid_symbols:
            unknown.append(license_id)
    return unknown
