"""
Validation utilities for the devlog page builder.
Checks the structural rules of a page before it is stored and provides
clear error messages.
"""
from typing import Any, Dict, Optional

from fastapi import HTTPException
from pydantic import ValidationError

from models.page import PageContent, width_percent


def parse_width(width: Optional[str]) -> float:
    """
    Parse a column width like "50%" into 50.0.

    Raises:
        HTTPException: 400 if the width is not a positive percentage
    """
    value = width_percent(width)
    if value is None:
        raise HTTPException(
            status_code=400,
            detail=f"Column width must be a positive percentage, got {width!r}"
        )
    return value


def validate_page_content(content: PageContent) -> None:
    """
    Validate the structural rules of a page.

    Rules:
    - Every row has at least one column
    - Column widths in a row add up to 100%
    - Ids of rows, columns and elements are unique

    Raises:
        HTTPException: 400 if validation fails
    """
    errors = content.structure_errors()
    if errors:
        raise HTTPException(
            status_code=400,
            detail="; ".join(errors)
        )


def parse_page_payload(raw: Optional[Dict[str, Any]]) -> PageContent:
    """
    Parse posted page JSON and check its structure.

    Raises:
        HTTPException: 400 if the JSON does not match the page model or
        breaks a structural rule
    """
    if raw is None:
        raise HTTPException(status_code=400, detail="Page content is required")
    try:
        content = PageContent.from_api(raw)
    except ValidationError as e:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid page content: {e.error_count()} error(s): {e.errors()[0]['msg']}"
        )
    validate_page_content(content)
    return content
