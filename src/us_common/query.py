"""Shared query-parameter dependencies."""

from typing import Annotated

from fastapi import Query

from src.us_common.errors import ValidationFailedError


def parse_ids(raw: list[str]) -> list[int]:
    """Accept both `ids=1,2` and `ids=1&ids=2`; blanks are skipped."""
    ids: list[int] = []
    for chunk in raw:
        for part in chunk.split(","):
            part = part.strip()
            if not part:
                continue
            try:
                ids.append(int(part))
            except ValueError:
                raise ValidationFailedError([f"ids: '{part}' is not a valid id"]) from None
    return ids


async def id_list(ids: Annotated[list[str], Query()]) -> list[int]:
    """FastAPI dependency for the `ids` bulk-lookup parameter."""
    return parse_ids(ids)
