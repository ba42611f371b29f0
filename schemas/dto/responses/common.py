"""
Common response DTOs shared across the collection endpoints.

DocResponse        - single document with a message (create/update/delete)
BulkDocsResponse   - PATCH / DELETE /api/{slug} over a where selection
PaginatedDocs      - GET /api/{slug}
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class DocResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str
    doc: dict[str, Any]


class PaginatedDocs(BaseModel):
    """Page of documents; camelCase keys match what the admin UI consumes."""

    model_config = ConfigDict(populate_by_name=True)

    docs: list[dict[str, Any]]
    total_docs: int = Field(alias="totalDocs")
    limit: int
    page: int
    total_pages: int = Field(alias="totalPages")
    has_next_page: bool = Field(alias="hasNextPage")
    has_prev_page: bool = Field(alias="hasPrevPage")


class BulkDocsResponse(BaseModel):
    """Result of a bulk update/delete; ``errors`` lists documents left untouched."""

    model_config = ConfigDict(populate_by_name=True)

    message: str
    docs: list[dict[str, Any]]
    errors: list[dict[str, Any]]
