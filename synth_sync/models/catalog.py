"""
Pydantic models for the beatmap catalog wire format.
"""

from pydantic import BaseModel, ConfigDict, Field


class CatalogEntry(BaseModel):
    """A single beatmap in the catalog. Identity is its filename."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field(alias="filename")
    download_locator: str = Field(alias="download_url")


class CatalogPage(BaseModel):
    """One page of the paginated catalog response."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    entries: tuple[CatalogEntry, ...] = Field(alias="data")
    page_index: int = Field(alias="page")
    page_count: int = Field(alias="pageCount")
    total_count: int = Field(alias="total")
    count: int = 0
