"""Pydantic DTOs for searching and importing Google Books volumes."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _GoogleModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")


class IndustryIdentifier(_GoogleModel):
    type: str
    identifier: str


class ImageLinks(_GoogleModel):
    thumbnail: str | None = None
    small_thumbnail: str | None = None


class VolumeInfo(_GoogleModel):
    title: str | None = None
    authors: list[str] = Field(default_factory=list)
    categories: list[str] = Field(default_factory=list)
    published_date: str | None = None
    description: str | None = None
    industry_identifiers: list[IndustryIdentifier] = Field(default_factory=list)
    image_links: ImageLinks | None = None


class ListPrice(_GoogleModel):
    amount: float | None = None
    currency_code: str | None = None


class SaleInfo(_GoogleModel):
    list_price: ListPrice | None = None


class BookImportRequest(_GoogleModel):
    """Body of ``POST /books/import`` — one Google Books volume resource."""

    volume_info: VolumeInfo
    sale_info: SaleInfo | None = None


class VolumeSearchResult(_GoogleModel):
    id: str | None = None
    volume_info: VolumeInfo = Field(default_factory=VolumeInfo)
    sale_info: SaleInfo | None = None
