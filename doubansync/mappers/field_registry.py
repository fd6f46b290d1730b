"""
doubansync/mappers/field_registry.py

Per content type field tables for the destination spreadsheet.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from doubansync.domain.field_mapping import ContentType, FieldDescriptor, FieldType

STATUS_FIELD = "myStatus"


class UnknownContentTypeError(ValueError):
    """
    Raised when no field table exists for a content type.
    """


def _table(*descriptors: FieldDescriptor) -> Mapping[str, FieldDescriptor]:
    return MappingProxyType({descriptor.source_name: descriptor for descriptor in descriptors})


BOOK_FIELDS: Mapping[str, FieldDescriptor] = _table(
    FieldDescriptor("subjectId", "Subject ID", FieldType.TEXT, required=True),
    FieldDescriptor("title", "书名", FieldType.TEXT, required=True),
    FieldDescriptor("subtitle", "副标题", FieldType.TEXT),
    FieldDescriptor("originalTitle", "原作名", FieldType.TEXT),
    FieldDescriptor(
        "author",
        "作者",
        FieldType.TEXT,
        notes="scraped as an array of names, needs join",
    ),
    FieldDescriptor(
        "translator",
        "译者",
        FieldType.TEXT,
        notes="scraped as an array of names, needs join",
    ),
    FieldDescriptor("publisher", "出版社", FieldType.TEXT),
    FieldDescriptor("publishDate", "出版年份", FieldType.TEXT),
    FieldDescriptor("isbn", "ISBN", FieldType.TEXT, notes="leading digits only"),
    FieldDescriptor(
        "doubanRating",
        "豆瓣评分",
        FieldType.NUMBER,
        nested_path="rating.average",
        notes="read from the nested rating object",
    ),
    FieldDescriptor("myRating", "我的评分", FieldType.RATING, notes="1-5 stars"),
    FieldDescriptor(
        "myTags",
        "我的标签",
        FieldType.TEXT,
        notes="scraped as an array of tags, needs join",
    ),
    FieldDescriptor(STATUS_FIELD, "我的状态", FieldType.SINGLE_SELECT, notes="想读 / 在读 / 读过"),
    FieldDescriptor("myComment", "我的备注", FieldType.TEXT),
    FieldDescriptor("summary", "内容简介", FieldType.TEXT),
    FieldDescriptor("coverImage", "封面图", FieldType.URL),
    FieldDescriptor("markDate", "标记日期", FieldType.DATETIME),
)

SCREEN_FIELDS: Mapping[str, FieldDescriptor] = _table(
    FieldDescriptor("subjectId", "Subject ID", FieldType.TEXT, required=True),
    FieldDescriptor("title", "电影名", FieldType.TEXT, required=True),
    FieldDescriptor(STATUS_FIELD, "我的状态", FieldType.SINGLE_SELECT, notes="想看 / 看过"),
    FieldDescriptor("genre", "类型", FieldType.TEXT),
    FieldDescriptor("coverImage", "封面图", FieldType.URL),
    FieldDescriptor("doubanRating", "豆瓣评分", FieldType.NUMBER),
    FieldDescriptor("myComment", "我的备注", FieldType.TEXT),
    FieldDescriptor("duration", "片长", FieldType.TEXT, notes="may hold several cuts, e.g. 118分钟 / 100分钟"),
    FieldDescriptor("releaseDate", "上映日期", FieldType.TEXT, notes="regional dates joined with ' / '"),
    FieldDescriptor("summary", "剧情简介", FieldType.TEXT),
    FieldDescriptor("cast", "主演", FieldType.TEXT),
    FieldDescriptor("director", "导演", FieldType.TEXT),
    FieldDescriptor("writer", "编剧", FieldType.TEXT),
    FieldDescriptor("country", "制片地区", FieldType.TEXT),
    FieldDescriptor("language", "语言", FieldType.TEXT),
    FieldDescriptor("myRating", "我的评分", FieldType.RATING, notes="1-5 stars"),
    FieldDescriptor("myTags", "我的标签", FieldType.TEXT),
    FieldDescriptor("markDate", "标记日期", FieldType.DATETIME),
)

STATUS_OPTIONS: Mapping[ContentType, tuple[str, ...]] = MappingProxyType(
    {
        ContentType.BOOKS: ("想读", "在读", "读过"),
        ContentType.MOVIES: ("想看", "看过"),
        ContentType.TV: ("想看", "看过"),
        ContentType.DOCUMENTARY: ("想看", "看过"),
    }
)


def coerce_content_type(content_type: ContentType | str) -> ContentType:
    if isinstance(content_type, ContentType):
        return content_type
    try:
        return ContentType(str(content_type).strip().lower())
    except ValueError as exc:
        allowed = ", ".join(item.value for item in ContentType)
        raise UnknownContentTypeError(
            f"Unknown content type '{content_type}'. Allowed types: {allowed}."
        ) from exc


class FieldMappingRegistry:
    """
    Read-only lookup of field tables; safe to share across threads.
    """

    def __init__(self, tables: Mapping[ContentType, Mapping[str, FieldDescriptor]] | None = None) -> None:
        builtins: dict[ContentType, Mapping[str, FieldDescriptor]] = {
            ContentType.BOOKS: BOOK_FIELDS,
            ContentType.MOVIES: SCREEN_FIELDS,
            ContentType.TV: SCREEN_FIELDS,
            ContentType.DOCUMENTARY: SCREEN_FIELDS,
        }
        if tables:
            builtins.update({key: MappingProxyType(dict(value)) for key, value in tables.items()})
        self._tables: Mapping[ContentType, Mapping[str, FieldDescriptor]] = MappingProxyType(builtins)

    def lookup(self, content_type: ContentType | str) -> Mapping[str, FieldDescriptor]:
        resolved = coerce_content_type(content_type)
        table = self._tables.get(resolved)
        if table is None:
            raise UnknownContentTypeError(f"No field table registered for '{resolved.value}'.")
        return table

    def descriptors(self, content_type: ContentType | str) -> tuple[FieldDescriptor, ...]:
        return tuple(self.lookup(content_type).values())

    @staticmethod
    def status_options(content_type: ContentType | str) -> tuple[str, ...]:
        return STATUS_OPTIONS[coerce_content_type(content_type)]


DEFAULT_REGISTRY = FieldMappingRegistry()
