# File: seoq/parser/sitemap_parser.py
"""seoq.parser.sitemap_parser: Модуль для парсинга sitemap.xml и sitemap index.

XML разбирается через lxml в обычное дерево словарей, после чего документ
проверяется pydantic-схемами: сначала как sitemap index, и только если это не
удалось, как urlset. Лишние поля игнорируются.
"""

from __future__ import annotations

from typing import Annotated, Any, Dict, List, Optional, Union

from lxml import etree
from pydantic import (
    AnyUrl,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
)

from seoq.crawler.models import (
    SitemapDocument,
    SitemapEntry,
    SitemapIndex,
    SitemapIndexEntry,
    UrlSet,
)
from seoq.errors import SitemapParseError, SitemapSchemaError

__all__ = ["parse_sitemap", "xml_to_tree"]

_URL_ADAPTER = TypeAdapter(AnyUrl)


def _one_or_many(value: Any) -> Any:
    """Одна запись или список записей: всегда приводим к списку."""
    if isinstance(value, dict):
        return [value]
    return value


def _check_url(value: Any) -> Any:
    # валидируем как URL, но возвращаем исходную строку без нормализации
    if isinstance(value, str):
        value = value.strip()
        try:
            _URL_ADAPTER.validate_python(value)
        except ValidationError:
            raise ValueError(f"invalid URL: {value!r}") from None
    return value


_UrlString = Annotated[str, BeforeValidator(_check_url)]


class _UrlEntrySchema(BaseModel):
    model_config = ConfigDict(extra="ignore")

    loc: _UrlString
    priority: Optional[float] = Field(None, ge=0, le=1)
    changefreq: Optional[str] = None
    lastmod: Optional[str] = None


class _UrlSetBody(BaseModel):
    model_config = ConfigDict(extra="ignore")

    url: Annotated[List[_UrlEntrySchema], BeforeValidator(_one_or_many)]


class _UrlSetSchema(BaseModel):
    model_config = ConfigDict(extra="ignore")

    urlset: _UrlSetBody


class _IndexEntrySchema(BaseModel):
    model_config = ConfigDict(extra="ignore")

    loc: _UrlString
    lastmod: Optional[str] = None


class _IndexBody(BaseModel):
    model_config = ConfigDict(extra="ignore")

    sitemap: Annotated[List[_IndexEntrySchema], BeforeValidator(_one_or_many)]


class _IndexSchema(BaseModel):
    model_config = ConfigDict(extra="ignore")

    sitemapindex: _IndexBody


# --------------------------------------------------------------------------- #
# XML -> дерево                                                               #
# --------------------------------------------------------------------------- #


def _element_to_value(element: etree._Element) -> Union[str, Dict[str, Any]]:
    children = [child for child in element if isinstance(child.tag, str)]
    if not children:
        return (element.text or "").strip()
    node: Dict[str, Any] = {}
    for child in children:
        name = etree.QName(child).localname
        value = _element_to_value(child)
        if name not in node:
            node[name] = value
        elif isinstance(node[name], list):
            node[name].append(value)
        else:
            node[name] = [node[name], value]
    return node


def xml_to_tree(xml_content: Union[str, bytes]) -> Dict[str, Any]:
    """Разбирает XML в дерево словарей: ``{корневой_тег: содержимое}``.

    Пространства имён отбрасываются, повторяющиеся теги становятся списками.
    Некорректный XML даёт :class:`SitemapParseError`.
    """
    if isinstance(xml_content, str):
        xml_content = xml_content.encode("utf-8")
    parser = etree.XMLParser(
        ns_clean=True,
        recover=False,
        resolve_entities=False,
        no_network=True,
        remove_comments=True,
    )
    try:
        root = etree.fromstring(xml_content, parser=parser)
    except etree.XMLSyntaxError as exc:
        raise SitemapParseError(f"Failed to parse XML: {exc}") from exc
    return {etree.QName(root).localname: _element_to_value(root)}


def parse_sitemap(xml_content: Union[str, bytes]) -> SitemapDocument:
    """Разбирает sitemap и определяет его вид.

    Args:
        xml_content: содержимое sitemap.xml (строка или байты).

    Returns:
        :class:`SitemapIndex` для sitemap index или :class:`UrlSet` для обычного sitemap.

    Raises:
        SitemapParseError: XML синтаксически некорректен.
        SitemapSchemaError: документ не подходит ни под одну из двух схем.

    Пример:
    ```python
    from seoq.parser.sitemap_parser import parse_sitemap

    with open('sitemap.xml', encoding='utf-8') as f:
        document = parse_sitemap(f.read())
    if document.kind == "leaf":
        print([entry.url for entry in document.entries])
    ```
    """
    tree = xml_to_tree(xml_content)

    try:
        index = _IndexSchema.model_validate(tree)
    except ValidationError:
        pass
    else:
        return SitemapIndex(
            entries=tuple(
                SitemapIndexEntry(location_url=item.loc, last_modified=item.lastmod)
                for item in index.sitemapindex.sitemap
            )
        )

    try:
        urlset = _UrlSetSchema.model_validate(tree)
    except ValidationError as exc:
        raise SitemapSchemaError(f"Invalid sitemap structure: {exc}") from exc
    return UrlSet(
        entries=tuple(
            SitemapEntry(url=item.loc, priority=item.priority) for item in urlset.urlset.url
        )
    )
