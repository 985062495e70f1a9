# File: tests/test_sitemap_parser.py
import pytest

from seoq.crawler.models import SitemapEntry, SitemapIndex, SitemapIndexEntry, UrlSet
from seoq.errors import SitemapParseError, SitemapSchemaError
from seoq.parser.sitemap_parser import parse_sitemap, xml_to_tree

NS = 'xmlns="http://www.sitemaps.org/schemas/sitemap/0.9"'


def test_urlset_with_several_entries():
    xml = f"""<?xml version="1.0" encoding="UTF-8"?>
    <urlset {NS}>
      <url><loc>https://example.com/</loc><priority>1.0</priority></url>
      <url><loc>https://example.com/about</loc><changefreq>monthly</changefreq></url>
    </urlset>"""
    document = parse_sitemap(xml)
    assert isinstance(document, UrlSet)
    assert document.kind == "leaf"
    assert document.entries == (
        SitemapEntry("https://example.com/", 1.0),
        SitemapEntry("https://example.com/about", None),
    )


def test_single_url_entry_is_normalized_to_list():
    xml = f"<urlset {NS}><url><loc>https://example.com/only</loc><priority>0.5</priority></url></urlset>"
    document = parse_sitemap(xml)
    assert document.entries == (SitemapEntry("https://example.com/only", 0.5),)


def test_sitemap_index_single_and_many():
    single = f"<sitemapindex {NS}><sitemap><loc>https://example.com/a.xml</loc></sitemap></sitemapindex>"
    many = (
        f"<sitemapindex {NS}>"
        "<sitemap><loc>https://example.com/a.xml</loc><lastmod>2024-01-01</lastmod></sitemap>"
        "<sitemap><loc>https://example.com/b.xml</loc></sitemap>"
        "</sitemapindex>"
    )
    assert parse_sitemap(single) == SitemapIndex(entries=(SitemapIndexEntry("https://example.com/a.xml"),))
    document = parse_sitemap(many)
    assert document.kind == "index"
    assert document.entries == (
        SitemapIndexEntry("https://example.com/a.xml", "2024-01-01"),
        SitemapIndexEntry("https://example.com/b.xml", None),
    )


def test_bytes_with_encoding_declaration_and_extra_fields():
    xml = (
        '<?xml version="1.0" encoding="UTF-8"?>'
        f'<urlset {NS} xmlns:image="http://www.google.com/schemas/sitemap-image/1.1">'
        "<url><loc> https://example.com/img </loc>"
        "<image:image><image:loc>https://example.com/x.png</image:loc></image:image>"
        "<foo>bar</foo></url></urlset>"
    ).encode("utf-8")
    document = parse_sitemap(xml)
    assert document.entries == (SitemapEntry("https://example.com/img", None),)


def test_malformed_xml_raises_parse_error():
    with pytest.raises(SitemapParseError, match="Failed to parse XML"):
        parse_sitemap("<urlset><url><loc>https://example.com/</loc></url>")


@pytest.mark.parametrize(
    "xml",
    [
        "<rss><channel><title>news</title></channel></rss>",
        f"<urlset {NS}><url><loc>not a url</loc></url></urlset>",
        f"<urlset {NS}><url><loc>https://example.com/</loc><priority>1.5</priority></url></urlset>",
        f"<sitemapindex {NS}><sitemap><lastmod>2024</lastmod></sitemap></sitemapindex>",
    ],
)
def test_neither_shape_raises_schema_error(xml):
    with pytest.raises(SitemapSchemaError):
        parse_sitemap(xml)


def test_xml_to_tree_strips_namespaces_and_groups_repeats():
    tree = xml_to_tree(f"<urlset {NS}><url><loc>a</loc></url><url><loc>b</loc></url></urlset>")
    assert tree == {"urlset": {"url": [{"loc": "a"}, {"loc": "b"}]}}
