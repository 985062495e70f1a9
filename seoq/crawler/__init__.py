"""seoq.crawler: обход sitemap и загрузка страниц."""
