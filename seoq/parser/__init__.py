"""seoq.parser: разбор sitemap XML и очистка HTML."""
