"""seoq.analysis: SEO-анализ страниц с помощью языковой модели."""
