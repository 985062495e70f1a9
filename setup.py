# setup.py
from setuptools import setup, find_packages

setup(
    name="seoq",
    version="1.0.0",
    description="SEO-анализ сайтов из командной строки: sitemap, проблемы страниц, ключевые слова, конкуренты",
    packages=find_packages(exclude=["tests", "tests.*"]),  # найдёт seoq и подпакеты
    package_data={"seoq": ["templates/*.j2"]},
    install_requires=[
        "aiohttp>=3.9",
        "beautifulsoup4>=4.12",
        "click>=8.1",
        "jinja2>=3.1",
        "lxml>=5.0",
        "openai>=1.66",
        "playwright>=1.40",
        "pydantic>=2.5",
        "python-dotenv>=1.0",
        "PyYAML>=6.0",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": [
            "seoq=seoq.cli:cli",
        ],
    },
    python_requires=">=3.11",
)
