"""Example custom extractor for ``article-batch --add-extractor``.

Usage:
    article-batch https://www.example-news.com/2024/03/story --add-extractor docs/example_extractor.py

Selector lists are tried in order. A selector ending in ``|attr`` reads that
attribute instead of the element text.
"""

extractors = [
    {
        "domain": "example-news.com",
        "title": ["h1.article-headline", "meta[property='og:title']|content"],
        "content": ["div.article-body", "article"],
        "excerpt": ["p.standfirst"],
        "author": ["a[rel='author']", ".byline .name"],
        "date_published": ["time[datetime]"],
        "lead_image_url": ["figure.lead img"],
        "clean": [".newsletter-signup", ".related-links", "aside"],
        "extend": {
            "section": "nav.breadcrumbs li:last-child",
            "comment_count": ".comments-count",
        },
    },
    {
        "domain": "markets.example-news.com",
        "content": ["section.market-report"],
        "clean": [".ticker"],
        "extend": {"symbol": ".quote-header .symbol"},
    },
]
