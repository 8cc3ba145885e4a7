from mdreader.parsing.links import extract_headings, extract_links, slugify

__all__ = [
    "extract_headings",
    "extract_links",
    "slugify",
]
