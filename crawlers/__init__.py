"""
UI Node Crawlers

Interfaces between the tile reader and the host UI tree.
"""

from .node_crawler import (
    NodeCrawlerInterface,
    SnapshotNodeCrawler,
)

__all__ = [
    "NodeCrawlerInterface",
    "SnapshotNodeCrawler",
]
