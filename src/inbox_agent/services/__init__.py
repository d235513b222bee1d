"""Content generation services."""

from inbox_agent.services.article_generator import ArticleGenerator, generate_article

__all__ = ["ArticleGenerator", "generate_article"]
