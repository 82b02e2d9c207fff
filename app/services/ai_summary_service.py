"""
Generate the AI summary shown on business cards.

Summaries are written out of band (never during ingestion) from what is stored
for the business: Yelp fields plus a few stored review snippets.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from app.models.business import Business
from app.models.review import Review
from app.services.gemini_client import generate_text_with_system

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are SipLocal, a guide to independent coffee shops. You summarize a SINGLE coffee shop for someone deciding whether to visit. Never invent facts that are not in the data you are given. Write in a warm, concise tone.

Output 2-3 sentences of plain text (no markdown, no bullet points) covering what people like, the vibe, and anything that stands out (drinks, food, space for working or studying)."""

MAX_SNIPPETS = 5
MAX_SNIPPET_CHARS = 300


def _review_snippets(db: Session, business: Business) -> str:
    reviews = (
        db.query(Review)
        .filter(Review.business_id == business.id)
        .order_by(Review.rating.desc())
        .limit(MAX_SNIPPETS)
        .all()
    )
    snippets = [r.content.strip()[:MAX_SNIPPET_CHARS] for r in reviews if r.content]
    return "\n\n".join(snippets) if snippets else "(No review snippets available)"


def build_summary_prompt(db: Session, business: Business) -> str:
    categories = ", ".join(c.get("title", "") for c in (business.categories or []) if c.get("title")) or "None"
    location = ", ".join(p for p in (business.city, business.state) if p)
    return f"""Name: {business.name}
Location: {location or "Unknown"}
Address: {business.display_address or "Unknown"}
Rating: {business.rating} from {business.review_count or 0} Yelp reviews
Price: {business.price or "Not specified"}
Categories: {categories}
Review snippets:
{_review_snippets(db, business)}

Using ONLY this information, write the summary."""


def generate_ai_summary(db: Session, business: Business) -> Optional[str]:
    """Summary text for the business, or None if Gemini produced nothing (quota, empty reply)."""
    result = generate_text_with_system(build_summary_prompt(db, business), SYSTEM_PROMPT)
    if not result or not result.strip():
        logger.info(f"No AI summary generated for business id={business.id}")
        return None
    return result.strip()
