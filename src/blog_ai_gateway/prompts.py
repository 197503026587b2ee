"""
Default prompt templates for the AI assist features.
"""

import json
import re
from typing import Optional

from pydantic import BaseModel, ValidationError

from .core.errors import MalformedResponseError
from .models.response import payload_preview

SUMMARY_TEMPLATE = "Write a concise summary (at most 200 words) of the following article:\n\n{content}"

WRITING_SUGGESTION_TEMPLATE = (
    "Give writing suggestions and improvements for the following content:\n\n{content}"
)

CONNECTION_TEST_PROMPT = "Connection test. Please reply 'OK'."

SEO_CONTENT_LIMIT = 1000
HISTORY_PROMPT_PREVIEW = 100

_CODE_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$")


class SeoResult(BaseModel):
    meta_description: str
    keywords: str
    share_description: Optional[str] = None


def build_seo_prompt(title: str, content: str) -> str:
    excerpt = content[:SEO_CONTENT_LIMIT]
    if len(content) > SEO_CONTENT_LIMIT:
        excerpt += "..."

    return f"""Generate SEO information for the following article: a meta description (at most 150 characters), 5-8 comma separated keywords and a share description (at most 60 characters).

Article title: {title}

Article content:
{excerpt}

Return JSON in exactly this format:
{{
  "metaDescription": "Meta description",
  "keywords": "keyword1,keyword2,keyword3,keyword4,keyword5",
  "shareDescription": "Share description"
}}"""


def parse_seo_result(text: str) -> SeoResult:
    """Parse the model's SEO JSON answer."""
    cleaned = _CODE_FENCE.sub("", text.strip())
    try:
        data = json.loads(cleaned)
        return SeoResult(
            meta_description=data["metaDescription"],
            keywords=data["keywords"],
            share_description=data.get("shareDescription"),
        )
    except (ValueError, KeyError, TypeError, ValidationError):
        raise MalformedResponseError(
            f"Could not parse the SEO result: {payload_preview(text)}",
            payload=payload_preview(text),
        )


def history_prompt(template: str, content: str) -> str:
    """Prompt as stored in history, with the content shortened."""
    return template.replace("{content}", content[:HISTORY_PROMPT_PREVIEW] + "...", 1)
