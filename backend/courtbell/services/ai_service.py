"""
AI Service using AWS Bedrock (Claude)

Suggests legal tools (statutes, case law, drafting templates) for a free-text
case description. Single request/response; no retry and no caching.
"""
import json
import logging
import re
from typing import Any, Dict, List, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from courtbell.core.config import settings
from courtbell.db.schemas import LegalToolSuggestions
from courtbell.utils.exceptions import AIServiceError
from courtbell.utils.helpers import truncate_text

logger = logging.getLogger(__name__)

MAX_DETAILS_CHARS = 20000


class LegalToolsService:
    """
    Service layer for legal-tool suggestions using AWS Bedrock Claude
    """

    def __init__(self, bedrock_client=None, model_id: Optional[str] = None):
        self.bedrock_client = bedrock_client or boto3.client(
            'bedrock-runtime',
            region_name=settings.AWS_REGION,
            aws_access_key_id=settings.AWS_ACCESS_KEY_ID or None,
            aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY or None
        )
        self.model_id = model_id or settings.LEGAL_TOOLS_MODEL_ID

    def suggest(self, case_details: str) -> LegalToolSuggestions:
        """
        Main entry point: returns suggested statutes, case law and templates
        """
        details = (case_details or "").strip()
        if not details:
            raise ValueError("Case details are required")

        logger.info("Suggesting legal tools for: %s", truncate_text(details, 80))
        prompt = self._build_prompt(details)

        try:
            response = self.bedrock_client.invoke_model(
                modelId=self.model_id,
                body=json.dumps({
                    "anthropic_version": "bedrock-2023-05-31",
                    "max_tokens": settings.LEGAL_TOOLS_MAX_TOKENS,
                    "temperature": settings.LEGAL_TOOLS_TEMPERATURE,
                    "messages": [{
                        "role": "user",
                        "content": prompt
                    }]
                })
            )
            response_body = json.loads(response['body'].read())
            text = response_body['content'][0]['text']
        except (BotoCoreError, ClientError) as e:
            logger.error("Bedrock call failed: %s", e)
            raise AIServiceError(str(e))
        except (KeyError, IndexError, TypeError, json.JSONDecodeError) as e:
            logger.error("Unexpected Bedrock response shape: %s", e)
            raise AIServiceError("unexpected response from model")

        suggestions = self._parse_suggestions(text)
        logger.info(
            "Legal tools suggested: %d statutes, %d case law, %d templates",
            len(suggestions.suggested_statutes),
            len(suggestions.suggested_case_law),
            len(suggestions.suggested_templates),
        )
        return suggestions

    def _parse_suggestions(self, text: str) -> LegalToolSuggestions:
        """
        Parse the JSON object out of Claude's reply (bare or in a code block)
        """
        try:
            payload = json.loads(text)
        except json.JSONDecodeError:
            json_match = re.search(r'```(?:json)?\s*(\{.*?\})\s*```', text, re.DOTALL)
            if not json_match:
                json_match = re.search(r'\{.*\}', text, re.DOTALL)
            if not json_match:
                raise AIServiceError("model did not return suggestions")
            try:
                payload = json.loads(json_match.group(1) if json_match.lastindex else json_match.group())
            except json.JSONDecodeError:
                raise AIServiceError("model returned malformed suggestions")

        if not isinstance(payload, dict):
            raise AIServiceError("model returned malformed suggestions")

        return LegalToolSuggestions(
            suggested_statutes=_string_list(payload, "suggestedStatutes", "suggested_statutes", "statutes"),
            suggested_case_law=_string_list(payload, "suggestedCaseLaw", "suggested_case_law", "case_law"),
            suggested_templates=_string_list(payload, "suggestedTemplates", "suggested_templates", "templates"),
        )

    def _build_prompt(self, case_details: str) -> str:
        """
        Build the suggestion prompt for Claude
        """
        return f"""You are an AI legal assistant. Your task is to suggest relevant legal tools (statutes, case law, and templates) based on the details of a case provided by the user.

Case Details: {case_details[:MAX_DETAILS_CHARS]}

Based on the case details, suggest relevant statutes, case law, and templates.
Respond with ONLY a JSON object of this shape, no additional text:

{{
  "suggestedStatutes": ["Statute and section, with a short reason"],
  "suggestedCaseLaw": ["Case name and citation, with a short reason"],
  "suggestedTemplates": ["Name of a drafting template useful for this case"]
}}
"""


def _string_list(payload: Dict[str, Any], *keys: str) -> List[str]:
    for key in keys:
        value = payload.get(key)
        if isinstance(value, list):
            return [str(item).strip() for item in value if str(item).strip()]
    return []
