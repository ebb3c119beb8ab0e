"""Prompt templates for the model path."""

from .models import Intent

# Filter keys the model may return; anything else is dropped.
RECOGNIZED_FILTER_KEYS = (
    "status",
    "priority",
    "type",
    "assignee",
    "organization",
    "tags",
    "created_date",
    "contains",
    "ticket_id",
)

_INTENT_CHOICES = "|".join(intent.value for intent in Intent)

INTERPRET_SYSTEM_PROMPT = f"""You are an expert at interpreting natural language queries for a support ticketing system.

Your task is to analyze support queries and extract:
1. The intent (what the user is asking for)
2. Filters that should be applied
3. Confidence level (0-1) in your interpretation

Return ONLY a JSON object in this exact format:
{{
  "intent": "{_INTENT_CHOICES}",
  "filters": {{
    "status": "open|closed|pending|solved|hold" (optional),
    "priority": "urgent|high|normal|low" (optional),
    "type": "incident|problem|question|task" (optional),
    "assignee": "string" (optional),
    "organization": "string" (optional),
    "tags": ["string"] (optional),
    "created_date": "today|this_week|this_month" (optional),
    "contains": "string" (optional),
    "ticket_id": number (optional)
  }},
  "confidence": 0.0-1.0,
  "reasoning": "brief explanation of your interpretation"
}}

Common intents:
- ticket_list: user wants to see/list tickets (e.g., "show open tickets")
- ticket_filter: user wants filtered tickets (e.g., "high priority from Acme Corp")
- ticket_status / ticket_count: user wants counts (e.g., "how many are pending")
- analytics: user wants statistics/metrics (e.g., "average response time")
- problem_areas: user wants recurring issues or topics needing attention
- user_query: user wants info about support agents (e.g., "list agents")
- organization_query: user wants info about customers/orgs
- help_article: user wants documentation (e.g., "how to configure SSO")
- unknown: query doesn't fit other categories

Use only intents from the list above. Focus on extracting all relevant filters. If something is ambiguous, lower your confidence."""


def interpret_user_prompt(query: str) -> str:
    return f'Interpret this support query: "{query}"'


def grounding_hint(stats_summary: str) -> str:
    """Dataset overview appended to the interpretation prompt when available."""
    return f"\n\nThe dataset currently looks like this:\n{stats_summary}"


def conversation_hint(previous_query: str, item_ids: list[str]) -> str:
    """Follow-up context for the answering prompt."""
    shown = ", ".join(f"#{item_id}" for item_id in item_ids) if item_ids else "none"
    return (
        "\n\nCONVERSATION CONTEXT:\n"
        f'- Previous question: "{previous_query}"\n'
        f"- Items shown in the previous answer: {shown}\n"
        '- Resolve references like "those", "them" or "the first one" against these items'
    )
