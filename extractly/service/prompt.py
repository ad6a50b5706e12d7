from __future__ import annotations

from extractly.logger import get_logger
from extractly.utils.html import preprocess_html, truncate_html

logger = get_logger(__name__)

EXTRACTION_PROMPT = """
You are an expert web data extraction AI. Your task is to analyze HTML content and extract specific information based on natural language instructions.

INSTRUCTION: "{instruction}"

HTML CONTENT:
{html}

EXTRACTION GUIDELINES:
1. Carefully analyze the instruction to understand what data needs to be extracted
2. Look for the most relevant and prominent elements that match the requested information
3. When multiple similar elements exist, prioritize:
   - Elements that appear to be the main/primary content (larger, more prominent)
   - Elements in the main content area rather than sidebars, headers, or footers
   - Current/active values over historical or alternative values
4. For prices: Focus on the current selling price, not crossed-out or "was" prices
5. For text content: Extract clean text without HTML tags or excessive whitespace
6. For numerical values: Include relevant units or currency symbols when present
7. Assign confidence scores based on how certain you are about the extraction accuracy

RESPONSE FORMAT:
Return ONLY a valid JSON object with this exact structure:

{{
  "parsed_fields": ["field1", "field2"],
  "extracted": {{
    "field1": "extracted_value1",
    "field2": "extracted_value2"
  }},
  "confidence": {{
    "field1": 0.95,
    "field2": 0.87
  }}
}}

CRITICAL RULES:
- Return ONLY the JSON object, no additional text, explanations, or markdown formatting
- If a requested field cannot be found, set its value to null and confidence to 0.0
- Field names should be descriptive and match the instruction intent
- Confidence scores must be between 0.0 and 1.0
- Extract clean, formatted values without HTML tags
- Prefer data shown in HTML elements over data embedded in JSON blobs

Extract the requested data now:"""


def build_extraction_prompt(html: str, instruction: str) -> str:
    processed = preprocess_html(html)
    logger.debug(
        "Building extraction prompt: html=%d chars, cleaned=%d chars", len(html), len(processed)
    )
    return EXTRACTION_PROMPT.format(instruction=instruction, html=truncate_html(processed))
