from extractly.service.prompt import build_extraction_prompt
from extractly.utils.html import MAX_PROMPT_HTML_CHARS, TRUNCATION_MARKER, preprocess_html, truncate_html


def test_preprocess_strips_noise():
    html = """
    <html>
      <head>
        <SCRIPT type="text/javascript">var x = "<div>";</SCRIPT>
        <style>body { color: red; }</style>
      </head>
      <body>
        <!-- tracking pixel -->
        <noscript><img src="pixel.gif"></noscript>
        <h1>  Widget   Pro </h1>
      </body>
    </html>
    """
    assert preprocess_html(html) == "<html><head></head><body><h1> Widget Pro </h1></body></html>"


def test_preprocess_keeps_json_ld_free_markup():
    assert preprocess_html("<p>a</p>\n\n<p>b</p>") == "<p>a</p><p>b</p>"


def test_truncate_short_html_untouched():
    assert truncate_html("<p>short</p>") == "<p>short</p>"


def test_truncate_long_html():
    html = "x" * (MAX_PROMPT_HTML_CHARS + 10)
    truncated = truncate_html(html)
    assert truncated.startswith("x" * MAX_PROMPT_HTML_CHARS)
    assert truncated.endswith(TRUNCATION_MARKER)
    assert len(truncated) == MAX_PROMPT_HTML_CHARS + 1 + len(TRUNCATION_MARKER)


def test_prompt_embeds_instruction_and_cleaned_html():
    prompt = build_extraction_prompt(
        "<body><script>evil()</script><h1>Widget</h1></body>", "get the {product} name"
    )
    assert 'INSTRUCTION: "get the {product} name"' in prompt
    assert "<body><h1>Widget</h1></body>" in prompt
    assert "evil()" not in prompt
    assert '"parsed_fields": ["field1", "field2"]' in prompt
    assert "crossed-out" in prompt
    assert TRUNCATION_MARKER not in prompt


def test_prompt_marks_truncation():
    prompt = build_extraction_prompt("<p>" + "a" * MAX_PROMPT_HTML_CHARS + "</p>", "get text")
    assert TRUNCATION_MARKER in prompt
