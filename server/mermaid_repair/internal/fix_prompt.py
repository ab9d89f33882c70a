"""
Fix-syntax prompt handed to the AI re-fix service
when the deterministic sanitizer cannot repair a diagram.
"""

FIX_MERMAID_SYNTAX_PROMPT = """The following Mermaid diagram has a syntax error and won't render:

```mermaid
{{MERMAID_CODE}}
```

The renderer reported:
{{RENDER_ERROR}}

Context about what this diagram should show:
{{SUMMARY}}

SCAN EVERY NODE AND EDGE LABEL for these issues:

1. PARENTHESES in node labels - MUST be quoted or removed:
   WRONG: B[process(file)]
   RIGHT: B["process(file)"]

2. CURLY BRACES {} - define shapes in Mermaid, NEVER unquoted in labels:
   WRONG: -->|{:ok, pid}|
   RIGHT: -->|"{:ok, pid}"|

3. DOTS, EXCLAMATION MARKS, COLONS and PIPES in labels must be quoted:
   WRONG: A[File.open!]  or  A[key: value]
   RIGHT: A["File.open!"]  or  A["key: value"]

4. NESTED QUOTES - remove inner quotes:
   WRONG: A[raise "error"]
   RIGHT: A["raise error"]

Return ONLY valid JSON:

{
  "mermaid": "fixed mermaid code here"
}

Keep the diagram's structure. Only fix syntax, don't redesign.
"""

NO_SUMMARY = "No summary available."
NO_RENDER_ERROR = "No error details available."


def build_fix_syntax_prompt(broken_mermaid: str, summary: str = "", render_error: str = "") -> str:
    """Fill the fix-syntax template; placeholders are plain string replacements"""
    return (
        FIX_MERMAID_SYNTAX_PROMPT
        .replace("{{RENDER_ERROR}}", render_error.strip() or NO_RENDER_ERROR)
        .replace("{{SUMMARY}}", summary.strip() or NO_SUMMARY)
        .replace("{{MERMAID_CODE}}", broken_mermaid)
    )
