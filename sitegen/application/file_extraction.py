"""Extract website files from raw model output."""

import re

# FILE: <name>\n```lang\n<content>```
_FILE_BLOCK = re.compile(
    r"FILE:\s*([^\n]+)\n```(?:html|css|javascript|js)?\n([\s\S]*?)```"
)
_HTML_BLOCK = re.compile(r"```html\n([\s\S]*?)```")
_ANY_BLOCK = re.compile(r"```\n([\s\S]*?)```")

HTML_SKELETON = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>Generated Website</title>
  <script src="https://cdn.tailwindcss.com"></script>
</head>
<body>
  {body}
</body>
</html>"""


def extract_files(text: str) -> dict[str, str]:
    """Parse `FILE:` blocks out of a completion.

    Falls back to a single index.html built from the first fenced block (or
    the raw text), wrapped in an HTML skeleton when it is not a full
    document. Later blocks with the same name win.
    """
    files: dict[str, str] = {}
    for match in _FILE_BLOCK.finditer(text):
        filename = match.group(1).strip()
        if filename:
            files[filename] = match.group(2).strip()

    if files:
        return files

    code_match = _HTML_BLOCK.search(text) or _ANY_BLOCK.search(text)
    code = code_match.group(1).strip() if code_match else text.strip()

    if "<!DOCTYPE" not in code and "<html" not in code:
        code = HTML_SKELETON.format(body=code)

    return {"index.html": code}
