"""Prompt assembly for website generation requests."""

from sitegen.domain.models.generation import GenerationRequest

SYSTEM_PROMPT = """You are an expert web developer. Create a complete, production-ready website based on the user's request.

CRITICAL REQUIREMENTS:
- ALWAYS generate exactly 3 separate files: index.html, styles.css, and script.js
- NEVER use inline styles or inline scripts in HTML
- Put ALL CSS in styles.css file
- Put ALL JavaScript in script.js file
- Use modern, responsive design
- Make it visually appealing with smooth animations
- Ensure mobile responsiveness

OUTPUT FORMAT (MANDATORY):
You MUST return exactly 3 files in this format:

FILE: index.html
```html
<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>Website Title</title>
  <link rel="stylesheet" href="styles.css">
</head>
<body>
  <!-- HTML content only -->
  <script src="script.js"></script>
</body>
</html>
```

FILE: styles.css
```css
/* All CSS styles here */
```

FILE: script.js
```javascript
// All JavaScript code here
```

IMPORTANT: Always generate all 3 files even for simple websites."""

CONTINUATION_INSTRUCTIONS = """A previous attempt at this request was interrupted. Its partial output is below, between the markers.
Continue EXACTLY where it stopped. Do not repeat any of the partial output and do not restart files that are already complete; output only the remaining text.

<<<PARTIAL OUTPUT>>>
{partial}
<<<END PARTIAL OUTPUT>>>"""


def build_user_message(request: GenerationRequest) -> str:
    """User turn for a request, with continuation context when resuming."""
    if not request.continuation:
        return request.prompt
    return f"{request.prompt}\n\n" + CONTINUATION_INSTRUCTIONS.format(partial=request.continuation)


def build_messages(request: GenerationRequest) -> list[dict[str, str]]:
    """Chat-completions message list for a request."""
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": build_user_message(request)},
    ]
