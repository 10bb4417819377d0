from sitegen.application.file_extraction import extract_files


def test_extracts_file_blocks() -> None:
    text = (
        "Here you go.\n\n"
        "FILE: index.html\n```html\n<!DOCTYPE html><html></html>\n```\n\n"
        "FILE: styles.css\n```css\nbody { margin: 0; }\n```\n\n"
        "FILE: script.js\n```javascript\nconsole.log('hi');\n```\n"
    )

    files = extract_files(text)

    assert files == {
        "index.html": "<!DOCTYPE html><html></html>",
        "styles.css": "body { margin: 0; }",
        "script.js": "console.log('hi');",
    }


def test_later_block_with_same_name_wins() -> None:
    text = "FILE: a.js\n```js\nold\n```\nFILE: a.js\n```js\nnew\n```"

    assert extract_files(text) == {"a.js": "new"}


def test_falls_back_to_html_block() -> None:
    text = "Sure!\n```html\n<!DOCTYPE html>\n<html><body>Hi</body></html>\n```"

    files = extract_files(text)

    assert list(files) == ["index.html"]
    assert files["index.html"].startswith("<!DOCTYPE html>")
    assert "<body>Hi</body>" in files["index.html"]


def test_fragment_is_wrapped_in_skeleton() -> None:
    files = extract_files("<h1>Hello</h1>")

    html = files["index.html"]
    assert html.startswith("<!DOCTYPE html>")
    assert "<h1>Hello</h1>" in html
    assert "cdn.tailwindcss.com" in html


def test_plain_fenced_block_used_when_no_html_block() -> None:
    files = extract_files("```\n<p>x</p>\n```")

    assert "<p>x</p>" in files["index.html"]
