import pytest

from utils.html_text import html_to_text


@pytest.mark.parametrize(
    "html, expected",
    [
        ("<p>Great day!</p>", "Great day!"),
        ("plain text", "plain text"),
        ("", ""),
        ("<p>a</p>\n<p>b</p>", "a\nb"),
        ("<p>  spaced  </p>", "  spaced  "),
        ("<b>Tom &amp; Jerry</b>", "Tom &amp; Jerry"),
        ("<p>before<script>alert('x')</script>after</p>", "beforeafter"),
        ("<STYLE type='text/css'>\np { color: red; }\n</STYLE><p>hi</p>", "hi"),
        ("<div><span>nested</span> text</div>", "nested text"),
        ("<p>unclosed <b", "unclosed "),
        ("a < b", "a "),
    ],
)
def test_html_to_text(html, expected):
    assert html_to_text(html) == expected


def test_script_content_with_tags_is_removed_entirely():
    html = "<p>ok</p><script>document.write('<p>injected</p>')</script>"
    assert html_to_text(html) == "ok"


@pytest.mark.parametrize(
    "html",
    [
        "<p>Great day!</p>",
        "<<b>>text",
        "<scr<script>x</script>ipt>alert(1)</script>",
        "<>empty<>",
        "trailing <",
        "<p>a</p><style>b</style>c",
    ],
)
def test_html_to_text_is_idempotent(html):
    once = html_to_text(html)
    assert html_to_text(once) == once
