import pytest

from autop.grammar import get_patterns
from autop.vault import Vault, VaultEntry, escape_pre, remove_useless_newlines, restore, vault


@pytest.fixture
def patterns():
    return get_patterns("re")


def test_vault_fills_inner_content_with_same_length(patterns):
    text = "a<pre>ab\ncd</pre>b"
    filled, captures = vault(text, patterns.element("pre"))
    assert filled == "a<pre>00000</pre>b"
    assert len(filled) == len(text)
    assert captures == [VaultEntry("ab\ncd", 6, 11)]


def test_vault_records_matches_in_order(patterns):
    text = "<script>one</script>\n<SCRIPT type='x'>two</Script >"
    filled, captures = vault(text, patterns.element("script"))
    assert [c.content for c in captures] == ["one", "two"]
    assert filled == "<script>000</script>\n<SCRIPT type='x'>000</Script >"
    for entry in captures:
        assert text[entry.start:entry.end] == entry.content


def test_vault_inner_content_is_lazy(patterns):
    filled, captures = vault("<pre>a</pre>x<pre>b</pre>", patterns.element("pre"))
    assert filled == "<pre>0</pre>x<pre>0</pre>"
    assert [c.content for c in captures] == ["a", "b"]


def test_vault_ignores_unclosed_element(patterns):
    filled, captures = vault("<pre>never closed", patterns.element("pre"))
    assert filled == "<pre>never closed"
    assert captures == []


def test_restore_pairs_by_position(patterns):
    pattern = patterns.element("style")
    buffer = "<p>x</p>\n<style>000</style>\n<style media='print'>0</style>"
    assert restore(buffer, pattern, ["a{}", "b"]) == (
        "<p>x</p>\n<style>a{}</style>\n<style media='print'>b</style>"
    )


def test_restore_without_contents_is_noop(patterns):
    buffer = "<svg>000</svg>"
    assert restore(buffer, patterns.element("svg"), []) == buffer


def test_restore_with_fewer_matches_keeps_buffer(patterns):
    assert restore("<p>gone</p>", patterns.element("svg"), ["lost"]) == "<p>gone</p>"


def test_vault_roundtrip_all_kinds(patterns):
    text = (
        "<pre>1\n\n2</pre><textarea>t\n\nt</textarea>"
        "<script>s\n\ns</script><style>c\n\nc</style><svg>v\n\nv</svg>"
    )
    v = Vault(patterns)
    filled = v.extract(text)
    assert "\n" not in filled
    assert len(filled) == len(text)
    assert v.restore(filled) == text


def test_later_kind_inside_earlier_kind_is_not_vaulted_twice(patterns):
    v = Vault(patterns)
    filled = v.extract("<pre><script>x</script></pre>")
    assert v.entries["pre"] == [VaultEntry("<script>x</script>", 5, 23)]
    assert v.entries["script"] == []
    assert v.restore(filled) == "<pre><script>x</script></pre>"


def test_earlier_kind_inside_later_kind_is_restored(patterns):
    text = "<script>var s = '<pre>a</pre>';</script>"
    v = Vault(patterns)
    filled = v.extract(text)
    assert v.entries["pre"][0].content == "a"
    assert v.entries["script"][0].content == "var s = '<pre>0</pre>';"
    assert v.restore(filled) == text


def test_restore_applies_pre_post_processing(patterns):
    v = Vault(patterns)
    filled = v.extract("<pre>\n<i>\n</pre><script>\n<i>\n</script>")
    assert v.restore(filled, esc_pre=True, remove_useless_newlines_in_pre=True) == (
        "<pre>&lt;i&gt;</pre><script>\n<i>\n</script>"
    )


@pytest.mark.parametrize(
    "content, expected",
    [
        ("\nabc\n", "abc"),
        ("\r\nabc\r\n", "abc"),
        ("\n\nabc\n\n", "\n\nabc\n\n"),
        ("\nabc\n\n", "abc\n\n"),
        ("abc", "abc"),
        ("\n", ""),
        ("", ""),
        ("a\nb", "a\nb"),
    ],
)
def test_remove_useless_newlines(patterns, content, expected):
    assert remove_useless_newlines(content, patterns) == expected


def test_escape_pre():
    assert escape_pre('<a href="x">&</a>') == "&lt;a href=&quot;x&quot;&gt;&amp;&lt;/a&gt;"
