"""
Unit tests for locator synthesis.

Tests the segment strategies, verification and the positional fallback.
"""

import pytest
from bs4 import BeautifulSoup

from textgrab.locator import (
    LocatorResolver,
    PathSegment,
    PathSynthesizer,
    SegmentKind,
)
from textgrab.locator.rules import (
    VOLATILE_CLASS_RULES,
    eligible_classes,
    volatile_class_reason,
)


ARTICLE_PAGE = """
<html>
  <head><title>Daily News</title></head>
  <body>
    <nav class="top-nav"><ul><li><a href="/">Home</a></li><li><a href="/world">World</a></li></ul></nav>
    <main id="main">
      <div class="card featured active"><h2>Story one</h2><p>First story text.</p></div>
      <div class="card"><h2>Story two</h2><p>Second story text.</p></div>
      <div class="card"><h2>Story three</h2><p>Third story text.</p></div>
      <section>
        <p>Loose paragraph.</p>
        <p>Another loose paragraph.</p>
        <button data-testid="share">Share</button>
        <button data-testid="save">Save</button>
      </section>
    </main>
    <footer><p>Footer text</p></footer>
  </body>
</html>
"""


def parse(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


@pytest.fixture
def synthesizer():
    return PathSynthesizer()


@pytest.fixture
def resolver():
    return LocatorResolver()


class TestVolatileClassRules:
    """Test the volatile-class table."""

    @pytest.mark.parametrize(
        "class_name,expected",
        [
            ("active", VOLATILE_CLASS_RULES["active"]),
            ("is-active", VOLATILE_CLASS_RULES["active"]),
            ("btn-hover", VOLATILE_CLASS_RULES["hover"]),
            ("has-focus", VOLATILE_CLASS_RULES["focus"]),
            ("row-selected", VOLATILE_CLASS_RULES["selected"]),
            ("_x9f3", VOLATILE_CLASS_RULES["^_"]),
            ("a", VOLATILE_CLASS_RULES["^.?$"]),
            ("article-body", None),
            ("card", None),
        ],
    )
    def test_volatile_class_reason(self, class_name, expected):
        """Each table row classifies its class names."""
        assert volatile_class_reason(class_name) == expected

    def test_eligible_classes_keeps_order(self):
        """Stable classes are kept in document order."""
        node = parse('<div class="x card _tmp hover featured big"></div>').div
        assert eligible_classes(node) == ["card", "featured", "big"]


class TestPathSynthesizer:
    """Test PathSynthesizer.synthesize."""

    def test_unique_class_needs_no_position(self, synthesizer):
        """A class unique among sibling divs is used on its own."""
        soup = parse(
            '<section><div class="intro">A</div>'
            '<div class="article-body">B</div>'
            '<div class="footer-note">C</div></section>'
        )
        target = soup.select_one("div.article-body")

        locator = synthesizer.synthesize(target, soup.section)

        assert locator.selector == "div.article-body"
        assert locator.path == [PathSegment(SegmentKind.CLASS, "div.article-body")]
        assert not locator.fallback

    def test_identifier_wins(self, synthesizer):
        """An id unique among siblings is preferred over everything else."""
        soup = parse(ARTICLE_PAGE)
        target = soup.find("main")

        locator = synthesizer.synthesize(target, soup)

        assert locator.path[-1] == PathSegment(SegmentKind.ID, "main#main")
        assert locator.selector == "html > body > main#main"

    def test_class_combination(self, synthesizer):
        """Several stable classes are combined when that makes the node unique."""
        soup = parse(ARTICLE_PAGE)
        target = soup.select_one("div.featured")

        locator = synthesizer.synthesize(target, soup.find("main"))

        assert locator.selector == "div.card.featured"

    def test_volatile_classes_are_ignored(self, synthesizer):
        """State classes never appear in a locator."""
        soup = parse('<ul><li class="item active">A</li><li class="item">B</li></ul>')
        target = soup.find("li")

        locator = synthesizer.synthesize(target, soup.ul)

        assert locator.selector == "li.item:nth-child(1)"
        assert "active" not in locator.selector
        assert locator.path[0].kind == SegmentKind.POSITIONAL

    def test_partial_class_with_position(self, synthesizer):
        """Shared classes degrade to tag.firstClass plus a position."""
        soup = parse(ARTICLE_PAGE)
        cards = soup.select("div.card")

        locator = synthesizer.synthesize(cards[2], soup.find("main"))

        assert locator.selector == "div.card:nth-child(3)"

    def test_sole_tag_is_enough(self, synthesizer):
        """A node that is the only one of its tag needs no qualifier."""
        soup = parse(ARTICLE_PAGE)
        target = soup.find("section")

        locator = synthesizer.synthesize(target, soup.find("main"))

        assert locator.path == [PathSegment(SegmentKind.TAG, "section")]

    def test_attribute_enrichment(self, synthesizer):
        """Semantic hooks replace positional indices when they are unique."""
        soup = parse(ARTICLE_PAGE)
        target = soup.select_one('button[data-testid="save"]')

        locator = synthesizer.synthesize(target, soup.find("section"))

        assert locator.selector == 'button[data-testid="save"]'
        assert locator.path[0].kind == SegmentKind.ATTRIBUTE

    def test_positional_counts_all_siblings(self, synthesizer):
        """nth-child indices count siblings of every tag."""
        soup = parse("<div><p>a</p><span>s</span><p>b</p></div>")
        target = soup.find_all("p")[1]

        locator = synthesizer.synthesize(target, soup.div)

        assert locator.selector == "p:nth-child(3)"

    def test_duplicate_ids_fall_through(self, synthesizer):
        """An id shared by siblings does not count as unique."""
        soup = parse('<div><span id="x">1</span><span id="x">2</span></div>')
        target = soup.find_all("span")[1]

        locator = synthesizer.synthesize(target, soup.div)

        assert locator.selector == "span:nth-child(2)"

    def test_special_characters_are_escaped(self, synthesizer, resolver):
        """Ids with CSS metacharacters still produce a verified locator."""
        soup = parse('<div><div id="a:b.c">x</div><div>y</div></div>')
        target = soup.find(id="a:b.c")

        locator = synthesizer.synthesize(target, soup.div)

        assert not locator.fallback
        assert locator.path[0].kind == SegmentKind.ID
        assert resolver.match_path([s.selector for s in locator.path], soup.div) == [target]

    def test_every_element_resolves_uniquely(self, synthesizer, resolver):
        """Re-evaluating any synthesized locator yields exactly its target."""
        soup = parse(ARTICLE_PAGE)
        for node in soup.find_all(True):
            locator = synthesizer.synthesize(node, soup)
            matches = resolver.match_path([s.selector for s in locator.path], soup)
            assert len(matches) == 1
            assert matches[0] is node

    def test_label_and_timestamp(self, synthesizer):
        """Locators carry a descriptive label and a creation time."""
        soup = parse(ARTICLE_PAGE)
        target = soup.select_one("div.featured")

        locator = synthesizer.synthesize(target, soup, scope="news.example.com")

        assert locator.scope == "news.example.com"
        assert locator.created_at > 0
        assert "div.card" in locator.label
        assert "Story one" in locator.label

    def test_target_outside_root_rejected(self, synthesizer):
        """The target must be a strict descendant of the root."""
        soup = parse("<div><p>a</p></div><section><p>b</p></section>")
        with pytest.raises(ValueError):
            synthesizer.synthesize(soup.section.p, soup.div)
        with pytest.raises(ValueError):
            synthesizer.synthesize(soup.div, soup.div)


class TestFallbackSynthesizer:
    """Test the positional fallback."""

    def test_fallback_for_every_element(self, synthesizer, resolver):
        """The fallback path is always non-empty, positional and resolvable."""
        soup = parse(ARTICLE_PAGE)
        for node in soup.find_all(True):
            locator = synthesizer.synthesize_fallback(node, soup)
            assert locator.fallback
            assert locator.path
            assert all(":nth-child(" in segment.selector for segment in locator.path)
            assert resolver.match_path([s.selector for s in locator.path], soup) == [node]

    def test_fallback_shape(self, synthesizer):
        """Each level is encoded as tag:nth-child(position)."""
        soup = parse("<div><p>a</p><ul><li>1</li><li>2</li></ul></div>")
        target = soup.find_all("li")[1]

        locator = synthesizer.synthesize_fallback(target, soup)

        assert locator.selector == "div:nth-child(1) > ul:nth-child(2) > li:nth-child(2)"

    def test_unverifiable_path_uses_fallback(self, resolver):
        """A malformed strategy result is caught and replaced by the fallback."""
        broken = PathSynthesizer(
            strategies=[lambda node, siblings: PathSegment(SegmentKind.TAG, "div[")]
        )
        soup = parse(ARTICLE_PAGE)
        target = soup.select_one("div.featured")

        locator = broken.synthesize(target, soup)

        assert locator.fallback
        assert resolver.match_path([s.selector for s in locator.path], soup) == [target]

    def test_ambiguous_path_uses_fallback(self, resolver):
        """A strategy result matching several nodes is replaced by the fallback."""
        loose = PathSynthesizer(
            strategies=[lambda node, siblings: PathSegment(SegmentKind.TAG, node.name)]
        )
        soup = parse(ARTICLE_PAGE)
        target = soup.select("div.card")[1]

        locator = loose.synthesize(target, soup)

        assert locator.fallback
        assert resolver.match_path([s.selector for s in locator.path], soup) == [target]
