from headlinea.filters import filter_articles


def _articles(article_factory):
    return [
        article_factory("Chip shortage eases", category="tech", source="Ars"),
        article_factory(
            "Markets rally",
            category="economy",
            description="Chip makers lead gains",
            source="BBC Business",
        ),
        article_factory("Election results", category="world", source="BBC World"),
        article_factory("New GPU launched", category="tech", source="Verge"),
    ]


def test_all_category_with_empty_search_returns_everything(article_factory):
    articles = _articles(article_factory)

    assert filter_articles(articles, "all", "") == articles


def test_category_filter_keeps_matching_category(article_factory):
    articles = _articles(article_factory)

    result = filter_articles(articles, "tech")

    assert [a.title for a in result] == ["Chip shortage eases", "New GPU launched"]


def test_search_matches_title_description_and_source(article_factory):
    articles = _articles(article_factory)

    assert [a.title for a in filter_articles(articles, "all", "CHIP")] == [
        "Chip shortage eases",
        "Markets rally",
    ]
    assert [a.title for a in filter_articles(articles, "all", "bbc")] == [
        "Markets rally",
        "Election results",
    ]


def test_category_and_search_are_conjunctive(article_factory):
    articles = _articles(article_factory)

    result = filter_articles(articles, "tech", "chip")

    assert [a.title for a in result] == ["Chip shortage eases"]


def test_unknown_category_yields_nothing(article_factory):
    assert filter_articles(_articles(article_factory), "sports") == []


def test_whitespace_search_is_ignored(article_factory):
    articles = _articles(article_factory)

    assert filter_articles(articles, "all", "   ") == articles


def test_filter_is_idempotent_and_does_not_mutate_input(article_factory):
    articles = _articles(article_factory)
    snapshot = list(articles)

    first = filter_articles(articles, "tech", "gpu")
    second = filter_articles(articles, "tech", "gpu")

    assert first == second
    assert first is not articles
    assert articles == snapshot


def test_result_preserves_relative_order(article_factory):
    articles = _articles(article_factory)

    result = filter_articles(articles, "all", "e")
    positions = [articles.index(article) for article in result]

    assert positions == sorted(positions)
