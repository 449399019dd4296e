import pytest

from app.cache import DASHBOARD_PATH, INVOICES_PATH, PageCache


@pytest.fixture
def cache(tmp_path):
    c = PageCache(tmp_path / "cache")
    yield c
    c.close()


def test_render_called_once_until_revalidated(cache: PageCache) -> None:
    calls = []

    def render():
        calls.append(1)
        return {"n": len(calls)}

    assert cache.get_or_render(INVOICES_PATH, render) == {"n": 1}
    assert cache.get_or_render(INVOICES_PATH, render) == {"n": 1}
    assert len(calls) == 1

    cache.revalidate_path(INVOICES_PATH)

    assert cache.get_or_render(INVOICES_PATH, render) == {"n": 2}


def test_params_are_separate_entries(cache: PageCache) -> None:
    cache.get_or_render(INVOICES_PATH, lambda: "page1", {"query": "", "page": 1})
    cache.get_or_render(INVOICES_PATH, lambda: "page2", {"query": "", "page": 2})

    assert cache.get_or_render(INVOICES_PATH, lambda: "x", {"page": 1, "query": ""}) == "page1"
    assert cache.get_or_render(INVOICES_PATH, lambda: "x", {"query": "", "page": 2}) == "page2"


def test_revalidate_evicts_every_variant_of_path(cache: PageCache) -> None:
    for page in (1, 2, 3):
        cache.get_or_render(INVOICES_PATH, lambda: "old", {"page": page})

    assert cache.revalidate_path(INVOICES_PATH) == 3
    assert cache.get_or_render(INVOICES_PATH, lambda: "new", {"page": 2}) == "new"


def test_revalidate_leaves_other_paths(cache: PageCache) -> None:
    cache.get_or_render(DASHBOARD_PATH, lambda: "overview")
    cache.get_or_render(INVOICES_PATH, lambda: "listing")

    cache.revalidate_path(INVOICES_PATH)

    assert cache.get_or_render(DASHBOARD_PATH, lambda: "changed") == "overview"


def test_revalidate_unknown_path_is_noop(cache: PageCache) -> None:
    assert cache.revalidate_path("/nothing/here") == 0


def test_revalidate_during_render_is_not_served_stale(cache: PageCache) -> None:
    # una mutación commitea y revalida mientras el render viejo todavía corre
    def slow_render():
        cache.revalidate_path(INVOICES_PATH)
        return "stale"

    assert cache.get_or_render(INVOICES_PATH, slow_render, {"page": 1}) == "stale"
    assert cache.get_or_render(INVOICES_PATH, lambda: "fresh", {"page": 1}) == "fresh"
