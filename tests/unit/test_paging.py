"""Unit tests for paging helpers."""

import pytest

from cosmosdb_repository.domain.paging import PagedList, in_pages_of


@pytest.mark.unit
class TestPager:
    def test_get_page_slices_items(self):
        page = in_pages_of(range(10), 3).get_page(1)

        assert isinstance(page, PagedList)
        assert list(page) == [3, 4, 5]
        assert page.page_index == 1
        assert page.page_size == 3
        assert page.total_count == 10
        assert page.page_count == 4

    def test_last_page_is_partial(self):
        page = in_pages_of(range(10), 3).get_page(3)

        assert list(page) == [9]
        assert page.is_last_page
        assert not page.has_next_page
        assert page.has_previous_page

    def test_first_page_flags(self):
        page = in_pages_of(range(10), 3).get_page(0)

        assert page.is_first_page
        assert not page.has_previous_page
        assert page.has_next_page

    def test_page_past_end_is_empty(self):
        page = in_pages_of(["a", "b"], 5).get_page(4)

        assert len(page) == 0
        assert page.total_count == 2
        assert page.page_count == 1

    def test_empty_source(self):
        page = in_pages_of([], 5).get_page(0)

        assert len(page) == 0
        assert page.page_count == 0
        assert page.is_last_page

    def test_page_supports_indexing(self):
        page = in_pages_of("abcdef", 2).get_page(2)

        assert page[0] == "e"
        assert page[-1] == "f"

    def test_iterating_pager_yields_every_page(self):
        pages = list(in_pages_of(range(5), 2))

        assert [list(p) for p in pages] == [[0, 1], [2, 3], [4]]

    @pytest.mark.parametrize("page_size", [0, -1])
    def test_invalid_page_size(self, page_size):
        with pytest.raises(ValueError, match="page_size"):
            in_pages_of([1, 2], page_size)

    def test_negative_page_index(self):
        with pytest.raises(ValueError, match="page_index"):
            in_pages_of([1, 2], 1).get_page(-1)
