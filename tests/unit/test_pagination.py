"""Tests for pagination metadata."""

from notemaker.core.pagination import Pagination, PaginationResult


class TestPagination:
    """Tests for Pagination."""

    def test_total_pages(self):
        assert Pagination(page=1, limit=10, total=0).total_pages == 0
        assert Pagination(page=1, limit=10, total=10).total_pages == 1
        assert Pagination(page=1, limit=10, total=11).total_pages == 2

    def test_skip(self):
        assert Pagination(page=3, limit=20, total=100).skip == 40

    def test_serialized_with_camel_case_total_pages(self):
        data = Pagination(page=2, limit=5, total=12).model_dump(by_alias=True)
        assert data == {"page": 2, "limit": 5, "total": 12, "totalPages": 3}

    def test_has_more(self):
        assert PaginationResult[int](items=[1], pagination=Pagination(page=1, limit=1, total=2)).has_more
        assert not PaginationResult[int](items=[2], pagination=Pagination(page=2, limit=1, total=2)).has_more
