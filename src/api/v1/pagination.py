"""Pagination utilities for API v1."""

from rest_framework.pagination import PageNumberPagination


class WeeklyPagination(PageNumberPagination):
    """One year of weeks per page by default; clients may ask for fewer or more."""

    page_size = 52
    page_size_query_param = "page_size"
    max_page_size = 260
