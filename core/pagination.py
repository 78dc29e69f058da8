"""Pagination classes for API endpoints."""

from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response


class NotificationRecordPagination(PageNumberPagination):
    """Page-number pagination for a user's notification list.

    Query parameters follow the app's camelCase convention (``page`` and
    ``pageSize``), and so does the envelope.
    """

    page_size = 20
    page_size_query_param = "pageSize"
    max_page_size = 100

    def get_paginated_response(self, data):
        return Response(
            {
                "count": self.page.paginator.count,
                "page": self.page.number,
                "pageSize": self.get_page_size(self.request),
                "next": self.get_next_link(),
                "previous": self.get_previous_link(),
                "results": data,
            }
        )
