from rest_framework.pagination import PageNumberPagination

from .responses import success_response


class EnvelopePagination(PageNumberPagination):
    """Page-number pagination that wraps results in the standard envelope."""

    page_size = 10
    page_query_param = "page"
    page_size_query_param = "limit"
    max_page_size = 100

    def get_pagination_block(self) -> dict:
        paginator = self.page.paginator
        return {
            "currentPage": self.page.number,
            "totalPages": paginator.num_pages,
            "totalItems": paginator.count,
            "itemsPerPage": paginator.per_page,
            "hasNextPage": self.page.has_next(),
            "hasPrevPage": self.page.has_previous(),
        }

    def get_paginated_response(self, data, message: str = "Success"):
        return success_response(data, message, pagination=self.get_pagination_block())


def paginated_response(request, queryset, serializer_class, *, message: str, view=None, context=None):
    """Paginate a queryset outside a generic view and return the envelope response."""

    paginator = EnvelopePagination()
    page = paginator.paginate_queryset(queryset, request, view=view)
    serializer = serializer_class(page, many=True, context=context or {"request": request})
    return paginator.get_paginated_response(serializer.data, message=message)
