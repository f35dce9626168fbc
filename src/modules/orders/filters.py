import django_filters

from modules.orders.models import ServiceOrder


class ServiceOrderFilter(django_filters.FilterSet):
    status = django_filters.CharFilter(field_name="status_id")
    client = django_filters.UUIDFilter(field_name="client_id")
    order_number = django_filters.CharFilter(
        field_name="order_number", lookup_expr="iexact"
    )
    analyst = django_filters.CharFilter(field_name="analyst", lookup_expr="icontains")
    start_date = django_filters.DateFilter(
        field_name="created_at", lookup_expr="date__gte"
    )
    end_date = django_filters.DateFilter(
        field_name="created_at", lookup_expr="date__lte"
    )

    class Meta:
        model = ServiceOrder
        fields = [
            "status",
            "client",
            "order_number",
            "analyst",
            "start_date",
            "end_date",
        ]
