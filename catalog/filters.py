"""Query-string filters for product listings."""
import django_filters

from .models import Product


class ProductFilter(django_filters.FilterSet):
    category = django_filters.NumberFilter(method="filter_category")
    is_visible = django_filters.BooleanFilter(method="filter_is_visible")
    search = django_filters.CharFilter(field_name="name", lookup_expr="icontains")
    min_price = django_filters.NumberFilter(field_name="price", lookup_expr="gte")
    max_price = django_filters.NumberFilter(field_name="price", lookup_expr="lte")

    class Meta:
        model = Product
        fields = ["category", "is_visible", "search", "min_price", "max_price"]

    def filter_category(self, queryset, name, value):
        return queryset.in_category(value)

    def filter_is_visible(self, queryset, name, value):
        if value:
            return queryset.visible()
        return queryset.filter(is_visible=False)
