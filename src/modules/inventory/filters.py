import django_filters
from django.db.models import F

from modules.inventory.models import InventoryCategory, InventoryItem


class InventoryItemFilter(django_filters.FilterSet):
    name = django_filters.CharFilter(field_name="name", lookup_expr="icontains")
    category = django_filters.ChoiceFilter(choices=InventoryCategory.choices)
    low_stock = django_filters.BooleanFilter(method="filter_low_stock")

    class Meta:
        model = InventoryItem
        fields = ["name", "category", "low_stock"]

    def filter_low_stock(self, queryset, name, value):
        if value is None:
            return queryset
        if value:
            return queryset.filter(quantity__lte=F("threshold"))
        return queryset.filter(quantity__gt=F("threshold"))
