import django_filters

from modules.staff.models import Department, StaffMember, StaffStatus


class StaffMemberFilter(django_filters.FilterSet):
    name = django_filters.CharFilter(field_name="name", lookup_expr="icontains")
    email = django_filters.CharFilter(field_name="email", lookup_expr="iexact")
    department = django_filters.ChoiceFilter(choices=Department.choices)
    status = django_filters.ChoiceFilter(choices=StaffStatus.choices)

    class Meta:
        model = StaffMember
        fields = ["name", "email", "department", "status"]
