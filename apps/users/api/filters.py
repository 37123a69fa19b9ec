"""django-filter FilterSets for agency and member lists."""

from __future__ import annotations

import django_filters  # type: ignore
from django.db.models import Q  # type: ignore

from apps.users.models import Agency, Member, MembershipType, Role, Status


class AgencyFilterSet(django_filters.FilterSet):
    status = django_filters.ChoiceFilter(choices=Status.choices)
    membership_type = django_filters.ChoiceFilter(choices=MembershipType.choices)
    search = django_filters.CharFilter(method="filter_search")

    class Meta:
        model = Agency
        fields = ["status", "membership_type"]

    def filter_search(self, queryset, name, value):  # type: ignore
        if not value:
            return queryset
        return queryset.filter(
            Q(name__icontains=value)
            | Q(email__icontains=value)
            | Q(member_number__icontains=value)
            | Q(city__icontains=value)
        )


class MemberFilterSet(django_filters.FilterSet):
    status = django_filters.ChoiceFilter(choices=Status.choices)
    membership_type = django_filters.ChoiceFilter(choices=MembershipType.choices)
    role = django_filters.ChoiceFilter(choices=Role.choices)
    agency = django_filters.NumberFilter(field_name="agency_id")
    search = django_filters.CharFilter(method="filter_search")

    class Meta:
        model = Member
        fields = ["status", "membership_type", "role", "agency"]

    def filter_search(self, queryset, name, value):  # type: ignore
        if not value:
            return queryset
        return queryset.filter(
            Q(first_name__icontains=value)
            | Q(last_name__icontains=value)
            | Q(name__icontains=value)
            | Q(email__icontains=value)
        )
