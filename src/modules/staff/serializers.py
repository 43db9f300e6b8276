"""Staff DRF serializers (read side)."""

from __future__ import annotations

from rest_framework import serializers

from modules.staff.models import StaffMember


class StaffMemberSerializer(serializers.ModelSerializer):
    class Meta:
        model = StaffMember
        fields = [
            "id",
            "name",
            "position",
            "department",
            "email",
            "phone",
            "join_date",
            "status",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields
