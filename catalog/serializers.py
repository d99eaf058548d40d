from rest_framework import serializers


class OptionSerializer(serializers.Serializer):
    id = serializers.CharField()
    name = serializers.CharField()


class NewSupervisorSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)


class ProjectPayloadSerializer(serializers.Serializer):
    """Body of the project create and update calls."""

    title = serializers.CharField(max_length=255)
    abstract = serializers.CharField(required=False, allow_blank=True)
    authorIds = serializers.ListField(child=serializers.CharField(), min_length=1)
    departmentId = serializers.CharField()
    schoolId = serializers.CharField()
    year = serializers.RegexField(r"^\d{4}$")
    supervisorId = serializers.CharField(required=False)
    newSupervisor = NewSupervisorSerializer(required=False)

    def validate(self, attrs):
        has_existing = bool(attrs.get("supervisorId"))
        has_new = bool(attrs.get("newSupervisor"))
        if has_existing == has_new:
            raise serializers.ValidationError(
                "Provide either supervisorId or newSupervisor, not both."
            )
        return attrs


class FilePayloadSerializer(serializers.Serializer):
    filename = serializers.CharField()
    path = serializers.URLField()
    mimetype = serializers.CharField()
    size = serializers.IntegerField(min_value=0)
    projectId = serializers.CharField()


def validated_payload(serializer_class, data):
    serializer = serializer_class(data=data)
    serializer.is_valid(raise_exception=True)
    return dict(serializer.validated_data)
