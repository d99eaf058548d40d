from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import APIView

from . import services
from .client import ApiError, Unauthorized
from .permissions import HasSessionToken
from .serializers import OptionSerializer


class BackendUnavailable(APIException):
    status_code = 502
    default_detail = "The repository backend could not be reached."


class OptionListView(APIView):
    """Options for one of the cascading selects of the project forms."""

    permission_classes = [HasSessionToken]

    def fetch(self, request, **kwargs):
        raise NotImplementedError

    def get(self, request, **kwargs):
        try:
            options = self.fetch(request, **kwargs)
        except Unauthorized:
            raise
        except ApiError as exc:
            raise BackendUnavailable(exc.message) from exc
        return Response(OptionSerializer(options, many=True).data)


class DepartmentOptionsView(OptionListView):
    def fetch(self, request, school_id, college_id):
        return services.list_departments(request.api, school_id, college_id)


class SupervisorOptionsView(OptionListView):
    def fetch(self, request, department_id):
        return services.list_supervisors(request.api, department_id)
