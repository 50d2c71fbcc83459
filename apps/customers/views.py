import logging

from rest_framework import viewsets, mixins, filters, status
from rest_framework.decorators import action
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.accounts.permissions import IsAdminStaff, IsCustomer
from apps.utils.exceptions import BusinessLogicException
from .models import Customer
from .serializers import CustomerSerializer, CustomerProvisionSerializer
from .services import CustomerService

logger = logging.getLogger(__name__)


def _first_error(detail):
    if isinstance(detail, dict):
        field, errors = next(iter(detail.items()))
        return f"{field}: {_first_error(errors)}"
    if isinstance(detail, list) and detail:
        return _first_error(detail[0])
    return str(detail)


class CustomerProvisionView(APIView):
    """
    POST /api/customers
    Creates a customer login plus record and emails a one-time password.
    Any failure is reported as 500 {"error": message}.
    """
    permission_classes = [IsAdminStaff]

    def post(self, request):
        serializer = CustomerProvisionSerializer(data=request.data)
        try:
            serializer.is_valid(raise_exception=True)
            customer = CustomerService.provision_customer(serializer.validated_data)
        except ValidationError as e:
            return Response({"error": _first_error(e.detail)}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
        except BusinessLogicException as e:
            return Response({"error": e.message}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
        except Exception as e:
            logger.exception("Customer provisioning failed")
            return Response({"error": str(e)}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

        return Response(CustomerSerializer(customer).data, status=status.HTTP_200_OK)


class CustomerViewSet(mixins.ListModelMixin,
                      mixins.RetrieveModelMixin,
                      mixins.UpdateModelMixin,
                      mixins.DestroyModelMixin,
                      viewsets.GenericViewSet):
    """
    Admin customer records. Creation goes through provisioning.
    """
    queryset = Customer.objects.all().order_by("business_name")
    serializer_class = CustomerSerializer
    permission_classes = [IsAdminStaff]
    filter_backends = [filters.SearchFilter]
    search_fields = ["business_name", "contact_name", "email"]

    def perform_update(self, serializer):
        CustomerService.update_customer(serializer.instance, serializer.validated_data)

    def perform_destroy(self, instance):
        CustomerService.delete_customer(instance)

    @action(detail=False, methods=["get"], permission_classes=[IsCustomer])
    def profile(self, request):
        """
        GET /api/v1/customers/profile/
        The caller's own customer record (checkout prefill).
        """
        customer = CustomerService.get_profile(request.user)
        return Response(CustomerSerializer(customer).data)
