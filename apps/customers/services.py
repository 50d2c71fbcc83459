import logging

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import transaction

from apps.utils.exceptions import BusinessLogicException
from apps.utils.utils import generate_password
from .models import Customer
from .tasks import send_welcome_email_task

logger = logging.getLogger(__name__)

User = get_user_model()

CUSTOMER_FIELDS = (
    "business_name", "contact_name", "email", "phone",
    "address", "state", "postcode", "country",
)


def queue_welcome_email(email: str, business_name: str, temp_password: str):
    try:
        send_welcome_email_task.delay(email, business_name, temp_password)
    except Exception:
        # Broker down etc. The account is already committed.
        logger.exception("Could not queue welcome email for %s", email)


class CustomerService:

    @staticmethod
    def provision_customer(data: dict) -> Customer:
        """
        Creates the login (one-time password) and the linked Customer row
        in one transaction, then queues the welcome email after commit.
        """
        email = User.objects.normalize_email(data["email"]).strip()
        if User.objects.filter(email__iexact=email).exists():
            raise BusinessLogicException(f"A login already exists for {email}.", code="email_taken")

        temp_password = generate_password(settings.TEMP_PASSWORD_LENGTH)

        with transaction.atomic():
            user = User.objects.create_user(
                email=email,
                password=temp_password,
                full_name=data.get("contact_name", ""),
                must_change_password=True,
            )
            fields = {k: data.get(k, "") for k in CUSTOMER_FIELDS}
            fields["email"] = email
            customer = Customer.objects.create(user=user, **fields)

            business_name = customer.business_name
            transaction.on_commit(lambda: queue_welcome_email(email, business_name, temp_password))

        logger.info("Provisioned customer %s", customer.id, extra={"customer_id": customer.id})
        return customer

    @staticmethod
    def update_customer(customer: Customer, data: dict) -> Customer:
        for field, value in data.items():
            if field in CUSTOMER_FIELDS:
                setattr(customer, field, value)
        customer.save()
        return customer

    @staticmethod
    @transaction.atomic
    def delete_customer(customer: Customer):
        if customer.orders.exists():
            raise BusinessLogicException(
                "Customer has orders and cannot be deleted.",
                code="customer_has_orders",
            )
        customer_id = customer.id
        # Cascades to the Customer row.
        customer.user.delete()
        logger.info("Deleted customer %s", customer_id, extra={"customer_id": customer_id})

    @staticmethod
    def get_profile(user) -> Customer:
        try:
            return Customer.objects.get(user=user)
        except Customer.DoesNotExist:
            raise BusinessLogicException("No customer account is linked to this login.", code="no_customer")
