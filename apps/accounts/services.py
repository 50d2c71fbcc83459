import logging

from django.db import transaction

logger = logging.getLogger(__name__)


class AuthService:

    @staticmethod
    @transaction.atomic
    def change_password(user, new_password: str):
        user.set_password(new_password)
        user.must_change_password = False
        user.save(update_fields=["password", "must_change_password"])
        logger.info("Password changed for user %s", user.id)
        return user
