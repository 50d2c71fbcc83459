import logging

from django.http import JsonResponse
from django.db import connection

logger = logging.getLogger(__name__)


def health_check(request):
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
    except Exception as e:
        logger.error("Health check failed: %s", e)
        return JsonResponse({"status": "error", "detail": str(e)}, status=503)

    return JsonResponse({"status": "ok"}, status=200)
