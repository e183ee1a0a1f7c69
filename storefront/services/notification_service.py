# storefront/services/notification_service.py
from storefront.celery_worker import celery_app
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class NotificationService:
    """
    Powiadomienia o zamowieniach.
    Wysylka przez Celery, nigdy nie blokuje ani nie psuje zatwierdzonej operacji.
    """

    def send_order_placed(self, user_id: int, order_id: int) -> None:
        self._publish(user_id, order_id, "placed")

    def send_order_cancelled(self, user_id: int, order_id: int) -> None:
        self._publish(user_id, order_id, "cancelled")

    def send_status_changed(self, user_id: int, order_id: int, status: str) -> None:
        self._publish(user_id, order_id, status)

    def _publish(self, user_id: int, order_id: int, event: str) -> None:
        try:
            send_order_notification_task.delay(user_id, order_id, event)
        except Exception as e:
            # zamowienie jest juz zapisane, brak brokera to tylko warning
            logger.warning(f"Failed to queue notification for order {order_id}: {e}")


@celery_app.task(name="storefront.services.notification_service.send_order_notification_task")
def send_order_notification_task(user_id: int, order_id: int, event: str):
    """
    Celery task - dostawa powiadomienia (email/SMS) jest poza tym serwisem,
    tutaj tylko logujemy.
    """
    logger.info(f"[NOTIFICATION] User {user_id}: Order {order_id} {event}")

    return {"user_id": user_id, "order_id": order_id, "event": event, "status": "sent"}
