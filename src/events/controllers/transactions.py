from django.db.models import QuerySet
from ninja import Query
from ninja_extra import api_controller, route
from ninja_extra.pagination import PageNumberPaginationExtra, PaginatedResponseSchema, paginate

from common.authentication import SessionJWTAuth
from common.controllers import AdminAwareController
from common.throttling import UserDefaultThrottle
from events import filters, models, schema
from events.exceptions import TransactionNotFoundError
from events.service.payment_service import get_payment_service


@api_controller("/transactions", auth=SessionJWTAuth(), tags=["Transactions"], throttle=UserDefaultThrottle())
class TransactionController(AdminAwareController):
    @route.get("/", url_name="list_transactions", response=PaginatedResponseSchema[schema.TransactionListSchema])
    @paginate(PageNumberPaginationExtra, page_size=20)
    def list_transactions(
        self, params: filters.TransactionFilterSchema = Query(...)
    ) -> QuerySet[models.Transaction]:
        """Browse purchases, newest first. Filter by `status`, `event_id` or buyer `email`."""
        return get_payment_service().list_transactions(params)

    @route.get("/{txn_id}", url_name="get_transaction", response=schema.TransactionSchema)
    def get_transaction(self, txn_id: str) -> models.Transaction:
        """Show a purchase with all of its tickets."""
        txn = models.Transaction.objects.with_related().filter(txn_id=txn_id).first()
        if txn is None:
            raise TransactionNotFoundError()
        return txn
