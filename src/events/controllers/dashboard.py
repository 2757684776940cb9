from ninja_extra import api_controller, route

from common.authentication import SessionJWTAuth
from common.controllers import AdminAwareController
from common.throttling import UserDefaultThrottle
from events import schema
from events.service import dashboard_service


@api_controller("/dashboard", auth=SessionJWTAuth(), tags=["Dashboard"], throttle=UserDefaultThrottle())
class DashboardController(AdminAwareController):
    @route.get("/", url_name="dashboard", response=schema.DashboardSchema)
    def dashboard(self, currency: schema.Currencies = "NGN") -> schema.DashboardSchema:
        """Tickets sold, revenue and active events this month against last month, plus the next events."""
        return dashboard_service.dashboard_stats(currency=currency)
