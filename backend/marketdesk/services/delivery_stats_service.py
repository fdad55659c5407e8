"""
Delivery Statistics Service
Order progress of confirmed delivery orders and the busiest delivery companies
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from marketdesk.domain.order import PROCESSING, ON_THE_WAY, COMPLETED
from marketdesk.repositories.delivery_repository import DeliveryCompanyRepository
from marketdesk.services.metrics import range_start, utc_now

logger = logging.getLogger(__name__)

TOP_COMPANIES = 10


def _status_counts(orders: List[dict]) -> Dict[str, int]:
    return {
        "processing": sum(1 for o in orders if o.get("status") == PROCESSING),
        "on_the_way": sum(1 for o in orders if o.get("status") == ON_THE_WAY),
        "completed": sum(1 for o in orders if o.get("status") == COMPLETED),
    }


def build_delivery_statistics(
    orders: List[dict],
    companies: List[dict],
    shops: List[dict],
    shop_ids: Optional[List[int]] = None,
    driver_ids: Optional[List[int]] = None
) -> Dict[str, Any]:
    """
    Args:
        orders: Confirmed delivery orders {id, status, shop, assigned_driver_id}
        companies: Delivery companies with drivers_count and cars_count
        shops: Shops linked to a delivery company {id, delivery_companies_id}
        shop_ids / driver_ids: Narrow the overall status counts

    Per-company order counts always cover every order of the shops linked
    to that company; the shop and driver filters only narrow the overall
    counts.
    """
    filtered = orders
    if shop_ids:
        filtered = [o for o in filtered if o.get("shop") in shop_ids]
    if driver_ids:
        filtered = [o for o in filtered if o.get("assigned_driver_id") and o["assigned_driver_id"] in driver_ids]

    overall = _status_counts(filtered)

    company_stats = []
    for company in companies:
        company_shop_ids = {s["id"] for s in shops if s.get("delivery_companies_id") == company["id"]}
        company_orders = [o for o in orders if o.get("shop") in company_shop_ids]
        counts = _status_counts(company_orders)
        company_stats.append({
            "id": company["id"],
            "company_name": company.get("company_name"),
            "logo_url": company.get("logo_url"),
            "total_drivers": company.get("drivers_count") or 0,
            "total_cars": company.get("cars_count") or 0,
            "total_orders": len(company_orders),
            "processing_orders": counts["processing"],
            "on_the_way_orders": counts["on_the_way"],
            "completed_orders": counts["completed"],
        })

    top_companies = sorted(company_stats, key=lambda c: c["total_orders"], reverse=True)[:TOP_COMPANIES]

    return {
        "overall": {
            "total_companies": len(companies),
            "total_processing": overall["processing"],
            "total_on_the_way": overall["on_the_way"],
            "total_completed": overall["completed"],
            "total_drivers": sum(c["total_drivers"] for c in company_stats),
            "total_cars": sum(c["total_cars"] for c in company_stats),
        },
        "top_companies": top_companies,
    }


class DeliveryStatisticsService:
    def __init__(self, repository: Optional[DeliveryCompanyRepository] = None):
        self.repository = repository or DeliveryCompanyRepository()

    def get_statistics(
        self,
        time_range: str = "all",
        shop_ids: Optional[List[int]] = None,
        driver_ids: Optional[List[int]] = None,
        now: Optional[datetime] = None
    ) -> Dict[str, Any]:
        since = range_start(time_range, now or utc_now())
        data = self.repository.get_statistics_data(since=since)
        logger.debug(f"Delivery statistics over {len(data['orders'])} orders")
        return build_delivery_statistics(
            data["orders"], data["companies"], data["shops"],
            shop_ids=shop_ids, driver_ids=driver_ids
        )
