from __future__ import annotations

from dataclasses import dataclass

from venuebook.core.config import get_settings


@dataclass(frozen=True)
class PriceBreakdown:
    package_price: float
    floor_cleaning_cost: float
    garbage_cost: float
    plates_cost: float
    cooking_gas_cost: float
    admin_price_adjustment: float

    @property
    def extra_services_total(self) -> float:
        return round(self.garbage_cost + self.plates_cost + self.cooking_gas_cost, 2)

    @property
    def final_price(self) -> float:
        return round(
            self.package_price + self.floor_cleaning_cost + self.extra_services_total + self.admin_price_adjustment,
            2,
        )


def calculate_booking_price(
    package_price: float | None,
    *,
    garbage_bags: int = 0,
    plates_small: int = 0,
    plates_large: int = 0,
    cooking_gas_qty: int = 0,
    admin_price_adjustment: float | None = 0.0,
) -> PriceBreakdown:
    settings = get_settings()

    return PriceBreakdown(
        package_price=package_price or 0.0,
        # Floor cleaning is always charged
        floor_cleaning_cost=settings.floor_cleaning_cost,
        garbage_cost=garbage_bags * settings.garbage_bag_cost,
        plates_cost=plates_small * settings.plate_small_cost + plates_large * settings.plate_large_cost,
        cooking_gas_cost=cooking_gas_qty * settings.cooking_gas_cost,
        admin_price_adjustment=admin_price_adjustment or 0.0,
    )
