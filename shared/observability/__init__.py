from .setup import setup_observability
from .metrics import (
    ecomm_orders_placed_total,
    ecomm_order_placement_duration_seconds,
    ecomm_orders_cancelled_total,
    ecomm_best_effort_failures_total,
    ecomm_images_processed_total
)
