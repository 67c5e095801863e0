from prometheus_client import Counter, Histogram

# Business Metrics
ecomm_orders_placed_total = Counter(
    "ecomm_orders_placed_total",
    "Total order placements attempted",
    ["status"] # Labels: 'success', 'rejected', 'failed'
)

ecomm_order_placement_duration_seconds = Histogram(
    "ecomm_order_placement_duration_seconds",
    "Order placement duration in seconds"
)

ecomm_orders_cancelled_total = Counter(
    "ecomm_orders_cancelled_total",
    "Total orders cancelled"
)

ecomm_best_effort_failures_total = Counter(
    "ecomm_best_effort_failures_total",
    "Best-effort side effects that failed and were dropped",
    ["hook"] # Labels: 'sales_count', 'image_discard', ...
)

ecomm_images_processed_total = Counter(
    "ecomm_images_processed_total",
    "Images run through the compression pipeline",
    ["outcome"] # Labels: 'compressed', 'rejected', 'failed'
)
