# Per-endpoint page size limits
class PaginationLimits:
    WALLET_LEDGER = {"min": 1, "max": 100, "default": 50}
    ORDERS = {"min": 1, "max": 100, "default": 50}
