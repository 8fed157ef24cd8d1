"""Prometheus metrics for the tenant isolation layer."""

from prometheus_client import Counter

# Writes and statements rejected by the row isolation policy
tenant_policy_rejections_total = Counter(
    "recruitiq_tenant_policy_rejections_total",
    "Total operations rejected by the tenant isolation policy",
    ["operation", "reason"]  # operation: insert|update|delete|select|bulk, reason: mismatch|unauthenticated|unsupported
)

# Tenant sessions opened, by how they ended
tenant_sessions_total = Counter(
    "recruitiq_tenant_sessions_total",
    "Total tenant-scoped database sessions",
    ["outcome"]  # outcome: committed|rolled_back
)

# Targeted reads that found nothing visible to the tenant
tenant_not_found_total = Counter(
    "recruitiq_tenant_not_found_total",
    "Targeted reads answered with not-found-or-forbidden",
    ["model"]
)
