"""Commerce bounded context — Stock Ledger, Customer Directory, Cart Store and Order Workflow.

All four components share one domain so that an order placement can deduct
stock, append ledger entries and insert the order inside a single unit of work.
"""

from protean.domain import Domain

from commerce.utils.logging import quiet_framework_loggers

commerce = Domain(name="commerce")

quiet_framework_loggers()
