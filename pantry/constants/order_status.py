class OrderStatus:
    PENDING = "pending"
    PENDING_PAYMENT = "pending_payment"
    PAID = "paid"
    COMPLETED = "completed"
    EXPIRED = "expired"


class PaymentStatus:
    PENDING = "pending"
    COMPLETED = "completed"
    EXPIRED = "expired"


ALLOWED_TRANSITIONS = {
    OrderStatus.PENDING: [OrderStatus.PENDING_PAYMENT, OrderStatus.PAID],
    OrderStatus.PENDING_PAYMENT: [OrderStatus.PAID, OrderStatus.EXPIRED],
    OrderStatus.PAID: [OrderStatus.COMPLETED],
    OrderStatus.COMPLETED: [],
    OrderStatus.EXPIRED: [],
}

# orders in these states have been paid for
SETTLED_STATUSES = {OrderStatus.PAID, OrderStatus.COMPLETED}
