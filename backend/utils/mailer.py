# backend/utils/mailer.py
import httpx
import logging
from typing import Optional

from config import settings
from models.order import Order
from schemas.order import load_address, load_lines
from schemas.profile import Address

logger = logging.getLogger(__name__)


def _format_address(value) -> str:
    address = load_address(value)
    if address is None:
        return "-"
    if isinstance(address, Address):
        parts = [
            f"{address.first_name} {address.last_name}".strip(),
            address.address,
            f"{address.postal_code} {address.display_city}".strip(),
            address.country,
            address.phone,
        ]
        return "\n".join(p for p in parts if p)
    return address


def format_order_text(order: Order) -> str:
    lines = [f"Porosia: {order.order_number}", f"Data: {order.date}", ""]
    for line in load_lines(order.items):
        lines.append(f"- {line.name} x{line.quantity}: €{line.line_total:.2f}")
    lines += [
        "",
        f"Totali: €{order.total:.2f}",
        "",
        "Klienti:",
        f"{order.customer_name} <{order.customer_email}>",
        "",
        "Adresa:",
        _format_address(order.address),
    ]
    return "\n".join(lines)


class Mailer:
    def __init__(
        self,
        api_url: Optional[str] = None,
        api_key: Optional[str] = None,
        sender: Optional[str] = None,
        admin: Optional[str] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        # Initialize transactional email API configuration
        self.api_url = api_url if api_url is not None else settings.MAIL_API_URL
        self.api_key = api_key if api_key is not None else settings.MAIL_API_KEY
        self.sender = sender if sender is not None else settings.MAIL_FROM
        self.admin = admin if admin is not None else settings.MAIL_ADMIN
        self.transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.api_url and self.sender and self.admin)

    def send(self, to: str, subject: str, text: str) -> None:
        # Submit a single message to the email API
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        payload = {"from": self.sender, "to": [to], "subject": subject, "text": text}
        with httpx.Client(transport=self.transport, timeout=10.0) as client:
            try:
                response = client.post(self.api_url, json=payload, headers=headers)
                response.raise_for_status()
            except (httpx.RequestError, httpx.HTTPStatusError) as e:
                logger.error(f"Mail API error for {to}: {e}")
                raise

    def send_order_notifications(self, order: Order) -> int:
        """Send the operator notice and the customer confirmation for ``order``.

        Returns the number of messages sent; 0 when the mailer is not configured.
        """
        if not self.configured:
            logger.debug("Mailer not configured, skipping notifications for %s", order.order_number)
            return 0

        body = format_order_text(order)
        self.send(self.admin, f"Porosi e re #{order.order_number}", body)
        sent = 1
        if order.customer_email:
            self.send(
                order.customer_email,
                f"Konfirmimi i porosisë #{order.order_number}",
                f"Faleminderit për porosinë, {order.customer_name}!\n\n{body}",
            )
            sent += 1
        return sent


mailer = Mailer()
