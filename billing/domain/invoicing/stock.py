"""Best-effort stock decrement run after an invoice has been saved."""

from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence

from billing.core import logs
from billing.db.store import Document, DocumentStore
from billing.domain.catalog.service import PRODUCTS
from billing.domain.invoicing.calculator import clamp_non_negative, clamp_rate, to_number

LOG = logs.logger(__file__)


@dataclass
class StockAdjustment:
    line_name: str
    status: str  # decremented | insufficient | not_found | failed
    product_id: Optional[str] = None
    previous: Optional[float] = None
    current: Optional[float] = None


def _whole(value: float):
    return int(value) if float(value).is_integer() else value


def find_product(products: Sequence[Document], line: Mapping) -> Optional[Document]:
    """
    Locate the product a line was sold from.

    A line that carries ``product_id`` is matched on it. Older lines only have
    their name, price and tax rate, so they are matched on that exact tuple;
    a product renamed or re-priced since the sale is then not found.
    """
    product_id = line.get("product_id")
    if product_id:
        return next((p for p in products if p.id == product_id), None)

    name = line.get("name")
    price = clamp_non_negative(line.get("unit_price"))
    rate = clamp_rate(line.get("tax_rate_percent"))
    for product in products:
        if (
            product.get("name") == name
            and to_number(product.get("price")) == price
            and to_number(product.get("tax_rate_percent")) == rate
        ):
            return product
    return None


async def decrement_stock(
    store: DocumentStore,
    owner_id: str,
    lines: Sequence[Mapping],
) -> List[StockAdjustment]:
    """Subtract sold quantities from the owner's products. Never raises."""
    try:
        products = await store.query(PRODUCTS, {"created_by": owner_id})
    except Exception:
        LOG.warning("decrement_stock - owner:%s could not load products", owner_id, exc_info=True)
        return [StockAdjustment(line_name=line.get("name", ""), status="failed") for line in lines]

    on_hand: Dict[str, float] = {p.id: to_number(p.get("stock")) for p in products}
    adjustments: List[StockAdjustment] = []

    for line in lines:
        name = line.get("name", "")
        product = find_product(products, line)
        if product is None:
            LOG.info("decrement_stock - owner:%s no product matches line %r", owner_id, name)
            adjustments.append(StockAdjustment(line_name=name, status="not_found"))
            continue

        quantity = clamp_non_negative(line.get("quantity"))
        previous = on_hand[product.id]
        current = max(previous - quantity, 0.0)
        status = "decremented"
        if quantity > previous:
            LOG.warning(
                "decrement_stock - owner:%s product:%s insufficient stock %s for quantity %s",
                owner_id,
                product.id,
                _whole(previous),
                _whole(quantity),
            )
            status = "insufficient"

        try:
            updated = await store.update(PRODUCTS, product.id, {"stock": _whole(current)})
        except Exception:
            LOG.warning("decrement_stock - product:%s update failed", product.id, exc_info=True)
            updated = False
        if not updated:
            adjustments.append(StockAdjustment(line_name=name, status="failed", product_id=product.id))
            continue

        on_hand[product.id] = current
        adjustments.append(
            StockAdjustment(
                line_name=name,
                status=status,
                product_id=product.id,
                previous=_whole(previous),
                current=_whole(current),
            )
        )

    return adjustments
