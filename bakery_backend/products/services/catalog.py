# products/services/catalog.py

"""
PRODUCT CATALOG SERVICE

Purpose:
- Product lookup for the engine (get_product)
- Shelf-life policy changes (update_shelf_life)
- Decoration counter restocks (restock_decoration)
- Category / shelf-life inference from supplier item codes
- Pricing rules applied when an invoice line introduces or refreshes a product

PRICING RULES:
- sale_price = ceil(invoice_price * SALE_PRICE_MARKUP), rounded UP to the next multiple of 5
- grm_value  = invoice_price * GRM_LOSS_RATE, rounded to 2 places
"""

from __future__ import annotations

import logging
from decimal import Decimal, ROUND_CEILING, ROUND_HALF_UP

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db.models import F
from django.utils import timezone

from products.models import Decoration, Product
from products.services.exceptions import NotFoundError

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")
PRICE_STEP = Decimal("5")

# Two-letter supplier code prefix -> (category, shelf life in days)
_PREFIX_POLICY = {
    "OG": ("cakes", 3),
    "DG": ("cakes", 3),
    "OO": ("cakes", 3),
    "OP": ("pastries", 3),
    "OS": ("savouries", 3),
    "OF": ("savouries", 3),
    "OB": ("breads", 3),
    "ID": ("packing_material", 0),
    "OZ": ("cookies", 90),
    "OY": ("assorted_cakes", 90),
    "IO": ("others", 90),
}


def _money(v) -> Decimal:
    return Decimal(str(v or "0.00")).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


# ============================================================
# INFERENCE + PRICING
# ============================================================

def infer_category_and_shelf_life(item_code) -> tuple[str | None, int | None]:
    """
    Map a supplier item code to (category, shelf_life_days).

    Unknown prefix or a code shorter than 2 characters -> (None, None).
    """
    code = (item_code or "").strip().upper()
    if len(code) < 2:
        return None, None
    return _PREFIX_POLICY.get(code[:2], (None, None))


def compute_sale_price(invoice_price) -> Decimal:
    price = _money(invoice_price)
    marked_up = (price * settings.SALE_PRICE_MARKUP).to_integral_value(rounding=ROUND_CEILING)
    steps = (marked_up / PRICE_STEP).to_integral_value(rounding=ROUND_CEILING)
    return _money(steps * PRICE_STEP)


def compute_grm_value(invoice_price) -> Decimal:
    return _money(_money(invoice_price) * settings.GRM_LOSS_RATE)


# ============================================================
# LOOKUPS
# ============================================================

def get_product(product_id) -> Product:
    try:
        return Product.objects.get(pk=product_id)
    except (Product.DoesNotExist, ValueError, TypeError) as exc:
        raise NotFoundError(f"Product {product_id} not found") from exc


def get_decoration(decoration_id) -> Decoration:
    try:
        return Decoration.objects.get(pk=decoration_id)
    except (Decoration.DoesNotExist, ValueError, TypeError) as exc:
        raise NotFoundError(f"Decoration {decoration_id} not found") from exc


# ============================================================
# POLICY + UPSERT
# ============================================================

def update_shelf_life(product: Product, shelf_life_days) -> Product:
    """
    Change the shelf-life policy of a product.

    Effective expiry of EVERY existing lot follows immediately, since lot
    expiry is never stored.
    """
    if shelf_life_days is not None:
        try:
            shelf_life_days = int(shelf_life_days)
        except (TypeError, ValueError) as exc:
            raise ValidationError({"shelf_life_days": "must be a whole number of days"}) from exc
        if shelf_life_days < 0:
            raise ValidationError({"shelf_life_days": "cannot be negative"})

    previous = product.shelf_life_days
    product.shelf_life_days = shelf_life_days
    product.save(update_fields=["shelf_life_days", "updated_at"])

    logger.info(
        "Shelf life updated",
        extra={
            "product_id": product.pk,
            "item_code": product.item_code,
            "previous": previous,
            "current": shelf_life_days,
        },
    )
    return product


def restock_decoration(decoration: Decoration, quantity) -> Decoration:
    """
    Add stock to a decoration counter.

    Same conditional F() update discipline as depletion, so a concurrent
    sale never loses its decrement.
    """
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise ValidationError({"quantity": "quantity must be a positive whole number"})

    Decoration.objects.filter(pk=decoration.pk).update(
        stock_quantity=F("stock_quantity") + quantity,
        updated_at=timezone.now(),
    )
    decoration.refresh_from_db(fields=["stock_quantity", "updated_at"])

    logger.info(
        "Decoration restocked",
        extra={
            "decoration_id": decoration.pk,
            "sku": decoration.sku,
            "added": quantity,
            "stock_quantity": decoration.stock_quantity,
        },
    )
    return decoration


def upsert_product_from_invoice_line(
    *,
    item_code: str,
    item_name: str,
    hsn_code: str = "",
    rate,
) -> Product:
    """
    Create or refresh a catalog product from a supplier invoice line.

    - Prices always follow the latest invoice rate.
    - Category / shelf life are inferred only when the product has none yet
      (a manually set policy is never overwritten).
    """
    code = (item_code or "").strip()
    if not code:
        raise ValidationError({"item_code": "item_code is required"})

    invoice_price = _money(rate)
    category, shelf_life_days = infer_category_and_shelf_life(code)

    product, created = Product.objects.get_or_create(
        item_code=code,
        defaults={
            "name": (item_name or code).strip(),
            "hsn_code": (hsn_code or "").strip(),
            "category": category or "",
            "shelf_life_days": shelf_life_days,
            "invoice_price": invoice_price,
            "sale_price": compute_sale_price(invoice_price),
            "grm_value": compute_grm_value(invoice_price),
        },
    )

    if created:
        return product

    product.name = (item_name or product.name).strip()
    product.hsn_code = (hsn_code or product.hsn_code or "").strip()
    product.invoice_price = invoice_price
    product.sale_price = compute_sale_price(invoice_price)
    product.grm_value = compute_grm_value(invoice_price)

    if not product.category and category:
        product.category = category
    if product.shelf_life_days is None and shelf_life_days is not None:
        product.shelf_life_days = shelf_life_days

    product.save()
    return product
